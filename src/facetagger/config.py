"""Environment-based configuration for FaceTagger."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from FACETAGGER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FACETAGGER_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8083

    # Authentication (None = disabled)
    api_key: str | None = None

    # Face detector factory as "module:attribute" (None = no detector)
    detector: str | None = None

    # Background detection workers
    max_concurrent: int = Field(default=2, ge=1)

    # Detection fallback and ordering
    segment_count: int = Field(default=2, ge=1)
    row_threshold_factor: float = Field(default=1.5, gt=0.0)

    # Thumbnail crop inflation around the detected box
    thumbnail_inflate: float = Field(default=1.6, ge=1.6, le=1.8)

    # Input limits
    max_image_pixels: int = Field(default=16_777_216, ge=1)
    max_file_size: int = Field(default=52_428_800, ge=1)

    # Contact directory contents at startup
    seed_contacts: list[str] = Field(default_factory=lambda: ["Ricardo", "Daniel", "Juan"])


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
