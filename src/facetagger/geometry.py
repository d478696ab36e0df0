"""Conversions between normalized detector boxes and pixel rectangles.

Detector boxes live in the unit square with a bottom-left origin; crops and
drawing happen in pixel space with a top-left origin.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterable

THUMBNAIL_INFLATE: float = 1.6
OUTLINE_INFLATE: float = 1.0


class ImageSize(NamedTuple):
    width: int
    height: int


@dataclass(frozen=True)
class NormalizedRect:
    """Rectangle in the unit square, origin bottom-left."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PixelRect:
    """Rectangle in pixel space, origin top-left. May extend past the image."""

    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height


def to_pixel_rect(box: NormalizedRect, image_size: ImageSize, inflate: float = OUTLINE_INFLATE) -> PixelRect:
    """Convert a normalized box to pixel space, grown by ``inflate`` around its center.

    The result is not clamped to the image; callers treat out-of-bounds
    rectangles as a crop failure.
    """
    w, h = image_size
    return PixelRect(
        x=box.x * w - (box.width * w * (inflate - 1)) / 2,
        y=(1 - box.y - box.height) * h - (box.height * h * (inflate - 1)) / 2,
        width=box.width * w * inflate,
        height=box.height * h * inflate,
    )


def outline_rects(boxes: Iterable[NormalizedRect], image_size: ImageSize) -> list[PixelRect]:
    """Return un-inflated pixel rectangles for drawing detection outlines."""
    return [to_pixel_rect(box, image_size, OUTLINE_INFLATE) for box in boxes]
