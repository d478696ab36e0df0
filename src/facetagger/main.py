"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from facetagger.config import Settings

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from facetagger.api.routes import router
from facetagger.config import get_settings
from facetagger.contacts import ContactDirectory
from facetagger.ml.detection import DetectionOrchestrator
from facetagger.ml.face_detector import load_detector
from facetagger.ml.inference import InferencePool
from facetagger.ml.preprocessing import ArrayCropper
from facetagger.session import TaggingSession
from facetagger.tagger import Tagger

logger = logging.getLogger(__name__)


def init_state(app: FastAPI, settings: Settings) -> None:
    """Build the session, background pool, and (if configured) the detection pipeline."""
    app.state.settings = settings
    app.state.pool = InferencePool(settings.max_concurrent)
    app.state.session = TaggingSession(ContactDirectory.from_names(settings.seed_contacts))
    app.state.tagger = None

    if settings.detector is None:
        logger.warning("No face detector configured; image uploads will be rejected")
        return

    cropper = ArrayCropper()
    orchestrator = DetectionOrchestrator(
        load_detector(settings.detector),
        cropper,
        app.state.pool,
        segment_count=settings.segment_count,
    )
    app.state.tagger = Tagger(
        app.state.session,
        orchestrator,
        cropper,
        app.state.pool,
        thumbnail_inflate=settings.thumbnail_inflate,
        row_factor=settings.row_threshold_factor,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting FaceTagger (detector=%s, max_concurrent=%s, segments=%s, contacts=%d)",
        settings.detector,
        settings.max_concurrent,
        settings.segment_count,
        len(settings.seed_contacts),
    )

    init_state(app, settings)

    logger.info("FaceTagger ready")
    yield

    logger.info("Shutting down FaceTagger")
    app.state.pool.shutdown()
    logger.info("FaceTagger shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="FaceTagger",
        description="Face detection and sequential contact tagging for photos",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run("facetagger.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
