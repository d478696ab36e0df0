"""Detection-to-session pipeline.

``Tagger`` owns the single tagging session and drives it from the event
loop. Detection and cropping are awaited on the background pool; only the
returned values touch the session, and only while their generation is still
current.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from facetagger.ml.preprocessing import image_size
from facetagger.ordering import ROW_THRESHOLD_FACTOR, order_faces
from facetagger.thumbnails import build_faces

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from facetagger.ml.detection import DetectionOrchestrator
    from facetagger.ml.inference import InferencePool
    from facetagger.ml.preprocessing import ImageCropper
    from facetagger.session import TaggingSession

logger = logging.getLogger(__name__)


class Tagger:
    """Runs the detection pipeline for new images and exposes the session."""

    def __init__(
        self,
        session: TaggingSession,
        orchestrator: DetectionOrchestrator,
        cropper: ImageCropper,
        pool: InferencePool,
        *,
        thumbnail_inflate: float,
        row_factor: float = ROW_THRESHOLD_FACTOR,
    ) -> None:
        self.session = session
        self._orchestrator = orchestrator
        self._cropper = cropper
        self._pool = pool
        self._thumbnail_inflate = thumbnail_inflate
        self._row_factor = row_factor

    async def run_pipeline(self, image: NDArray[np.uint8]) -> TaggingSession:
        """Detect, order, and crop the faces of ``image`` into a fresh session.

        Starting a new pipeline invalidates any pipeline still in flight;
        its results are dropped when they arrive.
        """
        size = image_size(image)
        generation = self.session.begin(size)
        logger.info("Pipeline generation %d started for %dx%d image", generation, size.width, size.height)

        observations = await self._orchestrator.detect(image)
        if not self.session.is_current(generation):
            logger.info("Pipeline generation %d superseded after detection", generation)
            return self.session

        ordered = order_faces(observations, size, self._row_factor)
        try:
            faces = await self._pool.run(build_faces, ordered, image, self._cropper, self._thumbnail_inflate)
        except TimeoutError:
            logger.warning("Thumbnail building for generation %d timed out waiting for a worker", generation)
            faces = []

        self.session.load(generation, faces)
        return self.session
