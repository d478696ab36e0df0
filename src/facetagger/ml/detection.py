"""Detection with a segmented fallback pass.

Some detectors miss faces that are small relative to a wide photo. When the
full-image pass finds nothing, the image is split into vertical strips and
each strip is searched on its own, which makes every face relatively larger.
Boxes found in a strip are mapped back into full-image normalized space.

Faces straddling a strip boundary may be reported once per strip; results
are not de-duplicated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from facetagger.geometry import PixelRect
from facetagger.ml.preprocessing import image_size

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from facetagger.geometry import ImageSize
    from facetagger.ml.face_detector import FaceDetector, FaceObservation
    from facetagger.ml.inference import InferencePool
    from facetagger.ml.preprocessing import ImageCropper

logger = logging.getLogger(__name__)

DEFAULT_SEGMENT_COUNT: int = 2


@dataclass(frozen=True)
class Segment:
    """A full-height vertical strip of the image, in pixels."""

    offset_x: int
    width: int
    height: int

    @property
    def rect(self) -> PixelRect:
        return PixelRect(x=self.offset_x, y=0, width=self.width, height=self.height)

    def to_image_space(self, observation: FaceObservation, full_width: int) -> FaceObservation:
        """Map an observation normalized to this strip into full-image space."""
        box = observation.bounding_box
        adjusted = replace(
            box,
            x=(self.offset_x + box.x * self.width) / full_width,
            width=box.width * self.width / full_width,
        )
        return replace(observation, bounding_box=adjusted)


def split_segments(size: ImageSize, count: int = DEFAULT_SEGMENT_COUNT) -> list[Segment]:
    """Split an image into ``count`` equal-width vertical strips, left to right.

    Integer division leaves any remainder pixels to the rightmost strips.
    """
    bounds = [size.width * i // count for i in range(count + 1)]
    return [
        Segment(offset_x=left, width=right - left, height=size.height)
        for left, right in zip(bounds, bounds[1:], strict=False)
        if right > left
    ]


class DetectionOrchestrator:
    """Runs the detector once on the full image, then per strip if nothing was found."""

    def __init__(
        self,
        detector: FaceDetector,
        cropper: ImageCropper,
        pool: InferencePool,
        segment_count: int = DEFAULT_SEGMENT_COUNT,
    ) -> None:
        self._detector = detector
        self._cropper = cropper
        self._pool = pool
        self._segment_count = segment_count

    async def detect(self, image: NDArray[np.uint8]) -> list[FaceObservation]:
        """Return every face found, possibly none. Never raises on detector failure."""
        observations = await self._run_pass(image, "full image")
        if observations:
            return observations

        size = image_size(image)
        segments = split_segments(size, self._segment_count)
        logger.info("No faces in full image, retrying on %d segments", len(segments))

        for index, segment in enumerate(segments):
            strip = self._cropper.crop(image, segment.rect)
            if strip is None:
                logger.warning("Could not crop segment %d at x=%d", index, segment.offset_x)
                continue
            found = await self._run_pass(strip, f"segment {index}")
            observations.extend(segment.to_image_space(obs, size.width) for obs in found)

        logger.info("Segmented detection found %d faces", len(observations))
        return observations

    async def _run_pass(self, image: NDArray[np.uint8], label: str) -> list[FaceObservation]:
        try:
            found = list(await self._pool.run(self._detector.detect, image) or [])
        except Exception:
            logger.exception("Face detection failed on %s", label)
            return []
        logger.debug("Detection on %s returned %d faces", label, len(found))
        return found
