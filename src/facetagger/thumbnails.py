"""Turn ordered face observations into tagged-face thumbnails."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from facetagger.geometry import THUMBNAIL_INFLATE, to_pixel_rect
from facetagger.ml.preprocessing import image_size

if TYPE_CHECKING:
    from collections.abc import Iterable

    import numpy as np
    from numpy.typing import NDArray

    from facetagger.contacts import Contact
    from facetagger.geometry import NormalizedRect
    from facetagger.ml.face_detector import FaceObservation
    from facetagger.ml.preprocessing import ImageCropper

logger = logging.getLogger(__name__)


def _checked_quality(value: float | None) -> float | None:
    if value is None or not math.isfinite(value) or not 0.0 <= value <= 1.0:
        return None
    return float(value)


@dataclass(eq=False)
class Face:
    """One detected face within a tagging session."""

    thumbnail: NDArray[np.uint8]
    bounding_box: NormalizedRect
    capture_quality: float | None = None
    contact: Contact | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


def build_faces(
    observations: Iterable[FaceObservation],
    image: NDArray[np.uint8],
    cropper: ImageCropper,
    inflate: float = THUMBNAIL_INFLATE,
) -> list[Face]:
    """Crop a thumbnail for each observation, keeping input order.

    Observations that cannot be cropped are skipped.
    """
    size = image_size(image)
    faces: list[Face] = []
    for index, observation in enumerate(observations):
        rect = to_pixel_rect(observation.bounding_box, size, inflate)
        thumbnail = cropper.crop(image, rect)
        if thumbnail is None:
            logger.info("Skipping face %d: cannot crop %s from %dx%d image", index, rect, size.width, size.height)
            continue
        faces.append(
            Face(
                thumbnail=thumbnail,
                bounding_box=observation.bounding_box,
                capture_quality=_checked_quality(observation.capture_quality),
            )
        )
    return faces
