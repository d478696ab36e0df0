"""Face detector contract and loading.

The detection model itself lives outside this package. Any object with a
``detect(image)`` method returning :class:`FaceObservation` values can be
plugged in through ``FACETAGGER_DETECTOR``.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from facetagger.geometry import NormalizedRect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FaceObservation:
    """A single face reported by a detector.

    ``bounding_box`` is normalized with a bottom-left origin.
    """

    bounding_box: NormalizedRect
    capture_quality: float | None = None


class FaceDetector(Protocol):
    """Protocol for face detection models."""

    def detect(self, image: NDArray[np.uint8]) -> list[FaceObservation]:
        """Detect faces in an image.

        Args:
            image: HxWx3 RGB uint8 array.

        Returns:
            Observations with normalized bounding boxes. May raise on failure.
        """
        ...


def load_detector(path: str) -> FaceDetector:
    """Import and build a detector from a ``"module:attribute"`` path.

    The attribute is called with no arguments if it is callable (a class or
    factory function), otherwise it is used as is.

    Raises:
        ValueError: If the path is malformed.
        ImportError: If the module cannot be imported.
        AttributeError: If the module has no such attribute.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Detector path must look like 'module:attribute', got {path!r}")

    target = getattr(importlib.import_module(module_name), attr)
    detector = target() if callable(target) else target
    logger.info("Loaded face detector %s (%s)", path, type(detector).__name__)
    return detector
