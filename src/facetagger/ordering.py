"""Reading-order sort for detected faces.

Faces whose top edges lie within a row band of each other are treated as
one row and ordered left to right; rows are ordered top to bottom. The band
is ``row_factor`` times the height of the *first* observation in the input,
so callers that reorder the input before sorting can get a different band.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from facetagger.geometry import ImageSize
    from facetagger.ml.face_detector import FaceObservation

ROW_THRESHOLD_FACTOR: float = 1.5


def pixel_top(observation: FaceObservation, image_height: float) -> float:
    """Row position of a face: ``(1 - y) * height`` in top-left-origin pixels."""
    return (1 - observation.bounding_box.y) * image_height


def order_faces(
    observations: Sequence[FaceObservation],
    image_size: ImageSize,
    row_factor: float = ROW_THRESHOLD_FACTOR,
) -> list[FaceObservation]:
    """Return ``observations`` in reading order: top row first, left to right.

    The sort is stable, so observations with identical top and x keep their
    input order.
    """
    if not observations:
        return []

    height = image_size.height
    row_threshold = observations[0].bounding_box.height * height * row_factor

    def compare(a: FaceObservation, b: FaceObservation) -> int:
        top_a = pixel_top(a, height)
        top_b = pixel_top(b, height)
        if abs(top_a - top_b) < row_threshold:
            ax, bx = a.bounding_box.x, b.bounding_box.x
            return (ax > bx) - (ax < bx)
        return (top_a > top_b) - (top_a < top_b)

    return sorted(observations, key=functools.cmp_to_key(compare))
