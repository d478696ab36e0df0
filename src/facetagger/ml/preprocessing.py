"""Image decoding, encoding, and cropping.

Uploaded bytes are decoded with Pillow, rotated according to their EXIF
orientation so detector boxes refer to the upright image, and handed around
as HxWx3 RGB uint8 numpy arrays.
"""

from __future__ import annotations

import io
import logging
import math
from typing import TYPE_CHECKING, Protocol

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from facetagger.geometry import ImageSize

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from facetagger.geometry import PixelRect

logger = logging.getLogger(__name__)


class ImageTooLargeError(ValueError):
    """Raised when an image exceeds the configured pixel limit."""


class ImageCropper(Protocol):
    """Protocol for the cropping capability."""

    def crop(self, image: NDArray[np.uint8], rect: PixelRect) -> NDArray[np.uint8] | None:
        """Return the pixels under ``rect``, or None if nothing can be cropped."""
        ...


class ArrayCropper:
    """Crops numpy images.

    The rectangle is expanded outward to whole pixels and intersected with
    the image bounds. A rectangle that is not finite or does not overlap the
    image yields None.
    """

    def crop(self, image: NDArray[np.uint8], rect: PixelRect) -> NDArray[np.uint8] | None:
        values = (rect.x, rect.y, rect.width, rect.height)
        if not all(math.isfinite(v) for v in values) or rect.width <= 0 or rect.height <= 0:
            return None

        height, width = image.shape[:2]
        x0 = max(math.floor(rect.x), 0)
        y0 = max(math.floor(rect.y), 0)
        x1 = min(math.ceil(rect.max_x), width)
        y1 = min(math.ceil(rect.max_y), height)
        if x1 <= x0 or y1 <= y0:
            return None
        return image[y0:y1, x0:x1].copy()


def image_size(image: NDArray[np.uint8]) -> ImageSize:
    """Return the pixel dimensions of an HxWxC array."""
    return ImageSize(width=int(image.shape[1]), height=int(image.shape[0]))


def decode_image(image_bytes: bytes, max_pixels: int) -> NDArray[np.uint8]:
    """Decode raw image bytes into an upright RGB uint8 numpy array.

    Args:
        image_bytes: Raw file bytes (any format Pillow can read).
        max_pixels: Upper bound on width * height.

    Returns:
        HxWx3 RGB uint8 numpy array.

    Raises:
        ImageTooLargeError: If the image exceeds ``max_pixels``.
        ValueError: If the image cannot be decoded.
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            width, height = img.size
            if width * height > max_pixels:
                raise ImageTooLargeError(f"Image has {width * height} pixels, limit is {max_pixels}")
            upright = ImageOps.exif_transpose(img)
            rgb = upright.convert("RGB")
    except Image.DecompressionBombError as exc:
        raise ImageTooLargeError(str(exc)) from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError(f"Cannot decode image: {exc}") from exc

    array = np.asarray(rgb, dtype=np.uint8)
    logger.debug("Decoded image %dx%d", array.shape[1], array.shape[0])
    return array


def encode_png(image: NDArray[np.uint8]) -> bytes:
    """Encode an RGB uint8 array as PNG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(image).save(buffer, format="PNG")
    return buffer.getvalue()
