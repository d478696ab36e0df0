"""Tests for image decoding and encoding."""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from facetagger.geometry import ImageSize
from facetagger.ml.preprocessing import ImageTooLargeError, decode_image, encode_png, image_size


def _png_bytes(width: int, height: int, mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (width, height)).save(buffer, format="PNG")
    return buffer.getvalue()


class TestDecodeImage:
    def test_decodes_to_rgb_array(self) -> None:
        array = decode_image(_png_bytes(30, 20), max_pixels=10_000)
        assert array.shape == (20, 30, 3)
        assert array.dtype == np.uint8

    def test_converts_grayscale_to_rgb(self) -> None:
        array = decode_image(_png_bytes(8, 8, mode="L"), max_pixels=10_000)
        assert array.shape == (8, 8, 3)

    def test_applies_exif_orientation(self) -> None:
        img = Image.new("RGB", (40, 20))
        exif = img.getexif()
        exif[0x0112] = 6  # rotated 90 degrees
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", exif=exif.tobytes())

        array = decode_image(buffer.getvalue(), max_pixels=10_000)

        assert array.shape == (40, 20, 3)

    def test_rejects_too_many_pixels(self) -> None:
        with pytest.raises(ImageTooLargeError):
            decode_image(_png_bytes(100, 100), max_pixels=9_999)

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValueError, match="Cannot decode image"):
            decode_image(b"not an image", max_pixels=10_000)


class TestEncodePng:
    def test_png_roundtrip_shape(self) -> None:
        image = np.full((6, 4, 3), 128, dtype=np.uint8)
        data = encode_png(image)
        assert data.startswith(b"\x89PNG")
        with Image.open(io.BytesIO(data)) as decoded:
            assert decoded.size == (4, 6)


class TestImageSize:
    def test_width_then_height(self) -> None:
        assert image_size(np.zeros((5, 7, 3), dtype=np.uint8)) == ImageSize(width=7, height=5)
