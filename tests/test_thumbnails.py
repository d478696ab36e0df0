"""Tests for cropping and thumbnail building."""

from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from facetagger.geometry import NormalizedRect, PixelRect
from facetagger.ml.face_detector import FaceObservation
from facetagger.ml.preprocessing import ArrayCropper
from facetagger.thumbnails import build_faces


def _image(width: int = 100, height: int = 100) -> np.ndarray:
    # Each pixel's red channel encodes its column so crops can be located.
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :, 0] = np.arange(width, dtype=np.uint8)[None, :]
    return image


class TestArrayCropper:
    def test_crop_inside_image(self) -> None:
        crop = ArrayCropper().crop(_image(), PixelRect(x=10, y=20, width=30, height=40))
        assert crop is not None
        assert crop.shape == (40, 30, 3)
        assert crop[0, 0, 0] == 10

    def test_fractional_rect_expands_to_whole_pixels(self) -> None:
        crop = ArrayCropper().crop(_image(), PixelRect(x=10.5, y=10.5, width=9.0, height=9.0))
        assert crop is not None
        assert crop.shape == (10, 10, 3)

    def test_partial_overlap_is_clipped(self) -> None:
        crop = ArrayCropper().crop(_image(), PixelRect(x=-20, y=90, width=40, height=30))
        assert crop is not None
        assert crop.shape == (10, 20, 3)
        assert crop[0, 0, 0] == 0

    @pytest.mark.parametrize(
        "rect",
        [
            PixelRect(x=150, y=0, width=10, height=10),
            PixelRect(x=-50, y=-50, width=20, height=20),
            PixelRect(x=10, y=10, width=0, height=10),
            PixelRect(x=float("nan"), y=10, width=10, height=10),
            PixelRect(x=10, y=10, width=float("inf"), height=10),
        ],
    )
    def test_uncroppable_rect_returns_none(self, rect: PixelRect) -> None:
        assert ArrayCropper().crop(_image(), rect) is None

    def test_crop_is_a_copy(self) -> None:
        image = _image()
        crop = ArrayCropper().crop(image, PixelRect(x=0, y=0, width=5, height=5))
        assert crop is not None
        crop[:] = 255
        assert image[0, 0, 1] == 0


class TestBuildFaces:
    def test_one_face_per_observation_in_order(self) -> None:
        observations = [
            FaceObservation(NormalizedRect(x=0.5, y=0.5, width=0.25, height=0.25), capture_quality=0.9),
            FaceObservation(NormalizedRect(x=0.25, y=0.5, width=0.25, height=0.25)),
        ]
        faces = build_faces(observations, _image(), ArrayCropper(), inflate=1.0)

        assert len(faces) == 2
        assert faces[0].bounding_box == observations[0].bounding_box
        assert faces[0].thumbnail[0, 0, 0] == 50
        assert faces[1].thumbnail[0, 0, 0] == 25
        assert faces[0].capture_quality == 0.9
        assert faces[1].capture_quality is None
        assert all(face.contact is None for face in faces)

    def test_ids_are_unique(self) -> None:
        observations = [FaceObservation(NormalizedRect(x=0.4, y=0.4, width=0.2, height=0.2))] * 5
        faces = build_faces(observations, _image(), ArrayCropper())
        assert len({face.id for face in faces}) == 5

    def test_uses_inflated_rect(self) -> None:
        cropper = MagicMock()
        cropper.crop.return_value = np.zeros((1, 1, 3), dtype=np.uint8)
        box = NormalizedRect(x=0.25, y=0.25, width=0.5, height=0.5)

        build_faces([FaceObservation(box)], _image(200, 200), cropper)

        rect = cropper.crop.call_args.args[1]
        assert rect.width == pytest.approx(160.0)
        assert rect.x == pytest.approx(20.0)

    def test_uncroppable_observation_is_skipped(self) -> None:
        cropper = MagicMock()
        good = np.zeros((2, 2, 3), dtype=np.uint8)
        cropper.crop.side_effect = [good, None, good]
        observations = [
            FaceObservation(NormalizedRect(x=0.1 * i, y=0.4, width=0.1, height=0.1), capture_quality=0.1 * i)
            for i in range(3)
        ]

        faces = build_faces(observations, _image(), cropper)

        assert [face.bounding_box for face in faces] == [observations[0].bounding_box, observations[2].bounding_box]
        assert cropper.crop.call_count == 3

    @pytest.mark.parametrize("quality", [1.5, -0.1, float("nan")])
    def test_out_of_range_quality_becomes_none(self, quality: float) -> None:
        observation = FaceObservation(NormalizedRect(x=0.4, y=0.4, width=0.2, height=0.2), capture_quality=quality)
        faces = build_faces([observation], _image(), ArrayCropper())
        assert faces[0].capture_quality is None

    def test_empty_input(self) -> None:
        assert build_faces([], _image(), ArrayCropper()) == []
