"""Tests for detector loading."""

from __future__ import annotations

import sys
import types

import pytest

from facetagger.ml.face_detector import FaceObservation, load_detector


class _Detector:
    def detect(self, image: object) -> list[FaceObservation]:
        return []


@pytest.fixture()
def plugin_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    module = types.ModuleType("fake_detector_plugin")
    module.Detector = _Detector  # type: ignore[attr-defined]
    module.instance = _Detector()  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "fake_detector_plugin", module)
    return module


class TestLoadDetector:
    def test_calls_factory(self, plugin_module: types.ModuleType) -> None:
        detector = load_detector("fake_detector_plugin:Detector")
        assert isinstance(detector, _Detector)

    def test_uses_instance_as_is(self, plugin_module: types.ModuleType) -> None:
        # Instances are callable only if they define __call__; _Detector does not.
        assert load_detector("fake_detector_plugin:instance") is plugin_module.instance

    @pytest.mark.parametrize("path", ["fake_detector_plugin", ":Detector", "fake_detector_plugin:"])
    def test_malformed_path(self, path: str) -> None:
        with pytest.raises(ValueError, match="module:attribute"):
            load_detector(path)

    def test_missing_attribute(self, plugin_module: types.ModuleType) -> None:
        with pytest.raises(AttributeError):
            load_detector("fake_detector_plugin:Nope")

    def test_missing_module(self) -> None:
        with pytest.raises(ImportError):
            load_detector("no_such_module_for_facetagger:Detector")
