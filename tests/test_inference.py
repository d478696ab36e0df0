"""Tests for the background execution pool."""

from __future__ import annotations

import threading

import pytest

from facetagger.ml.inference import InferencePool


class TestInferencePool:
    async def test_runs_off_the_event_loop_thread(self) -> None:
        pool = InferencePool(1)
        try:
            name = await pool.run(lambda: threading.current_thread().name)
        finally:
            pool.shutdown()
        assert name.startswith("face-detection")

    async def test_passes_arguments_and_resets_counters(self) -> None:
        pool = InferencePool(2)
        try:
            assert await pool.run(pow, 2, 10) == 1024
            assert pool.active_count == 0
            assert pool.queue_depth == 0
        finally:
            pool.shutdown()

    async def test_propagates_errors(self) -> None:
        def boom() -> None:
            raise RuntimeError("detector exploded")

        pool = InferencePool(1)
        try:
            with pytest.raises(RuntimeError, match="exploded"):
                await pool.run(boom)
            assert pool.active_count == 0
        finally:
            pool.shutdown()
