"""Tests for the sliding-window smoothing filter."""

from __future__ import annotations

import pytest

from huetrack.actuator.smoothing import SmoothingFilter
from huetrack.domain.models import CommandVector


class TestSmoothingFilter:
    def test_running_mean_over_window(self) -> None:
        f = SmoothingFilter(filter_length=3)
        outputs = [f.push(v, v) for v in (1, 2, 3, 4)]
        assert outputs == [(1, 1), (1.5, 1.5), (2, 2), (3, 3)]

    def test_window_never_exceeds_length(self) -> None:
        f = SmoothingFilter(filter_length=3)
        for v in range(10):
            f.push(v, -v)
        assert len(f) == 3
        assert f.push(10, -10) == CommandVector(9.0, -9.0)

    def test_axes_are_independent(self) -> None:
        f = SmoothingFilter(filter_length=2)
        f.push(4, -2)
        assert f.push(0, 6) == CommandVector(2.0, 2.0)

    def test_length_one_passes_through(self) -> None:
        f = SmoothingFilter(filter_length=1)
        f.push(5, 5)
        assert f.push(-1.5, 2.5) == CommandVector(-1.5, 2.5)

    def test_reset_clears_history(self) -> None:
        f = SmoothingFilter()
        f.push(100, 100)
        f.reset()
        assert len(f) == 0
        assert f.push(1, 2) == CommandVector(1.0, 2.0)

    def test_rejects_zero_length(self) -> None:
        with pytest.raises(ValueError, match="filter_length"):
            SmoothingFilter(filter_length=0)
