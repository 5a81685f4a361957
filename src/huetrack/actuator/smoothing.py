"""Sliding-window smoothing for motion commands."""

from __future__ import annotations

from collections import deque

from huetrack.domain.models import CommandVector


class SmoothingFilter:
    """Running mean over the last ``filter_length`` (dx, dy) pushes.

    The two histories are parallel and are always trimmed together, so
    they stay the same length.
    """

    def __init__(self, filter_length: int = 3) -> None:
        if filter_length < 1:
            raise ValueError(f"filter_length must be >= 1, got {filter_length}")
        self._filter_length = filter_length
        self._x_history: deque[float] = deque()
        self._y_history: deque[float] = deque()

    @property
    def filter_length(self) -> int:
        return self._filter_length

    def __len__(self) -> int:
        return len(self._x_history)

    def push(self, dx: float, dy: float) -> CommandVector:
        """Add a sample and return the mean of the current window."""
        self._x_history.append(float(dx))
        self._y_history.append(float(dy))
        if len(self._x_history) > self._filter_length:
            self._x_history.popleft()
            self._y_history.popleft()
        return CommandVector(
            sum(self._x_history) / len(self._x_history),
            sum(self._y_history) / len(self._y_history),
        )

    def reset(self) -> None:
        self._x_history.clear()
        self._y_history.clear()
