"""Single-slot frame handoff between the capture thread and its readers.

The slot holds at most one frame. Every publish overwrites the previous
occupant, so a slow reader skips intermediate frames instead of queuing
them, and the producer never waits on a reader.
"""

from __future__ import annotations

import logging
import threading

from huetrack.domain.models import Frame

logger = logging.getLogger(__name__)


class FrameSlot:
    """One-deep overwrite cell for the most recent frame.

    The frame reference, the publish counter and the ``paused``/``running``
    flags share one lock. Frames are immutable, so the critical section is
    a reference swap in both directions; pixel copies happen before
    ``publish`` is called.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frame: Frame | None = None
        self._sequence: int = 0
        self._paused: bool = False
        self._running: bool = True

    def publish(self, frame: Frame) -> int:
        """Replace the current frame. Returns the new sequence number."""
        if not isinstance(frame, Frame):
            raise TypeError(f"FrameSlot only accepts Frame, got {type(frame).__name__}")
        with self._lock:
            self._frame = frame
            self._sequence += 1
            return self._sequence

    def latest(self) -> Frame | None:
        """The most recently published frame, or None if nothing was published."""
        with self._lock:
            return self._frame

    def snapshot(self) -> tuple[Frame | None, int]:
        """The current frame together with its sequence number."""
        with self._lock:
            return self._frame, self._sequence

    @property
    def sequence(self) -> int:
        """Number of frames published so far."""
        with self._lock:
            return self._sequence

    def pause(self) -> None:
        with self._lock:
            self._paused = True

    def resume(self) -> None:
        with self._lock:
            self._paused = False

    @property
    def is_paused(self) -> bool:
        with self._lock:
            return self._paused

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def shutdown(self) -> None:
        """Tell the producer to exit after its current iteration."""
        with self._lock:
            self._running = False
