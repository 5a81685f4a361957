"""Abstract base class for screen grabbers.

All grabbers must conform to this interface, enabling the capture thread
to swap between a real screen backend and an in-memory test source
without changing the rest of the pipeline.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import numpy as np

from huetrack.domain.models import CaptureRegion

logger = logging.getLogger(__name__)


class ScreenGrabber(ABC):
    """Abstract interface for copying a screen region into memory.

    Grabbers are blocking and are driven from the capture thread. Handles
    acquired in ``open()`` may be bound to the thread that opened them, so
    ``open()``, ``grab()`` and ``close()`` are always called from the same
    thread.

    Example usage::

        with MssGrabber() as grabber:
            pixels = grabber.grab(region)
    """

    def __init__(self) -> None:
        self._is_open: bool = False

    @property
    def is_open(self) -> bool:
        """Whether the grabber currently holds its platform resources."""
        return self._is_open

    @property
    def name(self) -> str:
        """Identifier recorded on the frames this grabber produces."""
        return "screen"

    @abstractmethod
    def open(self) -> None:
        """Acquire the platform resources needed to grab the screen.

        Raises:
            CaptureError: If the screen surface is unavailable.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release platform resources. Safe to call multiple times."""
        ...

    @abstractmethod
    def grab(self, region: CaptureRegion) -> np.ndarray:
        """Copy the region into a freshly allocated array.

        Returns:
            A ``(region.height, region.width, 3)`` uint8 array in RGB order.

        Raises:
            CaptureError: If the surface cannot be read or the copy fails.
        """
        ...

    def __enter__(self) -> ScreenGrabber:
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()


class CaptureError(Exception):
    """Raised when a screen region cannot be captured."""
