"""Screen grabber implementation using mss.

Copies the region with mss, which returns BGRA bytes on every platform,
then converts to the RGB channel order used throughout huetrack.
"""

from __future__ import annotations

import logging

import cv2
import mss
import mss.exception
import numpy as np

from huetrack.capture.base import CaptureError, ScreenGrabber
from huetrack.domain.models import CaptureRegion

logger = logging.getLogger(__name__)

BGRA_CHANNELS = 4


class MssGrabber(ScreenGrabber):
    """Grabs screen regions through an ``mss.mss`` instance."""

    def __init__(self) -> None:
        super().__init__()
        self._sct: mss.base.MSSBase | None = None

    @property
    def name(self) -> str:
        return "mss"

    def open(self) -> None:
        """Create the mss handle for the calling thread."""
        try:
            self._sct = mss.mss()
        except mss.exception.ScreenShotError as e:
            raise CaptureError(f"Screen surface unavailable: {e}") from e
        self._is_open = True
        logger.info("Opened mss screen grabber")

    def close(self) -> None:
        if self._sct is not None:
            self._sct.close()
            logger.info("Closed mss screen grabber")
        self._sct = None
        self._is_open = False

    def grab(self, region: CaptureRegion) -> np.ndarray:
        """Copy the region and return it as an RGB array."""
        if self._sct is None:
            raise CaptureError("Grabber is not open")
        try:
            shot = self._sct.grab(region.as_monitor())
        except mss.exception.ScreenShotError as e:
            raise CaptureError(f"Failed to grab region {region.as_monitor()}: {e}") from e
        return bgra_to_rgb(bytes(shot.bgra), shot.width, shot.height)


def bgra_to_rgb(raw: bytes, width: int, height: int) -> np.ndarray:
    """Convert a packed BGRA byte buffer into an RGB ``(h, w, 3)`` array."""
    expected = width * height * BGRA_CHANNELS
    if len(raw) != expected:
        raise CaptureError(
            f"Grabbed {len(raw)} bytes, expected {expected} for {width}x{height}"
        )
    bgra = np.frombuffer(bytearray(raw), dtype=np.uint8).reshape(height, width, BGRA_CHANNELS)
    return cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGB)
