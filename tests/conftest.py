"""Shared test fixtures for the huetrack test suite.

Provides frames, colour ranges, capture regions and an in-memory screen
grabber so the capture thread can run without a display.
"""

from __future__ import annotations

import threading
from typing import Callable

import numpy as np
import pytest

from huetrack.capture.base import CaptureError, ScreenGrabber
from huetrack.domain.models import CaptureRegion, ColorRange, Frame

# Hue 150, value 200, saturation ~179: inside the default purple range
PURPLE = (200, 60, 200)
GREY = (90, 90, 90)


# ---------------------------------------------------------------------------
# Frame / Region Fixtures
# ---------------------------------------------------------------------------


def solid_pixels(width: int, height: int, color: tuple[int, int, int] = GREY) -> np.ndarray:
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


@pytest.fixture
def purple() -> tuple[int, int, int]:
    return PURPLE


@pytest.fixture
def make_frame() -> Callable[..., Frame]:
    """Factory for frames with an optional solid block painted in.

    ``block`` is ``(x0, y0, x1, y1)`` with inclusive bounds.
    """

    def _make(
        width: int = 75,
        height: int = 75,
        background: tuple[int, int, int] = GREY,
        block: tuple[int, int, int, int] | None = None,
        block_color: tuple[int, int, int] = PURPLE,
    ) -> Frame:
        pixels = solid_pixels(width, height, background)
        if block is not None:
            x0, y0, x1, y1 = block
            pixels[y0 : y1 + 1, x0 : x1 + 1] = block_color
        return Frame(pixels=pixels, source="test")

    return _make


@pytest.fixture
def purple_range() -> ColorRange:
    """The default purple target range."""
    return ColorRange(lower=(140, 120, 180), upper=(160, 200, 255))


@pytest.fixture
def small_region() -> CaptureRegion:
    return CaptureRegion(origin_x=100, origin_y=50, width=8, height=6)


# ---------------------------------------------------------------------------
# Grabber Fixtures
# ---------------------------------------------------------------------------


class FakeGrabber(ScreenGrabber):
    """In-memory grabber driven by a per-call script.

    ``script`` is called with the 0-based grab index and returns either an
    array to hand back or an exception to raise.
    """

    def __init__(self, script: Callable[[int, CaptureRegion], object] | None = None) -> None:
        super().__init__()
        self._script = script
        self.grab_count = 0
        self.open_count = 0
        self.close_count = 0
        self.open_failures = 0
        self.grabbed = threading.Event()

    @property
    def name(self) -> str:
        return "fake"

    def open(self) -> None:
        self.open_count += 1
        if self.open_failures:
            self.open_failures -= 1
            raise CaptureError("surface unavailable")
        self._is_open = True

    def close(self) -> None:
        self.close_count += 1
        self._is_open = False

    def grab(self, region: CaptureRegion) -> np.ndarray:
        index = self.grab_count
        self.grab_count += 1
        self.grabbed.set()
        if self._script is None:
            shade = index % 256
            return solid_pixels(region.width, region.height, (shade, shade, shade))
        result = self._script(index, region)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_grabber() -> FakeGrabber:
    return FakeGrabber()


@pytest.fixture
def scripted_grabber() -> Callable[..., FakeGrabber]:
    return FakeGrabber
