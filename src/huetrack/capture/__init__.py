"""Region capture module for huetrack.

Provides the background capture thread, the single-slot frame handoff
it publishes into, and pluggable screen grabbers. The abstract grabber
allows alternative backends (e.g. in-memory sources for testing).

Public API:
    RegionCapture -- Producer thread publishing the latest frame
    FrameSlot -- Last-writer-wins frame cell
    ScreenGrabber -- Abstract base class for grabbers
    MssGrabber -- mss-based screen grabber
"""

from huetrack.capture.base import CaptureError, ScreenGrabber
from huetrack.capture.region import RegionCapture
from huetrack.capture.slot import FrameSlot

__all__ = ["CaptureError", "FrameSlot", "MssGrabber", "RegionCapture", "ScreenGrabber"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "MssGrabber":
        from huetrack.capture.mss_grabber import MssGrabber
        return MssGrabber
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
