"""Actuator output module for huetrack.

Turns motion deltas and clicks into serial frames for the external
actuator board, with device discovery, reconnect cooldown and a
sliding-window smoothing filter.

Public API:
    ActuatorLink -- Serial link manager
    SmoothingFilter -- Running mean over recent motion deltas
    ActuatorError -- Base class for link failures
"""

from huetrack.actuator.smoothing import SmoothingFilter

__all__ = [
    "ActuatorConnectError",
    "ActuatorError",
    "ActuatorLink",
    "ActuatorWriteError",
    "NoDeviceFound",
    "ProbeFailed",
    "SmoothingFilter",
    "TooSoon",
]

_LINK_NAMES = {
    "ActuatorConnectError",
    "ActuatorError",
    "ActuatorLink",
    "ActuatorWriteError",
    "NoDeviceFound",
    "ProbeFailed",
    "TooSoon",
}


def __getattr__(name: str) -> type:
    """Lazy import for the serial link, which requires pyserial."""
    if name in _LINK_NAMES:
        from huetrack.actuator import link
        return getattr(link, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
