"""Domain models for huetrack.

This package contains the core data structures, enumerations, and value
objects shared by the capture, vision, actuator and tracking layers. All
models use Pydantic v2 for validation.
"""

from huetrack.domain.models import (
    Action,
    CaptureRegion,
    ColorRange,
    CommandVector,
    Frame,
    LinkState,
    TargetEstimate,
    TrackerState,
)

__all__ = [
    "Action",
    "CaptureRegion",
    "ColorRange",
    "CommandVector",
    "Frame",
    "LinkState",
    "TargetEstimate",
    "TrackerState",
]
