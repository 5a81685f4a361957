"""Core domain models for the huetrack system.

These models represent the data flowing through the pipeline: the screen
region being captured, the frames produced by the capture thread, the
colour range used to classify pixels, and the command vectors sent to
the actuator.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import NamedTuple, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Hue is stored halved so a full circle fits in one byte (OpenCV convention)
HUE_MAX = 180
CHANNEL_MAX = 255


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Action(str, enum.Enum):
    """Kind of command the tracker issues for a located target."""

    MOVE = "move"  # Continuous tracking delta
    CLICK = "click"  # Click only when the target is centred
    FLICK = "flick"  # Move there, click, move back


class LinkState(str, enum.Enum):
    """Connection state of the actuator serial link."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class TrackerState(str, enum.Enum):
    """Supervisory state: whether located targets produce commands."""

    IDLE = "idle"
    ARMED = "armed"


# ---------------------------------------------------------------------------
# Capture Models
# ---------------------------------------------------------------------------


class CaptureRegion(BaseModel):
    """Rectangular area of the screen captured on every cycle.

    Coordinates are in virtual-screen pixels. The origin may be negative
    on multi-monitor layouts where a display sits left of or above the
    primary one.
    """

    model_config = ConfigDict(frozen=True)

    origin_x: int = Field(description="Left edge x-coordinate in screen pixels")
    origin_y: int = Field(description="Top edge y-coordinate in screen pixels")
    width: int = Field(gt=0, description="Width of the region in pixels")
    height: int = Field(gt=0, description="Height of the region in pixels")

    @classmethod
    def centered(
        cls, screen_width: int, screen_height: int, width: int, height: int
    ) -> CaptureRegion:
        """Build a region of the given size centred on the screen."""
        return cls(
            origin_x=(screen_width - width) // 2,
            origin_y=(screen_height - height) // 2,
            width=width,
            height=height,
        )

    @property
    def center(self) -> tuple[float, float]:
        """Centre of the region in region-local pixel coordinates."""
        return self.width / 2.0, self.height / 2.0

    def as_monitor(self) -> dict[str, int]:
        """The region as an mss-style ``{left, top, width, height}`` dict."""
        return {
            "left": self.origin_x,
            "top": self.origin_y,
            "width": self.width,
            "height": self.height,
        }


class Frame(BaseModel):
    """A single captured frame of the region.

    Pixels are a dense row-major ``(height, width, 3)`` uint8 array in RGB
    order. The array is made read-only on construction so a published
    frame can be shared between threads without copying.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    pixels: np.ndarray = Field(description="RGB pixel data, shape (height, width, 3)")
    timestamp: datetime = Field(default_factory=datetime.now)
    frame_number: int = Field(default=0, ge=0, description="Sequential frame counter")
    source: str = Field(default="screen", description="Identifier of the grabber")

    @field_validator("pixels")
    @classmethod
    def _check_pixels(cls, value: np.ndarray) -> np.ndarray:
        if not isinstance(value, np.ndarray):
            raise ValueError("pixels must be a numpy array")
        if value.dtype != np.uint8:
            raise ValueError(f"pixels must be uint8, got {value.dtype}")
        if value.ndim != 3 or value.shape[2] != 3:
            raise ValueError(f"pixels must have shape (height, width, 3), got {value.shape}")
        if value.shape[0] == 0 or value.shape[1] == 0:
            raise ValueError("pixels must not be empty")
        frozen = np.ascontiguousarray(value).view()
        frozen.flags.writeable = False
        return frozen

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def buffer(self) -> bytes:
        """Raw RGB bytes, ``width * height * 3`` long."""
        return self.pixels.tobytes()

    def pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """RGB value of the pixel at (x, y)."""
        r, g, b = self.pixels[y, x]
        return int(r), int(g), int(b)


# ---------------------------------------------------------------------------
# Detection Models
# ---------------------------------------------------------------------------


HsvTriple = Tuple[int, int, int]


class ColorRange(BaseModel):
    """Inclusive per-channel HSV bounds used to classify pixels.

    Hue is in [0, 180] (degrees halved); saturation and value in [0, 255].
    """

    model_config = ConfigDict(frozen=True)

    lower: HsvTriple = Field(default=(140, 120, 180))
    upper: HsvTriple = Field(default=(160, 200, 255))

    @field_validator("lower", "upper")
    @classmethod
    def _check_channels(cls, value: HsvTriple) -> HsvTriple:
        h, s, v = value
        if not 0 <= h <= HUE_MAX:
            raise ValueError(f"hue must be in [0, {HUE_MAX}], got {h}")
        for channel in (s, v):
            if not 0 <= channel <= CHANNEL_MAX:
                raise ValueError(f"saturation/value must be in [0, {CHANNEL_MAX}], got {channel}")
        return value

    @model_validator(mode="after")
    def _check_order(self) -> ColorRange:
        for low, high in zip(self.lower, self.upper):
            if low > high:
                raise ValueError(f"lower bound {self.lower} exceeds upper bound {self.upper}")
        return self

    def contains(self, hsv: HsvTriple) -> bool:
        """Whether an (h, s, v) triple lies inside the range."""
        return all(low <= c <= high for c, low, high in zip(hsv, self.lower, self.upper))


# Centroid of the matching pixels for one frame, or None when nothing matched
TargetEstimate = Optional[Tuple[int, int]]


class CommandVector(NamedTuple):
    """A smoothed motion delta in device units."""

    dx: float
    dy: float
