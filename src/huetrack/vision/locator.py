"""Colour-space target locator.

Converts a frame to an 8-bit HSV encoding (hue halved into [0, 180],
matching OpenCV), keeps the pixels inside an inclusive colour range and
reports the centroid of what is left.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from huetrack.domain.models import ColorRange, Frame, TargetEstimate

logger = logging.getLogger(__name__)


def _round_half_up(values: np.ndarray) -> np.ndarray:
    """Round non-negative values with halves going up, not to even."""
    floor = np.floor(values)
    return np.where(values - floor >= 0.5, floor + 1, floor)


def hsv_image(pixels: np.ndarray) -> np.ndarray:
    """Convert an RGB ``(h, w, 3)`` uint8 array to 8-bit HSV.

    Uses the max/min/delta formulation in float32: value is the rounded
    maximum channel, saturation the rounded delta/max ratio, and hue the
    six-case r/g/b-dominant formula normalised to [0, 360) then halved.
    """
    rgb = pixels.astype(np.float32) / np.float32(255.0)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    high = rgb.max(axis=-1)
    low = rgb.min(axis=-1)
    delta = high - low

    value = _round_half_up(high * 255.0)

    with np.errstate(divide="ignore", invalid="ignore"):
        saturation = np.where(high > 0, _round_half_up(delta / high * 255.0), 0)
        hue = np.where(
            high == r,
            60.0 * ((g - b) / delta),
            np.where(
                high == g,
                60.0 * ((b - r) / delta + 2.0),
                60.0 * ((r - g) / delta + 4.0),
            ),
        )
    hue = np.where(delta > 0, hue, 0.0)
    hue = np.where(hue < 0, hue + 360.0, hue)
    hue = _round_half_up(hue / 2.0)

    hsv = np.stack([hue, saturation, value], axis=-1)
    return np.clip(hsv, 0, 255).astype(np.uint8)


def rgb_to_hsv(r: int, g: int, b: int) -> tuple[int, int, int]:
    """HSV triple for a single RGB pixel, using the same encoding as ``hsv_image``."""
    pixel = np.array([[[r, g, b]]], dtype=np.uint8)
    h, s, v = hsv_image(pixel)[0, 0]
    return int(h), int(s), int(v)


def match_mask(frame: Frame, color_range: ColorRange) -> np.ndarray:
    """Binary mask (255 = match) of pixels inside the colour range.

    Both bounds are inclusive on every channel.
    """
    hsv = hsv_image(frame.pixels)
    lower = np.array(color_range.lower, dtype=np.uint8)
    upper = np.array(color_range.upper, dtype=np.uint8)
    return cv2.inRange(hsv, lower, upper)


def locate(frame: Frame, color_range: ColorRange) -> TargetEstimate:
    """Centroid of the pixels matching ``color_range``, or None.

    The mean coordinate is truncated to integers. A frame with no matching
    pixel yields None rather than (0, 0).
    """
    ys, xs = np.nonzero(match_mask(frame, color_range))
    count = int(xs.size)
    if count == 0:
        logger.debug("No pixels matched in %dx%d frame", frame.width, frame.height)
        return None
    target = (int(xs.sum()) // count, int(ys.sum()) // count)
    logger.debug("Matched %d pixels, centroid at %s", count, target)
    return target
