"""Image helpers for inspecting captured frames.

Frames are RGB throughout huetrack; OpenCV writes BGR, so everything
here converts on the way out.
"""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from huetrack.domain.models import Frame, TargetEstimate

logger = logging.getLogger(__name__)

MARKER_COLOR_BGR = (0, 255, 0)
CENTER_COLOR_BGR = (0, 0, 255)


def frame_to_bgr(frame: Frame) -> np.ndarray:
    """A writable BGR copy of the frame's pixels."""
    return np.ascontiguousarray(frame.pixels[..., ::-1])


def annotate(frame: Frame, target: TargetEstimate, mask: np.ndarray | None = None) -> np.ndarray:
    """Draw the region centre and the located target onto a BGR copy.

    Matching pixels from ``mask`` are tinted so the colour range can be
    checked by eye.
    """
    image = frame_to_bgr(frame)
    if mask is not None:
        image[mask > 0] = MARKER_COLOR_BGR
    center = (frame.width // 2, frame.height // 2)
    cv2.drawMarker(image, center, CENTER_COLOR_BGR, cv2.MARKER_CROSS, markerSize=6, thickness=1)
    if target is not None:
        cv2.circle(image, target, 3, MARKER_COLOR_BGR, 1)
    return image


def save_image(image: np.ndarray, path: Path | str) -> Path:
    """Write a BGR image to disk as PNG (or whatever the suffix says)."""
    path = Path(path)
    if not cv2.imwrite(str(path), image):
        raise ValueError(f"Failed to write image to {path}")
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], path)
    return path
