"""Target location for huetrack.

Public API:
    locate -- Centroid of pixels inside a colour range
    rgb_to_hsv -- Single-pixel HSV conversion
    hsv_image -- Whole-frame HSV conversion
"""

from huetrack.vision.locator import hsv_image, locate, match_mask, rgb_to_hsv

__all__ = ["hsv_image", "locate", "match_mask", "rgb_to_hsv"]
