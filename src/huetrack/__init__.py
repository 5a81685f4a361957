"""huetrack -- Colour-tracking screen region follower.

This package captures a small region of the screen on a background
thread, finds the centroid of pixels inside an HSV colour range, and
turns the offset from the region centre into relative-move and click
commands written over a serial link to an external actuator board.
"""

__version__ = "0.1.0"
