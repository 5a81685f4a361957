"""Byte-level framing for the actuator serial protocol.

The board understands two frames, each starting with a one-byte opcode:

    M x y   relative move; x and y are single bytes where values >= 128
            stand for negative deltas (two's-complement style)
    C       click

A flick is not its own opcode: callers send M, C, M. Nothing is read
back from the device.
"""

from __future__ import annotations

import math

OP_MOVE = ord("M")
OP_CLICK = ord("C")

# Written when probing a port to check that it accepts data
PROBE_PAYLOAD = b"\n"

MOVE_FRAME_LENGTH = 3
CLICK_FRAME_LENGTH = 1


def encode_axis(value: float) -> int:
    """Encode one motion component as an unsigned wire byte.

    Negative values are shifted by 256, then the result is truncated
    toward zero and saturated to [0, 255]. NaN encodes to 0.
    """
    if math.isnan(value):
        return 0
    raw = value + 256.0 if value < 0 else value
    return int(min(max(raw, 0.0), 255.0))


def move_frame(dx: float, dy: float) -> bytes:
    """Three-byte relative-move frame."""
    return bytes([OP_MOVE, encode_axis(dx), encode_axis(dy)])


def click_frame() -> bytes:
    """One-byte click frame."""
    return bytes([OP_CLICK])
