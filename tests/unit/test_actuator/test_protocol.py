"""Tests for actuator wire framing."""

from __future__ import annotations

import pytest

from huetrack.actuator.protocol import (
    CLICK_FRAME_LENGTH,
    MOVE_FRAME_LENGTH,
    OP_CLICK,
    OP_MOVE,
    click_frame,
    encode_axis,
    move_frame,
)


class TestEncodeAxis:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (-1.0, 255),
            (1.0, 1),
            (0.0, 0),
            (-128.0, 128),
            (127.0, 127),
            (1.9, 1),
            (-0.5, 255),
            (-2.7, 253),
        ],
    )
    def test_wraps_negatives(self, value: float, expected: int) -> None:
        assert encode_axis(value) == expected

    def test_saturates(self) -> None:
        assert encode_axis(300.0) == 255
        assert encode_axis(-300.0) == 0

    def test_nan_encodes_to_zero(self) -> None:
        assert encode_axis(float("nan")) == 0


class TestFrames:
    def test_opcodes(self) -> None:
        assert OP_MOVE == 0x4D
        assert OP_CLICK == 0x43

    def test_move_frame(self) -> None:
        frame = move_frame(1.0, -1.0)
        assert frame == b"M\x01\xff"
        assert len(frame) == MOVE_FRAME_LENGTH

    def test_click_frame(self) -> None:
        assert click_frame() == b"C"
        assert len(click_frame()) == CLICK_FRAME_LENGTH
