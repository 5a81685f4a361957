"""Tests for logging setup and frame image helpers."""

from __future__ import annotations

import logging

import cv2
import numpy as np

from huetrack.config.settings import LoggingConfig
from huetrack.utils.imaging import annotate, frame_to_bgr, save_image
from huetrack.utils.logging import PACKAGE_LOGGER, setup_logging


class TestSetupLogging:
    def test_level_and_handlers(self) -> None:
        logger = setup_logging(LoggingConfig(level="debug"))
        assert logger.name == PACKAGE_LOGGER
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_repeated_calls_do_not_stack_handlers(self) -> None:
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO

    def test_file_handler(self, tmp_path) -> None:
        log_file = tmp_path / "huetrack.log"
        logger = setup_logging(LoggingConfig(file=str(log_file)))
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()
        setup_logging()


class TestImaging:
    def test_frame_to_bgr(self, make_frame, purple) -> None:
        frame = make_frame(width=4, height=3, block=(0, 0, 0, 0), block_color=(10, 20, 30))
        bgr = frame_to_bgr(frame)
        assert bgr[0, 0].tolist() == [30, 20, 10]
        assert bgr.flags.writeable

    def test_annotate_tints_mask(self, make_frame) -> None:
        frame = make_frame(width=20, height=20)
        mask = np.zeros((20, 20), dtype=np.uint8)
        mask[2, 3] = 255
        image = annotate(frame, (3, 2), mask)
        assert image.shape == (20, 20, 3)
        assert image[2, 3].tolist() == [0, 255, 0]
        assert not frame.pixels.flags.writeable

    def test_annotate_without_target(self, make_frame) -> None:
        frame = make_frame(width=20, height=20)
        image = annotate(frame, None)
        # Centre marker drawn in red (BGR)
        assert image[10, 10].tolist() == [0, 0, 255]

    def test_save_image(self, make_frame, tmp_path) -> None:
        path = save_image(frame_to_bgr(make_frame(width=8, height=6)), tmp_path / "out.png")
        loaded = cv2.imread(str(path))
        assert loaded.shape == (6, 8, 3)
