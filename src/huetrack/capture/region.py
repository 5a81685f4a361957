"""Background capture of a fixed screen region.

A dedicated producer thread grabs the configured region at a capped
cadence and publishes each result into a FrameSlot. Consumers read the
latest frame without ever blocking the producer beyond the slot swap.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime

from huetrack.capture.base import CaptureError, ScreenGrabber
from huetrack.capture.slot import FrameSlot
from huetrack.domain.models import CaptureRegion, Frame

logger = logging.getLogger(__name__)

# Cadence cap: at most one grab every 10 ms
MIN_INTERVAL = 0.01
DEFAULT_PAUSE_INTERVAL = 0.1
DEFAULT_POLL_INTERVAL = 0.001


class RegionCapture:
    """Owns the producer thread that keeps a FrameSlot fresh.

    Usage::

        with RegionCapture(region) as capture:
            frame = capture.get_frame_blocking(timeout=0.1)

    Grab failures are logged and retried on the next iteration; the last
    good frame stays in the slot so readers never see a gap.
    """

    def __init__(
        self,
        region: CaptureRegion,
        grabber: ScreenGrabber | None = None,
        interval: float = MIN_INTERVAL,
        pause_interval: float = DEFAULT_PAUSE_INTERVAL,
    ) -> None:
        if grabber is None:
            from huetrack.capture.mss_grabber import MssGrabber

            grabber = MssGrabber()
        self._region = region
        self._grabber = grabber
        self._interval = max(interval, MIN_INTERVAL)
        self._pause_interval = pause_interval
        self._slot = FrameSlot()
        self._thread: threading.Thread | None = None
        self._frame_counter: int = 0
        self._failure_streak: int = 0

    @property
    def region(self) -> CaptureRegion:
        return self._region

    @property
    def slot(self) -> FrameSlot:
        return self._slot

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> FrameSlot:
        """Spawn the producer thread. Returns the slot it publishes into.

        Raises:
            RuntimeError: If the capture was already stopped. A stopped
                capture cannot be restarted; build a new one instead.
        """
        if self._thread is not None:
            return self._slot
        if not self._slot.is_running:
            raise RuntimeError("RegionCapture was stopped and cannot be restarted")
        r = self._region
        logger.info(
            "Starting region capture at (%d, %d) %dx%d",
            r.origin_x, r.origin_y, r.width, r.height,
        )
        self._thread = threading.Thread(
            target=self._capture_loop, daemon=True, name="region-capture"
        )
        self._thread.start()
        return self._slot

    def stop(self, timeout: float | None = 1.0) -> None:
        """Signal the producer to exit and wait up to ``timeout`` for it."""
        self._slot.shutdown()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Capture thread still running after %.1fs", timeout)
            self._thread = None
            logger.info("Region capture stopped")

    def pause(self) -> None:
        self._slot.pause()

    def resume(self) -> None:
        self._slot.resume()

    @property
    def is_paused(self) -> bool:
        return self._slot.is_paused

    def get_frame(self) -> Frame | None:
        """The latest frame, or None if nothing has been captured yet."""
        return self._slot.latest()

    def get_frame_blocking(
        self, timeout: float, poll_interval: float = DEFAULT_POLL_INTERVAL
    ) -> Frame | None:
        """Poll for a frame until one is available or ``timeout`` elapses."""
        deadline = time.monotonic() + timeout
        while True:
            frame = self._slot.latest()
            if frame is not None:
                return frame
            if time.monotonic() >= deadline:
                return None
            time.sleep(poll_interval)

    def _capture_loop(self) -> None:
        """Producer loop running on the capture thread."""
        grabber_open = False
        try:
            while self._slot.is_running:
                if self._slot.is_paused:
                    time.sleep(self._pause_interval)
                    continue
                if not grabber_open:
                    grabber_open = self._open_grabber()
                if grabber_open:
                    self._capture_once()
                time.sleep(self._interval)
        finally:
            if grabber_open:
                self._grabber.close()

    def _open_grabber(self) -> bool:
        try:
            self._grabber.open()
        except CaptureError as e:
            self._record_failure(e)
            return False
        except Exception as e:
            self._record_failure(e, unexpected=True)
            return False
        return True

    def _capture_once(self) -> None:
        """Grab one frame and publish it; failures leave the slot untouched."""
        try:
            pixels = self._grabber.grab(self._region)
            frame = Frame(
                pixels=pixels,
                timestamp=datetime.now(),
                frame_number=self._frame_counter,
                source=self._grabber.name,
            )
        except CaptureError as e:
            self._record_failure(e)
            return
        except ValueError as e:
            # Frame validation rejected the buffer
            self._record_failure(CaptureError(f"Malformed frame: {e}"))
            return
        except Exception as e:
            self._record_failure(e, unexpected=True)
            return
        if frame.width != self._region.width or frame.height != self._region.height:
            self._record_failure(
                CaptureError(
                    f"Grabbed {frame.width}x{frame.height}, "
                    f"expected {self._region.width}x{self._region.height}"
                )
            )
            return
        self._slot.publish(frame)
        self._frame_counter += 1
        if self._failure_streak:
            logger.info("Capture recovered after %d failures", self._failure_streak)
            self._failure_streak = 0

    def _record_failure(self, error: Exception, unexpected: bool = False) -> None:
        """Count a failed grab or open. Must be called from an except block."""
        self._failure_streak += 1
        if self._failure_streak == 1:
            if unexpected:
                logger.exception("Unexpected capture error, keeping last frame: %s", error)
            else:
                logger.warning("Capture failed, keeping last frame: %s", error)
        else:
            logger.debug("Capture failed (%d in a row): %s", self._failure_streak, error)

    def __enter__(self) -> RegionCapture:
        self.start()
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.stop()
