"""Idle/armed supervisor that turns located targets into actuator commands.

Ties together region capture, the colour locator and the actuator link
for one action at a time. Whether commands are issued at all (armed) is
kept separate from whether the capture thread is paused.
"""

from __future__ import annotations

import asyncio
import logging

from huetrack.actuator.link import ActuatorLink
from huetrack.capture.region import RegionCapture
from huetrack.domain.models import Action, ColorRange, Frame, TargetEstimate, TrackerState
from huetrack.vision.locator import locate

logger = logging.getLogger(__name__)


class Tracker:
    """Processes one action per call against the latest captured frame.

    Coordinates: latest frame -> locate -> offset from centre -> command
    """

    def __init__(
        self,
        capture: RegionCapture,
        link: ActuatorLink,
        color_range: ColorRange,
        move_speed: float,
        flick_speed: float,
        click_tolerance_x: float = 4.0,
        click_tolerance_y: float = 10.0,
        frame_timeout: float = 0.1,
    ) -> None:
        self._capture = capture
        self._link = link
        self._color_range = color_range
        self._move_speed = move_speed
        self._flick_speed = flick_speed
        self._click_tolerance_x = click_tolerance_x
        self._click_tolerance_y = click_tolerance_y
        self._frame_timeout = frame_timeout
        self._state = TrackerState.IDLE

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_armed(self) -> bool:
        return self._state is TrackerState.ARMED

    def arm(self) -> None:
        if self._state is not TrackerState.ARMED:
            self._state = TrackerState.ARMED
            logger.info("Tracker armed")

    def disarm(self) -> None:
        if self._state is not TrackerState.IDLE:
            self._state = TrackerState.IDLE
            logger.info("Tracker idle")

    def toggle(self) -> bool:
        """Flip between idle and armed. Returns True when now armed."""
        if self.is_armed:
            self.disarm()
        else:
            self.arm()
        return self.is_armed

    @staticmethod
    def offset_from_center(target: tuple[int, int], frame: Frame) -> tuple[float, float]:
        """Pixel offset of ``target`` from the centre of ``frame``."""
        x, y = target
        return x - frame.width / 2.0, y - frame.height / 2.0

    def is_centered(self, dx: float, dy: float) -> bool:
        return abs(dx) <= self._click_tolerance_x and abs(dy) <= self._click_tolerance_y

    async def process(self, action: Action) -> TargetEstimate:
        """Locate the target in the latest frame and act on it.

        Returns the target position, or None if idle, no frame arrived in
        time, or nothing matched.

        Raises:
            ActuatorError: If the command could not be delivered.
        """
        if not self.is_armed:
            return None

        loop = asyncio.get_running_loop()
        frame = await loop.run_in_executor(
            None, self._capture.get_frame_blocking, self._frame_timeout
        )
        if frame is None:
            logger.warning("No frame captured within %.3fs", self._frame_timeout)
            return None

        target = locate(frame, self._color_range)
        if target is None:
            logger.debug("No target in frame %d", frame.frame_number)
            return None

        dx, dy = self.offset_from_center(target, frame)

        if action is Action.MOVE:
            await self._link.move(dx * self._move_speed, dy * self._move_speed)

        elif action is Action.CLICK:
            if self.is_centered(dx, dy):
                logger.debug("Target centred at offset (%.1f, %.1f), clicking", dx, dy)
                await self._link.click()
            else:
                logger.debug("Target off centre by (%.1f, %.1f), not clicking", dx, dy)

        elif action is Action.FLICK:
            flick_x = dx * self._flick_speed
            flick_y = dy * self._flick_speed
            await self._link.flick(flick_x, flick_y)
            await self._link.click()
            await self._link.flick(-flick_x, -flick_y)

        return target
