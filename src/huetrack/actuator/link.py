"""Serial link to the actuator board.

Finds the board among the available serial ports, keeps one open
handle to it, and writes move/click frames. A failed write marks the
link disconnected; the next command reconnects inline, subject to a
cooldown between reconnect attempts.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Sequence

import serial
from serial.tools import list_ports

from huetrack.actuator.protocol import PROBE_PAYLOAD, click_frame, move_frame
from huetrack.actuator.smoothing import SmoothingFilter
from huetrack.domain.models import CommandVector, LinkState

logger = logging.getLogger(__name__)

DEFAULT_BAUD_RATE = 115200
DEFAULT_PREFERRED_PORTS = (
    "COM9", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM10",
    "/dev/ttyACM0", "/dev/ttyUSB0",
)
# Time given to a probed port to swallow the probe byte
PROBE_WAIT = 0.1


class ActuatorError(Exception):
    """Base class for actuator link failures."""

    def __init__(self, message: str, port: str | None = None) -> None:
        super().__init__(message)
        self.port = port


class NoDeviceFound(ActuatorError):
    """Raised when no serial device is available to drive."""


class ProbeFailed(NoDeviceFound):
    """Raised when serial devices exist but none accepted a probe."""


class TooSoon(ActuatorError):
    """Raised when a reconnect is attempted inside the cooldown window."""


class ActuatorConnectError(ActuatorError):
    """Raised when the serial port cannot be opened."""


class ActuatorWriteError(ActuatorError):
    """Raised when a frame cannot be written to the serial port."""


def probe_port(port_name: str, baud_rate: int = DEFAULT_BAUD_RATE, timeout: float = 0.1) -> None:
    """Open a port, write a newline and close it again.

    Raises:
        serial.SerialException: If the port cannot be opened or written.
    """
    port = serial.Serial(port_name, baud_rate, timeout=timeout, write_timeout=timeout)
    try:
        port.write(PROBE_PAYLOAD)
        time.sleep(PROBE_WAIT)
    finally:
        port.close()


def discover_port(
    preferred: Sequence[str] = DEFAULT_PREFERRED_PORTS,
    baud_rate: int = DEFAULT_BAUD_RATE,
    timeout: float = 0.1,
) -> str:
    """Find a serial port that accepts writes.

    Preferred names that are present are probed first, then every other
    enumerated device.

    Raises:
        NoDeviceFound: If no serial ports are enumerated.
        ProbeFailed: If every enumerated port failed its probe.
    """
    available = [p.device for p in list_ports.comports()]
    if not available:
        raise NoDeviceFound("No serial ports found")

    ordered = [name for name in preferred if name in available]
    ordered += [name for name in available if name not in ordered]

    for name in ordered:
        try:
            probe_port(name, baud_rate, timeout)
        except (serial.SerialException, OSError) as e:
            logger.debug("Probe of %s failed: %s", name, e)
            continue
        logger.info("Found actuator on %s", name)
        return name

    raise ProbeFailed(f"No serial port accepted a probe (tried {', '.join(ordered)})")


class ActuatorLink:
    """Owns the serial connection to the actuator board.

    Usage::

        async with ActuatorLink(port_name="COM5") as link:
            await link.move(3.0, -2.0)
            await link.click()

    Calls must be serialized by the caller; the link holds one handle
    and one smoothing history.
    """

    def __init__(
        self,
        port_name: str | None = None,
        baud_rate: int = DEFAULT_BAUD_RATE,
        filter_length: int = 3,
        reconnect_delay_ms: int = 1000,
        humanize_delay: bool = True,
        min_click_delay_ms: int = 10,
        max_click_delay_ms: int = 100,
        settle_delay_ms: int = 2000,
        timeout_ms: int = 100,
        preferred_ports: Sequence[str] = DEFAULT_PREFERRED_PORTS,
        rng: random.Random | None = None,
    ) -> None:
        if min_click_delay_ms > max_click_delay_ms:
            raise ValueError("min_click_delay_ms must not exceed max_click_delay_ms")
        self._port_name = port_name
        self._baud_rate = baud_rate
        self._reconnect_delay_ms = reconnect_delay_ms
        self._humanize_delay = humanize_delay
        self._min_click_delay_ms = min_click_delay_ms
        self._max_click_delay_ms = max_click_delay_ms
        self._settle_delay = settle_delay_ms / 1000.0
        self._timeout = timeout_ms / 1000.0
        self._preferred_ports = tuple(preferred_ports)
        self._rng = rng or random.Random()
        self._filter = SmoothingFilter(filter_length)
        self._serial: serial.Serial | None = None
        self._state = LinkState.DISCONNECTED
        self._last_reconnect: float | None = None

    @classmethod
    def from_config(cls, config) -> ActuatorLink:
        """Build a link from an ``ActuatorConfig`` section."""
        return cls(
            port_name=config.port,
            baud_rate=config.baud_rate,
            filter_length=config.filter_length,
            reconnect_delay_ms=config.reconnect_delay_ms,
            humanize_delay=config.humanize_delay,
            min_click_delay_ms=config.min_click_delay_ms,
            max_click_delay_ms=config.max_click_delay_ms,
            settle_delay_ms=config.settle_delay_ms,
            timeout_ms=config.timeout_ms,
            preferred_ports=config.preferred_ports,
        )

    @property
    def port_name(self) -> str | None:
        return self._port_name

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is LinkState.CONNECTED

    @property
    def smoothing(self) -> SmoothingFilter:
        return self._filter

    async def discover(self) -> str:
        """Probe the serial ports and remember the first one that works."""
        loop = asyncio.get_running_loop()
        name = await loop.run_in_executor(
            None, discover_port, self._preferred_ports, self._baud_rate, self._timeout
        )
        self._port_name = name
        return name

    async def connect(self, port_name: str | None = None, baud_rate: int | None = None) -> None:
        """Open the port, replacing any handle already held.

        Discovers a port first if none is known. Waits for the board to
        finish booting before returning.
        """
        if port_name is not None:
            self._port_name = port_name
        if baud_rate is not None:
            self._baud_rate = baud_rate
        if self._port_name is None:
            await self.discover()

        await self._drop_handle()
        self._state = LinkState.CONNECTING
        try:
            loop = asyncio.get_running_loop()
            self._serial = await loop.run_in_executor(None, self._open_serial)
        except (serial.SerialException, OSError) as e:
            self._state = LinkState.DISCONNECTED
            raise ActuatorConnectError(
                f"Cannot open serial port {self._port_name}: {e}", port=self._port_name
            ) from e

        self._state = LinkState.CONNECTED
        self._last_reconnect = time.monotonic()
        if self._settle_delay > 0:
            await asyncio.sleep(self._settle_delay)
        logger.info("Connected to actuator on %s at %d baud", self._port_name, self._baud_rate)

    async def reconnect(self) -> None:
        """Drop the current handle and connect again.

        Raises:
            TooSoon: If the previous attempt was less than
                ``reconnect_delay_ms`` ago.
        """
        now = time.monotonic()
        if self._last_reconnect is not None:
            elapsed_ms = (now - self._last_reconnect) * 1000.0
            if elapsed_ms < self._reconnect_delay_ms:
                raise TooSoon(
                    f"Reconnect attempted {elapsed_ms:.0f}ms after the last one "
                    f"(cooldown {self._reconnect_delay_ms}ms)",
                    port=self._port_name,
                )
        self._last_reconnect = now
        logger.info("Reconnecting to actuator on %s", self._port_name)
        await self.connect()

    async def move(self, dx: float, dy: float) -> CommandVector:
        """Smooth a motion delta and send it as an ``M`` frame.

        Returns the smoothed vector that was encoded.
        """
        await self._ensure_connected()
        smoothed = self._filter.push(dx, dy)
        await self._write(move_frame(smoothed.dx, smoothed.dy))
        logger.debug("Move (%.2f, %.2f) -> smoothed (%.2f, %.2f)", dx, dy, smoothed.dx, smoothed.dy)
        return smoothed

    async def flick(self, dx: float, dy: float) -> CommandVector:
        """Same encoding and framing as ``move``."""
        return await self.move(dx, dy)

    async def click(self) -> None:
        """Send a ``C`` frame, after a random delay when humanizing."""
        await self._ensure_connected()
        if self._humanize_delay:
            delay_ms = self._rng.randint(self._min_click_delay_ms, self._max_click_delay_ms)
            await asyncio.sleep(delay_ms / 1000.0)
        await self._write(click_frame())
        logger.debug("Click")

    async def close(self) -> None:
        """Flush and close the port. Safe to call multiple times."""
        was_open = self._serial is not None
        await self._drop_handle()
        self._state = LinkState.DISCONNECTED
        if was_open:
            logger.info("Actuator connection closed")

    async def open(self) -> None:
        await self.connect()

    def _open_serial(self) -> serial.Serial:
        return serial.Serial(
            self._port_name,
            self._baud_rate,
            timeout=self._timeout,
            write_timeout=self._timeout,
        )

    async def _ensure_connected(self) -> None:
        if self._state is not LinkState.CONNECTED:
            await self.reconnect()

    async def _write(self, frame: bytes) -> None:
        port = self._serial
        if port is None:
            self._state = LinkState.DISCONNECTED
            raise ActuatorWriteError("Serial port not open", port=self._port_name)
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, port.write, frame)
        except (serial.SerialException, OSError) as e:
            self._state = LinkState.DISCONNECTED
            raise ActuatorWriteError(
                f"Failed to write {frame!r} to {self._port_name}: {e}", port=self._port_name
            ) from e

    async def _drop_handle(self) -> None:
        """Flush then close the current handle, if any."""
        port = self._serial
        if port is None:
            return
        self._serial = None
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, port.flush)
        except (serial.SerialException, OSError) as e:
            logger.debug("Flush before close failed on %s: %s", self._port_name, e)
        try:
            await loop.run_in_executor(None, port.close)
        except (serial.SerialException, OSError) as e:
            logger.debug("Close failed on %s: %s", self._port_name, e)

    async def __aenter__(self) -> ActuatorLink:
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()
