"""Command-line interface for huetrack.

Provides the main entry point for running the tracking loop and for
checking individual components (capture, colour range, serial port)
against real hardware.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from huetrack.domain.models import Action

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="huetrack",
        description="Colour-tracking screen region follower driving a serial actuator",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/huetrack.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Arm the tracker and loop until interrupted")
    run_parser.add_argument(
        "--action",
        choices=[a.value for a in Action],
        default=Action.MOVE.value,
        help="Command issued for each located target (default: move)",
    )
    run_parser.add_argument(
        "--port", type=str, default=None,
        help="Serial port of the actuator (default: from config, else auto-detect)",
    )

    capture_parser = subparsers.add_parser(
        "capture-test", help="Capture the region once and save an annotated PNG",
    )
    capture_parser.add_argument(
        "--output", type=Path, default=Path("capture_test.png"),
        help="Where to write the image (default: capture_test.png)",
    )

    subparsers.add_parser("inspect", help="Print centre-pixel HSV and the located target")
    subparsers.add_parser("probe", help="Find the actuator's serial port")

    return parser.parse_args(argv)


def _build_capture(settings):
    from huetrack.capture.region import RegionCapture

    return RegionCapture(
        settings.capture.region(),
        interval=settings.capture.interval,
        pause_interval=settings.capture.pause_interval,
    )


async def _run_tracker(settings, args) -> None:
    """Connect the actuator, start capture and process actions until interrupted."""
    from huetrack.actuator.link import ActuatorError, ActuatorLink
    from huetrack.tracking.tracker import Tracker

    link = ActuatorLink.from_config(settings.actuator)
    action = Action(args.action)
    tracking = settings.tracking

    print(f"Region:      {settings.capture.region().as_monitor()}")
    print(f"Move speed:  {tracking.move_speed:.3f}")
    print(f"Flick speed: {tracking.flick_speed:.3f}")

    await link.connect(port_name=args.port)
    try:
        with _build_capture(settings) as capture:
            tracker = Tracker(
                capture=capture,
                link=link,
                color_range=settings.detection.color_range(),
                move_speed=tracking.move_speed,
                flick_speed=tracking.flick_speed,
                click_tolerance_x=tracking.click_tolerance_x,
                click_tolerance_y=tracking.click_tolerance_y,
                frame_timeout=tracking.frame_timeout,
            )
            tracker.arm()
            print(f"Tracking ({action.value}) on {link.port_name}. Press Ctrl+C to stop.")
            while True:
                try:
                    await tracker.process(action)
                except ActuatorError as e:
                    logger.warning("Skipping cycle: %s", e)
                await asyncio.sleep(tracking.loop_interval)
    finally:
        await link.close()


def _grab_one(settings):
    """Start capture, wait for one frame, stop."""
    with _build_capture(settings) as capture:
        frame = capture.get_frame_blocking(timeout=2.0)
    if frame is None:
        raise SystemExit("No frame captured within 2s")
    return frame


def _capture_test(settings, output: Path) -> None:
    from huetrack.utils.imaging import annotate, save_image
    from huetrack.vision.locator import locate, match_mask

    color_range = settings.detection.color_range()
    frame = _grab_one(settings)
    target = locate(frame, color_range)
    save_image(annotate(frame, target, match_mask(frame, color_range)), output)
    print(f"Saved frame to {output} ({frame.width}x{frame.height}), target: {target}")


def _inspect(settings) -> None:
    from huetrack.vision.locator import locate, match_mask, rgb_to_hsv

    color_range = settings.detection.color_range()
    frame = _grab_one(settings)
    cx, cy = frame.width // 2, frame.height // 2
    r, g, b = frame.pixel(cx, cy)
    h, s, v = rgb_to_hsv(r, g, b)
    matched = int((match_mask(frame, color_range) > 0).sum())

    print(f"Centre pixel ({cx}, {cy}):")
    print(f"  RGB: ({r}, {g}, {b})")
    print(f"  HSV: ({h}, {s}, {v})")
    print(f"Looking for H:{color_range.lower[0]}-{color_range.upper[0]} "
          f"S:{color_range.lower[1]}-{color_range.upper[1]} "
          f"V:{color_range.lower[2]}-{color_range.upper[2]}")
    print(f"Matched pixels: {matched}")
    print(f"Target: {locate(frame, color_range)}")


def _probe(settings) -> None:
    from huetrack.actuator.link import discover_port

    act = settings.actuator
    port = discover_port(act.preferred_ports, act.baud_rate, act.timeout_ms / 1000.0)
    print(f"Actuator found on {port}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the huetrack CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from huetrack.actuator.link import NoDeviceFound
    from huetrack.config.settings import load_settings
    from huetrack.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    try:
        if args.command == "run":
            logger.info("Starting tracker (%s)", args.action)
            asyncio.run(_run_tracker(settings, args))

        elif args.command == "capture-test":
            _capture_test(settings, args.output)

        elif args.command == "inspect":
            _inspect(settings)

        elif args.command == "probe":
            _probe(settings)

    except NoDeviceFound as e:
        logger.error("No actuator available: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
