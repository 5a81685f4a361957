"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from huetrack.config.settings import (
    ActuatorConfig,
    CaptureConfig,
    DetectionConfig,
    Settings,
    TrackingConfig,
    flick_speed_for,
    load_settings,
    move_speed_for,
)
from huetrack.domain.models import CaptureRegion, ColorRange


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # Keep a developer's .env or HUETRACK_* variables out of these tests
    monkeypatch.chdir(tmp_path)
    for name in ("HUETRACK_ACTUATOR__PORT", "HUETRACK_ACTUATOR__BAUD_RATE", "HUETRACK_LOGGING__LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestSpeeds:
    def test_move_speed(self) -> None:
        assert move_speed_for(0.23) == pytest.approx(0.4347826, rel=1e-6)

    def test_flick_speed(self) -> None:
        assert flick_speed_for(1.0) == pytest.approx(1.07437623)
        assert flick_speed_for(0.23) == pytest.approx(1.07437623 * 0.23**-0.9936827126)

    def test_derived_when_unset(self) -> None:
        tracking = TrackingConfig(sensitivity=0.5)
        assert tracking.move_speed == pytest.approx(0.2)
        assert tracking.flick_speed == pytest.approx(flick_speed_for(0.5))

    def test_explicit_speed_kept(self) -> None:
        tracking = TrackingConfig(sensitivity=0.5, move_speed=1.25)
        assert tracking.move_speed == 1.25
        assert tracking.flick_speed == pytest.approx(flick_speed_for(0.5))

    def test_sensitivity_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            TrackingConfig(sensitivity=0)


class TestCaptureConfig:
    def test_region_is_centred(self) -> None:
        assert CaptureConfig().region() == CaptureRegion(
            origin_x=922, origin_y=502, width=75, height=75
        )

    def test_origin_override(self) -> None:
        region = CaptureConfig(origin_x=-1800, fov_width=40, fov_height=30).region()
        assert (region.origin_x, region.origin_y) == (-1800, 525)
        assert (region.width, region.height) == (40, 30)

    def test_interval_floor(self) -> None:
        with pytest.raises(ValidationError):
            CaptureConfig(interval=0.001)


class TestDetectionConfig:
    def test_default_range(self) -> None:
        assert DetectionConfig().color_range() == ColorRange()

    def test_hue_above_180_rejected(self) -> None:
        with pytest.raises(ValidationError, match="hue"):
            DetectionConfig(upper_hsv=(181, 200, 255)).color_range()

    def test_inverted_bounds_rejected(self) -> None:
        with pytest.raises(ValidationError, match="exceeds"):
            ColorRange(lower=(50, 0, 0), upper=(40, 255, 255))

    def test_contains(self) -> None:
        assert ColorRange().contains((150, 179, 200))
        assert not ColorRange().contains((150, 119, 200))


class TestActuatorConfig:
    def test_defaults(self) -> None:
        config = ActuatorConfig()
        assert config.port is None
        assert config.baud_rate == 115200
        assert config.filter_length == 3
        assert config.reconnect_delay_ms == 1000
        assert (config.min_click_delay_ms, config.max_click_delay_ms) == (10, 100)
        assert config.preferred_ports[0] == "COM9"

    def test_click_delays_must_be_ordered(self) -> None:
        with pytest.raises(ValidationError, match="min_click_delay_ms"):
            ActuatorConfig(min_click_delay_ms=200, max_click_delay_ms=100)

    def test_filter_length_positive(self) -> None:
        with pytest.raises(ValidationError):
            ActuatorConfig(filter_length=0)


class TestLoadSettings:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "missing.yaml")
        assert isinstance(settings, Settings)
        assert settings.actuator.baud_rate == 115200
        assert settings.logging.level == "INFO"

    def test_yaml_values(self, tmp_path: Path) -> None:
        path = tmp_path / "huetrack.yaml"
        path.write_text(
            "capture:\n"
            "  fov_width: 100\n"
            "  fov_height: 50\n"
            "detection:\n"
            "  lower_hsv: [10, 20, 30]\n"
            "  upper_hsv: [20, 255, 255]\n"
            "actuator:\n"
            "  port: COM4\n"
            "  humanize_delay: false\n"
        )
        settings = load_settings(path)
        assert settings.capture.region().width == 100
        assert settings.detection.color_range().lower == (10, 20, 30)
        assert settings.actuator.port == "COM4"
        assert settings.actuator.humanize_delay is False
        assert settings.actuator.baud_rate == 115200

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).tracking.sensitivity == 0.23

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "huetrack.yaml"
        path.write_text("actuator:\n  port: COM4\n  baud_rate: 57600\n")
        monkeypatch.setenv("HUETRACK_ACTUATOR__BAUD_RATE", "9600")
        settings = load_settings(path)
        assert settings.actuator.baud_rate == 9600
        assert settings.actuator.port == "COM4"

    def test_invalid_yaml_value(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("actuator:\n  baud_rate: -1\n")
        with pytest.raises(ValidationError):
            load_settings(path)
