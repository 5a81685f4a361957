"""Configuration management for huetrack.

Loads settings from a YAML configuration file with environment variable
overrides (``HUETRACK_<SECTION>__<FIELD>``). Supports .env files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from huetrack.domain.models import CaptureRegion, ColorRange

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/huetrack.yaml")

# Empirical fit mapping in-game sensitivity to a flick gain
FLICK_GAIN = 1.07437623
FLICK_EXPONENT = -0.9936827126


def flick_speed_for(sensitivity: float) -> float:
    """Flick gain for a given in-game sensitivity."""
    return FLICK_GAIN * sensitivity**FLICK_EXPONENT


def move_speed_for(sensitivity: float) -> float:
    """Tracking gain for a given in-game sensitivity."""
    return 1.0 / (10.0 * sensitivity)


class CaptureConfig(BaseModel):
    screen_width: int = Field(default=1920, gt=0)
    screen_height: int = Field(default=1080, gt=0)
    fov_width: int = Field(default=75, gt=0, description="Width of the captured region")
    fov_height: int = Field(default=75, gt=0, description="Height of the captured region")
    origin_x: int | None = Field(default=None, description="Region left edge; centred if unset")
    origin_y: int | None = Field(default=None, description="Region top edge; centred if unset")
    interval: float = Field(default=0.01, ge=0.01, description="Seconds between captures")
    pause_interval: float = Field(default=0.1, gt=0)

    def region(self) -> CaptureRegion:
        """The capture region, centred on the screen unless an origin is set."""
        centered = CaptureRegion.centered(
            self.screen_width, self.screen_height, self.fov_width, self.fov_height
        )
        return CaptureRegion(
            origin_x=centered.origin_x if self.origin_x is None else self.origin_x,
            origin_y=centered.origin_y if self.origin_y is None else self.origin_y,
            width=self.fov_width,
            height=self.fov_height,
        )


class DetectionConfig(BaseModel):
    lower_hsv: tuple[int, int, int] = Field(default=(140, 120, 180))
    upper_hsv: tuple[int, int, int] = Field(default=(160, 200, 255))

    def color_range(self) -> ColorRange:
        return ColorRange(lower=self.lower_hsv, upper=self.upper_hsv)


class TrackingConfig(BaseModel):
    sensitivity: float = Field(default=0.23, gt=0)
    move_speed: float | None = Field(default=None, gt=0)
    flick_speed: float | None = Field(default=None, gt=0)
    click_tolerance_x: float = Field(default=4.0, ge=0)
    click_tolerance_y: float = Field(default=10.0, ge=0)
    frame_timeout: float = Field(default=0.1, gt=0)
    loop_interval: float = Field(default=0.005, ge=0)

    @model_validator(mode="after")
    def _derive_speeds(self) -> TrackingConfig:
        if self.move_speed is None:
            self.move_speed = move_speed_for(self.sensitivity)
        if self.flick_speed is None:
            self.flick_speed = flick_speed_for(self.sensitivity)
        return self


class ActuatorConfig(BaseModel):
    port: str | None = Field(default=None, description="Serial port; auto-detected if unset")
    preferred_ports: list[str] = Field(
        default_factory=lambda: [
            "COM9", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM10",
            "/dev/ttyACM0", "/dev/ttyUSB0",
        ]
    )
    baud_rate: int = Field(default=115200, gt=0)
    filter_length: int = Field(default=3, ge=1)
    reconnect_delay_ms: int = Field(default=1000, ge=0)
    humanize_delay: bool = Field(default=True)
    min_click_delay_ms: int = Field(default=10, ge=0)
    max_click_delay_ms: int = Field(default=100, ge=0)
    settle_delay_ms: int = Field(default=2000, ge=0)
    timeout_ms: int = Field(default=100, gt=0)

    @model_validator(mode="after")
    def _check_click_delays(self) -> ActuatorConfig:
        if self.min_click_delay_ms > self.max_click_delay_ms:
            raise ValueError("min_click_delay_ms must not exceed max_click_delay_ms")
        return self


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the huetrack system.

    Loads from a YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "HUETRACK_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    actuator: ActuatorConfig = Field(default_factory=ActuatorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values passed in from the YAML file
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
