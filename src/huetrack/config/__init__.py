"""Configuration management for huetrack.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides for every field.
"""

from huetrack.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
