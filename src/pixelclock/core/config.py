"""Configuration loading with Pydantic validation.

Provides type-safe configuration with:
- Pydantic models for validation
- YAML file loading
- Environment overrides for credentials
- Defaults for a 64x32 panel
"""

import logging
import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

WEATHER_API_KEY_ENV = "PIXELCLOCK_WEATHER_API_KEY"
HA_TOKEN_ENV = "PIXELCLOCK_HA_TOKEN"


# =============================================================================
# Configuration Models
# =============================================================================


class DisplayConfig(BaseModel):
    """LED matrix and frame pacing configuration."""

    rows: int = Field(32, ge=8, le=128, description="Panel row count")
    cols: int = Field(64, ge=8, le=256, description="Panel column count")
    brightness: int = Field(50, ge=0, le=100, description="Display brightness %")
    hardware_mapping: str = Field("adafruit-hat", description="GPIO mapping profile")
    gpio_slowdown: int = Field(4, ge=0, le=5, description="GPIO timing slowdown")
    pwm_bits: int = Field(11, ge=1, le=11, description="PWM color depth bits")
    pwm_lsb_nanoseconds: int = Field(130, ge=50, le=500, description="PWM timing")
    frame_interval_ms: int = Field(1000, gt=0, description="Milliseconds between frames")
    mock: bool = Field(False, description="Never touch matrix hardware")
    preview_path: str | None = Field(None, description="PNG written on every frame in mock mode")


class ClockConfig(BaseModel):
    """Page rotation and clock settings."""

    timezone: str = Field("Europe/London", description="IANA timezone for local time")
    rotation_interval: float = Field(5.0, gt=0, description="Seconds per page")
    debug: bool = Field(False, description="Disable overnight blanking")
    font_path: str | None = Field(None, description="Bitmap or TrueType font file")
    font_size: int = Field(6, ge=4, le=32, description="Size for TrueType fonts")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the zoneinfo database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class WeatherConfig(BaseModel):
    """Forecast provider settings."""

    api_key: SecretStr = Field(default=SecretStr(""), description="tomorrow.io API key")
    latitude: str = Field("51.5072", description="Forecast latitude")
    longitude: str = Field("-0.1276", description="Forecast longitude")
    refresh: float = Field(600, gt=0, description="Seconds between forecast fetches")


class DiagnosticsConfig(BaseModel):
    """Network reachability probe settings."""

    host: str = Field("8.8.8.8", description="Probe host")
    port: int = Field(53, ge=1, le=65535, description="Probe TCP port")
    interval: float = Field(120, gt=0, description="Seconds between probes")
    timeout: float = Field(2.0, gt=0, description="Connect timeout in seconds")


class HomeAssistantConfig(BaseModel):
    """Home Assistant sensor settings."""

    base_url: str = Field("", description="e.g. http://homeassistant.local:8123")
    token: SecretStr = Field(default=SecretStr(""), description="Long-lived access token")
    entity_ids: list[str] = Field(default_factory=list, description="Sensor entity IDs")
    refresh: float = Field(60, gt=0, description="Seconds between sensor fetches")

    @property
    def enabled(self) -> bool:
        """Sensor pages are shown only when a server and entities are configured."""
        return bool(self.base_url and self.entity_ids)


class EventConfig(BaseModel):
    """A single countdown event."""

    name: str = Field(..., min_length=1, max_length=12)
    timestamp: str = Field(..., description="RFC 3339 start time")
    image: str | None = Field(None, description="Optional PNG overlay")


class CalendarConfig(BaseModel):
    """Countdown events."""

    events: list[EventConfig] = Field(default_factory=list)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    format: str = Field("simple", description="Format: simple, structured")
    file: str | None = Field(None, description="Log file path")
    max_size_mb: int = Field(10, ge=1, description="Max log file size")
    backup_count: int = Field(3, ge=0, description="Number of backup files")


class Config(BaseModel):
    """Root configuration model."""

    display: DisplayConfig = Field(default_factory=DisplayConfig)
    clock: ClockConfig = Field(default_factory=ClockConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
    homeassistant: HomeAssistantConfig = Field(default_factory=HomeAssistantConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Loading
# =============================================================================


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Fill credentials from the environment when set."""
    api_key = os.environ.get(WEATHER_API_KEY_ENV)
    if api_key:
        data.setdefault("weather", {})["api_key"] = api_key

    token = os.environ.get(HA_TOKEN_ENV)
    if token:
        data.setdefault("homeassistant", {})["token"] = token

    return data


def load_config(path: str | Path) -> Config:
    """Load and validate configuration from a YAML file.

    A missing file yields the defaults (plus environment overrides).

    Raises:
        ConfigurationError: If the file is unreadable, not a mapping, or
            fails validation
    """
    config_path = Path(path)
    data: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                "Failed to read config file",
                details={"path": str(config_path)},
                cause=e,
            ) from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                "Config file must contain a mapping at the top level",
                details={"path": str(config_path)},
            )
        data = loaded
        logger.info("Loaded config from %s", config_path)
    else:
        logger.info("Config file %s not found, using defaults", config_path)

    try:
        return Config.model_validate(_apply_env_overrides(data))
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid configuration",
            details={"path": str(config_path), "errors": e.error_count()},
            cause=e,
        ) from e
