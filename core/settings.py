"""
Centralized Settings Configuration

Uses Pydantic Settings to load the monitor configuration from a JSON file,
with environment variables (MONITOR_ prefix, "__" nested delimiter) filling
any values the file leaves out.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

import pytz
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CONFIG_PATH = "config.json"
CONFIG_PATH_ENV_VAR = "MONITOR_CONFIG_PATH"


class ConfigurationError(Exception):
    """Raised when the configuration file is missing or invalid."""

    pass


def parse_hhmm(value: str) -> tuple[int, int]:
    """Parse an "HH:MM" string into (hour, minute)."""
    try:
        hour_str, minute_str = value.split(":")
        hour, minute = int(hour_str), int(minute_str)
    except (AttributeError, ValueError):
        raise ValueError(f"time must be formatted HH:MM, got {value!r}")

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"time out of range: {value!r}")
    return hour, minute


class _CamelModel(BaseModel):
    """Base for config sections written in camelCase in config.json."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ThresholdConfig(_CamelModel):
    """Minimum stat line a player must reach (turnovers is a maximum)."""

    points: float = 0
    rebounds: float = 0
    assists: float = 0
    three_pointers: float = 0
    steals: float = 0
    blocks: float = 0
    turnovers: float = 99


class MonitoringConfig(_CamelModel):
    check_interval_minutes: float = Field(default=5, gt=0)
    only_during_game_times: bool = False
    game_time_start: str = "00:00"
    game_time_end: str = "23:59"
    timezone: str = "America/New_York"
    request_delay_seconds: float = Field(default=1.0, ge=0)

    @field_validator("game_time_start", "game_time_end")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate the timezone is a known IANA name."""
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"unknown timezone: {v}")
        return v


class SenderConfig(_CamelModel):
    user: Optional[str] = None
    app_password: Optional[SecretStr] = None


class EmailConfig(_CamelModel):
    sender: SenderConfig = Field(
        default_factory=SenderConfig,
        validation_alias=AliasChoices("from", "sender"),
    )
    to: list[str] = Field(default_factory=list)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    resend_api_key: Optional[SecretStr] = None
    dry_run: bool = False

    @field_validator("to", mode="before")
    @classmethod
    def split_recipients(cls, v: Union[str, list[str], None]) -> list[str]:
        """Accept a single address, a comma separated string, or a list."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [address.strip() for address in v if address and address.strip()]


class EspnConfig(_CamelModel):
    league_id: Optional[Union[int, str]] = None
    swid: Optional[SecretStr] = None
    espn_s2: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("espnS2", "espn_s2"),
    )
    current_season: int = 2026
    historical_season: int = 2025


class HttpConfig(_CamelModel):
    timeout: int = 30
    retry_max_attempts: int = 3
    retry_base_delay: float = 2.0
    retry_max_delay: float = 30.0


class Settings(BaseSettings):
    """Monitor settings loaded from config.json and the environment."""

    thresholds: ThresholdConfig
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    espn: EspnConfig = Field(default_factory=EspnConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)

    roster_file: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("rosterFile", "roster_file"),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("logLevel", "log_level", "MONITOR_LOG_LEVEL"),
    )
    log_format: str = Field(
        default="console",
        validation_alias=AliasChoices("logFormat", "log_format", "MONITOR_LOG_FORMAT"),
    )
    service_name: str = Field(
        default="hoops-monitor",
        validation_alias=AliasChoices("serviceName", "service_name", "MONITOR_SERVICE_NAME"),
    )

    # Control API bearer token
    api_token: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("apiToken", "api_token", "MONITOR_API_TOKEN"),
    )

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is either json or console."""
        lower_v = v.lower()
        if lower_v not in {"json", "console"}:
            raise ValueError("log_format must be 'json' or 'console'")
        return lower_v


def resolve_config_path(config_path: Optional[Union[str, Path]] = None) -> Path:
    """Explicit path, then MONITOR_CONFIG_PATH, then ./config.json."""
    if config_path:
        return Path(config_path)
    return Path(os.getenv(CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_PATH))


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file is not valid JSON: {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a JSON object: {path}")
    return data


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load and validate settings.

    Args:
        config_path: Path to the JSON config. Defaults to $MONITOR_CONFIG_PATH
                     or ./config.json.

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If the file is missing, malformed, or invalid
    """
    path = resolve_config_path(config_path)
    data = _read_config_file(path)

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}:\n{e}")


def load_espn_config(config_path: Optional[Union[str, Path]] = None) -> EspnConfig:
    """
    Load only the "espn" section of a config file.

    Used by the roster diagnostic script, which needs league credentials but
    not thresholds or email settings.
    """
    path = resolve_config_path(config_path)
    data = _read_config_file(path)

    try:
        return EspnConfig.model_validate(data.get("espn") or {})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid espn configuration in {path}:\n{e}")
