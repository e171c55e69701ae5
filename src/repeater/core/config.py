# src/repeater/core/config.py
"""
Configuration schema and loading for repeater.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from repeater.engine.session import DEFAULT_PENALTY_DURATION_SECONDS

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


class ProcessorSettings(BaseModel):
    """Which processor to run and its raw options.

    Options are validated by the processor's own config model when the
    runner schedules it, not here.

    Example YAML:
        processor:
          plugin: repeat_counter
          options:
            Repeat Count: 3
    """

    model_config = {"frozen": True, "extra": "forbid"}

    plugin: str = Field(
        default="repeat_counter",
        description="Registered processor name",
    )
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Processor options (display names or field names)",
    )

    @field_validator("plugin")
    @classmethod
    def validate_plugin_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("plugin name cannot be empty")
        return v.strip()


class LoggingSettings(BaseModel):
    """Log output configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class RepeaterSettings(BaseModel):
    """Top-level repeater configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    processor: ProcessorSettings = Field(
        default_factory=ProcessorSettings,
        description="Processor plugin and options",
    )
    penalty_duration_seconds: float = Field(
        default=DEFAULT_PENALTY_DURATION_SECONDS,
        ge=0,
        description="How long a penalized record stays ineligible for redelivery",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            # No env var and no default - keep original (validation will likely fail)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def load_settings(config_path: Path) -> RepeaterSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (REPEATER_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: REPEATER_LOGGING__LEVEL for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated RepeaterSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="REPEATER",
        settings_files=[str(config_path)],
        environments=False,  # No [default]/[production] sections
        load_dotenv=False,  # The CLI loads .env itself
        merge_enabled=True,  # Deep merge nested dicts
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    # and filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    raw_config = _expand_env_vars(raw_config)

    return RepeaterSettings(**raw_config)
