# src/repeater/plugins/config_base.py
"""Base classes for typed processor configurations.

This module provides base classes that processors inherit from to get:
- Strict validation (reject unknown fields)
- Immutability once validated
- Factory methods with clear error messages
- Host-style option names ("Repeat Count") alongside Python field names

Example usage:
    class RepeatCounterConfig(PluginConfig):
        repeat_count: int = Field(..., alias="Repeat Count", gt=0)

    cfg = RepeatCounterConfig.from_dict({"Repeat Count": "3"})
    cfg.repeat_count  # 3
"""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, ValidationError


class PluginConfigError(Exception):
    """Raised when processor configuration is invalid."""

    pass


class PluginConfig(BaseModel):
    """Base class for typed processor configurations.

    Options may be given either by their display name (the alias the host
    shows to operators) or by their Python field name.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create config from dict with clear error on validation failure.

        Args:
            config: Dictionary of configuration values.

        Returns:
            Validated configuration instance.

        Raises:
            PluginConfigError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: config must be a dict, got {type(config).__name__}.")

        try:
            return cls.model_validate(dict(config))
        except ValidationError as e:
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e
        except ValueError as e:
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e

    @classmethod
    def validation_messages(cls, config: dict[str, Any]) -> list[str]:
        """Return one human-readable message per validation problem.

        Empty list means the config is valid. Used by the runner and CLI to
        report every problem at once instead of failing on the first.
        """
        if not isinstance(config, dict):
            return [f"config must be a dict, got {type(config).__name__}"]
        try:
            cls.model_validate(dict(config))
        except ValidationError as e:
            messages = []
            for err in e.errors():
                location = ".".join(str(part) for part in err["loc"]) or "<root>"
                messages.append(f"{location}: {err['msg']}")
            return messages
        return []
