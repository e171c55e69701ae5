"""Core infrastructure: configuration loading and logging."""

from repeater.core.config import LoggingSettings, ProcessorSettings, RepeaterSettings, load_settings
from repeater.core.logging import configure_from_settings, configure_logging, get_logger

__all__ = [
    "LoggingSettings",
    "ProcessorSettings",
    "RepeaterSettings",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
