# src/repeater/core/logging.py
"""Structured logging for repeater.

structlog and stdlib loggers share one handler: stdlib records go through
the same processor chain via ProcessorFormatter, so a module may use either
``structlog.get_logger(__name__)`` or ``logging.getLogger(__name__)``.

Logs always go to stderr (or the given stream). The CLI writes emitted
records to stdout and the two must never interleave.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

if TYPE_CHECKING:
    from repeater.core.config import LoggingSettings

# Chatty at DEBUG; clamped to WARNING or the root level, whichever is stricter
_NOISY_LOGGERS = ("dynaconf", "pluggy")

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
]


def _render_chain(json_output: bool, stream: TextIO) -> list[Any]:
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    isatty = getattr(stream, "isatty", None)
    return [
        ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty())),
    ]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Install the repeater log handler on the root logger.

    Safe to call repeatedly; each call replaces the previous handler.

    Args:
        json_output: One JSON object per line instead of console output
        level: Stdlib level name
        stream: Destination, defaults to the current sys.stderr
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    target = stream if stream is not None else sys.stderr

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(target)
    handler.setFormatter(ProcessorFormatter(processors=_render_chain(json_output, target), foreign_pre_chain=_SHARED_PROCESSORS))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def configure_from_settings(settings: LoggingSettings, *, verbose: bool = False, json_output: bool = False) -> None:
    """Apply the ``logging:`` settings section; CLI flags only ever add verbosity or JSON."""
    configure_logging(
        json_output=settings.json_output or json_output,
        level="DEBUG" if verbose else settings.level,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
