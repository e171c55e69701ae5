# tests/conftest.py
"""Shared test fixtures and configuration.

Hypothesis profiles:
- ci: more examples, derandomized for reproducibility
- dev: default for local runs
"""

import logging
import os
from collections.abc import Iterator
from typing import Any

import pytest
import structlog
from hypothesis import settings

from repeater.contracts import Record
from repeater.engine.clock import MockClock
from repeater.engine.session import InMemorySession
from repeater.plugins.processors.repeat_counter import REPEATER_COUNT_ATTR, RepeatCounter

settings.register_profile("ci", max_examples=200, derandomize=True)
settings.register_profile("dev", max_examples=50)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "dev"))


def make_record(count: str | None = None, **attributes: str) -> Record:
    """Build a record, optionally carrying a prior pass count."""
    attrs: dict[str, str] = dict(attributes)
    if count is not None:
        attrs[REPEATER_COUNT_ATTR] = count
    return Record(content=b"payload", attributes=attrs)


def make_counter(repeat_count: Any = "1", penalize: Any = None) -> RepeatCounter:
    """Build a RepeatCounter from host-style options."""
    options: dict[str, Any] = {"Repeat Count": repeat_count}
    if penalize is not None:
        options["Penalize Repeated Passes"] = penalize
    return RepeatCounter(options)


@pytest.fixture
def clock() -> MockClock:
    return MockClock(start=100.0)


@pytest.fixture
def session(clock: MockClock) -> InMemorySession:
    """Session wired with the repeat counter's relationships."""
    return InMemorySession(RepeatCounter.relationship_names(), clock=clock)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Keep structlog and root logger configuration from leaking between tests.

    configure_logging() binds a handler to whatever sys.stderr is at call
    time, which under capsys/CliRunner is a buffer closed after the test.
    """
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)
