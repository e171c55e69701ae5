# src/repeater/engine/clock.py
"""Time source for penalty deadlines.

InMemorySession asks its clock for the current time when a record is
penalized and again when asked whether that penalty is still running.
Production code uses SystemClock (the default); tests inject MockClock.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Source of the current time for penalty bookkeeping."""

    def now(self) -> float:
        """Return seconds on a monotonic scale; only differences are meaningful."""
        ...


class SystemClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        """Return the current monotonic time in seconds."""
        return time.monotonic()


class MockClock:
    """Clock that only moves when told to.

    Example:
        clock = MockClock(start=100.0)
        session = InMemorySession(relationships, clock=clock, penalty_duration_seconds=30)
        record = session.penalize(record)       # expires at 130.0
        clock.advance(30)
        assert not session.is_penalty_active(record)
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        """Return the mock time, unchanged until advance() is called."""
        return self._now

    def advance(self, seconds: float) -> None:
        """Move mock time forward.

        Raises:
            ValueError: If seconds is negative
        """
        if seconds < 0:
            raise ValueError(f"MockClock cannot move backwards (advance by {seconds})")
        self._now += seconds


DEFAULT_CLOCK: Clock = SystemClock()
