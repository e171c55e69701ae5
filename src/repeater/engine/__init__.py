"""Host adapter: in-memory session and processor runner."""

from repeater.engine.clock import Clock, MockClock, SystemClock
from repeater.engine.runner import ProcessorRunner, RunawayLoopError, RunSummary
from repeater.engine.session import DEFAULT_PENALTY_DURATION_SECONDS, InMemorySession

__all__ = [
    "DEFAULT_PENALTY_DURATION_SECONDS",
    "Clock",
    "InMemorySession",
    "MockClock",
    "ProcessorRunner",
    "RunSummary",
    "RunawayLoopError",
    "SystemClock",
]
