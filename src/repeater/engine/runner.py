# src/repeater/engine/runner.py
"""Runner that schedules a processor against an in-memory session.

The runner is the thin host adapter around a processor:

    runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "1"})
    runner.enqueue(Record())
    summary = runner.run()
    summary.routed  # {"no-repeat": 0, "repeat": 1}

Configuration is validated before the first trigger. A processor whose
options are invalid is never instantiated and never sees a record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from repeater.contracts import Record, Route
from repeater.engine.session import DEFAULT_PENALTY_DURATION_SECONDS, InMemorySession
from repeater.plugins.config_base import PluginConfigError

if TYPE_CHECKING:
    from repeater.core.config import RepeaterSettings
    from repeater.engine.clock import Clock
    from repeater.plugins.base import BaseProcessor
    from repeater.plugins.manager import PluginManager

logger = structlog.get_logger(__name__)


class RunawayLoopError(Exception):
    """Raised when drain() exceeds its trigger budget."""

    def __init__(self, max_triggers: int, pending: int) -> None:
        self.max_triggers = max_triggers
        self.pending = pending
        super().__init__(f"Exceeded {max_triggers} triggers with {pending} record(s) still queued")


@dataclass
class RunSummary:
    """Counts accumulated over one run() or drain() call."""

    triggers: int = 0
    idle_ticks: int = 0
    penalized: int = 0
    routed: dict[str, int] = field(default_factory=dict)
    emitted: list[tuple[Record, str]] = field(default_factory=list)

    def add(self, relationship: str, records: list[Record]) -> None:
        self.routed[relationship] = self.routed.get(relationship, 0) + len(records)
        for record in records:
            if record.penalized:
                self.penalized += 1
            self.emitted.append((record, relationship))


class ProcessorRunner:
    """Validate, schedule and trigger one processor.

    Args:
        processor_cls: BaseProcessor subclass to run
        options: Raw processor options
        session: Session to use; created from the processor's relationships if omitted
        penalty_duration_seconds: Penalty duration for a created session
        clock: Clock for a created session
    """

    def __init__(
        self,
        processor_cls: type[BaseProcessor],
        options: dict[str, Any],
        *,
        session: InMemorySession | None = None,
        penalty_duration_seconds: float = DEFAULT_PENALTY_DURATION_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        self._processor_cls = processor_cls
        self._options = dict(options)
        self._processor: BaseProcessor | None = None
        self.session = (
            session
            if session is not None
            else InMemorySession(
                processor_cls.relationship_names(),
                penalty_duration_seconds=penalty_duration_seconds,
                clock=clock,
            )
        )

    @classmethod
    def from_settings(
        cls,
        settings: RepeaterSettings,
        manager: PluginManager,
        *,
        clock: Clock | None = None,
    ) -> ProcessorRunner:
        """Build a runner from loaded settings.

        Raises:
            PluginConfigError: If the configured plugin is not registered
        """
        processor_cls = manager.get_processor_by_name(settings.processor.plugin)
        if processor_cls is None:
            available = sorted(p.name for p in manager.get_processors())
            raise PluginConfigError(f"Unknown processor plugin '{settings.processor.plugin}'. Available: {available}")
        return cls(
            processor_cls,
            settings.processor.options,
            penalty_duration_seconds=settings.penalty_duration_seconds,
            clock=clock,
        )

    @property
    def processor_cls(self) -> type[BaseProcessor]:
        return self._processor_cls

    def validate(self) -> list[str]:
        """Return configuration problems; empty when the options are valid."""
        return self._processor_cls.config_model.validation_messages(self._options)

    def schedule(self) -> BaseProcessor:
        """Instantiate the processor, failing closed on invalid options.

        Raises:
            PluginConfigError: If the options are invalid
        """
        if self._processor is not None:
            return self._processor

        problems = self.validate()
        if problems:
            logger.warning("processor_not_scheduled", processor=self._processor_cls.name, problems=problems)
            raise PluginConfigError(f"Processor '{self._processor_cls.name}' is invalid and cannot be scheduled: " + "; ".join(problems))

        self._processor = self._processor_cls(self._options)
        logger.info("processor_scheduled", processor=self._processor_cls.name, options=self._options)
        return self._processor

    def enqueue(self, record: Record) -> None:
        self.session.enqueue(record)

    def run(self, iterations: int = 1) -> RunSummary:
        """Trigger the processor ``iterations`` times, committing after each."""
        if iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {iterations}")
        processor = self.schedule()
        summary = RunSummary()
        for _ in range(iterations):
            self._trigger(processor, summary)
        logger.info("run_complete", processor=self._processor_cls.name, triggers=summary.triggers, routed=summary.routed)
        return summary

    def drain(self, *, loop_back: bool = False, max_triggers: int | None = None) -> RunSummary:
        """Trigger until the queue is empty.

        Args:
            loop_back: Re-enqueue records routed to "repeat", modelling a
                retry loop wired back into this processor
            max_triggers: Optional trigger budget

        Raises:
            RunawayLoopError: If max_triggers is exceeded
        """
        processor = self.schedule()
        summary = RunSummary()
        while self.session.queue_size:
            if max_triggers is not None and summary.triggers >= max_triggers:
                raise RunawayLoopError(max_triggers, self.session.queue_size)
            committed = self._trigger(processor, summary)
            if loop_back:
                self.session.enqueue_all(committed.get(Route.REPEAT, []))
        logger.info("drain_complete", processor=self._processor_cls.name, triggers=summary.triggers, routed=summary.routed)
        return summary

    def _trigger(self, processor: BaseProcessor, summary: RunSummary) -> dict[str, list[Record]]:
        before = self.session.queue_size
        processor.on_trigger(self.session)
        committed = self.session.commit()
        summary.triggers += 1
        if before == 0:
            summary.idle_ticks += 1
        for relationship, records in committed.items():
            summary.add(relationship, records)
        return committed
