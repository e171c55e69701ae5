# src/repeater/engine/session.py
"""In-process host session.

InMemorySession implements the ProcessSession protocol over a FIFO queue.
It is the host adapter used by ProcessorRunner and the CLI, and the test
double processors are exercised against.

Transfer bookkeeping:
    get() marks a record as taken. transfer() must be called exactly once per
    taken record before commit(). Transfers stay staged, and invisible to
    transferred(), until commit().

Penalties are recorded with an expiry time but never enforced: the queue
delivers penalized records like any other.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping

import structlog

from repeater.contracts import (
    ProvenanceEvent,
    ProvenanceEventType,
    Record,
    TransferStateError,
    UnknownRelationshipError,
)
from repeater.engine.clock import DEFAULT_CLOCK, Clock

logger = structlog.get_logger(__name__)

DEFAULT_PENALTY_DURATION_SECONDS = 30.0


class InMemorySession:
    """Single-threaded in-memory ProcessSession.

    Not thread-safe. One session models one host connection for one
    processor; relationships are fixed at construction.
    """

    def __init__(
        self,
        relationships: Iterable[str],
        *,
        penalty_duration_seconds: float = DEFAULT_PENALTY_DURATION_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        if penalty_duration_seconds < 0:
            raise ValueError(f"penalty_duration_seconds must be >= 0, got {penalty_duration_seconds}")
        self._relationships = frozenset(relationships)
        self._penalty_duration = penalty_duration_seconds
        self._clock = clock if clock is not None else DEFAULT_CLOCK

        self._queue: deque[Record] = deque()
        self._taken: dict[str, Record] = {}
        self._staged: dict[str, tuple[Record, str]] = {}
        self._committed: dict[str, list[Record]] = {name: [] for name in sorted(self._relationships)}
        self._penalty_expiry: dict[str, float] = {}
        self._provenance: list[ProvenanceEvent] = []

    # === Host-side operations ===

    def enqueue(self, record: Record) -> None:
        """Queue a record for the processor."""
        self._queue.append(record)

    def enqueue_all(self, records: Iterable[Record]) -> None:
        for record in records:
            self.enqueue(record)

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    def commit(self) -> dict[str, list[Record]]:
        """Commit staged transfers.

        Returns:
            Records committed by this call, keyed by relationship

        Raises:
            TransferStateError: If a taken record was never transferred
        """
        missing = [record_id for record_id in self._taken if record_id not in self._staged]
        if missing:
            raise TransferStateError(missing[0], "taken from session but not transferred before commit")

        committed: dict[str, list[Record]] = {name: [] for name in sorted(self._relationships)}
        for record, relationship in self._staged.values():
            committed[relationship].append(record)
            self._committed[relationship].append(record)

        self._taken.clear()
        self._staged.clear()
        return committed

    def transferred(self, relationship: str) -> list[Record]:
        """Records committed to ``relationship`` over the session's lifetime."""
        if relationship not in self._relationships:
            raise UnknownRelationshipError(relationship, self._relationships)
        return list(self._committed[relationship])

    def clear_transfer_state(self) -> None:
        """Forget committed transfers and provenance (queue is kept)."""
        for records in self._committed.values():
            records.clear()
        self._provenance.clear()

    def penalty_expires_at(self, record: Record) -> float | None:
        """Clock time the record's penalty expires, None if not penalized."""
        return self._penalty_expiry.get(record.record_id)

    def is_penalty_active(self, record: Record) -> bool:
        expires_at = self._penalty_expiry.get(record.record_id)
        return expires_at is not None and self._clock.now() < expires_at

    @property
    def provenance_events(self) -> list[ProvenanceEvent]:
        return list(self._provenance)

    # === ProcessSession ===

    def get(self) -> Record | None:
        if not self._queue:
            return None
        record = self._queue.popleft()
        self._taken[record.record_id] = record
        return record

    def get_attribute(self, record: Record, name: str) -> str | None:
        return record.get_attribute(name)

    def put_all_attributes(self, record: Record, attributes: Mapping[str, str]) -> Record:
        self._require_taken(record, "put_all_attributes")
        updated = record.with_attributes(attributes)
        self._taken[record.record_id] = updated
        return updated

    def penalize(self, record: Record) -> Record:
        self._require_taken(record, "penalize")
        updated = record.with_penalty()
        self._taken[record.record_id] = updated
        expires_at = self._clock.now() + self._penalty_duration
        self._penalty_expiry[record.record_id] = expires_at
        logger.debug("record_penalized", record_id=record.record_id, expires_at=expires_at)
        return updated

    def transfer(self, record: Record, relationship: str) -> None:
        if relationship not in self._relationships:
            raise UnknownRelationshipError(relationship, self._relationships)
        self._require_taken(record, "transfer")
        if record.record_id in self._staged:
            raise TransferStateError(record.record_id, f"already transferred to '{self._staged[record.record_id][1]}'")
        self._staged[record.record_id] = (record, relationship)
        self._provenance.append(
            ProvenanceEvent(
                event_type=ProvenanceEventType.ROUTE,
                record_id=record.record_id,
                attributes=dict(record.attributes),
                relationship=relationship,
            )
        )

    def report_attributes_modified(self, record: Record) -> None:
        self._provenance.append(
            ProvenanceEvent(
                event_type=ProvenanceEventType.ATTRIBUTES_MODIFIED,
                record_id=record.record_id,
                attributes=dict(record.attributes),
            )
        )

    def _require_taken(self, record: Record, operation: str) -> None:
        if record.record_id not in self._taken:
            raise TransferStateError(record.record_id, f"{operation}() called on a record not taken from this session")
