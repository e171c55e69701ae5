"""Host session protocol.

The session is the processor's only window onto the host pipeline. It is
defined here as a Protocol so processors can be driven by any host that
provides these operations; ``repeater.engine.session.InMemorySession`` is the
in-process implementation.
"""

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from repeater.contracts.records import Record


@runtime_checkable
class ProcessSession(Protocol):
    """Operations a host offers to a processor during one trigger.

    The host guarantees single-threaded ownership of a record between get()
    and transfer(). Every record obtained from get() must be transferred to
    exactly one relationship.
    """

    def get(self) -> Record | None:
        """Take the next queued record, or None when nothing is queued."""
        ...

    def get_attribute(self, record: Record, name: str) -> str | None:
        """Read one attribute, None when absent."""
        ...

    def put_all_attributes(self, record: Record, attributes: Mapping[str, str]) -> Record:
        """Merge attributes into the record, returning the updated record."""
        ...

    def penalize(self, record: Record) -> Record:
        """Request delayed redelivery, returning the updated record."""
        ...

    def transfer(self, record: Record, relationship: str) -> None:
        """Hand the record to the named output relationship."""
        ...

    def report_attributes_modified(self, record: Record) -> None:
        """Record a provenance event for an attribute change."""
        ...
