"""Error and reason schema contracts.

TypedDict schemas for structured reason payloads, plus the exceptions a
host session raises when its contract is broken.
"""

from typing import Any, NotRequired, TypedDict


class RoutingReason(TypedDict):
    """Schema for routing reason payloads.

    Used by processors to explain routing decisions in logs and provenance.
    """

    rule: str  # Human-readable rule description
    matched_value: Any  # The value that triggered the route
    threshold: NotRequired[int]  # Threshold value if applicable
    field: NotRequired[str]  # Attribute name if applicable
    comparison: NotRequired[str]  # Comparison operator used


# =============================================================================
# Session Contract Exceptions
# =============================================================================


class SessionContractError(Exception):
    """Base class for violations of the ProcessSession contract.

    These indicate bugs in the processor or host wiring, never bad data.
    They are not caught by the runner - they crash the run.
    """


class TransferStateError(SessionContractError):
    """Raised when a record is transferred zero or more than one times.

    Every record taken from a session must be transferred to exactly one
    relationship before the session commits.
    """

    def __init__(self, record_id: str, message: str) -> None:
        self.record_id = record_id
        super().__init__(f"Record {record_id}: {message}")


class UnknownRelationshipError(SessionContractError):
    """Raised when a record is transferred to an undeclared relationship."""

    def __init__(self, relationship: str, declared: frozenset[str]) -> None:
        self.relationship = relationship
        self.declared = declared
        super().__init__(f"Relationship '{relationship}' is not declared. Declared relationships: {sorted(declared)}")
