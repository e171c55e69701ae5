"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core, engine
or plugins. Settings classes are NOT re-exported here - import them from
repeater.core.config.

Import patterns:
    from repeater.contracts import Record, Route, RepeatDecision
    from repeater.core.config import RepeaterSettings
"""

from repeater.contracts.enums import Determinism, ProvenanceEventType, Route
from repeater.contracts.errors import (
    RoutingReason,
    SessionContractError,
    TransferStateError,
    UnknownRelationshipError,
)
from repeater.contracts.records import ProvenanceEvent, Record, RepeatDecision
from repeater.contracts.session import ProcessSession

__all__ = [
    # enums
    "Determinism",
    "ProvenanceEventType",
    "Route",
    # errors
    "RoutingReason",
    "SessionContractError",
    "TransferStateError",
    "UnknownRelationshipError",
    # records
    "ProvenanceEvent",
    "Record",
    "RepeatDecision",
    # session
    "ProcessSession",
]
