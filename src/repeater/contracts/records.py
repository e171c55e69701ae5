"""Record and decision types.

These types answer: "What flows through the processor, and where does it go?"
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from uuid import uuid4

from repeater.contracts.enums import ProvenanceEventType, Route
from repeater.contracts.errors import RoutingReason


def _new_record_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class Record:
    """A unit of data flowing through the pipeline.

    Records are immutable. Attribute changes and penalty marking return new
    instances, mirroring how a host session hands back an updated record.

    Attributes:
        record_id: Stable identity across passes
        content: Opaque body, never read or written by processors here
        attributes: Read-only string-to-string mapping
        penalized: True once a delayed redelivery has been requested
    """

    record_id: str = field(default_factory=_new_record_id)
    content: bytes = b""
    attributes: Mapping[str, str] = field(default_factory=dict)
    penalized: bool = False

    def __post_init__(self) -> None:
        # Freeze a private copy so callers cannot mutate through a retained dict
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def get_attribute(self, name: str) -> str | None:
        """Return the attribute value, or None when absent."""
        return self.attributes.get(name)

    def with_attributes(self, updates: Mapping[str, str]) -> Record:
        """Return a copy with ``updates`` merged over the current attributes."""
        return replace(self, attributes={**self.attributes, **updates})

    def with_penalty(self) -> Record:
        """Return a copy marked for delayed redelivery."""
        return replace(self, penalized=True)


@dataclass(frozen=True)
class RepeatDecision:
    """Outcome of evaluating one record against a repeat counter config.

    Pure value: the same incoming attribute and config always produce an
    equal decision.
    """

    count: int
    route: Route
    penalize: bool
    reason: RoutingReason

    def __post_init__(self) -> None:
        object.__setattr__(self, "reason", copy.deepcopy(self.reason))


@dataclass(frozen=True)
class ProvenanceEvent:
    """A provenance entry reported to the host for one record."""

    event_type: ProvenanceEventType
    record_id: str
    attributes: Mapping[str, str]
    relationship: str | None = None
