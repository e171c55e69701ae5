"""Enumerations shared by processors, sessions and the plugin registry."""

from enum import StrEnum


class Route(StrEnum):
    """Output relationship of the repeat counter.

    Values are the relationship names exposed to the host pipeline.
    """

    REPEAT = "repeat"
    NO_REPEAT = "no-repeat"


class Determinism(StrEnum):
    """Whether re-running a processor on the same record gives the same result.

    Recorded in PluginSpec. Every built-in processor is DETERMINISTIC.
    """

    DETERMINISTIC = "deterministic"


class ProvenanceEventType(StrEnum):
    """Kind of provenance event reported through a session."""

    ATTRIBUTES_MODIFIED = "attributes_modified"
    ROUTE = "route"
