"""Declarative metadata a processor publishes to its host.

Property descriptors, relationships and written attributes are documentation
for operators and wiring information for the host. They are immutable value
objects built once at import time and attached to the processor class.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PropertyDescriptor:
    """A configurable option as shown to operators."""

    name: str
    description: str
    required: bool = False
    default: str | None = None
    allowable_values: tuple[str, ...] = ()


@dataclass(frozen=True)
class Relationship:
    """A named output channel."""

    name: str
    description: str


@dataclass(frozen=True)
class WritesAttribute:
    """An attribute the processor writes onto every record it handles."""

    attribute: str
    description: str
