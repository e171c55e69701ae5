"""RepeatCounter processor plugin.

Counts how many times a record has passed through this processor and
routes it to "repeat" while the count is within the configured limit, then
to "no-repeat". Optionally penalizes records on every pass after the first.

Typical wiring is a retry loop: the "repeat" relationship feeds back into an
upstream stage, and "no-repeat" leads to an error or give-up path.

IMPORTANT: The stored pass count is parsed leniently. Missing, empty or
malformed values count as 0 and never raise. A record whose counter was
corrupted upstream therefore restarts its count instead of failing.
"""

import unicodedata
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import Field, field_validator

from repeater.contracts import Determinism, ProcessSession, Record, RepeatDecision, Route, RoutingReason
from repeater.plugins.base import BaseProcessor
from repeater.plugins.config_base import PluginConfig
from repeater.plugins.descriptors import PropertyDescriptor, Relationship, WritesAttribute

logger = structlog.get_logger(__name__)

REPEATER_COUNT_ATTR = "repeater.count"

# Counters are stored as 32-bit signed decimals by other hosts; anything
# outside that range is treated like any other malformed value.
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
# Significant digits in _INT32_MIN; longer digit runs cannot fit
_INT32_DIGITS = 10

REPEAT_COUNT = PropertyDescriptor(
    name="Repeat Count",
    description="Number of cycles for incoming record.",
    required=True,
)
PENALIZE_PASSES = PropertyDescriptor(
    name="Penalize Repeated Passes",
    description="Penalize record after it passes this processor more than once.",
    required=True,
    default="false",
    allowable_values=("true", "false"),
)

REPEAT = Relationship(name=Route.REPEAT, description="Records that can be repeated.")
NO_REPEAT = Relationship(name=Route.NO_REPEAT, description="Records that cannot be repeated.")


def parse_pass_count(value: str | None) -> int:
    """Parse a stored pass count, returning 0 for anything unparseable.

    Accepts an optionally signed run of decimal digits (any Unicode Nd digit,
    leading zeros allowed) with no surrounding whitespace that fits a 32-bit
    signed integer.

    Args:
        value: Raw attribute value, or None when the attribute is absent

    Returns:
        Parsed integer, or 0
    """
    if not value:
        return 0
    sign, digits = (value[0], value[1:]) if value[0] in "+-" else ("", value)
    if not digits.isdecimal():
        return 0
    significant = "".join(str(unicodedata.decimal(c)) for c in digits).lstrip("0")
    if len(significant) > _INT32_DIGITS:
        return 0
    parsed = int(sign + (significant or "0"))
    if parsed < _INT32_MIN or parsed > _INT32_MAX:
        return 0
    return parsed


class RepeatCounterConfig(PluginConfig):
    """Configuration for the repeat counter.

    Options may use the display names shown to operators or the field names:
        {"Repeat Count": "3", "Penalize Repeated Passes": "true"}
        {"repeat_count": 3, "penalize_repeated_passes": True}
    """

    repeat_count: int = Field(
        ...,  # Required, no default
        alias=REPEAT_COUNT.name,
        gt=0,
        le=_INT32_MAX,
        description=REPEAT_COUNT.description,
    )
    penalize_repeated_passes: bool = Field(
        default=False,
        alias=PENALIZE_PASSES.name,
        description=PENALIZE_PASSES.description,
    )

    @field_validator("repeat_count", mode="before")
    @classmethod
    def validate_repeat_count(cls, v: Any) -> Any:
        """Reject booleans and non-integer strings before int coercion."""
        if isinstance(v, bool):
            raise ValueError("must be a positive integer, got a boolean")
        if isinstance(v, str):
            stripped = v.strip()
            if not stripped.isdecimal():
                raise ValueError(f"must be a positive integer, got '{v}'")
            return int(stripped)
        return v

    @field_validator("penalize_repeated_passes", mode="before")
    @classmethod
    def validate_penalize(cls, v: Any) -> Any:
        """Only true/false are allowed - no 'yes', '1' or 'on'."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str) and v in PENALIZE_PASSES.allowable_values:
            return v == "true"
        raise ValueError(f"must be one of {list(PENALIZE_PASSES.allowable_values)}, got {v!r}")


def evaluate(attributes: Mapping[str, str], config: RepeatCounterConfig) -> RepeatDecision:
    """Decide the new count, route and penalty for one record.

    Pure function of the incoming pass-count attribute and the config.

    Args:
        attributes: The record's current attributes
        config: Validated repeat counter config

    Returns:
        RepeatDecision with the count to store and the route to take
    """
    count = parse_pass_count(attributes.get(REPEATER_COUNT_ATTR)) + 1
    penalize = config.penalize_repeated_passes and count > 1
    route = Route.REPEAT if count <= config.repeat_count else Route.NO_REPEAT

    reason: RoutingReason = {
        "rule": f"{REPEATER_COUNT_ATTR} <= {config.repeat_count}",
        "matched_value": count,
        "threshold": config.repeat_count,
        "field": REPEATER_COUNT_ATTR,
        "comparison": "<=",
    }
    return RepeatDecision(count=count, route=route, penalize=penalize, reason=reason)


class RepeatCounter(BaseProcessor):
    """Restrict the number of repeated passages of a record.

    Number of passes are defined by property. Each pass increments the
    repeater.count attribute; records are routed to "repeat" while the count
    is at most Repeat Count and to "no-repeat" afterwards.

    Config options:
        Repeat Count: Required. Positive integer limit of passes routed to "repeat"
        Penalize Repeated Passes: "true" or "false" (default "false")

    Example YAML:
        processor:
          plugin: repeat_counter
          options:
            Repeat Count: 3
            Penalize Repeated Passes: "true"
    """

    name = "repeat_counter"
    config_model = RepeatCounterConfig
    relationships = (REPEAT, NO_REPEAT)
    property_descriptors = (REPEAT_COUNT, PENALIZE_PASSES)
    writes_attributes = (WritesAttribute(attribute=REPEATER_COUNT_ATTR, description="Number of current passes."),)
    tags = ("routing",)
    capability_description = "Restrict the number of repeated passages of a record. Number of passes are defined by property."

    determinism = Determinism.DETERMINISTIC
    plugin_version = "1.0.0"
    side_effect_free = True
    supports_batching = True

    config: RepeatCounterConfig

    def process(self, record: Record, config: RepeatCounterConfig | None = None) -> tuple[Record, Route]:
        """Apply the counter to a record without a host session.

        Args:
            record: Incoming record
            config: Config to use instead of the one given at construction

        Returns:
            Tuple of (updated record, route it must be emitted on)
        """
        cfg = config if config is not None else self.config
        decision = evaluate(record.attributes, cfg)
        updated = record.with_attributes({REPEATER_COUNT_ATTR: str(decision.count)})
        if decision.penalize:
            updated = updated.with_penalty()
        return updated, decision.route

    def on_trigger(self, session: ProcessSession) -> None:
        """Take one record from the session, count it and transfer it."""
        record = session.get()
        if record is None:
            return

        current = session.get_attribute(record, REPEATER_COUNT_ATTR)
        decision = evaluate({REPEATER_COUNT_ATTR: current} if current is not None else {}, self.config)

        record = session.put_all_attributes(record, {REPEATER_COUNT_ATTR: str(decision.count)})
        session.report_attributes_modified(record)

        if decision.penalize:
            record = session.penalize(record)

        session.transfer(record, decision.route)

        logger.debug(
            "record_routed",
            record_id=record.record_id,
            count=decision.count,
            route=str(decision.route),
            penalized=decision.penalize,
            rule=decision.reason["rule"],
        )
