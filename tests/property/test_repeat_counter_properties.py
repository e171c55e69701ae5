# tests/property/test_repeat_counter_properties.py
"""Property-based tests for the repeat counter.

REPEAT COUNTER INVARIANTS:
1. Stored count after a pass = parsed prior count (or 0) + 1
2. Route is "repeat" iff the new count <= Repeat Count; exactly one route
3. Penalty requested iff penalizing is enabled AND the new count > 1
4. Missing and malformed prior counts behave exactly like "0"
5. Content, identity and every other attribute pass through untouched
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from repeater.contracts import Record, Route
from repeater.engine.session import InMemorySession
from repeater.plugins.processors.repeat_counter import (
    REPEATER_COUNT_ATTR,
    RepeatCounter,
    RepeatCounterConfig,
    evaluate,
)
from tests.property.conftest import configs, malformed_counts, other_attributes, well_formed_counts
from tests.property.settings import QUICK_SETTINGS, STANDARD_SETTINGS


def _counter(config: RepeatCounterConfig) -> RepeatCounter:
    return RepeatCounter(config.model_dump(by_alias=True))


def _trigger(config: RepeatCounterConfig, record: Record) -> tuple[Record, str]:
    session = InMemorySession(RepeatCounter.relationship_names())
    session.enqueue(record)
    _counter(config).on_trigger(session)
    committed = session.commit()
    emitted = [(r, name) for name, records in committed.items() for r in records]
    assert len(emitted) == 1
    return emitted[0]


class TestCounterProperties:
    @given(config=configs, prior=well_formed_counts, extra=other_attributes)
    @STANDARD_SETTINGS
    def test_count_increments_by_one(self, config: RepeatCounterConfig, prior: str, extra: dict[str, str]) -> None:
        record, _ = _trigger(config, Record(attributes={**extra, REPEATER_COUNT_ATTR: prior}))
        assert record.attributes[REPEATER_COUNT_ATTR] == str(int(prior) + 1)

    @given(config=configs, prior=st.one_of(st.none(), well_formed_counts))
    @STANDARD_SETTINGS
    def test_route_matches_threshold(self, config: RepeatCounterConfig, prior: str | None) -> None:
        attributes = {} if prior is None else {REPEATER_COUNT_ATTR: prior}
        record, route = _trigger(config, Record(attributes=attributes))
        new_count = int(record.attributes[REPEATER_COUNT_ATTR])
        expected = Route.REPEAT if new_count <= config.repeat_count else Route.NO_REPEAT
        assert route == expected

    @given(config=configs, prior=st.one_of(st.none(), well_formed_counts))
    @STANDARD_SETTINGS
    def test_penalty_gating(self, config: RepeatCounterConfig, prior: str | None) -> None:
        attributes = {} if prior is None else {REPEATER_COUNT_ATTR: prior}
        record, _ = _trigger(config, Record(attributes=attributes))
        new_count = int(record.attributes[REPEATER_COUNT_ATTR])
        assert record.penalized == (config.penalize_repeated_passes and new_count > 1)

    @given(config=configs, prior=malformed_counts)
    @STANDARD_SETTINGS
    def test_malformed_counts_behave_like_zero(self, config: RepeatCounterConfig, prior: str) -> None:
        """Pins the lenient parsing behaviour: corrupt counters restart at 1."""
        malformed = evaluate({REPEATER_COUNT_ATTR: prior}, config)
        zero = evaluate({REPEATER_COUNT_ATTR: "0"}, config)
        absent = evaluate({}, config)
        assert malformed == zero == absent
        assert malformed.count == 1

    @given(config=configs, prior=st.one_of(st.none(), well_formed_counts, malformed_counts), extra=other_attributes, content=st.binary(max_size=64))
    @STANDARD_SETTINGS
    def test_nothing_else_changes(
        self,
        config: RepeatCounterConfig,
        prior: str | None,
        extra: dict[str, str],
        content: bytes,
    ) -> None:
        attributes = dict(extra)
        if prior is not None:
            attributes[REPEATER_COUNT_ATTR] = prior
        original = Record(record_id="fixed", content=content, attributes=attributes)

        record, _ = _trigger(config, original)

        assert record.record_id == original.record_id
        assert record.content == original.content
        assert {k: v for k, v in record.attributes.items() if k != REPEATER_COUNT_ATTR} == extra
        assert set(record.attributes) == set(extra) | {REPEATER_COUNT_ATTR}

    @given(config=configs, prior=st.one_of(st.none(), well_formed_counts, malformed_counts))
    @STANDARD_SETTINGS
    def test_session_and_pure_paths_agree(self, config: RepeatCounterConfig, prior: str | None) -> None:
        attributes = {} if prior is None else {REPEATER_COUNT_ATTR: prior}
        record = Record(record_id="same", attributes=attributes)

        via_session = _trigger(config, record)
        pure_record, pure_route = _counter(config).process(record)

        assert via_session[1] == pure_route
        assert via_session[0] == pure_record


class TestConfigProperties:
    @given(value=st.integers(max_value=0))
    @QUICK_SETTINGS
    def test_non_positive_repeat_count_rejected(self, value: int) -> None:
        assert RepeatCounterConfig.validation_messages({"Repeat Count": value})
        assert RepeatCounterConfig.validation_messages({"Repeat Count": str(value)})

    @given(value=st.integers(min_value=1, max_value=2**31 - 1))
    @QUICK_SETTINGS
    def test_positive_repeat_count_accepted_as_int_or_string(self, value: int) -> None:
        assert RepeatCounterConfig.from_dict({"Repeat Count": value}).repeat_count == value
        assert RepeatCounterConfig.from_dict({"Repeat Count": str(value)}).repeat_count == value
