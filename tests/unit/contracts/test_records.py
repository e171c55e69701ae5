"""Tests for record and decision contracts."""

import pytest

from repeater.contracts import RepeatDecision, Record, Route, RoutingReason


class TestRecord:
    """Record immutability and copy-on-write helpers."""

    def test_defaults(self) -> None:
        record = Record()
        assert record.content == b""
        assert dict(record.attributes) == {}
        assert record.penalized is False
        assert len(record.record_id) == 32

    def test_ids_are_unique(self) -> None:
        assert Record().record_id != Record().record_id

    def test_attributes_are_read_only(self) -> None:
        record = Record(attributes={"a": "1"})
        with pytest.raises(TypeError):
            record.attributes["a"] = "2"  # type: ignore[index]

    def test_retained_source_dict_cannot_mutate_record(self) -> None:
        source = {"a": "1"}
        record = Record(attributes=source)
        source["a"] = "changed"
        assert record.attributes["a"] == "1"

    def test_with_attributes_merges_and_overwrites(self) -> None:
        record = Record(record_id="r1", attributes={"a": "1", "b": "2"})
        updated = record.with_attributes({"b": "3", "c": "4"})
        assert dict(updated.attributes) == {"a": "1", "b": "3", "c": "4"}
        assert updated.record_id == "r1"
        assert dict(record.attributes) == {"a": "1", "b": "2"}

    def test_with_penalty(self) -> None:
        record = Record(record_id="r1", content=b"x")
        penalized = record.with_penalty()
        assert penalized.penalized is True
        assert penalized.content == b"x"
        assert record.penalized is False

    def test_get_attribute_absent_is_none(self) -> None:
        assert Record().get_attribute("missing") is None


class TestRepeatDecision:
    def test_reason_is_copied(self) -> None:
        reason: RoutingReason = {"rule": "r", "matched_value": 1}
        decision = RepeatDecision(count=1, route=Route.REPEAT, penalize=False, reason=reason)
        reason["rule"] = "mutated"
        assert decision.reason["rule"] == "r"

    def test_equal_inputs_give_equal_decisions(self) -> None:
        a = RepeatDecision(count=2, route=Route.NO_REPEAT, penalize=True, reason={"rule": "r", "matched_value": 2})
        b = RepeatDecision(count=2, route=Route.NO_REPEAT, penalize=True, reason={"rule": "r", "matched_value": 2})
        assert a == b


class TestRoute:
    def test_values_are_relationship_names(self) -> None:
        assert Route.REPEAT == "repeat"
        assert Route.NO_REPEAT == "no-repeat"
        assert str(Route.NO_REPEAT) == "no-repeat"
