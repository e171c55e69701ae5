"""Tests for ProcessorRunner scheduling and draining."""

import pytest

from repeater.contracts import Record
from repeater.core.config import ProcessorSettings, RepeaterSettings
from repeater.engine.clock import MockClock
from repeater.engine.runner import ProcessorRunner, RunawayLoopError
from repeater.plugins.config_base import PluginConfigError
from repeater.plugins.manager import PluginManager
from repeater.plugins.processors.repeat_counter import REPEATER_COUNT_ATTR, RepeatCounter
from tests.conftest import make_record


@pytest.fixture
def manager() -> PluginManager:
    pm = PluginManager()
    pm.register_builtin_plugins()
    return pm


class TestSchedule:
    def test_invalid_options_never_process_records(self) -> None:
        runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "-1"})
        runner.enqueue(make_record())

        with pytest.raises(PluginConfigError, match="cannot be scheduled"):
            runner.run()
        assert runner.session.queue_size == 1

    def test_validate_reports_problems(self) -> None:
        runner = ProcessorRunner(RepeatCounter, {"Penalize Repeated Passes": "sometimes"})
        problems = runner.validate()
        assert len(problems) == 2

    def test_schedule_is_cached(self) -> None:
        runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "1"})
        assert runner.schedule() is runner.schedule()

    def test_from_settings(self, manager: PluginManager) -> None:
        settings = RepeaterSettings(
            processor=ProcessorSettings(options={"Repeat Count": 2}),
            penalty_duration_seconds=10,
        )
        runner = ProcessorRunner.from_settings(settings, manager, clock=MockClock())
        assert runner.processor_cls is RepeatCounter

    def test_from_settings_unknown_plugin(self, manager: PluginManager) -> None:
        settings = RepeaterSettings(processor=ProcessorSettings(plugin="nope"))
        with pytest.raises(PluginConfigError, match="Unknown processor plugin 'nope'"):
            ProcessorRunner.from_settings(settings, manager)


class TestRun:
    def test_run_without_input_is_idle(self) -> None:
        runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "1"})
        summary = runner.run(iterations=3)
        assert summary.triggers == 3
        assert summary.idle_ticks == 3
        assert summary.routed == {"no-repeat": 0, "repeat": 0}

    def test_run_one_iteration_processes_one_record(self) -> None:
        runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "1"})
        runner.enqueue(make_record())
        runner.enqueue(make_record())
        summary = runner.run()
        assert summary.routed == {"no-repeat": 0, "repeat": 1}
        assert runner.session.queue_size == 1

    def test_iterations_must_be_positive(self) -> None:
        runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "1"})
        with pytest.raises(ValueError, match="iterations"):
            runner.run(iterations=0)


class TestDrain:
    def test_drain_empties_queue(self) -> None:
        runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "2"})
        for count in (None, "1", "2", "5"):
            runner.enqueue(make_record(count))
        summary = runner.drain()
        assert summary.routed == {"no-repeat": 2, "repeat": 2}
        assert summary.idle_ticks == 0

    def test_loop_back_until_no_repeat(self) -> None:
        """Every record makes Repeat Count + 1 passes when looped back."""
        runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "3", "Penalize Repeated Passes": "true"})
        record = Record(record_id="r1")
        runner.enqueue(record)

        summary = runner.drain(loop_back=True)

        assert summary.triggers == 4
        assert summary.routed == {"no-repeat": 1, "repeat": 3}
        assert summary.penalized == 3
        final, route = summary.emitted[-1]
        assert route == "no-repeat"
        assert final.attributes[REPEATER_COUNT_ATTR] == "4"
        assert [r.attributes[REPEATER_COUNT_ATTR] for r, _ in summary.emitted] == ["1", "2", "3", "4"]

    def test_max_triggers(self) -> None:
        runner = ProcessorRunner(RepeatCounter, {"Repeat Count": "100"})
        runner.enqueue(make_record())
        with pytest.raises(RunawayLoopError) as exc_info:
            runner.drain(loop_back=True, max_triggers=5)
        assert exc_info.value.pending == 1
