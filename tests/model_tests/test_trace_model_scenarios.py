# test/model_tests/test_trace_model_scenarios.py


from datetime import timedelta

import pytest
from model.trace import Trace, TraceEvent, TraceOrderError, to_seconds
from model.recorder import TraceRecorder


class FakeClock:
    """Manually advanced clock for deterministic recorder timestamps."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTraceEventScenarios:
    """
    Test suite for TraceEvent: timestamp normalization and coercion.
    """

    def test_01_timedelta_is_converted_to_seconds(self):
        assert TraceEvent("s", timedelta(milliseconds=250)).timestamp == 0.25

    def test_02_integer_timestamps_become_floats(self):
        event = TraceEvent("s", 3)

        assert event.timestamp == 3.0
        assert isinstance(event.timestamp, float)

    @pytest.mark.parametrize("bad", [-1, timedelta(seconds=-1)])
    def test_03_negative_timestamps_rejected(self, bad):
        with pytest.raises(ValueError):
            TraceEvent("s", bad)

    @pytest.mark.parametrize("bad", ["1", None, True])
    def test_04_non_numeric_timestamps_rejected(self, bad):
        with pytest.raises(TypeError):
            to_seconds(bad)

    def test_05_coerce_accepts_pairs_and_events(self):
        event = TraceEvent("a", 1.0)

        assert TraceEvent.coerce(event) is event
        assert TraceEvent.coerce(("a", 1)) == event
        with pytest.raises(TypeError):
            TraceEvent.coerce("a")

    def test_06_string_form(self):
        assert str(TraceEvent("idle", 0.1)) == "idle @ 100ms"
        assert str(TraceEvent("idle", 2)) == "idle @ 2s"


class TestTraceScenarios:
    """
    Test suite for Trace: ordering invariant, construction helpers and views.
    """

    def test_01_from_values_spaces_events_by_one_millisecond(self):
        trace = Trace.from_values(["a", "b", "c"])

        assert trace.values == ["a", "b", "c"]
        assert list(trace.timestamps) == pytest.approx([0.0, 0.001, 0.002])

    def test_02_equal_timestamps_allowed(self):
        trace = Trace.from_pairs([("a", 1), ("b", 1), ("c", 2)])

        assert len(trace) == 3
        assert trace.last_timestamp == 2.0

    def test_03_decreasing_timestamps_rejected(self):
        trace = Trace.from_pairs([("a", 2)])

        with pytest.raises(TraceOrderError):
            trace.append(TraceEvent("b", 1))
        assert len(trace) == 1

    def test_04_trace_order_error_is_value_error(self):
        with pytest.raises(ValueError):
            Trace.from_pairs([("a", 2), ("b", 1)])

    def test_05_indexing_iteration_and_equality(self):
        trace = Trace.from_pairs([("a", 0), ("b", 1)])

        assert trace[1] == TraceEvent("b", 1)
        assert [e.value for e in trace] == ["a", "b"]
        assert trace == Trace.from_pairs([("a", 0.0), ("b", 1.0)])
        assert trace != Trace.from_pairs([("a", 0)])

    def test_06_copy_is_independent(self):
        trace = Trace.from_pairs([("a", 0)])
        clone = trace.copy()
        clone.append(TraceEvent("b", 1))

        assert len(trace) == 1
        assert len(clone) == 2

    def test_07_empty_trace(self):
        trace = Trace()

        assert trace.is_empty
        assert trace.last_timestamp == 0.0
        assert str(trace) == "Trace()"


class TestTraceRecorderScenarios:
    """
    Test suite for TraceRecorder: elapsed-time stamping and duplicate skipping.
    """

    def test_01_record_requires_initialize(self):
        recorder = TraceRecorder(FakeClock())

        with pytest.raises(RuntimeError):
            recorder.record("idle")

    def test_02_states_stamped_with_elapsed_time(self):
        clock = FakeClock(100.0)
        recorder = TraceRecorder(clock)
        recorder.initialize()

        recorder.record("idle")
        clock.now = 100.5
        recorder.record("busy")

        trace = recorder.trace
        assert trace.values == ["idle", "busy"]
        assert list(trace.timestamps) == [0.0, 0.5]

    def test_03_duplicate_states_skipped_by_default(self):
        clock = FakeClock()
        recorder = TraceRecorder(clock)
        recorder.initialize()

        assert recorder.record("idle") is True
        clock.now += 1
        assert recorder.record("idle") is False
        assert recorder.record("idle", record_duplicates=True) is True
        assert len(recorder.trace) == 2

    def test_04_clock_stepping_back_keeps_order(self):
        clock = FakeClock(10.0)
        recorder = TraceRecorder(clock)
        recorder.initialize()
        clock.now = 12.0
        recorder.record("a")
        clock.now = 11.0
        recorder.record("b")

        assert list(recorder.trace.timestamps) == [2.0, 2.0]

    def test_05_initialize_discards_previous_states(self):
        recorder = TraceRecorder(FakeClock())
        recorder.initialize()
        recorder.record("a")
        recorder.initialize()

        assert recorder.trace.is_empty
        assert recorder.is_initialized

    def test_06_trace_snapshot_is_a_copy(self):
        recorder = TraceRecorder(FakeClock())
        recorder.initialize()
        recorder.record("a")
        snapshot = recorder.trace
        recorder.record("b")

        assert len(snapshot) == 1
