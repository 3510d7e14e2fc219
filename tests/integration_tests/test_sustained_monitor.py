# tests/integration_tests/test_sustained_monitor.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Integration tests for SustainedStateMonitor streak tracking

"""Integration test suite for SustainedStateMonitor.

The monitor answers "has the condition held, without interruption, for at
least the minimum duration?" as observations and clock ticks arrive.
"""

from datetime import timedelta

import pytest
from core.sustained import SustainedStateMonitor, SustainedStateUpdate
from core.verdict import CheckStatus
from model.trace import TraceEvent, TraceOrderError


def door_closed(state):
    return state["door_closed"]


def closed_at(t, value=True):
    return TraceEvent({"door_closed": value}, t)


class TestStreakTracking:
    """Test cases for streaks built from observations."""

    def test_streak_grows_to_success(self):
        monitor = SustainedStateMonitor(None, door_closed, 2.0)

        first = monitor.observe(closed_at(0))
        second = monitor.observe(closed_at(1))
        third = monitor.observe(closed_at(2.5))

        assert first.status is CheckStatus.PENDING
        assert first.reason == "held for 0s of 2s"
        assert second.reason == "held for 1s of 2s"
        assert third.status is CheckStatus.SUCCESS
        assert third.elapsed == 2.5
        assert third.is_success

    def test_false_observation_breaks_streak(self):
        monitor = SustainedStateMonitor(None, door_closed, 2.0)
        monitor.observe(closed_at(0))
        monitor.observe(closed_at(3))

        broken = monitor.observe(closed_at(4, False))
        restarted = monitor.observe(closed_at(5))

        assert broken.status is CheckStatus.FAILURE
        assert broken.reason == "condition not held"
        assert broken.streak_start is None
        assert restarted.status is CheckStatus.PENDING
        assert restarted.streak_start == 5.0

    def test_success_is_not_final(self):
        monitor = SustainedStateMonitor(None, door_closed, 1.0)
        monitor.observe(closed_at(0))
        monitor.observe(closed_at(1))

        assert monitor.status is CheckStatus.SUCCESS
        monitor.observe(closed_at(2, False))
        assert monitor.status is CheckStatus.FAILURE
        assert not monitor.is_done

    def test_timedelta_duration(self):
        monitor = SustainedStateMonitor(None, door_closed, timedelta(milliseconds=500))
        monitor.observe(closed_at(0))

        assert monitor.observe(closed_at(0.5)).status is CheckStatus.SUCCESS

    def test_zero_duration_succeeds_on_first_true_observation(self):
        monitor = SustainedStateMonitor(None, door_closed, 0, initial_value={"door_closed": True})

        assert monitor.status is CheckStatus.SUCCESS
        assert monitor.streak_start == 0.0

    def test_predicate_exception_is_a_failure(self):
        monitor = SustainedStateMonitor(None, door_closed, 1.0)
        monitor.observe(closed_at(0))

        update = monitor.observe(TraceEvent({}, 1))

        assert update.status is CheckStatus.FAILURE
        assert update.reason.startswith("predicate raised KeyError")
        assert monitor.streak_start is None

    def test_observation_going_back_in_time(self):
        monitor = SustainedStateMonitor(None, door_closed, 1.0)
        monitor.observe(closed_at(3))

        with pytest.raises(TraceOrderError):
            monitor.observe(closed_at(2))

    def test_predicate_must_be_callable(self):
        with pytest.raises(TypeError):
            SustainedStateMonitor(None, "door_closed", 1.0)


class TestClockTicks:
    """Test cases for re-evaluation without new observations."""

    def test_tick_completes_streak(self):
        monitor = SustainedStateMonitor(None, door_closed, 2.0)
        monitor.observe(closed_at(1))

        assert monitor.tick(2).status is CheckStatus.PENDING
        update = monitor.tick(3)
        assert update.status is CheckStatus.SUCCESS
        assert str(update) == "SUCCESS at 3s"

    def test_tick_before_any_observation(self):
        monitor = SustainedStateMonitor(None, door_closed, 2.0)

        update = monitor.tick(5)

        assert update.status is CheckStatus.PENDING
        assert update.reason == "nothing observed"
        assert str(update) == "PENDING at 5s (nothing observed)"

    def test_tick_keeps_failure(self):
        monitor = SustainedStateMonitor(None, door_closed, 2.0)
        monitor.observe(closed_at(0, False))

        assert monitor.tick(10).status is CheckStatus.FAILURE

    def test_tick_cannot_go_backwards(self):
        monitor = SustainedStateMonitor(None, door_closed, 2.0)
        monitor.observe(closed_at(4))
        monitor.tick(6)

        with pytest.raises(TraceOrderError):
            monitor.tick(5)
        with pytest.raises(TraceOrderError):
            monitor.observe(closed_at(5))


class TestSourcesAndObservers:
    """Test cases for pull mode, observers and disposal."""

    def test_run_over_source(self):
        source = [closed_at(0), closed_at(1), closed_at(2, False), closed_at(3), closed_at(6)]
        monitor = SustainedStateMonitor(source, door_closed, 2.0)

        statuses = [update.status for update in monitor.verdicts()]

        assert statuses == [
            CheckStatus.PENDING,
            CheckStatus.PENDING,
            CheckStatus.FAILURE,
            CheckStatus.PENDING,
            CheckStatus.SUCCESS,
        ]
        assert monitor.update.events_seen == 5

    def test_pairs_are_accepted(self):
        monitor = SustainedStateMonitor([({"door_closed": True}, 0), ({"door_closed": True}, 1)], door_closed, 1)

        assert monitor.run().status is CheckStatus.SUCCESS

    def test_source_failure_is_terminal(self):
        def source():
            yield closed_at(0)
            raise OSError("bus error")

        monitor = SustainedStateMonitor(source(), door_closed, 1.0)

        last = monitor.run()

        assert last.status is CheckStatus.FAILURE
        assert last.reason == "update source failed: OSError: bus error"
        assert isinstance(last.source_error, OSError)
        assert monitor.is_done
        assert monitor.observe(closed_at(5)) is None

    def test_out_of_order_source_fails(self):
        monitor = SustainedStateMonitor([closed_at(2), closed_at(1)], door_closed, 1.0)

        last = monitor.run()

        assert last.status is CheckStatus.FAILURE
        assert isinstance(last.source_error, TraceOrderError)

    def test_observers_and_dispose(self):
        seen = []
        monitor = SustainedStateMonitor(None, door_closed, 1.0)
        unsubscribe = monitor.subscribe(seen.append)

        monitor.observe(closed_at(0))
        unsubscribe()
        monitor.observe(closed_at(1))

        assert len(seen) == 1
        assert isinstance(seen[0], SustainedStateUpdate)

    def test_dispose_from_observer(self):
        seen = []
        monitor = SustainedStateMonitor([closed_at(0), closed_at(1), closed_at(2)], door_closed, 5.0)

        def observer(update):
            seen.append(update)
            monitor.dispose()
            monitor.dispose()

        monitor.subscribe(observer)

        assert list(monitor.verdicts()) == []

        assert len(seen) == 1
        assert monitor.is_done
        assert monitor.tick(10) is None

    def test_exhausted_source_fails_pending_streak(self):
        monitor = SustainedStateMonitor([closed_at(0), closed_at(1)], door_closed, 5.0)

        updates = list(monitor.verdicts())

        assert [u.status for u in updates] == [CheckStatus.PENDING, CheckStatus.PENDING, CheckStatus.FAILURE]
        assert updates[-1].reason == "source ended before the condition held for 5s"
        assert updates[-1].streak_start is None
        assert monitor.is_done

    def test_exhausted_source_keeps_settled_status(self):
        monitor = SustainedStateMonitor([closed_at(0), closed_at(2, False)], door_closed, 1.0)

        updates = list(monitor.verdicts())

        assert [u.status for u in updates] == [CheckStatus.PENDING, CheckStatus.FAILURE]
        assert updates[-1].reason == "condition not held"
        assert monitor.is_done

    def test_empty_source_fails(self):
        monitor = SustainedStateMonitor([], door_closed, 1.0)

        last = monitor.run()

        assert last.status is CheckStatus.FAILURE
        assert last.events_seen == 0

    def test_pulling_without_source_raises(self):
        monitor = SustainedStateMonitor(None, door_closed, 1.0)

        with pytest.raises(RuntimeError):
            monitor.run()
