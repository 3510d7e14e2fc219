# core/sustained.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Monitor checking that a condition holds continuously for a minimum duration

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from model.trace import Timestamp, TraceEvent, TraceOrderError, to_seconds
from .verdict import CheckStatus
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SustainedStateUpdate:
    """Snapshot of a sustained-state check.

    Attributes:
        status: SUCCESS, FAILURE or PENDING
        streak_start: Timestamp at which the current streak began, or None
        now: Time the status was computed for
        events_seen: Number of observations so far
        reason: Explanation for FAILURE and PENDING statuses
        source_error: Exception raised by the update source, if it failed
    """

    status: CheckStatus
    streak_start: Optional[float]
    now: float
    events_seen: int
    reason: Optional[str] = None
    source_error: Optional[BaseException] = None

    @property
    def elapsed(self) -> float:
        """Length of the current streak, 0.0 without one."""
        if self.streak_start is None:
            return 0.0
        return self.now - self.streak_start

    @property
    def is_success(self) -> bool:
        return self.status is CheckStatus.SUCCESS

    def __str__(self) -> str:
        detail = f" ({self.reason})" if self.reason else ""
        return f"{self.status} at {self.now:g}s{detail}"


class SustainedStateMonitor:
    """Checks that a predicate has held without interruption for `min_duration`.

    The monitor remembers when the predicate most recently became true. Any
    false observation, or a predicate that raises, ends the streak. The
    status is SUCCESS once `now - streak_start >= min_duration`, PENDING while
    the streak is shorter (or before anything was observed) and FAILURE after
    a false observation. Unlike `StreamMonitor` the check does not resolve
    while events keep coming: a later false observation turns SUCCESS back
    into FAILURE. A failing source ends the check with FAILURE, and so does
    an exhausted source while the status is still PENDING.

    Time advances with observations; `tick` re-evaluates the status at a
    caller-supplied time without a new observation.

    Args:
        source: Iterable of TraceEvents or `(value, timestamp)` pairs, or None
            for push mode
        predicate: Condition over a single state
        min_duration: Required streak length, seconds or timedelta
        initial_value: Optional state observed at time zero (or a TraceEvent)
    """

    def __init__(
        self,
        source: Optional[Iterable[Any]],
        predicate: Callable[[Any], bool],
        min_duration: Timestamp,
        initial_value: Any = None,
    ):
        if not callable(predicate):
            raise TypeError(f"Predicate must be callable, got {predicate!r}")
        self.predicate = predicate
        self.min_duration = to_seconds(min_duration)
        self._source = source
        self._iterator = None
        self._observers: List[Callable[[SustainedStateUpdate], None]] = []
        self._streak_start: Optional[float] = None
        self._last_time: Optional[float] = None
        self._events_seen = 0
        self._latest: Optional[SustainedStateUpdate] = None
        self._failed = False
        self._exhausted = False
        self._disposed = False

        if initial_value is not None:
            if not isinstance(initial_value, TraceEvent):
                initial_value = TraceEvent(initial_value, 0.0)
            self.observe(initial_value)

    @property
    def status(self) -> CheckStatus:
        return self._latest.status if self._latest else CheckStatus.PENDING

    @property
    def update(self) -> Optional[SustainedStateUpdate]:
        """Latest published update."""
        return self._latest

    @property
    def streak_start(self) -> Optional[float]:
        return self._streak_start

    @property
    def is_done(self) -> bool:
        return self._failed or self._exhausted or self._disposed

    def subscribe(self, callback: Callable[[SustainedStateUpdate], None]) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        if self._disposed:
            return lambda: None
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def observe(self, event: Any) -> Optional[SustainedStateUpdate]:
        """Record one observation and publish the resulting status.

        Raises:
            TraceOrderError: If the timestamp precedes the previous one
        """
        if self.is_done:
            return None
        event = TraceEvent.coerce(event)
        if self._last_time is not None and event.timestamp < self._last_time:
            raise TraceOrderError(
                f"Timestamps must be non-decreasing: {event.timestamp} after {self._last_time}"
            )
        self._last_time = event.timestamp
        self._events_seen += 1

        try:
            held = bool(self.predicate(event.value))
        except Exception as exc:
            logger.predicate_failed(getattr(self.predicate, "__name__", "predicate"), self._events_seen - 1, exc)
            self._streak_start = None
            return self._publish(
                CheckStatus.FAILURE,
                event.timestamp,
                f"predicate raised {type(exc).__name__}: {exc}",
            )

        if not held:
            self._streak_start = None
            return self._publish(CheckStatus.FAILURE, event.timestamp, "condition not held")

        if self._streak_start is None:
            self._streak_start = event.timestamp
            logger.debug(f"Streak started at {event.timestamp:g}s")
        return self._evaluate(event.timestamp)

    def tick(self, now: Timestamp) -> Optional[SustainedStateUpdate]:
        """Re-evaluate the status at time `now` without a new observation."""
        if self.is_done:
            return None
        now = to_seconds(now)
        if self._last_time is not None and now < self._last_time:
            raise TraceOrderError(f"Time must not go backwards: {now} after {self._last_time}")
        self._last_time = now
        if self._streak_start is None:
            if self._latest is not None:
                return self._publish(self._latest.status, now, self._latest.reason)
            return self._publish(CheckStatus.PENDING, now, "nothing observed")
        return self._evaluate(now)

    def _evaluate(self, now: float) -> Optional[SustainedStateUpdate]:
        elapsed = now - self._streak_start
        if elapsed >= self.min_duration:
            return self._publish(CheckStatus.SUCCESS, now)
        return self._publish(
            CheckStatus.PENDING,
            now,
            f"held for {elapsed:g}s of {self.min_duration:g}s",
        )

    def _publish(
        self,
        status: CheckStatus,
        now: float,
        reason: Optional[str] = None,
        error: Optional[BaseException] = None,
    ) -> Optional[SustainedStateUpdate]:
        """Deliver a new status to observers; None if the monitor is or becomes disposed."""
        if self._disposed:
            return None
        update = SustainedStateUpdate(status, self._streak_start, now, self._events_seen, reason, error)
        if self._latest is None or self._latest.status is not status:
            logger.debug(f"Sustained state check: {update}")
        self._latest = update
        for callback in list(self._observers):
            if self._disposed:
                break
            callback(update)
        return None if self._disposed else update

    def _fail(self, error: BaseException) -> Optional[SustainedStateUpdate]:
        logger.source_failed(error)
        self._streak_start = None
        self._failed = True
        update = self._publish(
            CheckStatus.FAILURE,
            self._last_time or 0.0,
            f"update source failed: {type(error).__name__}: {error}",
            error,
        )
        self._close_source()
        return update

    def _finish(self) -> Optional[SustainedStateUpdate]:
        """Source exhausted: a check still pending can no longer succeed."""
        self._exhausted = True
        self._iterator = None
        if self.status is not CheckStatus.PENDING:
            return None
        self._streak_start = None
        return self._publish(
            CheckStatus.FAILURE,
            self._last_time or 0.0,
            f"source ended before the condition held for {self.min_duration:g}s",
        )

    def verdicts(self):
        """Pull observations from the source and yield one update each."""
        if self._source is None:
            raise RuntimeError("Monitor has no update source; push events with observe()")
        if self._iterator is None:
            self._iterator = iter(self._source)

        while not self.is_done:
            try:
                item = next(self._iterator)
            except StopIteration:
                update = self._finish()
                if update is not None:
                    yield update
                return
            except Exception as exc:
                update = self._fail(exc)
                if update is not None:
                    yield update
                return
            try:
                update = self.observe(item)
            except (TypeError, ValueError) as exc:
                update = self._fail(exc)
            if update is not None:
                yield update

    def run(self) -> Optional[SustainedStateUpdate]:
        """Drain the source; returns the last update."""
        for _ in self.verdicts():
            pass
        return self._latest

    def dispose(self) -> None:
        """Stop monitoring; idempotent and safe to call from an observer."""
        if self._disposed:
            return
        self._disposed = True
        self._observers.clear()
        self._close_source()

    def _close_source(self) -> None:
        close = getattr(self._iterator, "close", None)
        if close is not None:
            try:
                close()
            except ValueError:
                logger.debug("Source generator busy, leaving it to the pull loop")
        self._iterator = None
