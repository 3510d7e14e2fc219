# core/monitor.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Streaming monitor producing three-valued verdicts as a trace grows

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from model.trace import Trace, TraceEvent
from parser.ast_nodes import Formula
from .evaluator import TraceEvaluator
from .result import EvaluationResult
from .verdict import Verdict
from utils.logger import get_logger

logger = get_logger(__name__)

Observer = Callable[["VerdictUpdate"], None]


@dataclass(frozen=True, slots=True)
class VerdictUpdate:
    """Immutable snapshot published after every observed event.

    Attributes:
        verdict: TRUE/FALSE once no extension of the trace can change the
            outcome, PENDING otherwise
        result: Boolean outcome if the trace ended now, with its reason
        events_seen: Number of events in the monitored trace
        timestamp: Timestamp of the latest event, when there is one
        source_error: Exception raised by the update source, if it failed
    """

    verdict: Verdict
    result: EvaluationResult
    events_seen: int
    timestamp: Optional[float] = None
    source_error: Optional[BaseException] = None

    @property
    def holds(self) -> bool:
        return self.result.holds

    @property
    def reason(self) -> Optional[str]:
        return self.result.reason

    @property
    def is_resolved(self) -> bool:
        return self.verdict.is_conclusive()

    def __str__(self) -> str:
        return f"{self.verdict} after {self.events_seen} event(s): {self.result}"


class StreamMonitor:
    """Incremental monitor for a formula over a growing trace.

    The monitor owns an append-only trace. After each new event it evaluates
    the formula twice over the buffered trace: once as if the trace ended
    there, giving the boolean approximation and its reason, and once with
    the future left open, giving the verdict. A TRUE or FALSE verdict is
    final; it is published once and the monitor stops consuming its source.
    A monitor whose outcome still depends on unseen events stays PENDING
    until it resolves, `finalize` is called, or it is disposed. There is no
    timeout.

    Events can be pulled from `source` with `verdicts`, `averdicts`, `run`
    or `arun`, or pushed with `process` when `source` is None. Updates are
    also delivered to observers registered with `subscribe`.

    A failing source (an exception while pulling, a malformed item or a
    timestamp going backwards) produces a terminal FALSE update whose reason
    starts with "update source failed" and whose `source_error` is set.

    Args:
        source: Iterable or async iterable of TraceEvents or
            `(value, timestamp)` pairs, or None for push mode
        formula: Formula to monitor
        initial_value: Optional state observed at time zero (or a
            TraceEvent); evaluated immediately

    Example:
        >>> monitor = StreamMonitor(None, eventually(prop("home")))
        >>> monitor.process(TraceEvent({"login"}, 0.0)).verdict
        <Verdict.PENDING: 3>
        >>> monitor.process(TraceEvent({"home"}, 1.0)).verdict
        <Verdict.TRUE: 1>
    """

    def __init__(
        self,
        source: Optional[Iterable[Any]],
        formula: Formula,
        initial_value: Any = None,
    ):
        self.formula = formula
        self._source = source
        self._iterator = None
        self._async_iterator = None
        self._trace = Trace()
        self._observers: List[Observer] = []
        self._latest: Optional[VerdictUpdate] = None
        self._unreported: Optional[VerdictUpdate] = None
        self._resolved = False
        self._disposed = False

        logger.debug(f"Initializing stream monitor for formula: {formula}")

        if initial_value is not None:
            if not isinstance(initial_value, TraceEvent):
                initial_value = TraceEvent(initial_value, 0.0)
            self._trace.append(initial_value)
            self._unreported = self._advance(initial_value)

    # --- state -----------------------------------------------------------

    @property
    def verdict(self) -> Optional[VerdictUpdate]:
        """Latest published update, None before the first event."""
        return self._latest

    @property
    def trace(self) -> Trace:
        """Copy of the observed trace."""
        return self._trace.copy()

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def is_done(self) -> bool:
        """True once no further update will be published."""
        return self._resolved or self._disposed

    # --- observers -------------------------------------------------------

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        if self._disposed:
            return lambda: None
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _publish(self, update: VerdictUpdate) -> Optional[VerdictUpdate]:
        """Deliver `update` to observers; None if the monitor is or becomes disposed."""
        if self._disposed:
            return None
        self._latest = update
        for callback in list(self._observers):
            # an observer may dispose the monitor
            if self._disposed:
                break
            callback(update)
        return None if self._disposed else update

    # --- push mode -------------------------------------------------------

    def process(self, event: Any) -> Optional[VerdictUpdate]:
        """Observe one event and publish the resulting update.

        Args:
            event: TraceEvent or `(value, timestamp)` pair

        Returns:
            The published update, or None when the monitor is done

        Raises:
            TraceOrderError: If the timestamp precedes the previous one
        """
        if self.is_done:
            logger.debug("Monitor is done, ignoring event")
            return None
        event = TraceEvent.coerce(event)
        self._trace.append(event)
        return self._advance(event)

    def finalize(self) -> Optional[VerdictUpdate]:
        """Declare the trace complete and resolve a pending verdict.

        The finite-trace result decides the verdict. Resolved and disposed
        monitors are left untouched.

        Returns:
            The final update, or None if the monitor was disposed
        """
        if self._disposed:
            return None
        if self._resolved:
            return self._latest

        result = TraceEvaluator(self._trace).result(self.formula)
        update = VerdictUpdate(
            Verdict.from_bool(result.holds),
            result,
            len(self._trace),
            self._last_timestamp(),
        )
        logger.debug(f"Finalizing after {len(self._trace)} event(s): {result}")
        return self._settle(update)

    # --- pull mode -------------------------------------------------------

    def verdicts(self):
        """Pull events from the source and yield one update per event.

        The update for the initial value, if any, is yielded first. Stops
        when the verdict resolves, the source is exhausted or fails, or the
        monitor is disposed.
        """
        if self._unreported is not None:
            update, self._unreported = self._unreported, None
            yield update

        if self.is_done:
            return

        if self._iterator is None:
            self._iterator = iter(self._require_source())

        while not self.is_done:
            try:
                item = next(self._iterator)
            except StopIteration:
                logger.debug("Update source exhausted")
                return
            except Exception as exc:
                update = self._fail(exc)
                if update is not None:
                    yield update
                return

            update = self._consume(item)
            if update is not None:
                yield update

    async def averdicts(self):
        """Async counterpart of `verdicts`; accepts sync or async sources."""
        if self._unreported is not None:
            update, self._unreported = self._unreported, None
            yield update

        if self.is_done:
            return

        source = self._require_source()
        is_async = hasattr(source, "__aiter__")
        if is_async and self._async_iterator is None:
            self._async_iterator = source.__aiter__()
        elif not is_async and self._iterator is None:
            self._iterator = iter(source)

        try:
            while not self.is_done:
                try:
                    if is_async:
                        item = await self._async_iterator.__anext__()
                    else:
                        item = next(self._iterator)
                except (StopIteration, StopAsyncIteration):
                    logger.debug("Update source exhausted")
                    return
                except Exception as exc:
                    update = self._fail(exc)
                    if update is not None:
                        yield update
                    return

                update = self._consume(item)
                if update is not None:
                    yield update
        finally:
            if is_async and self.is_done:
                await self._close_async_source()

    def run(self) -> Optional[VerdictUpdate]:
        """Drain the source; returns the last published update."""
        for _ in self.verdicts():
            pass
        return self._latest

    async def arun(self) -> Optional[VerdictUpdate]:
        """Async counterpart of `run`."""
        async for _ in self.averdicts():
            pass
        return self._latest

    # --- disposal --------------------------------------------------------

    def dispose(self) -> None:
        """Stop monitoring. Idempotent and safe to call from an observer.

        Drops observers, closes a generator source and guarantees that no
        update is published afterwards. An async generator source is closed
        by the running `averdicts`/`arun` loop.
        """
        if self._disposed:
            return
        self._disposed = True
        self._observers.clear()
        self._unreported = None
        self._close_source()
        logger.debug("Stream monitor disposed")

    # --- internals -------------------------------------------------------

    def _require_source(self) -> Iterable[Any]:
        if self._source is None:
            raise RuntimeError("Monitor has no update source; push events with process()")
        return self._source

    def _last_timestamp(self) -> Optional[float]:
        return self._trace.last_timestamp if len(self._trace) else None

    def _consume(self, item: Any) -> Optional[VerdictUpdate]:
        try:
            event = TraceEvent.coerce(item)
            self._trace.append(event)
        except (TypeError, ValueError) as exc:
            return self._fail(exc)
        return self._advance(event)

    def _advance(self, event: TraceEvent) -> Optional[VerdictUpdate]:
        """Evaluate the buffered trace after `event` was appended."""
        result = TraceEvaluator(self._trace).result(self.formula)
        verdict = TraceEvaluator(self._trace, closed=False).status(self.formula)
        update = VerdictUpdate(verdict, result, len(self._trace), event.timestamp)

        logger.debug(f"{event} → verdict={verdict}" + (f" ({result.reason})" if result.reason else ""))

        if verdict.is_conclusive():
            return self._settle(update)
        return self._publish(update)

    def _settle(self, update: VerdictUpdate) -> Optional[VerdictUpdate]:
        self._resolved = True
        logger.verdict_resolved(str(update.verdict), update.events_seen)
        published = self._publish(update)
        self._close_source()
        return published

    def _fail(self, error: BaseException) -> Optional[VerdictUpdate]:
        logger.source_failed(error)
        update = VerdictUpdate(
            Verdict.FALSE,
            EvaluationResult.failure(
                f"update source failed: {type(error).__name__}: {error}",
                timestamp=self._last_timestamp(),
            ),
            len(self._trace),
            self._last_timestamp(),
            source_error=error,
        )
        self._resolved = True
        published = self._publish(update)
        self._close_source()
        return published

    def _close_source(self) -> None:
        close = getattr(self._iterator, "close", None)
        if close is not None:
            try:
                close()
            except ValueError:
                # generator is executing; the pull loop stops on its own
                logger.debug("Source generator busy, leaving it to the pull loop")
        self._iterator = None

    async def _close_async_source(self) -> None:
        aclose = getattr(self._async_iterator, "aclose", None)
        self._async_iterator = None
        if aclose is not None:
            await aclose()
