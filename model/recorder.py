# model/recorder.py

"""
TraceRecorder
=============

Turns manually recorded application states into a Trace. The recorder does
not sample: the application (or a test) calls `record` whenever its state
changes, and the recorder stamps the state with the time elapsed since
`initialize` according to an injectable clock.
"""

from __future__ import annotations
import time
from typing import Any, Callable, Optional

from .trace import Trace, TraceEvent

Clock = Callable[[], float]


class TraceRecorder:
    """Records states with elapsed-time timestamps.

    Attributes:
        clock: Zero-argument callable returning the current time in seconds
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock or time.monotonic
        self._start: Optional[float] = None
        self._trace = Trace()

    def initialize(self) -> None:
        """Mark the start time and discard previously recorded states."""
        self._start = self.clock()
        self._trace = Trace()

    @property
    def is_initialized(self) -> bool:
        return self._start is not None

    def record(self, state: Any, record_duplicates: bool = False) -> bool:
        """Record `state` at the current clock time.

        By default a state equal to the last recorded one is skipped, so the
        trace holds state *changes*.

        Returns:
            True if the state was appended to the trace

        Raises:
            RuntimeError: If `initialize` has not been called
        """
        if self._start is None:
            raise RuntimeError("TraceRecorder must be initialized before recording; call initialize()")

        if not record_duplicates and not self._trace.is_empty and self._trace[-1].value == state:
            return False

        # A clock that steps backwards must not break trace ordering
        elapsed = max(self.clock() - self._start, self._trace.last_timestamp)
        self._trace.append(TraceEvent(state, elapsed))
        return True

    @property
    def trace(self) -> Trace:
        """Snapshot of the recorded trace."""
        return self._trace.copy()
