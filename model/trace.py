# model/trace.py

"""
TraceEvent and Trace
====================

A TraceEvent is an immutable observation: an opaque application state and
the time (seconds since the start of recording) at which it was observed.
A Trace is the ordered sequence of such observations. Timestamps never
decrease; index 0 is the earliest observation.

The evaluator only reads a Trace. The owner of a Trace (for instance a
streaming monitor) may grow it with `append`.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Iterable, Iterator, List, Sequence, Tuple, Union

Timestamp = Union[int, float, timedelta]


class TraceOrderError(ValueError):
    """Raised when an event would make trace timestamps decrease."""


def to_seconds(timestamp: Timestamp) -> float:
    """Normalize a timestamp (number of seconds or timedelta) to float seconds."""
    if isinstance(timestamp, timedelta):
        seconds = timestamp.total_seconds()
    elif isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise TypeError(f"Timestamp must be a number of seconds or a timedelta, got {timestamp!r}")
    else:
        seconds = float(timestamp)
    if seconds < 0:
        raise ValueError(f"Timestamp must be non-negative, got {seconds}")
    return seconds


def _format_seconds(seconds: float) -> str:
    if seconds < 1.0:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"


@dataclass(frozen=True, slots=True)
class TraceEvent:
    value: Any
    timestamp: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "timestamp", to_seconds(self.timestamp))

    @classmethod
    def coerce(cls, item: Any) -> TraceEvent:
        """Accept a TraceEvent or a `(value, timestamp)` pair."""
        if isinstance(item, TraceEvent):
            return item
        if isinstance(item, tuple) and len(item) == 2:
            return cls(item[0], item[1])
        raise TypeError(f"Expected TraceEvent or (value, timestamp) pair, got {item!r}")

    def __str__(self) -> str:
        return f"{self.value} @ {_format_seconds(self.timestamp)}"


class Trace:
    """Ordered sequence of TraceEvents with non-decreasing timestamps."""

    __slots__ = ("_events", "_timestamps")

    def __init__(self, events: Iterable[TraceEvent] = ()):
        self._events: List[TraceEvent] = []
        self._timestamps: List[float] = []
        for event in events:
            self.append(event)

    @classmethod
    def from_values(cls, values: Sequence[Any], interval: float = 0.001) -> Trace:
        """Build a trace from plain states, stamping each with `index * interval`.

        Useful for untimed (LTL) checks where only the order matters.
        """
        step = to_seconds(interval)
        return cls(TraceEvent(value, index * step) for index, value in enumerate(values))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Any, Timestamp]]) -> Trace:
        """Build a trace from `(value, timestamp)` pairs."""
        return cls(TraceEvent(value, timestamp) for value, timestamp in pairs)

    def append(self, event: TraceEvent) -> None:
        """Append an observation; its timestamp must not precede the last one."""
        event = TraceEvent.coerce(event)
        if self._timestamps and event.timestamp < self._timestamps[-1]:
            raise TraceOrderError(
                f"Timestamps must be non-decreasing: {event.timestamp} after {self._timestamps[-1]} "
                f"at index {len(self._events)}"
            )
        self._events.append(event)
        self._timestamps.append(event.timestamp)

    @property
    def events(self) -> Tuple[TraceEvent, ...]:
        return tuple(self._events)

    @property
    def timestamps(self) -> Sequence[float]:
        """Sorted timestamps (read-only view for bisecting)."""
        return self._timestamps

    @property
    def values(self) -> List[Any]:
        return [event.value for event in self._events]

    @property
    def is_empty(self) -> bool:
        return not self._events

    @property
    def last_timestamp(self) -> float:
        """Timestamp of the latest observation (0.0 for an empty trace)."""
        return self._timestamps[-1] if self._timestamps else 0.0

    def copy(self) -> Trace:
        clone = Trace()
        clone._events = list(self._events)
        clone._timestamps = list(self._timestamps)
        return clone

    def __len__(self) -> int:
        return len(self._events)

    def __getitem__(self, index: int) -> TraceEvent:
        return self._events[index]

    def __iter__(self) -> Iterator[TraceEvent]:
        return iter(self._events)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Trace) and self._events == other._events

    def __str__(self) -> str:
        return f"Trace({', '.join(str(e) for e in self._events)})"

    __repr__ = __str__
