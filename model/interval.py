# model/interval.py

"""
TimeInterval
============

Bounded (or right-unbounded) time window used by the timed operators.
Each endpoint is independently inclusive or exclusive. Bounds are durations
in seconds relative to the state at which a timed operator is evaluated.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Tuple


class IntervalError(ValueError):
    """Raised when an interval is malformed (negative or inverted bounds)."""


def _format_bound(value: float) -> str:
    if math.isinf(value):
        return "inf"
    return f"{value:g}"


@dataclass(frozen=True, slots=True)
class TimeInterval:
    start: float
    end: float
    start_inclusive: bool = True
    end_inclusive: bool = True

    def __post_init__(self):
        for bound in (self.start, self.end):
            if isinstance(bound, bool) or not isinstance(bound, (int, float)):
                raise IntervalError(f"Interval bounds must be numbers, got {bound!r}")
            if math.isnan(bound):
                raise IntervalError("Interval bounds must not be NaN")
        if self.start < 0:
            raise IntervalError(f"Interval start must be non-negative, got {self.start}")
        if math.isinf(self.start):
            raise IntervalError("Interval start must be finite")
        if self.start > self.end:
            raise IntervalError(f"Interval start {self.start} exceeds end {self.end}")
        # an infinite end can never be reached
        if math.isinf(self.end):
            object.__setattr__(self, "end_inclusive", False)

    # --- factories -------------------------------------------------------

    @classmethod
    def closed(cls, start: float, end: float) -> TimeInterval:
        """`[start, end]`."""
        return cls(start, end, True, True)

    @classmethod
    def up_to(cls, end: float) -> TimeInterval:
        """`[0, end]`."""
        return cls(0.0, end, True, True)

    @classmethod
    def exactly(cls, point: float) -> TimeInterval:
        """`[point, point]`."""
        return cls(point, point, True, True)

    @classmethod
    def at_least(cls, start: float) -> TimeInterval:
        """`[start, inf)`."""
        return cls(start, math.inf, True, False)

    @classmethod
    def always(cls) -> TimeInterval:
        """`[0, inf)`: every non-negative offset."""
        return cls.at_least(0.0)

    # --- queries ---------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        """True for a degenerate window such as `(2, 2]` that admits no offset."""
        return self.start == self.end and not (self.start_inclusive and self.end_inclusive)

    @property
    def is_bounded(self) -> bool:
        return not math.isinf(self.end)

    def contains(self, offset: float) -> bool:
        """True if the time offset falls inside this interval.

        Trace windows are decided in absolute time, see `admits`.
        """
        if offset < self.start or (offset == self.start and not self.start_inclusive):
            return False
        if offset > self.end or (offset == self.end and not self.end_inclusive):
            return False
        return True

    def absolute(self, origin: float) -> Tuple[float, float]:
        """Window bounds shifted to absolute time for a state observed at `origin`."""
        return origin + self.start, origin + self.end

    def admits(self, origin: float, timestamp: float) -> bool:
        """True if an event at `timestamp` lies in the window of a state observed at `origin`.

        Compares against the absolute bounds, so it agrees with the window
        queries of the timed operators even where float subtraction would
        round `timestamp - origin` across a bound.
        """
        start, end = self.absolute(origin)
        if timestamp < start or (timestamp == start and not self.start_inclusive):
            return False
        if timestamp > end or (timestamp == end and not self.end_inclusive):
            return False
        return True

    def __str__(self) -> str:
        left = "[" if self.start_inclusive else "("
        right = "]" if self.end_inclusive else ")"
        return f"{left}{_format_bound(self.start)}, {_format_bound(self.end)}{right}"
