# core/timed.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Time window arithmetic for the interval-bounded (MTL) operators

"""Window queries over the sorted timestamps of a trace.

Timed operators are evaluated point-based: only observed timestamps count,
nothing is interpolated between two events. For the state at index `i` with
timestamp `t`, the window of an interval `I = [a, b]` is the set of indices
`j >= i` with `t + a <= t_j <= t + b` (strict where the bound is open). The
bounds are shifted to absolute time once and compared with the observed
timestamps; `TimeInterval.admits` applies the same rule to a single event.
Because timestamps are non-decreasing the window is a contiguous index
range, found with two binary searches.

The `next_index` tables turn "is there an operand cell with status X in
`[lo, hi)`" into a constant time lookup after a linear precomputation.
"""

from bisect import bisect_left, bisect_right
from typing import List, Sequence, Tuple

from model.interval import TimeInterval


def window(timestamps: Sequence[float], index: int, interval: TimeInterval) -> Tuple[int, int]:
    """Half-open index range `[lo, hi)` of the window anchored at `index`.

    Membership is tested on absolute time: `timestamps[j]` is inside when
    `interval.admits(timestamps[index], timestamps[j])` holds.

    Args:
        timestamps: Non-decreasing timestamps of the trace
        index: Anchor index (the state the timed operator is evaluated at)
        interval: Window relative to the anchor timestamp

    Returns:
        `(lo, hi)`; the window is empty when `lo >= hi`
    """
    if interval.is_empty:
        return index, index

    origin = timestamps[index]
    start, end = interval.absolute(origin)

    if interval.start_inclusive:
        lo = bisect_left(timestamps, start)
    else:
        lo = bisect_right(timestamps, start)

    if interval.end_inclusive:
        hi = bisect_right(timestamps, end)
    else:
        hi = bisect_left(timestamps, end)

    # future-time operators never look at earlier states
    return max(lo, index), hi


def window_is_open(last_timestamp: float, origin: float, interval: TimeInterval) -> bool:
    """True if an event appended later could still fall inside the window.

    Appended events carry timestamps `>= last_timestamp`, so the window stays
    open while its upper bound has not been passed.
    """
    if interval.is_empty:
        return False
    end = origin + interval.end
    if end > last_timestamp:
        return True
    return end == last_timestamp and interval.end_inclusive


def next_index(flags: Sequence[bool]) -> List[int]:
    """For every position the smallest position `>= it` whose flag is set.

    The returned list has one extra slot; positions without a later set flag
    map to `len(flags)`.
    """
    size = len(flags)
    result = [size] * (size + 1)
    for position in range(size - 1, -1, -1):
        result[position] = position if flags[position] else result[position + 1]
    return result


def first_in(table: Sequence[int], lo: int, hi: int) -> int:
    """First flagged position in `[lo, hi)`, or -1 when there is none."""
    if lo >= hi:
        return -1
    found = table[lo]
    return found if found < hi else -1
