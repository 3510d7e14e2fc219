# core/evaluator.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Finite-trace LTL/MTL evaluation by backward dynamic programming

"""Finite-trace evaluator for LTL formulas and their MTL extensions.

Every distinct subformula is visited once, children first, and receives a
table with one cell per trace index plus a tail cell for the empty suffix
past the last observation. Each table is filled in a single backward pass,
so the cell at index `j` is computed from cells at `j` and `j + 1` only.
This keeps evaluation linear in the trace length for every untimed
operator; the timed operators add a binary search per index.

A cell is a `(status, reason, index)` triple:

- status: `Verdict.TRUE`, `Verdict.FALSE`, or `Verdict.PENDING`
- reason: explanation of a failure, `None` for success
- index: trace index of the state that decided the failure

Two interpretations of the end of the trace are supported:

- closed (`closed=True`): the trace is complete. The tail cell takes the
  standard finite-trace value of each operator (`Always` vacuously true,
  `Eventually` false, strong `Next` false at the last state).
- open (`closed=False`): more states may follow. Every tail cell is
  PENDING, every time window that can still receive events is treated as
  partially unknown, and statuses combine with Kleene logic. A TRUE or
  FALSE status in this mode cannot be changed by any extension of the
  trace; the streaming monitor relies on this.

Example:
    >>> trace = Trace.from_values([{"busy"}, {"busy"}, {"done"}])
    >>> evaluate(trace, parse("busy U done")).holds
    True
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Union

from model.interval import TimeInterval
from model.trace import Trace, TraceEvent
from parser.ast_nodes import (
    Always,
    AlwaysTimed,
    And,
    Atomic,
    Eventually,
    EventuallyTimed,
    Formula,
    Implies,
    Next,
    Not,
    Or,
    Release,
    Until,
    UntilTimed,
    iter_postorder,
)
from .result import EvaluationResult
from .timed import first_in, next_index, window, window_is_open
from .verdict import Verdict
from utils.logger import get_logger

logger = get_logger(__name__)

TRUE = Verdict.TRUE
FALSE = Verdict.FALSE
PENDING = Verdict.PENDING


class Cell(NamedTuple):
    """Status of one subformula at one trace index."""

    status: Verdict
    reason: Optional[str] = None
    index: Optional[int] = None


_HOLDS = Cell(TRUE)
_UNKNOWN = Cell(PENDING)


def _undecided_or_holds(status: Verdict) -> Cell:
    return _HOLDS if status is TRUE else _UNKNOWN


class TraceEvaluator:
    """Memoised evaluation of formulas over a single trace.

    The evaluator reads the trace but never modifies it. Tables are cached
    per subformula (by identity), so evaluating several formulas that share
    subtrees, or one formula at many start indices, reuses earlier work.
    The cache is only valid for the trace length seen at construction; a
    growing trace needs a fresh evaluator.

    Attributes:
        trace: Observed states, read-only
        closed: Whether the trace is complete (see module docstring)
    """

    def __init__(self, trace: Trace, closed: bool = True):
        self.trace = trace
        self.closed = closed
        self._length = len(trace)
        self._timestamps = list(trace.timestamps)
        self._tables: Dict[int, List[Cell]] = {}
        # keeps nodes alive so their ids stay unique while cached
        self._nodes: Dict[int, Formula] = {}

    # --- public queries --------------------------------------------------

    def cell(self, formula: Formula, index: int = 0) -> Cell:
        """Cell of `formula` at `index` (`len(trace)` is the empty suffix)."""
        self._check_index(index)
        return self.table(formula)[index]

    def status(self, formula: Formula, index: int = 0) -> Verdict:
        return self.cell(formula, index).status

    def result(self, formula: Formula, index: int = 0) -> EvaluationResult:
        """Boolean result of `formula` on the suffix starting at `index`."""
        cell = self.cell(formula, index)
        if cell.status is TRUE:
            return EvaluationResult.success()
        return EvaluationResult.failure(
            cell.reason or f"{formula} is undecided",
            cell.index,
            self._timestamp_at(cell.index),
        )

    def results(self, formula: Formula) -> List[EvaluationResult]:
        """Results at every observed index, in trace order."""
        return [self.result(formula, index) for index in range(self._length)]

    def table(self, formula: Formula) -> List[Cell]:
        """Cells of `formula` for indices `0..len(trace)` inclusive."""
        key = id(formula)
        if key not in self._tables:
            for node in iter_postorder(formula):
                if id(node) not in self._tables:
                    self._tables[id(node)] = self._fill(node)
                    self._nodes[id(node)] = node
        return self._tables[key]

    # --- helpers ---------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Index must be an integer, got {index!r}")
        if not 0 <= index <= self._length:
            raise IndexError(f"Index {index} outside trace of length {self._length}")

    def _timestamp_at(self, index: Optional[int]) -> Optional[float]:
        if index is None or index >= self._length:
            return None
        return self._timestamps[index]

    def _tail(self, status_when_closed: Verdict, reason: Optional[str] = None) -> Cell:
        """Cell for the empty suffix past the last observed state."""
        if not self.closed:
            return _UNKNOWN
        if status_when_closed is TRUE:
            return _HOLDS
        return Cell(FALSE, reason, self._length)

    def _fill(self, node: Formula) -> List[Cell]:
        """Dispatch to the table builder of the node's operator."""
        if isinstance(node, Atomic):
            table = self._atomic(node)
        elif isinstance(node, Not):
            table = self._not(node)
        elif isinstance(node, And):
            table = self._and(node)
        elif isinstance(node, Or):
            table = self._or(node)
        elif isinstance(node, Implies):
            table = self._implies(node)
        elif isinstance(node, Next):
            table = self._next(node)
        elif isinstance(node, Always):
            table = self._always(node)
        elif isinstance(node, Eventually):
            table = self._eventually(node)
        elif isinstance(node, Until):
            table = self._until(node)
        elif isinstance(node, Release):
            table = self._release(node)
        elif isinstance(node, AlwaysTimed):
            table = self._always_timed(node)
        elif isinstance(node, EventuallyTimed):
            table = self._eventually_timed(node)
        elif isinstance(node, UntilTimed):
            table = self._until_timed(node)
        else:
            raise ValueError(f"Unknown formula type: {type(node)}")

        if logger.is_debug():
            logger.debug(f"  {node}: {self._summary(table)}")
        return table

    def _summary(self, table: Sequence[Cell]) -> str:
        return " ".join(cell.status.name[0] for cell in table)

    # --- boolean operators -----------------------------------------------

    def _atomic(self, node: Atomic) -> List[Cell]:
        table = []
        for index, event in enumerate(self.trace):
            try:
                held = bool(node.predicate(event.value))
            except Exception as exc:
                logger.predicate_failed(node.name, index, exc)
                table.append(Cell(FALSE, f"{node.name} raised {type(exc).__name__}: {exc}", index))
                continue
            table.append(_HOLDS if held else Cell(FALSE, node.name, index))
        table.append(self._tail(FALSE, node.name))
        return table

    def _not(self, node: Not) -> List[Cell]:
        reason = f"{node.operand} held"
        table = []
        for index, cell in enumerate(self._tables[id(node.operand)]):
            status = cell.status.negate()
            table.append(Cell(FALSE, reason, index) if status is FALSE else _undecided_or_holds(status))
        return table

    def _and(self, node: And) -> List[Cell]:
        table = []
        for left, right in zip(self._tables[id(node.left)], self._tables[id(node.right)]):
            status = left.status.combine_conjunctive(right.status)
            if status is FALSE:
                table.append(left if left.status is FALSE else right)
            else:
                table.append(_undecided_or_holds(status))
        return table

    def _or(self, node: Or) -> List[Cell]:
        table = []
        for left, right in zip(self._tables[id(node.left)], self._tables[id(node.right)]):
            status = left.status.combine_disjunctive(right.status)
            if status is FALSE:
                table.append(Cell(FALSE, f"{left.reason} and {right.reason}", left.index))
            else:
                table.append(_undecided_or_holds(status))
        return table

    def _implies(self, node: Implies) -> List[Cell]:
        table = []
        for left, right in zip(self._tables[id(node.left)], self._tables[id(node.right)]):
            status = left.status.negate().combine_disjunctive(right.status)
            if status is FALSE:
                table.append(Cell(FALSE, f"{node.left} held but {right.reason}", right.index))
            else:
                table.append(_undecided_or_holds(status))
        return table

    # --- untimed temporal operators --------------------------------------

    def _next(self, node: Next) -> List[Cell]:
        operand = self._tables[id(node.operand)]
        n = self._length
        table: List[Cell] = [_UNKNOWN] * (n + 1)
        for index in range(n + 1):
            if index + 1 < n or (index + 1 == n and not self.closed):
                table[index] = operand[index + 1]
            elif self.closed:
                table[index] = Cell(FALSE, f"no next state after index {index}", index)
        return table

    def _always(self, node: Always) -> List[Cell]:
        operand = self._tables[id(node.operand)]
        n = self._length
        table: List[Cell] = [_UNKNOWN] * (n + 1)
        table[n] = self._tail(TRUE)
        for index in range(n - 1, -1, -1):
            here, later = operand[index], table[index + 1]
            status = here.status.combine_conjunctive(later.status)
            if status is FALSE:
                table[index] = here if here.status is FALSE else later
            else:
                table[index] = _undecided_or_holds(status)
        return table

    def _eventually(self, node: Eventually) -> List[Cell]:
        operand = self._tables[id(node.operand)]
        n = self._length
        reason = f"{node.operand} never held"
        table: List[Cell] = [_UNKNOWN] * (n + 1)
        table[n] = self._tail(FALSE, reason)
        for index in range(n - 1, -1, -1):
            status = operand[index].status.combine_disjunctive(table[index + 1].status)
            table[index] = Cell(FALSE, reason, index) if status is FALSE else _undecided_or_holds(status)
        return table

    def _until(self, node: Until) -> List[Cell]:
        left = self._tables[id(node.left)]
        right = self._tables[id(node.right)]
        n = self._length
        blocked = f"{node.left} failed before {node.right} held"
        table: List[Cell] = [_UNKNOWN] * (n + 1)
        table[n] = self._tail(FALSE, f"{node.right} never became true")
        for index in range(n - 1, -1, -1):
            goal, hold, later = right[index], left[index], table[index + 1]
            # left U right  ==  right | (left & X(left U right))
            status = goal.status.combine_disjunctive(hold.status.combine_conjunctive(later.status))
            if status is not FALSE:
                table[index] = _undecided_or_holds(status)
            elif hold.status is FALSE:
                table[index] = Cell(FALSE, blocked, index)
            else:
                table[index] = later
        return table

    def _release(self, node: Release) -> List[Cell]:
        left = self._tables[id(node.left)]
        right = self._tables[id(node.right)]
        n = self._length
        broken = f"{node.right} failed before being released by {node.left}"
        table: List[Cell] = [_UNKNOWN] * (n + 1)
        table[n] = self._tail(TRUE)
        for index in range(n - 1, -1, -1):
            kept, releaser, later = right[index], left[index], table[index + 1]
            # left R right  ==  right & (left | X(left R right))
            status = kept.status.combine_conjunctive(releaser.status.combine_disjunctive(later.status))
            if status is not FALSE:
                table[index] = _undecided_or_holds(status)
            elif kept.status is FALSE:
                table[index] = Cell(FALSE, broken, index)
            else:
                table[index] = later
        return table

    # --- timed operators -------------------------------------------------

    def _operand_indexes(self, operand: Sequence[Cell]):
        observed = operand[: self._length]
        return (
            next_index([cell.status is TRUE for cell in observed]),
            next_index([cell.status is FALSE for cell in observed]),
            next_index([cell.status is PENDING for cell in observed]),
        )

    def _is_open(self, index: int, node: Union[AlwaysTimed, EventuallyTimed, UntilTimed]) -> bool:
        if self.closed:
            return False
        return window_is_open(self._timestamps[-1], self._timestamps[index], node.interval)

    def _always_timed(self, node: AlwaysTimed) -> List[Cell]:
        operand = self._tables[id(node.operand)]
        n = self._length
        _, next_false, next_pending = self._operand_indexes(operand)
        table: List[Cell] = [_UNKNOWN] * (n + 1)
        table[n] = self._tail(TRUE)
        for index in range(n):
            lo, hi = window(self._timestamps, index, node.interval)
            failed = first_in(next_false, lo, hi)
            if failed >= 0:
                table[index] = operand[failed]
            elif first_in(next_pending, lo, hi) >= 0 or self._is_open(index, node):
                table[index] = _UNKNOWN
            else:
                table[index] = _HOLDS
        return table

    def _eventually_timed(self, node: EventuallyTimed) -> List[Cell]:
        operand = self._tables[id(node.operand)]
        n = self._length
        next_true, _, next_pending = self._operand_indexes(operand)
        table: List[Cell] = [_UNKNOWN] * (n + 1)
        table[n] = self._tail(FALSE, f"{node.operand} did not occur within {node.interval}")
        for index in range(n):
            lo, hi = window(self._timestamps, index, node.interval)
            if first_in(next_true, lo, hi) >= 0:
                table[index] = _HOLDS
            elif first_in(next_pending, lo, hi) >= 0 or self._is_open(index, node):
                table[index] = _UNKNOWN
            else:
                table[index] = Cell(FALSE, self._timeout_reason(node.operand, node.interval, index), index)
        return table

    def _until_timed(self, node: UntilTimed) -> List[Cell]:
        left = self._tables[id(node.left)][: self._length]
        right = self._tables[id(node.right)][: self._length]
        n = self._length
        left_not_true = next_index([cell.status is not TRUE for cell in left])
        left_false = next_index([cell.status is FALSE for cell in left])
        right_true = next_index([cell.status is TRUE for cell in right])
        right_maybe = next_index([cell.status is not FALSE for cell in right])
        blocked_reason = f"{node.left} failed before {node.right} held within {node.interval}"
        table: List[Cell] = [_UNKNOWN] * (n + 1)
        table[n] = self._tail(FALSE, f"{node.right} did not occur within {node.interval}")
        for index in range(n):
            lo, hi = window(self._timestamps, index, node.interval)
            # a witness at j needs left TRUE on [index, j)
            if first_in(right_true, lo, min(hi, left_not_true[index] + 1)) >= 0:
                table[index] = _HOLDS
                continue
            blocked = left_false[index]
            if first_in(right_maybe, lo, min(hi, blocked + 1)) >= 0 or (blocked >= n and self._is_open(index, node)):
                table[index] = _UNKNOWN
            elif blocked < hi:
                table[index] = Cell(FALSE, blocked_reason, blocked)
            else:
                table[index] = Cell(FALSE, self._timeout_reason(node.right, node.interval, index), index)
        return table

    def _timeout_reason(self, target: Formula, interval: TimeInterval, index: int) -> str:
        reason = f"{target} did not occur within {interval}"
        if interval.is_bounded:
            deadline = self._timestamps[index] + interval.end
            reason += f" (deadline {deadline:g}s)"
        return reason


def _as_trace(trace: Union[Trace, Iterable[Any]]) -> Trace:
    if isinstance(trace, Trace):
        return trace
    return Trace(TraceEvent.coerce(item) for item in trace)


def evaluate(trace: Union[Trace, Iterable[TraceEvent]], formula: Formula, start_index: int = 0) -> EvaluationResult:
    """Evaluate `formula` on the suffix of a complete trace.

    Args:
        trace: Observed states; a Trace or an iterable of TraceEvents or
            `(value, timestamp)` pairs
        formula: Formula to check
        start_index: First index of the suffix; `len(trace)` denotes the
            empty suffix

    Returns:
        EvaluationResult, with the reason of the deciding subformula on
        failure. Predicate exceptions are reported as failures, never raised.

    Raises:
        IndexError: If start_index lies outside `[0, len(trace)]`
    """
    trace = _as_trace(trace)
    logger.debug(f"Evaluating {formula} over {len(trace)} event(s) from index {start_index}")
    evaluator = TraceEvaluator(trace)
    result = evaluator.result(formula, start_index)
    logger.debug(f"Result: {result}")
    return result


def evaluate_ltl(formula: Formula, values: Sequence[Any]) -> bool:
    """Check an untimed formula against a plain list of states.

    States are stamped one millisecond apart. An empty list never satisfies
    the formula.
    """
    if not values:
        return False
    return evaluate(Trace.from_values(values), formula).holds


def evaluate_open(trace: Trace, formula: Formula, start_index: int = 0) -> Verdict:
    """Three-valued status of `formula` on a trace that may still grow."""
    return TraceEvaluator(trace, closed=False).status(formula, start_index)


__all__ = ["Cell", "TraceEvaluator", "evaluate", "evaluate_ltl", "evaluate_open"]
