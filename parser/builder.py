# parser/builder.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Builder functions for composing formulas programmatically

"""Formula construction API.

Plain functions returning new immutable nodes. Operators that are not part of
the closed node set (weak until, never, bounded response) are expressed with
the nodes that are.

Example:
    >>> home = state(lambda s: s.on_home, name="home")
    >>> clicked = event(lambda s: s.login_clicked, name="loginClicked")
    >>> spec = always(implies(clicked, eventually(home)))
"""

from __future__ import annotations
from typing import Any, Callable, Optional, Tuple, Union

from model.interval import TimeInterval
from .ast_nodes import (
    Always,
    AlwaysTimed,
    And,
    Atomic,
    Constant,
    Eventually,
    EventuallyTimed,
    Formula,
    Implies,
    Next,
    Not,
    Or,
    PropositionLookup,
    Release,
    Until,
    UntilTimed,
)

IntervalLike = Union[TimeInterval, Tuple[float, float]]


def _display_name(predicate: Callable[[Any], bool]) -> str:
    return getattr(predicate, "__name__", None) or repr(predicate)


def atomic(predicate: Callable[[Any], bool], name: Optional[str] = None) -> Atomic:
    """Atomic proposition over a single state."""
    if not callable(predicate):
        raise TypeError(f"Predicate must be callable, got {predicate!r}")
    return Atomic(predicate, name or _display_name(predicate))


def state(predicate: Callable[[Any], bool], name: Optional[str] = None) -> Atomic:
    """Proposition describing a condition that holds while the state satisfies it."""
    return atomic(predicate, name)


def event(predicate: Callable[[Any], bool], name: Optional[str] = None) -> Atomic:
    """Proposition marking an occurrence at a state.

    Evaluated exactly like `state`: a predicate test at one index.
    """
    return atomic(predicate, name)


def prop(name: str) -> Atomic:
    """Proposition read from the state by name (see PropositionLookup)."""
    return Atomic(PropositionLookup(name), name)


def true() -> Atomic:
    return Atomic(Constant(True), "true")


def false() -> Atomic:
    return Atomic(Constant(False), "false")


def not_(operand: Formula) -> Not:
    return Not(operand)


def and_(first: Formula, second: Formula, *rest: Formula) -> And:
    """Conjunction of two or more formulas, folded to the left."""
    result = And(first, second)
    for operand in rest:
        result = And(result, operand)
    return result


def or_(first: Formula, second: Formula, *rest: Formula) -> Or:
    """Disjunction of two or more formulas, folded to the left."""
    result = Or(first, second)
    for operand in rest:
        result = Or(result, operand)
    return result


def implies(antecedent: Formula, consequent: Formula) -> Implies:
    return Implies(antecedent, consequent)


def next_(operand: Formula) -> Next:
    return Next(operand)


def always(operand: Formula) -> Always:
    return Always(operand)


def eventually(operand: Formula) -> Eventually:
    return Eventually(operand)


def until(left: Formula, right: Formula) -> Until:
    return Until(left, right)


def release(left: Formula, right: Formula) -> Release:
    return Release(left, right)


def weak_until(left: Formula, right: Formula) -> Or:
    """`left W right`: `left U right`, or `left` holds for the rest of the trace."""
    return Or(Until(left, right), Always(left))


def never(operand: Formula) -> Always:
    """`G !operand`."""
    return Always(Not(operand))


def as_interval(interval: IntervalLike) -> TimeInterval:
    """Accept a TimeInterval or a `(start, end)` pair describing a closed interval."""
    if isinstance(interval, TimeInterval):
        return interval
    start, end = interval
    return TimeInterval.closed(start, end)


def always_within(operand: Formula, interval: IntervalLike) -> AlwaysTimed:
    """`G_I operand`."""
    return AlwaysTimed(operand, as_interval(interval))


def eventually_within(operand: Formula, interval: IntervalLike) -> EventuallyTimed:
    """`F_I operand`."""
    return EventuallyTimed(operand, as_interval(interval))


def until_within(left: Formula, right: Formula, interval: IntervalLike) -> UntilTimed:
    """`left U_I right`."""
    return UntilTimed(left, right, as_interval(interval))


def responds_within(trigger: Formula, response: Formula, interval: IntervalLike) -> Always:
    """Bounded response: every `trigger` is followed by `response` inside `interval`."""
    return Always(Implies(trigger, EventuallyTimed(response, as_interval(interval))))
