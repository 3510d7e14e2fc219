# parser/ast_nodes.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Formula tree node classes for temporal logic formula representation

"""Formula node classes for LTL and MTL specifications.

This module defines the closed set of immutable node classes used to build
temporal formulas over a trace of application states. Formulas are trees
(possibly sharing subtrees) of logical and temporal operators whose leaves
are atomic propositions carrying opaque predicates.

Node Types:
    Atomic: Named predicate over a single state
    Not, And, Or, Implies: Boolean connectives
    Next, Always, Eventually, Until, Release: LTL operators
    AlwaysTimed, EventuallyTimed, UntilTimed: MTL operators bounded by a
        TimeInterval

All nodes are frozen and hold no mutable state. They support the visitor
design pattern; the formula visualizer labels its nodes through it.
"""

from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Tuple

from model.interval import TimeInterval


class Visitor(Protocol):
    """Interface for formula visitors implementing the visitor design pattern.

    Concrete visitors must implement visit methods for each node type
    to enable type-safe traversal and transformation operations.
    """

    def visit_atomic(self, n: Atomic): ...

    def visit_not(self, n: Not): ...

    def visit_and(self, n: And): ...

    def visit_or(self, n: Or): ...

    def visit_implies(self, n: Implies): ...

    def visit_next(self, n: Next): ...

    def visit_always(self, n: Always): ...

    def visit_eventually(self, n: Eventually): ...

    def visit_until(self, n: Until): ...

    def visit_release(self, n: Release): ...

    def visit_always_timed(self, n: AlwaysTimed): ...

    def visit_eventually_timed(self, n: EventuallyTimed): ...

    def visit_until_timed(self, n: UntilTimed): ...


@dataclass(frozen=True, slots=True)
class Formula:
    """Base class for all formula nodes.

    Provides the foundation for immutable formula trees with visitor pattern
    support. All concrete node types inherit from this class and implement
    `accept`, `children` and `__str__`.
    """

    def accept(self, v: Visitor):
        """Dispatch to the appropriate visitor method.

        Args:
            v: Visitor instance to process this node

        Raises:
            NotImplementedError: Must be implemented by subclasses
        """
        raise NotImplementedError

    def children(self) -> Tuple[Formula, ...]:
        """Direct subformulas, left to right."""
        return ()

    def __str__(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class PropositionLookup:
    """Predicate that reads a named proposition from a state.

    A state satisfies the proposition when it is a mapping whose value for
    `name` is truthy, a set/list/tuple containing `name`, or an object whose
    attribute `name` is truthy. Equal names give equal predicates, which keeps
    formulas parsed from the same text comparable.

    Attributes:
        name: Proposition identifier
    """

    name: str

    def __call__(self, state: Any) -> bool:
        if isinstance(state, Mapping):
            return bool(state.get(self.name, False))
        if isinstance(state, (set, frozenset, list, tuple)):
            return self.name in state
        return bool(getattr(state, self.name))


@dataclass(frozen=True, slots=True)
class Constant:
    """Predicate ignoring the state and returning a fixed truth value."""

    value: bool

    def __call__(self, state: Any) -> bool:
        return self.value


@dataclass(frozen=True, slots=True)
class Atomic(Formula):
    """Atomic proposition: a named predicate tested on a single state.

    "State" and "event" propositions are both represented by this node and
    are evaluated identically.

    Attributes:
        predicate: Callable taking a state and returning a truth value
        name: Display name used in diagnostics and textual form
    """

    predicate: Callable[[Any], bool]
    name: str

    def accept(self, v: Visitor):
        return v.visit_atomic(self)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Not(Formula):
    """Logical negation.

    Attributes:
        operand: The formula being negated
    """

    operand: Formula

    def accept(self, v: Visitor):
        return v.visit_not(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"!{self.operand}"


@dataclass(frozen=True, slots=True)
class And(Formula):
    """Logical conjunction.

    Attributes:
        left: Left operand of the conjunction
        right: Right operand of the conjunction
    """

    left: Formula
    right: Formula

    def accept(self, v: Visitor):
        return v.visit_and(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"({self.left} & {self.right})"


@dataclass(frozen=True, slots=True)
class Or(Formula):
    """Logical disjunction.

    Attributes:
        left: Left operand of the disjunction
        right: Right operand of the disjunction
    """

    left: Formula
    right: Formula

    def accept(self, v: Visitor):
        return v.visit_or(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"({self.left} | {self.right})"


@dataclass(frozen=True, slots=True)
class Implies(Formula):
    """Logical implication, equivalent to `!left | right`.

    Attributes:
        left: Antecedent
        right: Consequent
    """

    left: Formula
    right: Formula

    def accept(self, v: Visitor):
        return v.visit_implies(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"({self.left} -> {self.right})"


@dataclass(frozen=True, slots=True)
class Next(Formula):
    """Strong next: the operand holds at the following state.

    At the last state of a finite trace there is no following state and
    the formula does not hold.

    Attributes:
        operand: Formula evaluated at the next index
    """

    operand: Formula

    def accept(self, v: Visitor):
        return v.visit_next(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"X({self.operand})"


@dataclass(frozen=True, slots=True)
class Always(Formula):
    """Globally: the operand holds at every state of the suffix.

    Vacuously true on an empty suffix.

    Attributes:
        operand: Formula that must hold everywhere
    """

    operand: Formula

    def accept(self, v: Visitor):
        return v.visit_always(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"G({self.operand})"


@dataclass(frozen=True, slots=True)
class Eventually(Formula):
    """Finally: the operand holds at some state of the suffix.

    False on an empty suffix.

    Attributes:
        operand: Formula that must hold somewhere
    """

    operand: Formula

    def accept(self, v: Visitor):
        return v.visit_eventually(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"F({self.operand})"


@dataclass(frozen=True, slots=True)
class Until(Formula):
    """Strong until: `right` eventually holds and `left` holds before it.

    Attributes:
        left: Formula that must hold until `right` does
        right: Formula that must eventually hold
    """

    left: Formula
    right: Formula

    def accept(self, v: Visitor):
        return v.visit_until(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"({self.left} U {self.right})"


@dataclass(frozen=True, slots=True)
class Release(Formula):
    """Release, the dual of Until: `!(!left U !right)`.

    `right` must hold up to and including the first state where `left`
    holds; if `left` never holds, `right` must hold to the end of the trace.

    Attributes:
        left: Formula that releases the obligation
        right: Formula that must hold until released
    """

    left: Formula
    right: Formula

    def accept(self, v: Visitor):
        return v.visit_release(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"({self.left} R {self.right})"


@dataclass(frozen=True, slots=True)
class AlwaysTimed(Formula):
    """Bounded globally: the operand holds at every state whose time offset
    from the current state lies in `interval`.

    Attributes:
        operand: Formula checked inside the window
        interval: Window relative to the current timestamp
    """

    operand: Formula
    interval: TimeInterval

    def accept(self, v: Visitor):
        return v.visit_always_timed(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"G{self.interval}({self.operand})"


@dataclass(frozen=True, slots=True)
class EventuallyTimed(Formula):
    """Bounded finally: the operand holds at some state whose time offset
    from the current state lies in `interval`.

    Attributes:
        operand: Formula searched inside the window
        interval: Window relative to the current timestamp
    """

    operand: Formula
    interval: TimeInterval

    def accept(self, v: Visitor):
        return v.visit_eventually_timed(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"F{self.interval}({self.operand})"


@dataclass(frozen=True, slots=True)
class UntilTimed(Formula):
    """Bounded until: `right` holds at some state whose time offset from the
    current state lies in `interval`, and `left` holds at every state before it.

    Attributes:
        left: Formula that must hold until `right` does
        right: Formula that must hold inside the window
        interval: Window relative to the current timestamp
    """

    left: Formula
    right: Formula
    interval: TimeInterval

    def accept(self, v: Visitor):
        return v.visit_until_timed(self)

    def children(self) -> Tuple[Formula, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"({self.left} U{self.interval} {self.right})"


def iter_postorder(root: Formula):
    """Yield each distinct node of `root` once, children before parents.

    Shared subtrees are identified by object identity. The traversal is
    iterative so deeply nested formulas do not hit the recursion limit.
    """
    seen = set()
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if id(node) in seen:
            continue
        if expanded:
            seen.add(id(node))
            yield node
            continue
        stack.append((node, True))
        for child in reversed(node.children()):
            if id(child) not in seen:
                stack.append((child, False))


def formula_size(root: Formula) -> int:
    """Number of distinct nodes in the formula."""
    return sum(1 for _ in iter_postorder(root))
