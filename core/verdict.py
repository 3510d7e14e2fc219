# core/verdict.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Verdict enumerations for evaluation and monitoring results

from enum import Enum, auto


class Verdict(Enum):
    """Three-valued result for temporal property monitoring.

    A verdict over an unfinished trace is TRUE or FALSE only when every
    possible continuation of the trace yields the same answer. Otherwise the
    property is PENDING and further observations may still decide it. Once
    conclusive, a verdict never changes for the same trace prefix.

    The combination methods implement strong Kleene logic so that partial
    results can be propagated through formula trees without losing
    soundness.

    Values:
        TRUE: Property is satisfied by every extension of the observed trace
        FALSE: Property is violated by every extension of the observed trace
        PENDING: Verdict cannot be determined from the observations so far
    """

    TRUE = auto()
    FALSE = auto()
    PENDING = auto()

    def __str__(self) -> str:
        """Generate string representation of the verdict.

        Returns:
            Human-readable verdict name (TRUE, FALSE, or PENDING)
        """
        return self.name

    @classmethod
    def from_bool(cls, value: bool) -> "Verdict":
        """Map a two-valued result to TRUE or FALSE."""
        return cls.TRUE if value else cls.FALSE

    def is_conclusive(self) -> bool:
        """Determine if this verdict is final.

        Conclusive verdicts (TRUE or FALSE) allow a monitor to stop
        observing; PENDING means more of the trace is needed.

        Returns:
            True if verdict is definitive (TRUE or FALSE), False if pending
        """
        return self is not Verdict.PENDING

    def combine_disjunctive(self, other: "Verdict") -> "Verdict":
        """Combine this verdict with another using disjunctive (OR) semantics.

        Combination rules:
        - TRUE OR anything = TRUE
        - FALSE OR FALSE = FALSE
        - FALSE OR PENDING = PENDING
        - PENDING OR PENDING = PENDING

        Args:
            other: Verdict to combine with this verdict

        Returns:
            Combined verdict following disjunctive semantics
        """
        if self is Verdict.TRUE or other is Verdict.TRUE:
            return Verdict.TRUE
        if self is Verdict.FALSE and other is Verdict.FALSE:
            return Verdict.FALSE
        return Verdict.PENDING

    def combine_conjunctive(self, other: "Verdict") -> "Verdict":
        """Combine this verdict with another using conjunctive (AND) semantics.

        Combination rules:
        - FALSE AND anything = FALSE
        - TRUE AND TRUE = TRUE
        - TRUE AND PENDING = PENDING
        - PENDING AND PENDING = PENDING

        Args:
            other: Verdict to combine with this verdict

        Returns:
            Combined verdict following conjunctive semantics
        """
        if self is Verdict.FALSE or other is Verdict.FALSE:
            return Verdict.FALSE
        if self is Verdict.TRUE and other is Verdict.TRUE:
            return Verdict.TRUE
        return Verdict.PENDING

    def negate(self) -> "Verdict":
        """Compute the logical negation of this verdict.

        Negation rules:
        - NOT TRUE = FALSE
        - NOT FALSE = TRUE
        - NOT PENDING = PENDING

        Returns:
            Negated verdict
        """
        if self is Verdict.TRUE:
            return Verdict.FALSE
        if self is Verdict.FALSE:
            return Verdict.TRUE
        return Verdict.PENDING


class CheckStatus(Enum):
    """Outcome of a sustained-state check.

    Values:
        SUCCESS: The condition has held continuously for the required duration
        FAILURE: The condition was observed false or the source failed
        PENDING: The condition holds but not yet for long enough, or nothing
            has been observed
    """

    SUCCESS = auto()
    FAILURE = auto()
    PENDING = auto()

    def __str__(self) -> str:
        return self.name
