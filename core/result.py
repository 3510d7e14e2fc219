# core/result.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Immutable evaluation result carrying the explanation of a failure

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of evaluating a formula over a trace suffix.

    On failure the reason names the subformula that decided the outcome,
    for example `"error held"` or `"response did not occur within [0, 5]"`.
    Successful results usually carry no reason.

    Attributes:
        holds: Whether the formula holds
        reason: Human-readable explanation, mostly set on failure
        index: Trace index the deciding subformula was evaluated at
        timestamp: Timestamp (seconds) of that index, when known
    """

    holds: bool
    reason: Optional[str] = None
    index: Optional[int] = None
    timestamp: Optional[float] = None

    @classmethod
    def success(cls, reason: Optional[str] = None) -> EvaluationResult:
        return cls(True, reason)

    @classmethod
    def failure(
        cls,
        reason: str,
        index: Optional[int] = None,
        timestamp: Optional[float] = None,
    ) -> EvaluationResult:
        return cls(False, reason, index, timestamp)

    def __bool__(self) -> bool:
        return self.holds

    def __str__(self) -> str:
        if self.holds:
            return "holds" if not self.reason else f"holds ({self.reason})"
        location = ""
        if self.index is not None:
            location = f" at index {self.index}"
            if self.timestamp is not None:
                location += f" (t={self.timestamp:g}s)"
        return f"fails{location}: {self.reason}"
