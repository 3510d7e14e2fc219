# core/__init__.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Core module public API for evaluation and monitoring components

"""Core components for LTL/MTL runtime verification.

This module provides the evaluation engine that decides temporal formulas
over finite traces of timestamped application states, and the monitors
that keep a verdict up to date while a trace is still growing.

Primary Components:
    evaluate: Batch evaluation of a formula over a complete trace
    TraceEvaluator: Memoised backward dynamic-programming evaluator
    EvaluationResult: Boolean outcome with the reason of a failure
    Verdict: Three-valued streaming verdict (TRUE, FALSE, PENDING)
    StreamMonitor: Incremental monitor publishing VerdictUpdates
    SustainedStateMonitor: Checks that a condition holds long enough

Example:
    >>> from core import evaluate, StreamMonitor
    >>> from model import Trace
    >>> from parser import parse
    >>> evaluate(Trace.from_values([{"p"}, {"q"}]), parse("p U q")).holds
    True
"""

from .result import EvaluationResult
from .verdict import CheckStatus, Verdict
from .evaluator import Cell, TraceEvaluator, evaluate, evaluate_ltl, evaluate_open
from .monitor import StreamMonitor, VerdictUpdate
from .sustained import SustainedStateMonitor, SustainedStateUpdate

__all__ = [
    "EvaluationResult",
    "Verdict",
    "CheckStatus",
    "Cell",
    "TraceEvaluator",
    "evaluate",
    "evaluate_ltl",
    "evaluate_open",
    "StreamMonitor",
    "VerdictUpdate",
    "SustainedStateMonitor",
    "SustainedStateUpdate",
]

__version__ = "1.0.0"
__description__ = "Evaluation and monitoring components for LTL/MTL runtime verification"
