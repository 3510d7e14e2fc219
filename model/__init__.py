# model/__init__.py

"""
Domain objects for representing observed executions:
timestamped events, traces, time intervals and a trace recorder.
These types support the evaluators and monitors without pulling in
evaluation logic.
"""

from .interval import IntervalError, TimeInterval
from .trace import Trace, TraceEvent, TraceOrderError, to_seconds
from .recorder import TraceRecorder

__all__ = [
    "TimeInterval",
    "IntervalError",
    "TraceEvent",
    "Trace",
    "TraceOrderError",
    "TraceRecorder",
    "to_seconds",
]
