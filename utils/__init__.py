# utils/__init__.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Utility module exports

from .trace_reader import (
    read_trace,
    load_trace,
    validate_trace_file,
    get_time_unit,
    TraceFormatError,
    TIME_UNITS,
)
from .trace_utils import generate_trace_file

__all__ = [
    "read_trace",
    "load_trace",
    "validate_trace_file",
    "get_time_unit",
    "TraceFormatError",
    "TIME_UNITS",
    "generate_trace_file",
]
