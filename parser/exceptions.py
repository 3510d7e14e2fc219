# parser/exceptions.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Custom exceptions for formula parsing

"""Domain-specific exceptions for temporal formula processing.

Malformed interval bounds surface as `model.interval.IntervalError`, which
the textual parser wraps into `ParseError` so callers handle a single type.
"""


class ParseError(RuntimeError):
    """Exception raised when formula parsing fails due to syntax errors.

    Indicates that the input text does not conform to the formula grammar,
    contains an illegal character, or carries an invalid interval.
    """

    pass
