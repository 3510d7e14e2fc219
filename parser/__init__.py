# parser/__init__.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Formula construction and parsing components for temporal logic expressions

"""LTL/MTL formula construction and parsing.

This package holds the immutable formula tree, the builder functions used to
compose formulas in code, and a textual parser for the same operator set.
Formulas written as text name their propositions; the names are resolved
through an optional table of predicates and otherwise read from each state
by name.

Core Functions:
    parse: Converts formula strings into formula trees
    always, eventually, until, ...: Builder functions (see builder module)

Supported Logic:
    - Boolean connectives (!, &, |, ->)
    - LTL operators (X, G, F, U, R, W)
    - MTL operators G[a, b], F[a, b] and U[a, b] over time offsets in seconds

Example:
    >>> from parser import parse
    >>> spec = parse("G(request -> F[0, 2](grant))")
    >>> spec_from_code = always(implies(prop("request"),
    ...                         eventually_within(prop("grant"), (0, 2))))
    >>> spec == spec_from_code
    True
"""

from typing import Callable, Dict, Optional

from .exceptions import ParseError
from .grammar import _FormulaParser
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
    Visitor,
    formula_size,
    iter_postorder,
)
from .builder import (
    always,
    always_within,
    and_,
    atomic,
    event,
    eventually,
    eventually_within,
    false,
    implies,
    never,
    next_,
    not_,
    or_,
    prop,
    release,
    responds_within,
    state,
    true,
    until,
    until_within,
    weak_until,
)
from utils.logger import get_logger


def parse(source: str, propositions: Optional[Dict[str, Callable]] = None) -> Formula:
    """Parse a formula string into a formula tree.

    Uses a fresh parser instance for each invocation so concurrent callers
    never share a proposition table.

    Args:
        source: Well-formed formula string to parse
        propositions: Optional mapping from proposition name to predicate;
            names not in the table are read from the state by name

    Returns:
        Root node of the parsed formula

    Raises:
        ParseError: Formula syntax is malformed or an interval is invalid

    Example:
        >>> f = parse("busy U done", {"busy": lambda s: s.busy})
        >>> str(f)
        '(busy U done)'
    """
    logger = get_logger()
    logger.debug(f"Parsing formula: {source}")

    parser = _FormulaParser()
    parser.propositions = dict(propositions or {})

    try:
        result = parser.parse(source)
        logger.debug(f"Formula parsed successfully into tree with root: {type(result).__name__}")
        return result

    except ParseError:
        logger.debug("ParseError encountered during formula parsing")
        raise

    except Exception as exc:
        logger.debug(f"Unexpected parsing error: {type(exc).__name__}: {exc}")
        raise ParseError(str(exc)) from exc


__all__ = [
    "parse",
    "ParseError",
    # nodes
    "Formula",
    "Atomic",
    "Not",
    "And",
    "Or",
    "Implies",
    "Next",
    "Always",
    "Eventually",
    "Until",
    "Release",
    "AlwaysTimed",
    "EventuallyTimed",
    "UntilTimed",
    "PropositionLookup",
    "Constant",
    "Visitor",
    "iter_postorder",
    "formula_size",
    # builders
    "atomic",
    "state",
    "event",
    "prop",
    "true",
    "false",
    "not_",
    "and_",
    "or_",
    "implies",
    "next_",
    "always",
    "eventually",
    "until",
    "release",
    "weak_until",
    "never",
    "always_within",
    "eventually_within",
    "until_within",
    "responds_within",
]

__version__ = "1.0.0"
__description__ = "LTL/MTL formula construction and parsing components"
