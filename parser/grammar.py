# parser/grammar.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# LALR(1) grammar and parser for LTL/MTL formulas using SLY

"""Temporal formula grammar implementation using SLY parser generator.

This module defines the grammar rules and parsing logic for LTL formulas
with MTL interval bounds. The parser constructs formula trees from token
streams provided by the lexer, handling operator precedence and
associativity correctly. Proposition identifiers are resolved to predicates
through a caller-supplied table.

Grammar Features:
- Boolean operators (!, &, |, ->)
- Unary temporal operators X, G, F with optional interval on G and F
- Binary temporal operators U, R, W with optional interval on U
- Intervals `[a, b]`, `(a, b]`, `[a, b)`, `(a, b)`, upper bound may be `inf`
- Parenthetical grouping for precedence override

Operator Precedence (lowest to highest):
- IMPLIES ('->'): right-associative
- OR ('|'): left-associative
- AND ('&'): left-associative
- U, R, W: right-associative
- !, X, G, F: right-associative
"""

import math
from typing import Callable, Dict, Optional

from sly import Parser
from model.interval import TimeInterval
from .lexer import FormulaLexer
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
from .exceptions import ParseError
from utils.logger import get_logger


class _FormulaParser(Parser):
    """SLY-based LALR(1) parser for LTL/MTL formulas.

    Attributes:
        tokens: Token types from FormulaLexer
        precedence: Operator precedence and associativity rules
        propositions: Mapping from proposition name to predicate
    """

    tokens = FormulaLexer.tokens

    precedence = (
        ("right", "IMPLIES"),
        ("left", "OR"),
        ("left", "AND"),
        ("right", "UNTIL", "RELEASE", "WEAK_UNTIL"),
        ("right", "NOT", "NEXT", "ALWAYS", "EVENTUALLY"),
    )

    propositions: Optional[Dict[str, Callable]] = None

    @_("expr")
    def start(self, p) -> Formula:
        """Start rule: complete formula is a single expression."""
        return p.expr

    # Unary operators
    @_("NOT expr")
    def expr(self, p) -> Formula:
        return Not(p.expr)

    @_("NEXT expr")
    def expr(self, p) -> Formula:
        return Next(p.expr)

    @_("ALWAYS expr")
    def expr(self, p) -> Formula:
        return Always(p.expr)

    @_("EVENTUALLY expr")
    def expr(self, p) -> Formula:
        return Eventually(p.expr)

    @_("ALWAYS interval expr")
    def expr(self, p) -> Formula:
        return AlwaysTimed(p.expr, p.interval)

    @_("EVENTUALLY interval expr")
    def expr(self, p) -> Formula:
        return EventuallyTimed(p.expr, p.interval)

    # Binary operators
    @_("expr AND expr")
    def expr(self, p) -> Formula:
        return And(p.expr0, p.expr1)

    @_("expr OR expr")
    def expr(self, p) -> Formula:
        return Or(p.expr0, p.expr1)

    @_("expr IMPLIES expr")
    def expr(self, p) -> Formula:
        return Implies(p.expr0, p.expr1)

    @_("expr UNTIL expr")
    def expr(self, p) -> Formula:
        return Until(p.expr0, p.expr1)

    @_("expr UNTIL interval expr")
    def expr(self, p) -> Formula:
        return UntilTimed(p.expr0, p.expr1, p.interval)

    @_("expr RELEASE expr")
    def expr(self, p) -> Formula:
        return Release(p.expr0, p.expr1)

    @_("expr WEAK_UNTIL expr")
    def expr(self, p) -> Formula:
        """Weak until, expanded to `(left U right) | G left`."""
        return Or(Until(p.expr0, p.expr1), Always(p.expr0))

    @_("LPAREN expr RPAREN")
    def expr(self, p) -> Formula:
        """Parenthesized expression for grouping."""
        return p.expr

    @_("literal")
    def expr(self, p) -> Formula:
        return p.literal

    # Interval rules
    @_(
        "LBRACKET bound COMMA bound RBRACKET",
        "LBRACKET bound COMMA bound RPAREN",
        "LPAREN bound COMMA bound RBRACKET",
        "LPAREN bound COMMA bound RPAREN",
    )
    def interval(self, p) -> TimeInterval:
        """Time window; brackets are inclusive, parentheses exclusive."""
        return TimeInterval(
            p.bound0,
            p.bound1,
            start_inclusive=p[0] == "[",
            end_inclusive=p[4] == "]",
        )

    @_("NUMBER")
    def bound(self, p) -> float:
        return p.NUMBER

    @_("INF")
    def bound(self, p) -> float:
        return math.inf

    # Literal rules
    @_("ID")
    def literal(self, p) -> Atomic:
        """Identifier resolved through the proposition table."""
        table = self.propositions or {}
        predicate = table.get(p.ID) or PropositionLookup(p.ID)
        return Atomic(predicate, p.ID)

    @_("TRUE")
    def literal(self, p) -> Atomic:
        return Atomic(Constant(True), "true")

    @_("FALSE")
    def literal(self, p) -> Atomic:
        return Atomic(Constant(False), "false")

    def parse(self, text: str) -> Formula:
        """Parse formula text into a formula tree.

        Args:
            text: Formula string to parse

        Returns:
            Root node of the parsed formula

        Raises:
            ParseError: If formula is empty or contains syntax errors
        """
        logger = get_logger()
        logger.debug(f"Parsing formula: {text}")

        try:
            result = super().parse(FormulaLexer().tokenize(text))

            if result is None and text.strip() == "":
                raise ParseError("Input formula is empty.")

            if result is None:
                raise ParseError("Failed to parse formula (syntax error).")

            logger.debug(f"Successfully parsed formula into {type(result).__name__}")
            return result

        except ParseError:
            logger.debug("Parse error encountered")
            raise
        except Exception as e:
            logger.debug(f"Unexpected parsing error: {e}")
            raise ParseError(f"Parse failed: {e}") from e

    def error(self, token):
        """Handle syntax errors during parsing.

        Args:
            token: Problematic token or None for EOF errors

        Raises:
            ParseError: Always raises with detailed error information
        """
        if token:
            error_msg = (
                f"Syntax error near '{token.value}' "
                f"(type: {token.type}) at line {token.lineno}, position {token.index}"
            )
        else:
            error_msg = "Syntax error: Unexpected end of formula"

        raise ParseError(error_msg)
