# parser/lexer.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Lexical analyzer for LTL/MTL formula tokenization using SLY

"""Lexical analyzer for LTL/MTL formula strings.

This module implements tokenization of temporal formulas, breaking input
strings into tokens for parser consumption. The lexer handles operator
recognition, keyword distinction, interval punctuation and numeric bounds
while providing meaningful error messages for invalid characters.

Supported Tokens:
- Operators: !, &, |, ->, (, ), [, ], ','
- Keywords: X, G, F, U, R, W, true, false, inf
- Numbers: interval bounds in seconds
- Identifiers: proposition names
- Whitespace: ignored during tokenization
"""

from sly import Lexer
from utils.logger import get_logger


class FormulaLexer(Lexer):
    """SLY-based lexer for temporal formula tokenization.

    Distinguishes between reserved operator letters and user-defined
    proposition identifiers. Single upper-case letters X, G, F, U, R and W
    are reserved and cannot name propositions.

    Attributes:
        tokens: Set of valid token types
        ignore: Characters to skip during tokenization
        ID: Identifier pattern with keyword mapping
    """

    tokens = {
        "NEXT",
        "ALWAYS",
        "EVENTUALLY",
        "UNTIL",
        "RELEASE",
        "WEAK_UNTIL",
        "TRUE",
        "FALSE",
        "INF",
        "ID",
        "NUMBER",
        "NOT",
        "AND",
        "OR",
        "IMPLIES",
        "LPAREN",
        "RPAREN",
        "LBRACKET",
        "RBRACKET",
        "COMMA",
    }

    ignore = " \t\r\n"

    # Operator and punctuation tokens
    IMPLIES = r"->"
    NOT = r"!"
    AND = r"&"
    OR = r"\|"
    LPAREN = r"\("
    RPAREN = r"\)"
    LBRACKET = r"\["
    RBRACKET = r"\]"
    COMMA = r","

    @_(r"\d+(\.\d+)?([eE][+-]?\d+)?")
    def NUMBER(self, t):
        t.value = float(t.value)
        return t

    # Identifier pattern: starts with letter/underscore, followed by alphanumerics/underscores
    ID = r"[a-zA-Z_][a-zA-Z0-9_]*"

    # Keyword mapping: reassign token types for reserved words
    ID["X"] = "NEXT"
    ID["G"] = "ALWAYS"
    ID["F"] = "EVENTUALLY"
    ID["U"] = "UNTIL"
    ID["R"] = "RELEASE"
    ID["W"] = "WEAK_UNTIL"
    ID["true"] = "TRUE"
    ID["false"] = "FALSE"
    ID["inf"] = "INF"

    def error(self, t):
        """Handle illegal characters during tokenization.

        Args:
            t: SLY token object containing error context

        Raises:
            ValueError: Always raised with character and position information
        """
        logger = get_logger()

        illegal_char = t.value[0]
        error_pos = self.index

        logger.debug(f"Illegal character '{illegal_char}' at position {error_pos}")

        # Skip the illegal character
        self.index += 1

        raise ValueError(
            f"Illegal character '{illegal_char}' encountered at position {error_pos}"
        )
