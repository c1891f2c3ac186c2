"""
Lexical vocabulary for the EFP language.

The parser reads characters straight from the source (there is no token
stream), so this module holds the character classes, keywords and operator
spellings that the grammar rules test against:
- Whitespace, digits and identifier characters
- Reserved words that start a keyword production (func, match)
- The four binary arithmetic operators and their spellings
- Punctuation shared by several rules

Author: xwest
"""

from enum import Enum
from typing import Dict, FrozenSet


class Operator(Enum):
    """Binary arithmetic operators, valued by their source spelling."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def symbol(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Character classes
# ============================================================================

# Space, tab, newline, carriage return, form feed, vertical tab
WHITESPACE_CHARS: FrozenSet[str] = frozenset(" \t\n\r\f\v")

DIGIT_CHARS: FrozenSet[str] = frozenset("0123456789")

# Identifiers are [A-Za-z0-9_]+ (ASCII only)
SYMBOL_CHARS: FrozenSet[str] = frozenset(
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789_"
)


def is_whitespace(char: str) -> bool:
    return char in WHITESPACE_CHARS


def is_digit(char: str) -> bool:
    return char in DIGIT_CHARS


def is_symbol_char(char: str) -> bool:
    return char in SYMBOL_CHARS


# ============================================================================
# Keywords and punctuation
# ============================================================================

KEYWORD_FUNC = "func"
KEYWORD_MATCH = "match"

KEYWORDS: FrozenSet[str] = frozenset({KEYWORD_FUNC, KEYWORD_MATCH})

QUOTE = '"'
DECIMAL_POINT = "."
COMMA = ","
COLON = ":"
ARROW = "->"
LEFT_PAREN = "("
RIGHT_PAREN = ")"
LEFT_BRACE = "{"
RIGHT_BRACE = "}"

# Additive operators bind loosest, multiplicative tightest
ADDITIVE_OPERATORS: Dict[str, Operator] = {
    "+": Operator.ADD,
    "-": Operator.SUB,
}

MULTIPLICATIVE_OPERATORS: Dict[str, Operator] = {
    "*": Operator.MUL,
    "/": Operator.DIV,
}

OPERATORS: Dict[str, Operator] = {**ADDITIVE_OPERATORS, **MULTIPLICATIVE_OPERATORS}
