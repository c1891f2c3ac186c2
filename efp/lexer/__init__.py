"""
EFP Lexer Package

The EFP parser has no separate tokenizer pass: grammar rules read characters
directly through a Cursor. This package holds that cursor and the lexical
vocabulary (character classes, keywords, operators) the rules test against.

Key Features:
- Integer offsets as cheap checkpoints for backtracking
- Non-destructive lookahead by predicate, character or literal
- Depth-counted delimiter matching that skips string literals

Author: xwest
"""

from .cursor import Cursor
from .tokens import Operator, KEYWORDS, OPERATORS

__all__ = [
    "Cursor",
    "Operator",
    "KEYWORDS",
    "OPERATORS",
]
