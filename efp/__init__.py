"""
EFP Front-End Package

Parser and printer for EFP, a small expression-oriented language of
arithmetic, function calls, function declarations and match expressions.

Architecture:
    efp/
    ├── lexer/           # Source cursor and lexical vocabulary
    ├── parser/          # Backtracking parser and AST
    ├── printer/         # Prefix and source printers
    └── cli.py           # `efp` command line

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__email__ = "dev@neuralscript.org"
__license__ = "MIT"

from .lexer import Cursor
from .parser import Parser, ParseError, parse_string, parse_file
from .printer import print_expr, print_program, format_source

__all__ = [
    # Core classes
    "Cursor",
    "Parser",
    "ParseError",

    # Convenience functions
    "parse_string",
    "parse_file",
    "print_expr",
    "print_program",
    "format_source",

    # Version info
    "__version__",
    "__author__",
    "__email__",
    "__license__",
]
