"""
EFP Printer Package

Turns ASTs back into text: the canonical prefix form used as program output,
and re-parseable EFP source used to check that parsing round-trips.

Author: xwest
"""

from .printer import (
    PrefixPrinter, SourcePrinter, print_expr, print_program, format_source,
    format_number
)

__all__ = [
    "PrefixPrinter",
    "SourcePrinter",
    "print_expr",
    "print_program",
    "format_source",
    "format_number",
]
