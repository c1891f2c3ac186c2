"""
Error handling for the EFP parser.

Grammar rules never raise. Each rule returns either an Expression or a
ParseFailure; ErrorKind.FAIL_TRY marks a soft failure (try the next
alternative) and every other kind a hard, committed failure. Only the public
entry points turn a hard failure into a ParseError exception carrying a
Diagnostic for reporting.

Author: xwest
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from .ast_nodes import Expression


class ErrorKind(Enum):
    """Outcome of a grammar rule that did not produce an expression."""

    FAIL_TRY = "FailTry"
    UNCLOSED_QUOTE = "UnclosedQuote"
    UNKNOWN_EXPRESSION = "UnknownExpression"
    UNCLOSED_PARENS = "UnclosedParens"
    EXPECTED_BLOCK = "ExpectedBlock"
    UNCLOSED_CURLIES = "UnclosedCurlies"
    EXPECTED_RETURN = "ExpectedReturn"
    NESTING_TOO_DEEP = "NestingTooDeep"

    @property
    def is_soft(self) -> bool:
        return self is ErrorKind.FAIL_TRY


@dataclass(frozen=True)
class ParseFailure:
    """
    Failed outcome of a grammar rule.

    For a soft failure, position is where the rule started (the cursor has
    been restored there). For a hard failure it is where the problem was
    detected; the cursor is left at that offset.
    """
    kind: ErrorKind
    position: int

    @property
    def is_soft(self) -> bool:
        return self.kind.is_soft

    @property
    def is_hard(self) -> bool:
        return not self.kind.is_soft


# What every grammar rule returns
ParseResult = Union[Expression, ParseFailure]


@dataclass
class Diagnostic:
    """Reportable description of a parse error."""
    message: str
    filename: str
    offset: int
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        result = f"ERROR[{self.code}]: {self.message}\n"
        result += f"  --> {self.filename} at offset {self.offset}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class ParseError(Exception):
    """
    Exception raised when parsing stops at a hard failure.

    Contains the failure kind and detailed diagnostic information.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        filename: str,
        offset: int,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.offset = offset
        self.diagnostic = Diagnostic(
            message=message,
            filename=filename,
            offset=offset,
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


# Parser error codes, one per hard failure kind
PARSER_ERROR_CODES: Dict[ErrorKind, str] = {
    ErrorKind.UNCLOSED_QUOTE: "P001",
    ErrorKind.UNKNOWN_EXPRESSION: "P002",
    ErrorKind.UNCLOSED_PARENS: "P003",
    ErrorKind.EXPECTED_BLOCK: "P004",
    ErrorKind.UNCLOSED_CURLIES: "P005",
    ErrorKind.EXPECTED_RETURN: "P006",
    ErrorKind.NESTING_TOO_DEEP: "P007",
}

ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.UNCLOSED_QUOTE: "Unclosed string literal",
    ErrorKind.UNKNOWN_EXPRESSION: "Unknown expression",
    ErrorKind.UNCLOSED_PARENS: "Unclosed parenthesis",
    ErrorKind.EXPECTED_BLOCK: "Expected block",
    ErrorKind.UNCLOSED_CURLIES: "Unclosed braces",
    ErrorKind.EXPECTED_RETURN: "Expected return type",
    ErrorKind.NESTING_TOO_DEEP: "Expression nested too deeply",
}

ERROR_SUGGESTIONS: Dict[ErrorKind, List[str]] = {
    ErrorKind.UNCLOSED_QUOTE: ["Add a closing '\"'"],
    ErrorKind.UNKNOWN_EXPRESSION: [
        "Check the expression syntax",
        "Ensure all operators have operands",
        "Parenthesised grouping is not supported outside call arguments",
    ],
    ErrorKind.UNCLOSED_PARENS: ["Add a closing ')'"],
    ErrorKind.EXPECTED_BLOCK: ["Add an opening brace '{' to start a block"],
    ErrorKind.UNCLOSED_CURLIES: ["Add a closing brace '}'"],
    ErrorKind.EXPECTED_RETURN: ["Add an arrow '->' before the return type"],
    ErrorKind.NESTING_TOO_DEEP: [
        "Move deeply nested calls or matches into separate declarations",
    ],
}


def create_parse_error(failure: ParseFailure, source: str, filename: str) -> ParseError:
    """Build the public exception for a failure that reached the driver."""
    # Anything soft that gets this far means nothing matched at the top level
    kind = ErrorKind.UNKNOWN_EXPRESSION if failure.is_soft else failure.kind

    found = source[failure.position:failure.position + 10]
    if found:
        help_text = f"Parsing stopped before {found!r}."
    else:
        help_text = "Parsing stopped at the end of input."

    return ParseError(
        kind=kind,
        message=ERROR_MESSAGES[kind],
        filename=filename,
        offset=failure.position,
        code=PARSER_ERROR_CODES[kind],
        help_text=help_text,
        suggestions=ERROR_SUGGESTIONS[kind]
    )
