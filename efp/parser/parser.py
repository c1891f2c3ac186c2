"""
EFP Recursive Descent Parser Implementation

Hand-written backtracking parser for EFP with two-level precedence climbing
for arithmetic. There is no token stream: every rule reads characters from
the Cursor directly.

Each rule returns either an Expression or a ParseFailure. A soft failure
(ErrorKind.FAIL_TRY) means the production does not apply here and the caller
restores its checkpoint and tries the next alternative. Any other kind is a
hard failure: the production committed (a keyword matched, a '(' followed a
name, an operator was consumed) and then something required was missing. Hard
failures go straight back to the driver and the cursor stays where the
problem was found.

Author: xwest
"""

import logging
import sys
from contextlib import contextmanager
from enum import IntEnum
from typing import Callable, Dict, Iterator, List, Optional, Union

from ..lexer.cursor import Cursor
from ..lexer.tokens import (
    Operator, ADDITIVE_OPERATORS, MULTIPLICATIVE_OPERATORS, KEYWORD_FUNC,
    KEYWORD_MATCH, QUOTE, DECIMAL_POINT, COMMA, COLON, ARROW, LEFT_PAREN,
    RIGHT_PAREN, LEFT_BRACE, RIGHT_BRACE, is_digit, is_symbol_char
)
from .ast_nodes import (
    ASTNode, Expression, Number, String, Symbol, Operation, FnCall, FnDecl,
    Parameter, Match, MatchBranch, Program
)
from .errors import ErrorKind, ParseFailure, ParseResult, create_parse_error

logger = logging.getLogger(__name__)

# Each level of call or match nesting costs about a dozen rule frames
RECURSION_LIMIT = 4000


class Precedence(IntEnum):
    """Binary operator precedence levels, loosest first."""
    TERM = 0            # +, -
    FACTOR = 1          # *, /


BINARY_OPERATORS: Dict[Precedence, Dict[str, Operator]] = {
    Precedence.TERM: ADDITIVE_OPERATORS,
    Precedence.FACTOR: MULTIPLICATIVE_OPERATORS,
}


def _is_soft(result: Union[ASTNode, ParseFailure, list]) -> bool:
    return isinstance(result, ParseFailure) and result.is_soft


@contextmanager
def raised_recursion_limit(limit: int = RECURSION_LIMIT):
    """Run a block with the interpreter recursion limit at least limit."""
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous, limit))
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Parser:
    """
    EFP parser.

    Parses a whole source text into a Program of top-level expressions,
    stopping at the first hard failure.
    """

    def __init__(self, source: str, filename: str = "<string>"):
        """
        Initialize parser over a source string.

        Args:
            source: Source code string
            filename: Filename for error reporting
        """
        self.source = source
        self.filename = filename
        self.cursor = Cursor(source, filename)

    def parse(self) -> Program:
        """
        Parse the source into an AST.

        Returns:
            Program AST node holding every top-level expression

        Raises:
            ParseError: At the first hard failure
        """
        items = list(self.iter_expressions())
        return Program(tuple(items), self.filename)

    def iter_expressions(self) -> Iterator[Expression]:
        """
        Yield top-level expressions one at a time, in source order.

        Lets callers act on each expression before later ones are parsed.

        Raises:
            ParseError: At the first hard failure
        """
        self.cursor.restore(0)

        while True:
            self.cursor.skip_whitespace()
            if self.cursor.at_end():
                return

            start = self.cursor.checkpoint()
            try:
                with raised_recursion_limit():
                    result = self._parse_expression()
            except RecursionError:
                logger.debug("recursion limit hit in expression at offset %d", start)
                result = ParseFailure(ErrorKind.NESTING_TOO_DEEP, start)

            if isinstance(result, ParseFailure):
                raise create_parse_error(result, self.source, self.filename)

            logger.debug("parsed %s ending at offset %d",
                         result.node_type.value, self.cursor.position)
            yield result

    # Failure helpers

    def _fail(self, kind: ErrorKind) -> ParseFailure:
        """Hard failure at the current position."""
        logger.debug("%s at offset %d", kind.value, self.cursor.position)
        return ParseFailure(kind, self.cursor.position)

    def _soft(self, start: int) -> ParseFailure:
        """Soft failure; restores the cursor to start."""
        self.cursor.restore(start)
        return ParseFailure(ErrorKind.FAIL_TRY, start)

    def _commit(self, result: ParseResult) -> ParseResult:
        """Promote a soft failure to UnknownExpression once a rule committed."""
        if _is_soft(result):
            return self._fail(ErrorKind.UNKNOWN_EXPRESSION)
        return result

    def _first_of(self, *rules: Callable[[], ParseResult]) -> ParseResult:
        """
        Ordered choice: return the first result that is not a soft failure.

        The cursor is restored to the entry position before each retry.
        Soft-fails only if every alternative soft-failed.
        """
        start = self.cursor.checkpoint()
        for rule in rules:
            result = rule()
            if not _is_soft(result):
                return result
            self.cursor.restore(start)
        return ParseFailure(ErrorKind.FAIL_TRY, start)

    # Expressions

    def _parse_expression(self) -> ParseResult:
        """Parse an expression: function declaration or arithmetic."""
        self.cursor.skip_whitespace()
        result = self._first_of(self._parse_fn_decl, self._parse_operation)
        if _is_soft(result):
            return self._fail(ErrorKind.UNKNOWN_EXPRESSION)
        return result

    def _parse_operation(self) -> ParseResult:
        """Parse arithmetic, starting from the loosest precedence level."""
        return self._parse_binary(Precedence.TERM)

    def _parse_binary(self, level: Precedence) -> ParseResult:
        """
        Precedence climbing for one level.

        Operands are expressions of the next tighter level (atoms at the
        tightest). Operators of this level fold left-associatively.
        """
        self.cursor.skip_whitespace()
        left = self._parse_operand(level)
        if isinstance(left, ParseFailure):
            return left

        while True:
            self.cursor.skip_whitespace()
            operator = self._match_operator(BINARY_OPERATORS[level])
            if operator is None:
                break

            self.cursor.skip_whitespace()
            right = self._commit(self._parse_operand(level))
            if isinstance(right, ParseFailure):
                return right
            left = Operation(left, operator, right)

        return left

    def _parse_operand(self, level: Precedence) -> ParseResult:
        if level >= Precedence.FACTOR:
            return self._parse_atom()
        return self._parse_binary(Precedence(level + 1))

    def _match_operator(self, operators: Dict[str, Operator]) -> Optional[Operator]:
        """Consume an operator of the given table, if one is next."""
        # '-' of an arrow is never a subtraction
        if self.cursor.peek_literal(ARROW):
            return None
        for spelling, operator in operators.items():
            if self.cursor.peek_literal(spelling):
                self.cursor.advance_by(len(spelling))
                return operator
        return None

    def _parse_atom(self) -> ParseResult:
        """Parse an atom: number, match, call or symbol, string."""
        self.cursor.skip_whitespace()
        return self._first_of(
            self._parse_number,
            self._parse_match,
            self._parse_call_or_symbol,
            self._parse_string,
        )

    # Literals

    def _parse_number(self) -> ParseResult:
        """Parse a decimal literal: digits, optionally '.' and more digits."""
        start = self.cursor.checkpoint()
        if not self.cursor.peek(is_digit):
            return self._soft(start)

        while self.cursor.peek(is_digit):
            self.cursor.advance()

        if self.cursor.peek_char(DECIMAL_POINT):
            self.cursor.advance()
            while self.cursor.peek(is_digit):
                self.cursor.advance()

        return Number(float(self.cursor.text(start)))

    def _parse_string(self) -> ParseResult:
        """Parse a double-quoted string. No escape sequences."""
        start = self.cursor.checkpoint()
        if not self.cursor.peek_char(QUOTE):
            return self._soft(start)
        self.cursor.advance()

        content_start = self.cursor.position
        while not self.cursor.at_end() and not self.cursor.peek_char(QUOTE):
            self.cursor.advance()

        if self.cursor.at_end():
            return self._fail(ErrorKind.UNCLOSED_QUOTE)

        value = self.cursor.text(content_start)
        self.cursor.advance()
        return String(value)

    def _read_identifier(self) -> Optional[str]:
        """Consume [A-Za-z0-9_]+ and return it, or None without moving."""
        start = self.cursor.position
        while self.cursor.peek(is_symbol_char):
            self.cursor.advance()
        if self.cursor.position == start:
            return None
        return self.cursor.text(start)

    def _match_keyword(self, keyword: str) -> bool:
        """Consume a keyword if the next identifier is exactly that word."""
        start = self.cursor.checkpoint()
        if self._read_identifier() == keyword:
            return True
        self.cursor.restore(start)
        return False

    # Calls and symbols

    def _parse_call_or_symbol(self) -> ParseResult:
        """Parse an identifier, and an argument list if '(' follows it."""
        start = self.cursor.checkpoint()
        name = self._read_identifier()
        if name is None:
            return self._soft(start)

        self.cursor.skip_whitespace()
        if not self.cursor.peek_char(LEFT_PAREN):
            return Symbol(name)

        args = self._parse_parenthesized(self._parse_expression)
        if isinstance(args, ParseFailure):
            return args
        return FnCall(name, tuple(args))

    def _parse_parenthesized(
        self, parse_item: Callable[[], Union[ASTNode, ParseFailure]]
    ) -> Union[List[ASTNode], ParseFailure]:
        """
        Parse '(' item, ... ')' with the cursor on the '('.

        The matching ')' is located first by depth counting, and items are
        parsed strictly up to it.
        """
        close = self.cursor.find_matching(LEFT_PAREN, RIGHT_PAREN)
        if close is None:
            return self._fail(ErrorKind.UNCLOSED_PARENS)
        self.cursor.advance()

        items = self._parse_separated(close, parse_item)
        if isinstance(items, ParseFailure):
            return items

        self.cursor.advance()
        return items

    def _parse_separated(
        self, close: int, parse_item: Callable[[], Union[ASTNode, ParseFailure]]
    ) -> Union[List[ASTNode], ParseFailure]:
        """
        Parse comma-separated items up to the closing delimiter at close.

        A trailing comma is allowed. Leaves the cursor on the closing
        delimiter; anything left before it is an UnknownExpression.
        """
        items: List[ASTNode] = []

        while True:
            self.cursor.skip_whitespace()
            if self.cursor.position >= close:
                break

            item = self._commit(parse_item())
            if isinstance(item, ParseFailure):
                return item
            items.append(item)

            self.cursor.skip_whitespace()
            if not self.cursor.peek_char(COMMA):
                break
            self.cursor.advance()

        self.cursor.skip_whitespace()
        if self.cursor.position != close:
            return self._fail(ErrorKind.UNKNOWN_EXPRESSION)
        return items

    # Function declarations

    def _parse_fn_decl(self) -> ParseResult:
        """Parse func name(param: type, ...) -> type { body }."""
        self.cursor.skip_whitespace()
        start = self.cursor.checkpoint()
        if not self._match_keyword(KEYWORD_FUNC):
            return self._soft(start)
        logger.debug("function declaration at offset %d", start)

        self.cursor.skip_whitespace()
        name = self._read_identifier()
        if name is None:
            return self._fail(ErrorKind.UNKNOWN_EXPRESSION)

        self.cursor.skip_whitespace()
        if not self.cursor.peek_char(LEFT_PAREN):
            return self._fail(ErrorKind.UNCLOSED_PARENS)
        params = self._parse_parenthesized(self._parse_parameter)
        if isinstance(params, ParseFailure):
            return params

        self.cursor.skip_whitespace()
        if not self.cursor.peek_literal(ARROW):
            return self._fail(ErrorKind.EXPECTED_RETURN)
        self.cursor.advance_by(len(ARROW))

        self.cursor.skip_whitespace()
        return_type = self._read_identifier()
        if return_type is None:
            return self._fail(ErrorKind.UNKNOWN_EXPRESSION)

        body = self._parse_block()
        if isinstance(body, ParseFailure):
            return body

        return FnDecl(name, tuple(params), return_type, body)

    def _parse_parameter(self) -> Union[Parameter, ParseFailure]:
        """Parse name: type."""
        name = self._read_identifier()
        if name is None:
            return self._fail(ErrorKind.UNKNOWN_EXPRESSION)

        self.cursor.skip_whitespace()
        if not self.cursor.peek_char(COLON):
            return self._fail(ErrorKind.UNKNOWN_EXPRESSION)
        self.cursor.advance()

        self.cursor.skip_whitespace()
        type_name = self._read_identifier()
        if type_name is None:
            return self._fail(ErrorKind.UNKNOWN_EXPRESSION)

        return Parameter(name, type_name)

    def _parse_block(self, unclosed: ErrorKind = ErrorKind.UNCLOSED_CURLIES) -> ParseResult:
        """
        Parse { expression }. Blocks hold exactly one expression.

        A missing '}' after the expression is reported as unclosed.
        """
        self.cursor.skip_whitespace()
        if not self.cursor.peek_char(LEFT_BRACE):
            return self._fail(ErrorKind.EXPECTED_BLOCK)
        self.cursor.advance()

        body = self._parse_expression()
        if isinstance(body, ParseFailure):
            return body

        self.cursor.skip_whitespace()
        if not self.cursor.peek_char(RIGHT_BRACE):
            return self._fail(unclosed)
        self.cursor.advance()

        return body

    # Match expressions

    def _parse_match(self) -> ParseResult:
        """Parse match scrutinee { pattern -> { value }, ... }."""
        start = self.cursor.checkpoint()
        if not self._match_keyword(KEYWORD_MATCH):
            return self._soft(start)
        logger.debug("match expression at offset %d", start)

        scrutinee = self._parse_expression()
        if isinstance(scrutinee, ParseFailure):
            return scrutinee

        self.cursor.skip_whitespace()
        if not self.cursor.peek_char(LEFT_BRACE):
            return self._fail(ErrorKind.EXPECTED_BLOCK)

        close = self.cursor.find_matching(LEFT_BRACE, RIGHT_BRACE)
        if close is None:
            return self._fail(ErrorKind.UNCLOSED_CURLIES)
        self.cursor.advance()

        branches = self._parse_separated(close, self._parse_branch)
        if isinstance(branches, ParseFailure):
            return branches
        self.cursor.advance()

        return Match(scrutinee, tuple(branches))

    def _parse_branch(self) -> Union[MatchBranch, ParseFailure]:
        """Parse pattern -> { value }. Patterns are atoms."""
        pattern = self._commit(self._parse_atom())
        if isinstance(pattern, ParseFailure):
            return pattern

        self.cursor.skip_whitespace()
        if not self.cursor.peek_literal(ARROW):
            return self._fail(ErrorKind.EXPECTED_RETURN)
        self.cursor.advance_by(len(ARROW))

        # Enclosing braces are already matched; a value missing '}' is a bad block
        value = self._parse_block(unclosed=ErrorKind.EXPECTED_BLOCK)
        if isinstance(value, ParseFailure):
            return value

        return MatchBranch(pattern, value)


def parse_string(source: str, filename: str = "<string>") -> Program:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        Program AST

    Raises:
        ParseError: If parsing fails
    """
    parser = Parser(source, filename)
    return parser.parse()


def parse_file(filepath: str) -> Program:
    """
    Convenience function to parse a source file.

    Args:
        filepath: Path to source file

    Returns:
        Program AST

    Raises:
        ParseError: If parsing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath)
