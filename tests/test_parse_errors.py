"""
Test suite for EFP parse failures.

Tests cover:
- Every hard failure kind and where it is reported
- Soft failures and cursor restoration inside the grammar rules
- ParseError diagnostics

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from efp.parser.parser import Parser, parse_string
from efp.parser.ast_nodes import Number, Symbol
from efp.parser.errors import (
    ErrorKind, ParseFailure, ParseError, PARSER_ERROR_CODES, create_parse_error
)


class ParseErrorTestCase(unittest.TestCase):

    def assertParseError(self, source: str, kind: ErrorKind, offset: int = None) -> ParseError:
        with self.assertRaises(ParseError) as ctx:
            parse_string(source)
        self.assertEqual(ctx.exception.kind, kind)
        if offset is not None:
            self.assertEqual(ctx.exception.offset, offset)
        return ctx.exception


class TestHardFailures(ParseErrorTestCase):
    """Each committed production reports its own failure kind."""

    def test_unclosed_quote(self):
        self.assertParseError('"abc', ErrorKind.UNCLOSED_QUOTE, offset=4)

    def test_unclosed_quote_in_block(self):
        self.assertParseError('func f() -> t { "x }', ErrorKind.UNCLOSED_QUOTE)

    def test_declaration_with_unclosed_params(self):
        self.assertParseError("func f(x: int -> int { x }", ErrorKind.UNCLOSED_PARENS, offset=6)

    def test_declaration_without_params(self):
        self.assertParseError("func f -> int { x }", ErrorKind.UNCLOSED_PARENS)

    def test_call_with_unclosed_args(self):
        self.assertParseError("f(1, 2", ErrorKind.UNCLOSED_PARENS, offset=1)

    def test_declaration_without_arrow(self):
        self.assertParseError("func f(x: int) int { x }", ErrorKind.EXPECTED_RETURN, offset=15)

    def test_branch_without_arrow(self):
        self.assertParseError("match x { 1 { 2 } }", ErrorKind.EXPECTED_RETURN)

    def test_declaration_is_not_a_pattern(self):
        # 'func' reads as a bare symbol in pattern position
        self.assertParseError(
            "match x { func g() -> t { 1 } -> { 2 } }", ErrorKind.EXPECTED_RETURN
        )

    def test_declaration_without_block(self):
        self.assertParseError("func f() -> int x", ErrorKind.EXPECTED_BLOCK)

    def test_match_without_block(self):
        self.assertParseError("match x 1", ErrorKind.EXPECTED_BLOCK)

    def test_branch_without_block(self):
        self.assertParseError("match x { 1 -> 2 }", ErrorKind.EXPECTED_BLOCK)

    def test_unclosed_declaration_body(self):
        self.assertParseError("func f() -> int { x", ErrorKind.UNCLOSED_CURLIES)

    def test_unclosed_match(self):
        self.assertParseError("match x { 1 -> { 2 }", ErrorKind.UNCLOSED_CURLIES)

    def test_block_holds_one_expression(self):
        self.assertParseError("func f() -> int { x y }", ErrorKind.UNCLOSED_CURLIES, offset=20)

    def test_branch_value_without_closing_brace(self):
        self.assertParseError("match x { 1 -> { 2 3 } }", ErrorKind.EXPECTED_BLOCK, offset=19)

    def test_leftover_text_before_match_close(self):
        self.assertParseError("match x { 1 -> { 2 } 3 }", ErrorKind.UNKNOWN_EXPRESSION, offset=21)


class TestNesting(ParseErrorTestCase):
    """Nesting beyond the interpreter stack is a diagnostic, not a crash."""

    def test_runaway_call_nesting(self):
        depth = 1000
        error = self.assertParseError(
            "f(" * depth + "1" + ")" * depth, ErrorKind.NESTING_TOO_DEEP, offset=0
        )
        self.assertEqual(error.diagnostic.code, "P007")

    def test_runaway_nesting_after_valid_expression(self):
        depth = 1000
        parser = Parser("x\n" + "g(" * depth + ")" * depth)
        expressions = parser.iter_expressions()
        self.assertEqual(next(expressions), Symbol("x"))
        with self.assertRaises(ParseError) as ctx:
            next(expressions)
        self.assertEqual(ctx.exception.kind, ErrorKind.NESTING_TOO_DEEP)
        self.assertEqual(ctx.exception.offset, 2)

    def test_recursion_limit_restored(self):
        limit = sys.getrecursionlimit()
        with self.assertRaises(ParseError):
            parse_string("f(" * 1000 + ")" * 1000)
        self.assertEqual(sys.getrecursionlimit(), limit)


class TestUnknownExpression(ParseErrorTestCase):
    """Input that no production accepts."""

    def test_parenthesised_grouping(self):
        self.assertParseError("(1 + 2) * 3", ErrorKind.UNKNOWN_EXPRESSION, offset=0)

    def test_missing_right_operand(self):
        self.assertParseError("1 +", ErrorKind.UNKNOWN_EXPRESSION, offset=3)

    def test_missing_operand_inside_call(self):
        self.assertParseError("f(1 + )", ErrorKind.UNKNOWN_EXPRESSION, offset=6)

    def test_missing_comma(self):
        self.assertParseError("f(1 2)", ErrorKind.UNKNOWN_EXPRESSION, offset=4)

    def test_leading_operator(self):
        self.assertParseError("* 2", ErrorKind.UNKNOWN_EXPRESSION, offset=0)

    def test_func_without_name(self):
        self.assertParseError("func(1)", ErrorKind.UNKNOWN_EXPRESSION)

    def test_parameter_without_colon(self):
        self.assertParseError("func f(x int) -> int { x }", ErrorKind.UNKNOWN_EXPRESSION)

    def test_parameter_without_type(self):
        self.assertParseError("func f(x:) -> int { x }", ErrorKind.UNKNOWN_EXPRESSION)

    def test_missing_return_type(self):
        self.assertParseError("func f() -> { x }", ErrorKind.UNKNOWN_EXPRESSION)

    def test_match_without_scrutinee(self):
        self.assertParseError("match { 1 -> { 2 } }", ErrorKind.UNKNOWN_EXPRESSION)

    def test_empty_block(self):
        self.assertParseError("func f() -> int { }", ErrorKind.UNKNOWN_EXPRESSION)

    def test_stray_character_after_expressions(self):
        self.assertParseError("1 2 )", ErrorKind.UNKNOWN_EXPRESSION, offset=4)


class TestSoftFailures(unittest.TestCase):
    """Grammar rules that do not apply soft-fail and restore the cursor."""

    def test_number_rule_on_symbol(self):
        parser = Parser("abc")
        result = parser._parse_number()
        self.assertIsInstance(result, ParseFailure)
        self.assertTrue(result.is_soft)
        self.assertEqual(parser.cursor.position, 0)

    def test_string_rule_on_number(self):
        parser = Parser("12")
        self.assertTrue(parser._parse_string().is_soft)
        self.assertEqual(parser.cursor.position, 0)

    def test_match_rule_on_longer_identifier(self):
        parser = Parser("matcher")
        self.assertTrue(parser._parse_match().is_soft)
        self.assertEqual(parser.cursor.position, 0)

    def test_fn_decl_rule_on_call(self):
        parser = Parser("functor(1)")
        self.assertTrue(parser._parse_fn_decl().is_soft)
        self.assertEqual(parser.cursor.position, 0)

    def test_first_of_restores_between_alternatives(self):
        parser = Parser("x")
        result = parser._first_of(parser._parse_number, parser._parse_call_or_symbol)
        self.assertEqual(result, Symbol("x"))

    def test_first_of_all_soft(self):
        parser = Parser("+")
        result = parser._first_of(parser._parse_number, parser._parse_string)
        self.assertEqual(result, ParseFailure(ErrorKind.FAIL_TRY, 0))
        self.assertEqual(parser.cursor.position, 0)

    def test_hard_failure_stops_alternatives(self):
        parser = Parser('"open')
        result = parser._first_of(parser._parse_string, parser._parse_call_or_symbol)
        self.assertTrue(result.is_hard)
        self.assertEqual(result.kind, ErrorKind.UNCLOSED_QUOTE)

    def test_arrow_is_not_subtraction(self):
        parser = Parser("x -> y")
        self.assertEqual(parser._parse_operation(), Symbol("x"))
        self.assertTrue(parser.cursor.peek_literal("->"))


class TestParseErrorReporting(unittest.TestCase):
    """Diagnostics carried by ParseError."""

    def test_codes_cover_every_hard_kind(self):
        hard_kinds = [kind for kind in ErrorKind if not kind.is_soft]
        self.assertEqual(set(PARSER_ERROR_CODES), set(hard_kinds))
        self.assertEqual(len(set(PARSER_ERROR_CODES.values())), len(hard_kinds))

    def test_diagnostic_fields(self):
        with self.assertRaises(ParseError) as ctx:
            parse_string("1 +", "calc.efp")
        diagnostic = ctx.exception.diagnostic
        self.assertEqual(diagnostic.code, "P002")
        self.assertEqual(diagnostic.filename, "calc.efp")
        self.assertEqual(diagnostic.offset, 3)
        self.assertEqual(diagnostic.message, "Unknown expression")

    def test_diagnostic_text(self):
        with self.assertRaises(ParseError) as ctx:
            parse_string('"abc', "s.efp")
        text = str(ctx.exception)
        self.assertTrue(text.startswith("ERROR[P001]: Unclosed string literal\n"))
        self.assertIn("  --> s.efp at offset 4\n", text)
        self.assertIn("end of input", text)

    def test_help_shows_upcoming_text(self):
        with self.assertRaises(ParseError) as ctx:
            parse_string("func f() -> int x + 1")
        self.assertIn("'x + 1'", ctx.exception.diagnostic.help_text)

    def test_soft_failure_reported_as_unknown_expression(self):
        error = create_parse_error(ParseFailure(ErrorKind.FAIL_TRY, 2), "a )", "<string>")
        self.assertEqual(error.kind, ErrorKind.UNKNOWN_EXPRESSION)
        self.assertEqual(error.diagnostic.code, "P002")

    def test_earlier_expressions_are_yielded_before_error(self):
        parser = Parser('1\nx\n"oops')
        seen = []
        with self.assertRaises(ParseError) as ctx:
            for expression in parser.iter_expressions():
                seen.append(expression)
        self.assertEqual(seen, [Number(1), Symbol("x")])
        self.assertEqual(ctx.exception.kind, ErrorKind.UNCLOSED_QUOTE)


if __name__ == '__main__':
    unittest.main()
