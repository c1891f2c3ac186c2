"""
AST printers for EFP.

PrefixPrinter renders the canonical prefix form the command line prints:
    (+ 1 (* 2 3))
    (add 1 2)
    (func add(a: int, b: int) -> int (+ a b))
    (match x (1 -> 2) (2 -> 3))

SourcePrinter renders EFP surface syntax that the parser reads back into the
same tree. The grammar has no grouping parentheses, so only trees shaped the
way the parser builds them can be written; anything else raises ValueError.

Author: xwest
"""

from decimal import Decimal

from ..parser.ast_nodes import (
    ASTNode, ASTVisitor, Expression, Number, String, Symbol, Operation, FnCall,
    FnDecl, Parameter, Match, MatchBranch, Program
)
from ..lexer.tokens import Operator, ARROW


def format_number(value: float) -> str:
    """Shortest positional decimal for a number literal (never an exponent)."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = format(Decimal(text), 'f')
    return text


def format_params(params) -> str:
    return ", ".join(f"{param.name}: {param.type_name}" for param in params)


def _left_spine(node: Operation):
    """
    Split a left-nested operation chain without recursing.

    Returns the operations from the outermost inward, and the first
    non-operation left operand. The parser folds `a + b + c + ...` to the
    left, so long chains are deep only along this spine.
    """
    spine = []
    while isinstance(node, Operation):
        spine.append(node)
        node = node.left
    return spine, node


class PrefixPrinter(ASTVisitor):
    """Canonical prefix-notation printer."""

    def visit(self, node: ASTNode) -> str:
        if isinstance(node, Number):
            return format_number(node.value)
        elif isinstance(node, String):
            return f'"{node.value}"'
        elif isinstance(node, Symbol):
            return node.name
        elif isinstance(node, Operation):
            spine, innermost = _left_spine(node)
            text = self.visit(innermost)
            for operation in reversed(spine):
                text = f"({operation.operator.symbol} {text} {self.visit(operation.right)})"
            return text
        elif isinstance(node, FnCall):
            return "(" + " ".join([node.name] + [self.visit(arg) for arg in node.args]) + ")"
        elif isinstance(node, FnDecl):
            return (f"(func {node.name}({format_params(node.params)}) "
                    f"{ARROW} {node.return_type} {self.visit(node.body)})")
        elif isinstance(node, Match):
            parts = [self.visit(node.scrutinee)]
            parts.extend(self.visit(branch) for branch in node.branches)
            return "(match " + " ".join(parts) + ")"
        elif isinstance(node, MatchBranch):
            return f"({self.visit(node.pattern)} {ARROW} {self.visit(node.value)})"
        elif isinstance(node, Parameter):
            return f"{node.name}: {node.type_name}"
        elif isinstance(node, Program):
            return "\n".join(self.visit(item) for item in node.items)

        raise TypeError(f"Cannot print {type(node).__name__}")


# Binding strength of a node when written in source form
_LEVEL_DECL = -1
_LEVEL_TERM = 0
_LEVEL_FACTOR = 1
_LEVEL_ATOM = 2

_OPERATOR_LEVELS = {
    Operator.ADD: _LEVEL_TERM,
    Operator.SUB: _LEVEL_TERM,
    Operator.MUL: _LEVEL_FACTOR,
    Operator.DIV: _LEVEL_FACTOR,
}


def _source_level(node: Expression) -> int:
    if isinstance(node, Operation):
        return _OPERATOR_LEVELS[node.operator]
    if isinstance(node, FnDecl):
        return _LEVEL_DECL
    return _LEVEL_ATOM


class SourcePrinter(ASTVisitor):
    """Printer for re-parseable EFP source text."""

    def visit(self, node: ASTNode) -> str:
        if isinstance(node, Number):
            return format_number(node.value)
        elif isinstance(node, String):
            return f'"{node.value}"'
        elif isinstance(node, Symbol):
            return node.name
        elif isinstance(node, Operation):
            spine, innermost = _left_spine(node)
            for outer, inner in zip(spine, spine[1:]):
                if _OPERATOR_LEVELS[inner.operator] < _OPERATOR_LEVELS[outer.operator]:
                    raise _ungroupable(inner)

            text = self._operand(innermost, _OPERATOR_LEVELS[spine[-1].operator])
            for operation in reversed(spine):
                level = _OPERATOR_LEVELS[operation.operator]
                right = self._operand(operation.right, level + 1)
                text = f"{text} {operation.operator.symbol} {right}"
            return text
        elif isinstance(node, FnCall):
            args = ", ".join(self.visit(arg) for arg in node.args)
            return f"{node.name}({args})"
        elif isinstance(node, FnDecl):
            return (f"func {node.name}({format_params(node.params)}) "
                    f"{ARROW} {node.return_type} {{ {self.visit(node.body)} }}")
        elif isinstance(node, Match):
            branches = ", ".join(self.visit(branch) for branch in node.branches)
            if not branches:
                return f"match {self.visit(node.scrutinee)} {{ }}"
            return f"match {self.visit(node.scrutinee)} {{ {branches} }}"
        elif isinstance(node, MatchBranch):
            pattern = self._operand(node.pattern, _LEVEL_ATOM)
            return f"{pattern} {ARROW} {{ {self.visit(node.value)} }}"
        elif isinstance(node, Parameter):
            return f"{node.name}: {node.type_name}"
        elif isinstance(node, Program):
            return "\n".join(self.visit(item) for item in node.items)

        raise TypeError(f"Cannot print {type(node).__name__}")

    def _operand(self, node: Expression, min_level: int) -> str:
        """Render node where the grammar only accepts min_level or tighter."""
        if _source_level(node) < min_level:
            raise _ungroupable(node)
        return self.visit(node)


def _ungroupable(node: Expression) -> ValueError:
    return ValueError(
        f"{type(node).__name__} cannot appear here without grouping, "
        "which EFP does not have"
    )


def print_expr(node: ASTNode) -> str:
    """Canonical prefix form of a node."""
    return node.accept(PrefixPrinter())


def print_program(program: Program) -> str:
    """Prefix form of every top-level expression, one per line."""
    return program.accept(PrefixPrinter())


def format_source(node: ASTNode) -> str:
    """
    Render a node as EFP source.

    Raises:
        ValueError: If the tree needs grouping parentheses to be written
    """
    return node.accept(SourcePrinter())
