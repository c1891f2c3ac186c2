"""
Abstract Syntax Tree node definitions for EFP.

Defines the closed set of expression node types the parser produces.
Nodes are immutable (frozen dataclasses holding tuples), compare
structurally, and support the visitor pattern.

Author: xwest
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, List, Tuple

from ..lexer.tokens import Operator


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"

    # Literals
    NUMBER = "Number"
    STRING = "String"
    SYMBOL = "Symbol"

    # Compound expressions
    OPERATION = "Operation"
    FN_CALL = "FnCall"
    FN_DECL = "FnDecl"
    MATCH = "Match"

    # Non-expression parts
    PARAMETER = "Parameter"
    MATCH_BRANCH = "MatchBranch"


class ASTVisitor(ABC):
    """Abstract visitor interface for traversing AST nodes."""

    @abstractmethod
    def visit(self, node: 'ASTNode') -> Any:
        """Visit a generic AST node."""
        pass


class ASTNode(ABC):
    """Base class for all AST nodes."""

    node_type: ClassVar[ASTNodeType]

    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes, in source order."""
        pass


class Expression(ASTNode):
    """Base class for expressions."""
    pass


# ============================================================================
# Literals
# ============================================================================

@dataclass(frozen=True)
class Number(Expression):
    """Decimal number literal. Always stored as a float."""
    value: float

    node_type: ClassVar[ASTNodeType] = ASTNodeType.NUMBER

    def children(self) -> List[ASTNode]:
        return []


@dataclass(frozen=True)
class String(Expression):
    """Double-quoted string literal (no escape sequences)."""
    value: str

    node_type: ClassVar[ASTNodeType] = ASTNodeType.STRING

    def children(self) -> List[ASTNode]:
        return []


@dataclass(frozen=True)
class Symbol(Expression):
    """Bare identifier."""
    name: str

    node_type: ClassVar[ASTNodeType] = ASTNodeType.SYMBOL

    def children(self) -> List[ASTNode]:
        return []


# ============================================================================
# Compound expressions
# ============================================================================

@dataclass(frozen=True)
class Operation(Expression):
    """Binary arithmetic operation. Always exactly two operands."""
    left: Expression
    operator: Operator
    right: Expression

    node_type: ClassVar[ASTNodeType] = ASTNodeType.OPERATION

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


@dataclass(frozen=True)
class FnCall(Expression):
    """Call of a named function: name(arg, ...)."""
    name: str
    args: Tuple[Expression, ...] = ()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.FN_CALL

    def children(self) -> List[ASTNode]:
        return list(self.args)


@dataclass(frozen=True)
class Parameter(ASTNode):
    """Function parameter with its type name (name: type)."""
    name: str
    type_name: str

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PARAMETER

    def children(self) -> List[ASTNode]:
        return []


@dataclass(frozen=True)
class FnDecl(Expression):
    """Function declaration. The body is a single expression."""
    name: str
    params: Tuple[Parameter, ...]
    return_type: str
    body: Expression

    node_type: ClassVar[ASTNodeType] = ASTNodeType.FN_DECL

    @property
    def arity(self) -> int:
        return len(self.params)

    def children(self) -> List[ASTNode]:
        return list(self.params) + [self.body]


@dataclass(frozen=True)
class MatchBranch(ASTNode):
    """One arm of a match: pattern -> { value }."""
    pattern: Expression
    value: Expression

    node_type: ClassVar[ASTNodeType] = ASTNodeType.MATCH_BRANCH

    def children(self) -> List[ASTNode]:
        return [self.pattern, self.value]


@dataclass(frozen=True)
class Match(Expression):
    """Match expression. Zero branches is legal."""
    scrutinee: Expression
    branches: Tuple[MatchBranch, ...] = ()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.MATCH

    def children(self) -> List[ASTNode]:
        return [self.scrutinee] + list(self.branches)


# ============================================================================
# Top-level
# ============================================================================

@dataclass(frozen=True)
class Program(ASTNode):
    """Root node: the top-level expressions of one source text, in order."""
    items: Tuple[Expression, ...] = ()
    filename: str = field(default="<unknown>", compare=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROGRAM

    def children(self) -> List[ASTNode]:
        return list(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


# Alias for the main AST type
AST = Program
