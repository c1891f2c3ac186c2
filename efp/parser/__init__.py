"""
EFP Parser Package

Implements a backtracking recursive descent parser for the EFP language with
lexing fused into the grammar rules.

Key Features:
- Ordered choice with explicit soft/hard failure results instead of exceptions
- Two-level precedence climbing for + - and * /
- Function declarations, calls and match expressions
- Immutable, structurally comparable AST nodes

Author: xwest
"""

from .ast_nodes import *
from .parser import (
    Parser, Precedence, parse_string, parse_file, raised_recursion_limit
)
from .errors import ErrorKind, ParseFailure, ParseError, Diagnostic

__all__ = [
    # Core parser
    "Parser", "Precedence", "parse_string", "parse_file", "raised_recursion_limit",

    # AST nodes
    "AST", "ASTNode", "ASTNodeType", "ASTVisitor", "Program", "Expression",
    "Number", "String", "Symbol", "Operation", "FnCall", "FnDecl",
    "Parameter", "Match", "MatchBranch",

    # Error handling
    "ErrorKind", "ParseFailure", "ParseError", "Diagnostic",
]
