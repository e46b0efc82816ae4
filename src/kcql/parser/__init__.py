"""KCQL Parser module - Lexer, grammar, AST nodes, and Lark parser."""

from kcql.parser.ast import (
    KCQLQuery,
    StatementType,
    Comparator,
    FieldRef,
    Condition,
    WhereClause,
    ReturnItem,
    ReturnClause,
    Assignment,
)
from kcql.parser.lexer import Lexer, LexerState, Token, TokenType, tokenize
from kcql.parser.parser import KCQLParser, parse

__all__ = [
    "KCQLParser",
    "parse",
    "Lexer",
    "LexerState",
    "Token",
    "TokenType",
    "tokenize",
    "KCQLQuery",
    "StatementType",
    "Comparator",
    "FieldRef",
    "Condition",
    "WhereClause",
    "ReturnItem",
    "ReturnClause",
    "Assignment",
]
