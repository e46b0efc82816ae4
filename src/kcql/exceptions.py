# -*- encoding: utf-8 -*-
"""
KCQL Exceptions.

Custom exceptions for query parsing, kind resolution and execution
against the cluster API.
"""

from typing import Optional


class KCQLError(Exception):
    """Base exception for all KCQL errors."""

    def to_dict(self) -> dict:
        """Convert exception to dictionary representation."""
        return {
            "error": type(self).__name__,
            "message": str(self),
        }


class QueryParseError(KCQLError):
    """
    Raised when a KCQL query cannot be parsed.

    Parsing stops at the first error; no partial AST is returned.

    Attributes:
        line: 1-based line of the offending token, if known
        column: 1-based column of the offending token, if known
        expected: Terminal names the grammar would have accepted
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        expected: Optional[list[str]] = None,
    ):
        if line is not None and column is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)
        self.line = line
        self.column = column
        self.expected = sorted(expected or [])

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({
            "line": self.line,
            "column": self.column,
            "expected": self.expected,
        })
        return d


class LexError(QueryParseError):
    """
    Raised when the query contains text the lexer cannot tokenize.

    Attributes:
        text: The illegal text; for an unterminated string, the rest of
            the input from the opening quote
    """

    def __init__(self, text: str, line: int, column: int):
        if len(text) > 1 and text[0] in "\"'":
            message = "Unterminated string literal"
        else:
            message = f"Illegal character {text!r}"
        super().__init__(message, line=line, column=column)
        self.text = text


class ResolutionError(KCQLError):
    """Raised when a resource-kind identifier matches nothing in discovery."""

    def __init__(self, identifier: str):
        super().__init__(f"Resource kind not found: {identifier}")
        self.identifier = identifier

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["identifier"] = self.identifier
        return d


class SelectorError(KCQLError):
    """Raised when a node property cannot be expressed as a selector."""

    def __init__(self, message: str, key: str = "", value: object = None):
        super().__init__(message)
        self.key = key
        self.value = value

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({"key": self.key, "value": self.value})
        return d


class APIError(KCQLError):
    """
    Raised when the cluster API rejects or fails a call.

    The gateway's own exception is chained as ``__cause__``; the executor
    adds the binding and kind the call was made for.

    Attributes:
        operation: Gateway operation name (list, create, patch, delete, discover)
        status: HTTP status reported by the gateway, if any
        binding: Query binding the call was issued for
        kind: Resource kind the call was issued for
    """

    def __init__(
        self,
        message: str,
        operation: str = "",
        status: Optional[int] = None,
        binding: str = "",
        kind: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.status = status
        self.binding = binding
        self.kind = kind

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(self.operation)
        if self.kind:
            context.append(self.kind)
        if self.binding:
            context.append(f"binding {self.binding}")
        if self.status is not None:
            context.append(f"status {self.status}")
        if not context:
            return self.message
        return f"{self.message} [{', '.join(context)}]"

    def with_context(self, binding: str = "", kind: str = "") -> "APIError":
        """Fill in binding/kind context unless already set, returning self."""
        self.binding = self.binding or binding
        self.kind = self.kind or kind
        return self

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({
            "operation": self.operation,
            "status": self.status,
            "binding": self.binding,
            "kind": self.kind,
        })
        return d


class MarshalError(KCQLError):
    """Raised when a query result cannot be serialized."""
    pass


class QueryExecutionError(KCQLError):
    """Raised when query execution fails for reasons other than the API."""
    pass
