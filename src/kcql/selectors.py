# -*- encoding: utf-8 -*-
"""
KCQL selectors - Kubernetes field and label selector expressions.

Selectors are ``key=value`` terms joined with commas (AND). Field
selector values escape ``\\``, ``,`` and ``=`` with a backslash; label
keys and values must follow the Kubernetes label syntax.
"""

import re
from typing import Any

from kcql.exceptions import SelectorError

_NAME = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")
_DNS_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")

MAX_NAME = 63
MAX_PREFIX = 253


def format_value(value: Any) -> str:
    """Render a scalar literal the way the API server prints it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise SelectorError(f"Selector value must be a scalar, got {type(value).__name__}", value=value)


def escape_field_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace("=", "\\=")


def field_term(key: str, value: Any) -> str:
    """Build one ``key=value`` field selector term."""
    return f"{key}={escape_field_value(format_value(value))}"


def validate_label_key(key: str) -> None:
    """
    Raises:
        SelectorError: If the key is not a valid label key
    """
    prefix, slash, name = key.rpartition("/")
    if slash and (not prefix or len(prefix) > MAX_PREFIX or not _DNS_SUBDOMAIN.match(prefix)):
        raise SelectorError(f"Invalid label key prefix in {key!r}", key=key)
    if len(name) > MAX_NAME or not _NAME.match(name):
        raise SelectorError(f"Invalid label key {key!r}", key=key)


def label_term(key: str, value: Any) -> str:
    """
    Build one ``key=value`` label selector term.

    Raises:
        SelectorError: If the key or value breaks the label syntax
    """
    validate_label_key(key)
    text = format_value(value)
    if text and (len(text) > MAX_NAME or not _NAME.match(text)):
        raise SelectorError(f"Invalid label value {text!r} for {key!r}", key=key, value=value)
    return f"{key}={text}"


def join(terms: list[str]) -> str:
    return ",".join(terms)


def parse_selector(selector: str) -> list[tuple[str, str, str]]:
    """
    Split a selector into (key, operator, value) terms.

    Understands ``=``, ``==`` and ``!=`` and backslash escapes in values.

    Raises:
        SelectorError: If a term has no operator
    """
    terms = []
    for raw in _split_unescaped(selector, ","):
        if not raw.strip():
            continue
        key, op, value = _split_term(raw)
        terms.append((key.strip(), op, _unescape(value)))
    return terms


def _split_unescaped(text: str, sep: str) -> list[str]:
    parts, current, escaped = [], [], False
    for ch in text:
        if escaped:
            current.append("\\" + ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == sep:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if escaped:
        current.append("\\")
    parts.append("".join(current))
    return parts


def _split_term(term: str) -> tuple[str, str, str]:
    escaped = False
    for i, ch in enumerate(term):
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == "!" and term[i + 1:i + 2] == "=":
            return term[:i], "!=", term[i + 2:]
        elif ch == "=":
            if term[i + 1:i + 2] == "=":
                return term[:i], "=", term[i + 2:]
            return term[:i], "=", term[i + 1:]
    raise SelectorError(f"Selector term {term!r} has no operator", key=term)


def _unescape(value: str) -> str:
    out, escaped = [], False
    for ch in value:
        if escaped:
            out.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        else:
            out.append(ch)
    return "".join(out)
