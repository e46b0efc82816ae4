# -*- encoding: utf-8 -*-
"""
KCQL field paths over schemaless resource documents.

A field path is the dotted notation used in RETURN projections, WHERE
conditions, property blocks and relationship rules:

    metadata.name
    spec.template.spec.containers[0].image
    metadata.ownerReferences[].uid
    metadata.labels."app.kubernetes.io"
    spec.*

``[]`` and ``[*]`` fan out over list items, ``*`` fans out over mapping
values, ``[n]`` selects one list item and a double-quoted segment may
contain dots.
"""

import copy
import re
from typing import Any, Union


class _Wildcard:
    """Sentinel segment matching every item of a list or mapping."""

    def __repr__(self) -> str:
        return "*"


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


WILDCARD = _Wildcard()
MISSING = _Missing()

Segment = Union[str, int, _Wildcard]

_PART = re.compile(
    r'"(?P<quoted>[^"]*)"'
    r'|(?P<key>[^.\[\]"]+)'
    r'|\[(?P<index>[0-9]*|\*)\]'
    r'|(?P<dot>\.)'
)


def parse_path(path: str) -> list[Segment]:
    """
    Split a field path into segments.

    Args:
        path: Dotted field path

    Returns:
        List of str keys, int list indexes and WILDCARD markers

    Raises:
        ValueError: If the path is empty or malformed
    """
    segments: list[Segment] = []
    pos = 0
    need_key = True

    while pos < len(path):
        m = _PART.match(path, pos)
        if m is None:
            raise ValueError(f"Malformed field path {path!r} at offset {pos}")

        if m.group("dot") is not None:
            if need_key:
                raise ValueError(f"Empty segment in field path {path!r}")
            need_key = True
        elif m.group("index") is not None:
            if need_key:
                raise ValueError(f"Index without a key in field path {path!r}")
            index = m.group("index")
            segments.append(int(index) if index.isdigit() else WILDCARD)
        else:
            if not need_key:
                raise ValueError(f"Missing '.' in field path {path!r}")
            if m.group("quoted") is not None:
                segments.append(m.group("quoted"))
            else:
                key = m.group("key")
                segments.append(WILDCARD if key == "*" else key)
            need_key = False

        pos = m.end()

    if need_key:
        raise ValueError(f"Incomplete field path {path!r}")

    return segments


def _segments(path: Union[str, list[Segment]]) -> list[Segment]:
    return parse_path(path) if isinstance(path, str) else path


def extract(document: Any, path: Union[str, list[Segment]]) -> list[Any]:
    """
    Collect every value found at a path.

    Missing keys and out-of-range indexes contribute nothing, so the
    result is empty when the path does not exist in the document.
    """
    values = [document]
    for seg in _segments(path):
        found = []
        for value in values:
            if seg is WILDCARD:
                if isinstance(value, list):
                    found.extend(value)
                elif isinstance(value, dict):
                    found.extend(value.values())
            elif isinstance(seg, int):
                if isinstance(value, list) and -len(value) <= seg < len(value):
                    found.append(value[seg])
            elif isinstance(value, dict) and seg in value:
                found.append(value[seg])
        values = found
    return values


def project(document: Any, path: Union[str, list[Segment]]) -> Any:
    """
    Build the part of a document that lies on a path.

    The result keeps the document's nesting, e.g. projecting
    ``metadata.name`` yields ``{"metadata": {"name": ...}}``. Returns
    MISSING when nothing lies on the path.
    """
    return _project(document, _segments(path))


def _project(value: Any, segments: list[Segment]) -> Any:
    if not segments:
        return copy.deepcopy(value)

    head, rest = segments[0], segments[1:]

    if head is WILDCARD:
        if isinstance(value, list):
            items = [_project(item, rest) for item in value]
            return [item for item in items if item is not MISSING]
        if isinstance(value, dict):
            items = {k: _project(v, rest) for k, v in value.items()}
            return {k: v for k, v in items.items() if v is not MISSING}
        return MISSING

    if isinstance(head, int):
        if isinstance(value, list) and -len(value) <= head < len(value):
            sub = _project(value[head], rest)
            return MISSING if sub is MISSING else [sub]
        return MISSING

    if isinstance(value, dict) and head in value:
        sub = _project(value[head], rest)
        return MISSING if sub is MISSING else {head: sub}
    return MISSING


def merge(base: Any, other: Any) -> Any:
    """
    Deep-merge two projections of the same document.

    Mappings merge key by key and equal-length lists merge item by item;
    anything else resolves to ``other``.
    """
    if isinstance(base, dict) and isinstance(other, dict):
        merged = dict(base)
        for key, value in other.items():
            merged[key] = merge(merged[key], value) if key in merged else value
        return merged
    if isinstance(base, list) and isinstance(other, list) and len(base) == len(other):
        return [merge(a, b) for a, b in zip(base, other)]
    return other


def set_path(document: dict, path: Union[str, list[Segment]], value: Any) -> dict:
    """
    Assign a value at a path, creating intermediate mappings.

    Only plain keys are supported; list indexes and wildcards cannot be
    assigned through.

    Raises:
        ValueError: If the path contains an index or wildcard, or crosses
            a non-mapping value
    """
    segments = _segments(path)
    for seg in segments:
        if not isinstance(seg, str):
            raise ValueError(f"Cannot assign through {seg!r} in field path")

    target = document
    for key in segments[:-1]:
        child = target.setdefault(key, {})
        if not isinstance(child, dict):
            raise ValueError(f"Cannot assign below non-mapping field {key!r}")
        target = child
    target[segments[-1]] = value
    return document
