"""Decoding of ``application/x-www-form-urlencoded`` payloads.

Two modes are supported:

* **simple** -- a flat ``dict``; a key repeated in the payload maps to a
  list of its values (``a=1&a=2`` -> ``{"a": ["1", "2"]}``).
* **extended** -- bracket syntax builds nested data:
  ``user[name]=x`` -> ``{"user": {"name": "x"}}``,
  ``tags[]=a&tags[]=b`` -> ``{"tags": ["a", "b"]}``,
  ``rows[1]=b&rows[0]=a`` -> ``{"rows": ["a", "b"]}``.

All leaf values are strings; callers must coerce them.
"""

from __future__ import annotations

import re
from http import HTTPStatus
from typing import Any, Union
from urllib.parse import parse_qsl

from reqbody.exceptions import BodyParsingError

ARRAY_INDEX_LIMIT = 100
"""Bracket indices above this are treated as object keys, not list positions."""

_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")

_Key = Union[int, str]


def count_parameters(body: str, limit: int) -> int:
    """Return the number of ``&``-separated parameters in *body*.

    Raises:
        BodyParsingError: 413 ``parameters.too.many`` when the count exceeds
            *limit*.
    """
    count = body.count("&") + 1
    if count > limit:
        raise BodyParsingError(
            "too many parameters",
            status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
            error_type="parameters.too.many",
        )
    return count


def _split_key(key: str) -> list[_Key]:
    """Split ``a[b][]`` into ``["a", "b", ""]``, mapping small digit segments to ints."""
    bracket = key.find("[")
    if bracket <= 0:
        return [key]

    segments: list[_Key] = [key[:bracket]]
    position = bracket
    for match in _SEGMENT_RE.finditer(key, bracket):
        if match.start() != position:
            return [key]
        segment = match.group(1)
        if segment.isdigit() and int(segment) <= ARRAY_INDEX_LIMIT:
            segments.append(int(segment))
        else:
            segments.append(segment)
        position = match.end()

    # anything not made of bracket groups is a literal key
    if position != len(key):
        return [key]
    return segments


def _next_index(node: dict[_Key, Any]) -> int:
    indices = [k for k in node if isinstance(k, int)]
    return max(indices) + 1 if indices else 0


def _as_node(value: Any) -> dict[_Key, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        return dict(enumerate(value))
    return {0: value}


def _assign(node: dict[_Key, Any], segments: list[_Key], value: str) -> None:
    key = segments[0]
    if key == "":
        key = _next_index(node)

    if len(segments) == 1:
        if key in node:
            existing = node[key]
            node[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            node[key] = value
        return

    child = node.get(key)
    child = {} if child is None else _as_node(child)
    node[key] = child
    _assign(child, segments[1:], value)


def _finalize(value: Any) -> Any:
    if isinstance(value, list):
        return [_finalize(item) for item in value]
    if not isinstance(value, dict):
        return value
    if value and all(isinstance(k, int) for k in value):
        return [_finalize(value[k]) for k in sorted(value)]
    return {str(k): _finalize(v) for k, v in value.items()}


def parse_urlencoded(body: str, extended: bool = True) -> dict[str, Any]:
    """Decode an url-encoded form body.

    Args:
        body: The decoded body text.
        extended: Build nested data from bracket syntax.

    Returns:
        A dict of the form fields; leaves are strings.
    """
    pairs = parse_qsl(body, keep_blank_values=True)
    if not extended:
        flat: dict[str, Any] = {}
        for key, value in pairs:
            if key not in flat:
                flat[key] = value
            elif isinstance(flat[key], list):
                flat[key].append(value)
            else:
                flat[key] = [flat[key], value]
        return flat

    result: dict[_Key, Any] = {}
    for key, value in pairs:
        if key:
            _assign(result, _split_key(key), value)
    return {str(k): _finalize(v) for k, v in result.items()}
