"""Media type normalization and pattern matching.

A single matching function, :func:`match_media_type`, is used for both
selection passes of the resolver:

1. the request's ``Content-Type`` against each media type declared in the
   operation's ``requestBody.content``;
2. the matched media type against each parser's supported patterns.

Supported pattern forms:

* exact -- ``application/json``
* subtype wildcard -- ``text/*``
* type wildcard -- ``*/json``, ``*/*``
* suffix class -- ``application/*+json``, ``*/*+json`` (shorthand ``+json``)

A pattern without ``/`` (other than the ``+suffix`` shorthand) never matches.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

DEFAULT_CONTENT_TYPE = "application/json"
"""Content type assumed when a request carries no ``Content-Type`` header."""

# RFC 7231 token characters
_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_MEDIA_TYPE_RE = re.compile(rf"^({_TOKEN})/({_TOKEN})$")
_PARAM_RE = re.compile(
    rf";\s*({_TOKEN})\s*=\s*(\"(?:[^\"\\]|\\.)*\"|{_TOKEN})"
)


def parse_media_type(value: str) -> tuple[str, str, dict[str, str]]:
    """Split a ``Content-Type`` value into type, subtype and parameters.

    Type, subtype and parameter names are lowercased; quoted parameter
    values are unquoted.

    Args:
        value: A header value such as ``"application/json; charset=UTF-8"``.

    Returns:
        A ``(type, subtype, params)`` tuple.

    Raises:
        ValueError: If *value* is not a syntactically valid media type.

    Example::

        >>> parse_media_type("text/plain; charset=latin1")
        ('text', 'plain', {'charset': 'latin1'})
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid media type: {value!r}")

    base, sep, rest = value.partition(";")
    match = _MEDIA_TYPE_RE.match(base.strip())
    if match is None:
        raise ValueError(f"Invalid media type: {value!r}")

    params: dict[str, str] = {}
    if sep:
        for name, raw in _PARAM_RE.findall(";" + rest):
            if raw.startswith('"'):
                raw = re.sub(r"\\(.)", r"\1", raw[1:-1])
            params[name.lower()] = raw

    return match.group(1).lower(), match.group(2).lower(), params


def normalize_media_type(value: Optional[str]) -> Optional[str]:
    """Return ``type/subtype`` in lowercase without parameters, or ``None`` if invalid."""
    if not value:
        return None
    try:
        type_, subtype, _ = parse_media_type(value)
    except ValueError:
        return None
    return f"{type_}/{subtype}"


def _normalize_pattern(pattern: str) -> Optional[str]:
    pattern = pattern.strip().lower()
    if pattern.startswith("+"):
        return f"*/*{pattern}"
    if "/" not in pattern:
        return None
    return pattern


def _mime_match(expected: str, actual: str) -> bool:
    expected_parts = expected.split("/")
    actual_parts = actual.split("/")
    if len(expected_parts) != 2 or len(actual_parts) != 2:
        return False

    expected_type, expected_subtype = expected_parts
    actual_type, actual_subtype = actual_parts

    if expected_type != "*" and expected_type != actual_type:
        return False

    if expected_subtype.startswith("*+"):
        return actual_subtype.endswith(expected_subtype[1:])

    return expected_subtype == "*" or expected_subtype == actual_subtype


def match_media_type(candidate: Optional[str], pattern: str) -> Optional[str]:
    """Match a concrete media type against a declared pattern.

    Args:
        candidate: A concrete media type, possibly with parameters
            (``"application/json; charset=utf-8"``).
        pattern: A media type pattern (see module docstring).

    Returns:
        ``None`` when there is no match. Otherwise, for wildcard and suffix
        patterns, the normalized candidate (``"text/plain"`` for ``text/*``);
        for exact patterns, the pattern as given.
    """
    actual = normalize_media_type(candidate)
    if actual is None or not pattern:
        return None

    expected = _normalize_pattern(pattern)
    if expected is None or not _mime_match(expected, actual):
        return None

    if pattern.startswith("+") or "*" in pattern:
        return actual
    return pattern


def first_match(candidate: Optional[str], patterns: Iterable[str]) -> Optional[str]:
    """Return the result of :func:`match_media_type` for the first matching pattern."""
    for pattern in patterns:
        matched = match_media_type(candidate, pattern)
        if matched is not None:
            return matched
    return None


def get_header(headers: Mapping[str, Any], name: str) -> Optional[str]:
    """Look up a header case-insensitively.

    Starlette and httpx header mappings are already case-insensitive; plain
    dicts are scanned.
    """
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if isinstance(key, str) and key.lower() == lowered:
                value = candidate
                break
    if isinstance(value, bytes):
        value = value.decode("latin-1")
    return value


def get_content_type(request: Any) -> Optional[str]:
    """Return the raw ``Content-Type`` header of *request*, or ``None`` if absent or empty."""
    return get_header(request.headers, "content-type") or None


def get_charset(content_type: Optional[str]) -> Optional[str]:
    """Return the lowercased ``charset`` parameter of *content_type*, if any."""
    if not content_type:
        return None
    try:
        _, _, params = parse_media_type(content_type)
    except ValueError:
        return None
    charset = params.get("charset")
    return charset.lower() if charset else None
