"""Layered option resolution for the built-in body parsers.

Each built-in format (``json``, ``urlencoded``, ``text``) gets its effective
options from three layers, highest precedence first:

1. the format's own sub-object (``options.json``, ``options.urlencoded``,
   ``options.text``);
2. the shared, format-agnostic fields of :class:`~reqbody.models.BodyParserOptions`;
3. the hard-coded defaults in :data:`DEFAULTS`.

Only the fields the format's effective model declares are copied from the
first two layers, so a format sub-object never leaks into another format and
a JSON-only flag never reaches the text parser.
"""

from __future__ import annotations

import re
from typing import Any, Union

from reqbody.exceptions import ConfigError
from reqbody.models import (
    BodyParserOptions,
    JsonOptions,
    ParserFormat,
    TextOptions,
    UrlencodedOptions,
)

DEFAULT_LIMIT = "1mb"
"""Default maximum body size for every built-in parser."""

EffectiveOptions = Union[JsonOptions, UrlencodedOptions, TextOptions]

_MODELS: dict[str, type[EffectiveOptions]] = {
    "json": JsonOptions,
    "urlencoded": UrlencodedOptions,
    "text": TextOptions,
}

DEFAULTS: dict[str, dict[str, Any]] = {
    "json": {"type": ["application/json", "+json"], "limit": DEFAULT_LIMIT},
    "urlencoded": {
        "type": "application/x-www-form-urlencoded",
        "extended": True,
        "limit": DEFAULT_LIMIT,
    },
    "text": {"type": "text/*", "limit": DEFAULT_LIMIT},
}

_UNITS = {
    "b": 1,
    "kb": 1 << 10,
    "mb": 1 << 20,
    "gb": 1 << 30,
    "tb": 1 << 40,
    "pb": 1 << 50,
}
_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(kb|mb|gb|tb|pb|b)?\s*$", re.IGNORECASE)


def parse_size_limit(value: Union[int, str]) -> int:
    """Convert a size limit to a number of bytes.

    Units are 1024-based and case-insensitive; a bare number means bytes.

    Args:
        value: An integer byte count or a string such as ``"100kb"`` or
            ``"1.5mb"``.

    Returns:
        The limit in bytes.

    Raises:
        ConfigError: If *value* is negative or not a recognised size.

    Example::

        >>> parse_size_limit("1mb")
        1048576
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid size limit: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ConfigError(f"Invalid size limit: {value!r}")
        return value

    match = _SIZE_RE.match(str(value))
    if match is None:
        raise ConfigError(f"Invalid size limit: {value!r}")
    number, unit = match.groups()
    return int(float(number) * _UNITS[(unit or "b").lower()])


def get_parser_options(fmt: ParserFormat, options: BodyParserOptions) -> dict[str, Any]:
    """Merge the shared and per-format options for *fmt*, without defaults.

    Returns:
        A dict holding only the fields declared by the format's effective
        model that are set in either layer; per-format values win.
    """
    allowed = _MODELS[fmt].model_fields.keys()
    merged: dict[str, Any] = {}
    for layer in (options, options.for_format(fmt)):
        if layer is None:
            continue
        for key, value in layer.model_dump(exclude_none=True).items():
            if key in allowed:
                merged[key] = value
    return merged


def resolve_parser_options(
    fmt: ParserFormat, options: BodyParserOptions | None = None
) -> EffectiveOptions:
    """Compute the effective options of the built-in *fmt* parser.

    Args:
        fmt: ``"json"``, ``"urlencoded"`` or ``"text"``.
        options: Shared and per-format options; ``None`` means defaults only.

    Returns:
        The format's effective options model, with ``limit`` in bytes and
        ``type`` as a list of patterns.

    Raises:
        ConfigError: If *fmt* is unknown or an option value is invalid.
    """
    if fmt not in _MODELS:
        raise ConfigError(f"Unknown body parser format: {fmt}")

    effective = {**DEFAULTS[fmt], **get_parser_options(fmt, options or BodyParserOptions())}
    effective["limit"] = parse_size_limit(effective["limit"])
    if isinstance(effective["type"], str):
        effective["type"] = [effective["type"]]

    try:
        return _MODELS[fmt].model_validate(effective)
    except ValueError as exc:
        raise ConfigError(f"Invalid {fmt} parser options: {exc}") from exc
