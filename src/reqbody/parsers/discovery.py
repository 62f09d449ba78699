"""Entry-point discovery of extension body parsers.

Third-party packages register parsers by declaring an entry point under the
``reqbody.body_parsers`` group in their ``pyproject.toml``::

    [project.entry-points."reqbody.body_parsers"]
    csv = "my_package.parsers:CsvBodyParser"

The entry point may name a :class:`~reqbody.parsers.base.BodyParser`
subclass (instantiated with no arguments), a zero-argument factory, or a
ready instance. Discovered parsers keep entry-point order and are placed
ahead of the built-ins by :class:`~reqbody.resolver.RequestBodyResolver`.
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Any

from reqbody.exceptions import PluginError
from reqbody.models import GlobalConfig
from reqbody.parsers.base import BodyParser

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "reqbody.body_parsers"
"""The entry-point group name used for extension parser discovery."""


def _select_entry_points() -> Any:
    entry_points = importlib.metadata.entry_points()
    # Python 3.10+ returns EntryPoints with select(); older versions a dict.
    if hasattr(entry_points, "select"):
        return entry_points.select(group=ENTRY_POINT_GROUP)
    return entry_points.get(ENTRY_POINT_GROUP, [])  # type: ignore[union-attr]


def instantiate_parser(name: str, target: Any) -> BodyParser:
    """Turn a loaded entry-point object into a :class:`BodyParser` instance.

    Raises:
        PluginError: If *target* is neither a parser nor produces one.
    """
    parser = target
    if not isinstance(parser, BodyParser):
        if not callable(parser):
            raise PluginError(f"Body parser '{name}' is not callable")
        parser = parser()
    if not isinstance(parser, BodyParser):
        raise PluginError(
            f"Body parser '{name}' did not produce a BodyParser (got {type(parser).__name__})"
        )
    return parser


def discover_parsers(config: GlobalConfig) -> list[BodyParser]:
    """Discover and load extension parsers via Python entry points.

    The *enabled* and *disabled* lists in ``config.plugins`` act as an
    explicit allowlist/blocklist of entry-point names. When *enabled* is
    non-empty only those parsers are loaded; otherwise every discovered
    parser not in *disabled* is loaded.

    Args:
        config: The global configuration holding the plugin lists.

    Returns:
        The loaded parsers in entry-point order. Entries that fail to load
        are logged as warnings and skipped.
    """
    parsers: list[BodyParser] = []
    enabled_set = set(config.plugins.enabled)
    disabled_set = set(config.plugins.disabled)

    for ep in _select_entry_points():
        name = ep.name

        if enabled_set and name not in enabled_set:
            logger.debug("Body parser '%s' not in enabled list, skipping", name)
            continue
        if name in disabled_set:
            logger.debug("Body parser '%s' is disabled, skipping", name)
            continue

        try:
            parser = instantiate_parser(name, ep.load())
        except Exception as exc:
            logger.warning("Failed to load body parser '%s': %s", name, exc)
            continue

        parsers.append(parser)
        logger.info("Loaded body parser '%s' (%s)", name, parser.display_name)

    return parsers
