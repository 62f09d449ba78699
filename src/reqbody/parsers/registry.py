"""Ordered, immutable registry of body parsers.

The registry holds an immutable snapshot of the parser list taken at
construction time; a different set of parsers needs a new registry.
Selection is first-match-wins in registration order, which is why extension
parsers are placed before the built-ins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Optional, Union

from reqbody.exceptions import PluginError
from reqbody.parsers.base import BodyParser

logger = logging.getLogger(__name__)

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


class ParserRegistry:
    """Priority-ordered collection of :class:`~reqbody.parsers.base.BodyParser` entries.

    Args:
        parsers: Parser instances, highest priority first.

    Raises:
        PluginError: If an entry is not a ``BodyParser``.

    Example::

        registry = ParserRegistry([CsvBodyParser(), JsonBodyParser(json_options)])
        parser = registry.find("text/csv")
    """

    def __init__(self, parsers: Iterable[BodyParser]) -> None:
        entries = tuple(parsers)
        for entry in entries:
            if not isinstance(entry, BodyParser):
                raise PluginError(
                    f"Body parser entries must be BodyParser instances, got {type(entry).__name__}"
                )
        self._parsers = entries

    def __iter__(self) -> Iterator[BodyParser]:
        return iter(self._parsers)

    def __len__(self) -> int:
        return len(self._parsers)

    def names(self) -> list[str]:
        """Return the display names of all entries in priority order."""
        return [parser.display_name for parser in self._parsers]

    def find(
        self, media_type: str, log: Optional[LoggerLike] = None
    ) -> Optional[BodyParser]:
        """Return the first parser that supports *media_type*, or ``None``.

        Every skipped parser and the selected one are logged at debug level.

        Args:
            media_type: The matched media type to find a parser for.
            log: Logger to report decisions to; defaults to this module's.
        """
        log = log or logger
        for parser in self._parsers:
            if not parser.supports(media_type):
                log.debug(
                    "Body parser %s does not support %s", parser.display_name, media_type
                )
                continue
            log.debug("Body parser %s found for %s", parser.display_name, media_type)
            return parser
        return None
