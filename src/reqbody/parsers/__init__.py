"""Body parser interface, built-in parsers, registry and discovery.

Key classes:

* :class:`BodyParser` -- Abstract base class every parser extends.
* :class:`MediaTypeBodyParser` -- Base class for parsers with a fixed set of
  supported media type patterns.
* :class:`JsonBodyParser`, :class:`UrlencodedBodyParser`,
  :class:`TextBodyParser` -- The built-ins.
* :class:`ParserRegistry` -- Ordered, first-match-wins parser lookup.

Example:
    Building a registry with an extension ahead of the built-ins::

        from reqbody.options import resolve_parser_options
        from reqbody.parsers import JsonBodyParser, ParserRegistry

        registry = ParserRegistry(
            [MyParser(), JsonBodyParser(resolve_parser_options("json"))]
        )
"""

from reqbody.parsers.base import BodyParser, MediaTypeBodyParser
from reqbody.parsers.builtin import JsonBodyParser, TextBodyParser, UrlencodedBodyParser
from reqbody.parsers.discovery import ENTRY_POINT_GROUP, discover_parsers
from reqbody.parsers.registry import ParserRegistry

__all__ = [
    "BodyParser",
    "MediaTypeBodyParser",
    "JsonBodyParser",
    "UrlencodedBodyParser",
    "TextBodyParser",
    "ParserRegistry",
    "ENTRY_POINT_GROUP",
    "discover_parsers",
]
