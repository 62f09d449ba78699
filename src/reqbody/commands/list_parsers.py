"""Parsers command -- show the body parser registry in priority order."""

from __future__ import annotations

from reqbody.output import print_table


def parsers_command() -> None:
    """List the body parsers in the order they are consulted.

    Extension parsers discovered through entry points come first, followed by
    the built-ins. The first parser supporting a matched media type wins.

    Example::

        reqbody parsers
        reqbody --json parsers
    """
    from reqbody.config import resolve_config
    from reqbody.parsers import discover_parsers
    from reqbody.resolver import RequestBodyResolver

    config = resolve_config()
    extensions = discover_parsers(config)
    resolver = RequestBodyResolver(options=config.body_parser, parsers=extensions)

    rows = []
    for priority, parser in enumerate(resolver.registry, start=1):
        kind = "extension" if priority <= len(extensions) else "builtin"
        media_types = ", ".join(getattr(parser, "media_types", ())) or "-"
        rows.append([str(priority), parser.display_name, kind, media_types])

    print_table(["priority", "name", "kind", "media types"], rows, title="Body parsers")
