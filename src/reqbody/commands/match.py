"""Match command -- test a content type against media type patterns."""

from __future__ import annotations

import typer

from reqbody.exceptions import UnsupportedMediaTypeError
from reqbody.media_types import match_media_type
from reqbody.output import format_result


def match_command(
    content_type: str = typer.Argument(help="Request content type, e.g. 'application/json'."),
    patterns: list[str] = typer.Argument(
        help="Media type patterns in priority order, e.g. 'text/*' '+json'."
    ),
) -> None:
    """Print the first pattern CONTENT_TYPE matches.

    Patterns are tried in the order given, like the ``content`` map of an
    OpenAPI ``requestBody``. Exits with code 3 when nothing matches.

    Example::

        reqbody match 'application/vnd.api+json; charset=utf-8' text/plain '+json'
    """
    for pattern in patterns:
        matched = match_media_type(content_type, pattern)
        if matched is not None:
            format_result({"pattern": pattern, "media_type": matched})
            return
    raise UnsupportedMediaTypeError(
        f"Content-type {content_type} does not match [{','.join(patterns)}]."
    )
