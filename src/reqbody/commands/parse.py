"""Parse command -- run the request body resolver against an OpenAPI operation.

``reqbody parse`` loads an OpenAPI document, finds one operation, builds an
in-memory request from the command line and prints the normalized
:class:`~reqbody.models.RequestBodyResult`. It exercises exactly the code
path a web integration uses, which makes it handy for checking what a
server would accept before sending real traffic.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from reqbody.exceptions import InvalidUsageError
from reqbody.output import debug, format_result

logger = logging.getLogger(__name__)


def _parse_headers(raw_headers: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in raw_headers:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid header (expected 'Name: value'): {raw}")
        headers[name.strip().lower()] = value.strip()
    return headers


def _read_body(data: Optional[str], file: Optional[str]) -> bytes:
    if data is not None and file is not None:
        raise InvalidUsageError("Use either --data or --file, not both")
    if data is not None:
        return data.encode("utf-8")
    if file == "-":
        return sys.stdin.buffer.read()
    if file is not None:
        path = Path(file)
        if not path.is_file():
            raise InvalidUsageError(f"Body file not found: {file}")
        return path.read_bytes()
    return b""


def parse_command(
    spec: str = typer.Argument(help="OpenAPI document: file path, URL, or '-' for stdin."),
    operation: str = typer.Argument(
        help="operationId, or 'METHOD /path' (e.g. 'POST /pets')."
    ),
    content_type: Optional[str] = typer.Option(
        None, "--content-type", "-t", help="Request Content-Type header."
    ),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Request body text."),
    file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Read the request body from a file ('-' for stdin)."
    ),
    header: list[str] = typer.Option(
        [], "--header", "-H", help="Extra request header 'Name: value' (repeatable)."
    ),
    limit: Optional[str] = typer.Option(
        None, "--limit", help="Body size limit, e.g. '100kb' (overrides config)."
    ),
) -> None:
    """Parse a request body the way a server for OPERATION would.

    The extension parsers installed through the ``reqbody.body_parsers``
    entry-point group take part, ahead of the built-in JSON, url-encoded and
    text parsers.

    Example::

        reqbody parse openapi.yaml createPet -t application/json -d '{"name": "Rex"}'
        reqbody parse openapi.yaml 'POST /pets' -t application/x-www-form-urlencoded -d 'a[b]=1'
    """
    from reqbody.config import resolve_config
    from reqbody.openapi import find_operation, load_spec, validate_openapi_version
    from reqbody.parsers import discover_parsers
    from reqbody.request import BufferedRequest
    from reqbody.resolver import RequestBodyResolver

    if spec == "-" and file == "-":
        raise InvalidUsageError("The OpenAPI document and the body cannot both be read from stdin")

    config = resolve_config(cli_limit=limit)

    document = load_spec(spec)
    version = validate_openapi_version(document)
    op = find_operation(document, operation)
    debug(f"OpenAPI {version}: using operation {op.method} {op.path}")

    headers = _parse_headers(header)
    if content_type is not None:
        headers["content-type"] = content_type
    request = BufferedRequest(headers=headers, body=_read_body(data, file))

    resolver = RequestBodyResolver(
        options=config.body_parser,
        parsers=discover_parsers(config),
        logger=logger,
    )
    result = asyncio.run(resolver.load_request_body_if_needed(op, request))
    format_result(result.model_dump(mode="json", by_alias=True))
