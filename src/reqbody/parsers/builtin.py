"""The three built-in body parsers: JSON, url-encoded forms and text.

Each parser is configured once with its effective options (see
:mod:`reqbody.options`) and is safe to share across concurrent requests.
Besides the fixed ``media_types`` capability, every built-in also checks the
request's own ``Content-Type`` against its ``type`` option before reading;
a request outside that option is left unread and yields an empty object, so
``type`` can narrow what a built-in accepts without changing the selection
order.
"""

from __future__ import annotations

import codecs
import json
import logging
from http import HTTPStatus
from typing import Any, Union

from reqbody.exceptions import BodyParsingError
from reqbody.media_types import (
    DEFAULT_CONTENT_TYPE,
    first_match,
    get_charset,
    get_content_type,
)
from reqbody.models import JsonOptions, RequestBodyResult, TextOptions, UrlencodedOptions
from reqbody.parsers.base import MediaTypeBodyParser
from reqbody.parsers.urlencoded import count_parameters, parse_urlencoded
from reqbody.request import RequestLike, read_body

logger = logging.getLogger(__name__)

_JSON_WHITESPACE = " \t\n\r"


def _unsupported_charset(charset: str) -> BodyParsingError:
    return BodyParsingError(
        f'unsupported charset "{charset.upper()}"',
        status_code=HTTPStatus.UNSUPPORTED_MEDIA_TYPE,
        error_type="charset.unsupported",
    )


def decode_body(raw: bytes, charset: str) -> str:
    """Decode *raw* with *charset*, dropping a UTF-8 byte order mark.

    Raises:
        BodyParsingError: 415 for an unknown charset, 400 for bytes that are
            not valid in it.
    """
    codec = "utf-8-sig" if charset in ("utf-8", "utf8") else charset
    try:
        codecs.lookup(codec)
    except LookupError:
        raise _unsupported_charset(charset) from None
    try:
        return raw.decode(codec)
    except UnicodeDecodeError as exc:
        raise BodyParsingError(
            f"invalid {charset} body: {exc.reason}", error_type="entity.parse.failed"
        ) from exc


class _BuiltinBodyParser(MediaTypeBodyParser):
    options: Union[JsonOptions, UrlencodedOptions, TextOptions]

    def _should_read(self, request: RequestLike) -> bool:
        content_type = get_content_type(request) or DEFAULT_CONTENT_TYPE
        if first_match(content_type, self.options.type) is None:
            logger.debug(
                "%s parser skips content type %s (accepts %s)",
                self.display_name,
                content_type,
                self.options.type,
            )
            return False
        return True


class JsonBodyParser(_BuiltinBodyParser):
    """Decode ``application/json`` and ``+json`` bodies.

    With ``strict`` (the default) only objects and arrays are accepted at the
    top level. An empty body yields ``{}``.
    """

    name = "json"
    media_types = ("application/json", "*/*+json")

    def __init__(self, options: JsonOptions) -> None:
        self.options = options

    async def parse(self, request: RequestLike) -> RequestBodyResult:
        if not self._should_read(request):
            return RequestBodyResult(value={})

        charset = get_charset(get_content_type(request)) or "utf-8"
        if not charset.startswith("utf-"):
            raise _unsupported_charset(charset)

        raw = await read_body(request, self.options.limit, self.options.inflate)
        if not raw:
            return RequestBodyResult(value={})

        text = decode_body(raw, charset)
        return RequestBodyResult(value=self._loads(text))

    def _loads(self, text: str) -> Any:
        if self.options.strict:
            stripped = text.lstrip(_JSON_WHITESPACE)
            first = stripped[:1]
            if first not in ("{", "["):
                position = len(text) - len(stripped)
                token = first or "end of input"
                raise BodyParsingError(
                    f"Unexpected token {token} in JSON at position {position}",
                    error_type="entity.parse.failed",
                )
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise BodyParsingError(
                f"{exc.msg} in JSON at position {exc.pos}",
                error_type="entity.parse.failed",
            ) from exc


class UrlencodedBodyParser(_BuiltinBodyParser):
    """Decode ``application/x-www-form-urlencoded`` bodies.

    Every value is a string, so results carry ``coercion_required=True``.
    """

    name = "urlencoded"
    media_types = ("application/x-www-form-urlencoded",)

    def __init__(self, options: UrlencodedOptions) -> None:
        self.options = options

    async def parse(self, request: RequestLike) -> RequestBodyResult:
        return RequestBodyResult(
            value=await self._parse_value(request), coercion_required=True
        )

    async def _parse_value(self, request: RequestLike) -> Any:
        if not self._should_read(request):
            return {}

        charset = get_charset(get_content_type(request)) or "utf-8"
        if charset not in ("utf-8", "utf8"):
            raise _unsupported_charset(charset)

        raw = await read_body(request, self.options.limit, self.options.inflate)
        if not raw:
            return {}

        text = decode_body(raw, charset)
        count_parameters(text, self.options.parameter_limit)
        return parse_urlencoded(text, extended=self.options.extended)


class TextBodyParser(_BuiltinBodyParser):
    """Decode ``text/*`` bodies into a string using the request's charset."""

    name = "text"
    media_types = ("text/*",)

    def __init__(self, options: TextOptions) -> None:
        self.options = options

    async def parse(self, request: RequestLike) -> RequestBodyResult:
        if not self._should_read(request):
            return RequestBodyResult(value={})

        charset = get_charset(get_content_type(request)) or self.options.default_charset
        raw = await read_body(request, self.options.limit, self.options.inflate)
        return RequestBodyResult(value=decode_body(raw, charset.lower()))
