"""Request body resolution: match the media type, pick a parser, parse once.

:class:`RequestBodyResolver` sits between the HTTP layer and operation
dispatch. For each request it runs the following protocol:

1. An operation without ``requestBody`` yields an empty result; no parser
   runs.
2. The request's ``Content-Type`` is read (``application/json`` when
   absent). A ``$ref`` request body is rejected. An empty ``content`` map is
   replaced by JSON and url-encoded defaults.
3. Declared media types are tried in declaration order; the first one
   matching the request's content type supplies ``media_type`` and
   ``schema``.
4. No match raises :class:`~reqbody.exceptions.MediaTypeMismatchError`.
5. The first registered parser supporting the matched type parses the
   request, and the fields it returns are merged into the result.
6. A parse failure is normalized into
   :class:`~reqbody.exceptions.BodyParsingError`; no other parser is tried.
7. No capable parser raises :class:`~reqbody.exceptions.ParserNotFoundError`.

Exactly one parser is invoked per call, and the body stream is read at most
once.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from reqbody.exceptions import (
    MediaTypeMismatchError,
    ParserNotFoundError,
    UnsupportedReferenceError,
    normalize_parsing_error,
)
from reqbody.media_types import DEFAULT_CONTENT_TYPE, get_content_type, match_media_type
from reqbody.models import (
    BodyParserOptions,
    MediaTypeObject,
    OperationSpec,
    ReferenceObject,
    RequestBodyObject,
    RequestBodyResult,
)
from reqbody.options import resolve_parser_options
from reqbody.parsers.base import BodyParser
from reqbody.parsers.builtin import JsonBodyParser, TextBodyParser, UrlencodedBodyParser
from reqbody.parsers.registry import LoggerLike, ParserRegistry
from reqbody.request import RequestLike

logger = logging.getLogger(__name__)


def default_content() -> dict[str, MediaTypeObject]:
    """Content map used when an operation's ``requestBody`` declares none."""
    return {
        "application/json": MediaTypeObject(schema={"type": "object"}),
        "application/x-www-form-urlencoded": MediaTypeObject(schema={"type": "object"}),
    }


def builtin_parsers(options: Optional[BodyParserOptions] = None) -> list[BodyParser]:
    """Create the built-in JSON, url-encoded and text parsers, in that order."""
    return [
        JsonBodyParser(resolve_parser_options("json", options)),
        UrlencodedBodyParser(resolve_parser_options("urlencoded", options)),
        TextBodyParser(resolve_parser_options("text", options)),
    ]


class RequestBodyResolver:
    """Load an operation's request body from a live request.

    The parser registry and options are fixed at construction, so one
    resolver can serve concurrent requests.

    Args:
        options: Shared and per-format options for the built-in parsers.
        parsers: Extension parsers. They are consulted before the built-ins,
            in the order given.
        logger: Logger receiving the decision trail (matched type, parsers
            skipped and selected, failures). Defaults to this module's logger.

    Example::

        resolver = RequestBodyResolver(parsers=[CsvBodyParser()])
        result = await resolver.load_request_body_if_needed(operation, request)
    """

    def __init__(
        self,
        options: Optional[BodyParserOptions] = None,
        parsers: Sequence[BodyParser] = (),
        logger: Optional[LoggerLike] = None,
    ) -> None:
        self._options = options or BodyParserOptions()
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._registry = ParserRegistry([*parsers, *builtin_parsers(self._options)])

    @property
    def options(self) -> BodyParserOptions:
        """The options the built-in parsers were configured with."""
        return self._options

    @property
    def registry(self) -> ParserRegistry:
        """The parser registry, extensions first."""
        return self._registry

    async def load_request_body_if_needed(
        self,
        operation: Union[OperationSpec, Mapping[str, Any]],
        request: RequestLike,
    ) -> RequestBodyResult:
        """Load and parse the request body declared by *operation*.

        Args:
            operation: An :class:`~reqbody.models.OperationSpec`, or a raw
                OpenAPI operation mapping (validated into one).
            request: The live request.

        Returns:
            The normalized result. It is empty (``value=None``) when the
            operation declares no request body.

        Raises:
            UnsupportedReferenceError: The request body is a ``$ref``.
            MediaTypeMismatchError: The content type matches no declared type.
            ParserNotFoundError: No registered parser supports the matched type.
            BodyParsingError: The selected parser failed.
        """
        if not isinstance(operation, OperationSpec):
            operation = OperationSpec.model_validate(operation)

        result = RequestBodyResult()
        request_body = operation.request_body
        if request_body is None:
            return result

        log = self._logger
        log.debug(
            "Request body parser options: %s",
            self._options.model_dump(exclude_none=True, by_alias=True),
        )

        content_type = get_content_type(request) or DEFAULT_CONTENT_TYPE
        log.debug("Loading request body with content type %s", content_type)

        if isinstance(request_body, ReferenceObject):
            raise UnsupportedReferenceError(
                f"$ref requestBody is not supported yet: {request_body.ref}"
            )

        content = self._effective_content(request_body)

        matched: Optional[str] = None
        for media_type, media_object in content.items():
            matched = match_media_type(content_type, media_type)
            if matched is not None:
                log.debug("Matched media type: %s -> %s", media_type, content_type)
                result = result.model_copy(
                    update={"media_type": media_type, "schema_": media_object.schema_}
                )
                break

        if matched is None:
            log.debug(
                "Content type %s matches none of the declared types %s",
                content_type,
                list(content),
            )
            raise MediaTypeMismatchError(content_type, list(content))

        # Parser selection, parsing and result validation share one error path.
        parser: Optional[BodyParser] = None
        body: Optional[RequestBodyResult] = None
        try:
            parser = self._registry.find(matched, log)
            if parser is not None:
                parsed = await parser.parse(request)
                if isinstance(parsed, RequestBodyResult):
                    body = parsed
                else:
                    body = RequestBodyResult.model_validate(parsed)
        except Exception as exc:
            name = parser.display_name if parser is not None else None
            error = normalize_parsing_error(exc, parser=name)
            log.debug(
                "Cannot parse request body with %s: %s (status %s, %s)",
                name or "the parser registry",
                error,
                error.status_code,
                error.error_type,
            )
            if error is exc:
                raise
            raise error from exc

        if parser is None or body is None:
            log.debug("No body parser supports %s", matched)
            raise ParserNotFoundError(matched)
        return result.merged(body)

    @staticmethod
    def _effective_content(request_body: RequestBodyObject) -> dict[str, MediaTypeObject]:
        if not request_body.content:
            return default_content()
        return request_body.content
