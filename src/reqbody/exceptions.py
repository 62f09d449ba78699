"""Exception hierarchy for reqbody.

All exceptions inherit from :class:`ReqbodyError`, which carries two
class-level codes: ``status_code`` (the HTTP status an integrating web layer
should answer with) and ``exit_code`` (mapped to a constant from
:mod:`reqbody.exit_codes` and used by the CLI). The top-level error handler
in :func:`reqbody.app.main` catches ``ReqbodyError`` and exits with the
appropriate code.

Subclass hierarchy::

    ReqbodyError                   (exit 1,  HTTP 500)
    +-- InvalidUsageError          (exit 2,  HTTP 400)
    +-- UnsupportedMediaTypeError  (exit 3,  HTTP 415)
    |   +-- MediaTypeMismatchError
    |   +-- ParserNotFoundError
    +-- BodyParsingError           (exit 4,  HTTP 400, or the original 4xx)
    +-- UnsupportedReferenceError  (exit 7,  HTTP 500)
    +-- SpecParseError             (exit 7,  HTTP 500)
    +-- PluginError                (exit 10, HTTP 500)
    +-- ConfigError                (exit 1,  HTTP 500)
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Optional

from reqbody.exit_codes import (
    EXIT_BODY_PARSE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
    EXIT_SPEC_ERROR,
    EXIT_UNSUPPORTED_MEDIA_TYPE,
)


class ReqbodyError(Exception):
    """Base exception for all reqbody errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`reqbody.exit_codes`, and a class-level
    ``status_code`` holding the HTTP status to report to the client.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
        status_code: Optional override for the class-level HTTP status.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code
        if status_code is not None:
            self.status_code = status_code


class InvalidUsageError(ReqbodyError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE
    status_code = HTTPStatus.BAD_REQUEST


class UnsupportedMediaTypeError(ReqbodyError):
    """Raised when a request body cannot be handled because of its media type (HTTP 415).

    Catch this class to handle both failure causes at once. The two
    subclasses tell a client-side mismatch apart from a server-side
    configuration gap.
    """

    exit_code = EXIT_UNSUPPORTED_MEDIA_TYPE
    status_code = HTTPStatus.UNSUPPORTED_MEDIA_TYPE


class MediaTypeMismatchError(UnsupportedMediaTypeError):
    """The request's content type matches none of the operation's declared media types.

    Attributes:
        content_type: The (possibly defaulted) request content type.
        declared: The declared media type patterns, in declaration order.
    """

    def __init__(self, content_type: str, declared: list[str]):
        self.content_type = content_type
        self.declared = list(declared)
        super().__init__(
            f"Content-type {content_type} does not match [{','.join(self.declared)}]."
        )


class ParserNotFoundError(UnsupportedMediaTypeError):
    """A declared media type matched, but no registered parser supports it.

    Attributes:
        media_type: The matched media type no parser claimed.
    """

    def __init__(self, media_type: str):
        self.media_type = media_type
        super().__init__(f"Content-type {media_type} is not supported.")


class BodyParsingError(ReqbodyError):
    """Raised when the selected parser fails to decode the request body.

    Attributes:
        error_type: Machine-readable failure category, e.g.
            ``"entity.parse.failed"`` or ``"entity.too.large"``.
        parser: Display name of the parser that failed, when known.
    """

    exit_code = EXIT_BODY_PARSE_ERROR
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str = "entity.parse.failed",
        parser: Optional[str] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.error_type = error_type
        self.parser = parser


class UnsupportedReferenceError(ReqbodyError):
    """Raised when an operation's ``requestBody`` is a ``$ref`` pointer.

    Resolving references is not supported; the operation spec must inline
    the request body object.
    """

    exit_code = EXIT_SPEC_ERROR


class SpecParseError(ReqbodyError):
    """Raised when an OpenAPI document cannot be loaded or an operation cannot be found."""

    exit_code = EXIT_SPEC_ERROR


class PluginError(ReqbodyError):
    """Raised when an extension parser fails to load or is not a BodyParser."""

    exit_code = EXIT_PLUGIN_ERROR


class ConfigError(ReqbodyError):
    """Raised for configuration problems (invalid JSON, bad size limits)."""

    exit_code = EXIT_GENERIC_FAILURE


def _status_of(exc: BaseException) -> Any:
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if value is not None:
            return value
    return None


def normalize_parsing_error(
    exc: BaseException, parser: Optional[str] = None
) -> BodyParsingError:
    """Turn any exception raised while parsing into a :class:`BodyParsingError`.

    The original status code (``status_code`` or ``status`` attribute) is kept
    when it is a client error (400-499). A missing status, or one outside the
    4xx range, becomes 400 so that body-format problems are never reported as
    server errors.

    Args:
        exc: The exception raised by the parser.
        parser: Display name of the parser that raised, for diagnostics.

    Returns:
        A :class:`BodyParsingError`. When *exc* already is one it is updated
        in place and returned; otherwise a new error is created and chained to
        *exc* by the caller.
    """
    status = _status_of(exc)
    try:
        status = int(status) if status is not None else None
    except (TypeError, ValueError):
        status = None
    if status is None or not 400 <= status < 500:
        status = int(HTTPStatus.BAD_REQUEST)

    if isinstance(exc, BodyParsingError):
        exc.status_code = status
        if exc.parser is None:
            exc.parser = parser
        return exc

    return BodyParsingError(
        str(exc) or type(exc).__name__,
        status_code=status,
        error_type=getattr(exc, "error_type", None) or "entity.parse.failed",
        parser=parser,
    )
