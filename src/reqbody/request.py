"""The request contract and bounded body reading.

The resolver only needs two things from a live request: a ``headers``
mapping and an async ``stream()`` yielding the raw body in chunks. Starlette
(and therefore FastAPI) ``Request`` objects satisfy :class:`RequestLike` as
they are. :class:`BufferedRequest` is an in-memory implementation used by the
CLI and the tests.

:func:`read_body` is the only place that consumes the stream. It enforces the
size limit while reading and handles ``Content-Encoding``.
"""

from __future__ import annotations

import logging
import zlib
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Optional, Protocol, runtime_checkable

from reqbody.exceptions import BodyParsingError
from reqbody.media_types import get_header

logger = logging.getLogger(__name__)


@runtime_checkable
class RequestLike(Protocol):
    """Structural type of the requests reqbody can read."""

    @property
    def headers(self) -> Mapping[str, Any]: ...

    def stream(self) -> AsyncIterator[bytes]: ...


@dataclass
class BufferedRequest:
    """A request whose body is already in memory.

    Args:
        headers: Request headers. Lookups are case-insensitive.
        body: The raw body bytes (``str`` is encoded as UTF-8).
        chunk_size: Size of the chunks yielded by :meth:`stream`.

    Example::

        request = BufferedRequest({"Content-Type": "application/json"}, b'{"a": 1}')
    """

    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    chunk_size: int = 64 * 1024

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")

    async def stream(self) -> AsyncIterator[bytes]:
        for start in range(0, len(self.body), self.chunk_size):
            yield self.body[start : start + self.chunk_size]


def _too_large(limit: int) -> BodyParsingError:
    return BodyParsingError(
        f"request entity too large (limit {limit} bytes)",
        status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
        error_type="entity.too.large",
    )


def _declared_length(request: RequestLike) -> Optional[int]:
    raw = get_header(request.headers, "content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _inflate(data: bytes, encoding: str) -> bytes:
    wbits = 16 + zlib.MAX_WBITS if encoding == "gzip" else zlib.MAX_WBITS
    try:
        return zlib.decompress(data, wbits)
    except zlib.error as exc:
        if encoding == "deflate":
            # raw deflate stream without zlib header
            try:
                return zlib.decompress(data, -zlib.MAX_WBITS)
            except zlib.error:
                pass
        raise BodyParsingError(
            f"invalid {encoding} body: {exc}", error_type="entity.parse.failed"
        ) from exc


async def read_body(request: RequestLike, limit: int, inflate: bool = True) -> bytes:
    """Read the whole body of *request*, enforcing *limit* bytes.

    Args:
        request: The request to read.
        limit: Maximum number of bytes, checked against ``Content-Length``
            before reading, while streaming, and after inflation.
        inflate: Accept ``gzip`` and ``deflate`` content encodings.

    Returns:
        The (inflated) body bytes.

    Raises:
        BodyParsingError: 413 when the body exceeds *limit*, 415 for an
            unsupported ``Content-Encoding``, 400 when the received size
            does not match ``Content-Length`` or the body cannot be inflated.
    """
    encoding = (get_header(request.headers, "content-encoding") or "identity").lower()
    if encoding not in ("identity", "gzip", "deflate") or (
        encoding != "identity" and not inflate
    ):
        raise BodyParsingError(
            f'unsupported content encoding "{encoding}"',
            status_code=HTTPStatus.UNSUPPORTED_MEDIA_TYPE,
            error_type="encoding.unsupported",
        )

    length = _declared_length(request)
    if encoding == "identity" and length is not None and length > limit:
        raise _too_large(limit)

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        if not chunk:
            continue
        received += len(chunk)
        if received > limit:
            raise _too_large(limit)
        chunks.append(chunk)

    if length is not None and received != length:
        raise BodyParsingError(
            "request size did not match content length",
            status_code=HTTPStatus.BAD_REQUEST,
            error_type="request.size.invalid",
        )

    data = b"".join(chunks)
    if encoding != "identity" and data:
        data = _inflate(data, encoding)
        if len(data) > limit:
            raise _too_large(limit)

    logger.debug("Read %d body bytes (encoding %s)", len(data), encoding)
    return data
