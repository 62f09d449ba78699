"""Abstract base classes for request body parsers.

Every parser must subclass :class:`BodyParser` and implement
:meth:`~BodyParser.supports` and :meth:`~BodyParser.parse`. Parsers that
claim a fixed set of media type patterns can subclass
:class:`MediaTypeBodyParser` instead and only declare ``media_types``.

Extension parsers are registered as entry points in the
``reqbody.body_parsers`` group and discovered at runtime by
:func:`~reqbody.parsers.discovery.discover_parsers`, or passed directly to
:class:`~reqbody.resolver.RequestBodyResolver`.

Example:
    Minimal extension parser::

        class CsvBodyParser(MediaTypeBodyParser):
            name = "csv"
            media_types = ("text/csv",)

            async def parse(self, request):
                data = await read_body(request, limit=1 << 20)
                return RequestBodyResult(value=data.decode().splitlines())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union

from reqbody.media_types import first_match

if TYPE_CHECKING:
    from reqbody.models import RequestBodyResult
    from reqbody.request import RequestLike


class BodyParser(ABC):
    """Base class for all request body parsers.

    A parser is a capability predicate plus a parse action. The registry asks
    each parser in priority order whether it :meth:`supports` the matched
    media type and invokes :meth:`parse` on the first one that does.

    Parsers are shared across concurrent requests and must not keep
    per-request state on ``self``.
    """

    name: ClassVar[Optional[str]] = None
    """Optional short name used in logs and listings."""

    @property
    def display_name(self) -> str:
        """The parser's ``name``, falling back to its class name."""
        return self.name or type(self).__name__

    @abstractmethod
    def supports(self, media_type: str) -> bool:
        """Return ``True`` if this parser can decode bodies of *media_type*.

        Args:
            media_type: The media type selected from the operation's declared
                content, e.g. ``"application/json"`` or ``"text/plain"``.
        """

    @abstractmethod
    async def parse(
        self, request: RequestLike
    ) -> Union[RequestBodyResult, Mapping[str, Any]]:
        """Read and decode the body of *request*.

        Returns:
            A partial :class:`~reqbody.models.RequestBodyResult` (or a
            mapping with the same keys) holding at least ``value``. Only the
            fields set here are merged into the final result.

        Raises:
            Exception: Any error; the resolver normalizes it into a
                :class:`~reqbody.exceptions.BodyParsingError`. Set a
                ``status_code`` attribute to report a specific 4xx status.
        """


class MediaTypeBodyParser(BodyParser):
    """A parser whose capability is a fixed tuple of media type patterns.

    :meth:`supports` uses the same matcher as declared-content matching, so
    ``media_types = ("text/*",)`` claims ``text/plain``, ``text/csv``...
    """

    media_types: ClassVar[tuple[str, ...]] = ()

    def supports(self, media_type: str) -> bool:
        return first_match(media_type, self.media_types) is not None
