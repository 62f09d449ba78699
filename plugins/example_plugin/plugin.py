"""Example extension parser that decodes ``text/csv`` bodies into rows of dicts.

Register it from a package's ``pyproject.toml``::

    [project.entry-points."reqbody.body_parsers"]
    csv = "example_plugin.plugin:CsvBodyParser"
"""

from __future__ import annotations

import csv
import io

from reqbody.media_types import get_charset, get_content_type
from reqbody.models import RequestBodyResult
from reqbody.parsers.base import MediaTypeBodyParser
from reqbody.parsers.builtin import decode_body
from reqbody.request import RequestLike, read_body


class CsvBodyParser(MediaTypeBodyParser):
    """Parse a CSV body with a header row.

    Every cell is a string, so results ask for schema coercion.
    """

    name = "csv"
    media_types = ("text/csv",)

    def __init__(self, limit: int = 1 << 20) -> None:
        self.limit = limit

    async def parse(self, request: RequestLike) -> RequestBodyResult:
        raw = await read_body(request, self.limit)
        charset = get_charset(get_content_type(request)) or "utf-8"
        reader = csv.DictReader(io.StringIO(decode_body(raw, charset)))
        return RequestBodyResult(value=list(reader), coercion_required=True)
