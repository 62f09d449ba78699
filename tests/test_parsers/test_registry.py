"""Tests for reqbody.parsers.registry and entry-point discovery."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import patch

import pytest

from reqbody.exceptions import PluginError
from reqbody.models import GlobalConfig, PluginsConfig, RequestBodyResult
from reqbody.parsers.base import BodyParser, MediaTypeBodyParser
from reqbody.parsers.discovery import ENTRY_POINT_GROUP, discover_parsers, instantiate_parser
from reqbody.parsers.registry import ParserRegistry


# ---------------------------------------------------------------------------
# Test helpers -- concrete parsers
# ---------------------------------------------------------------------------


class CsvParser(MediaTypeBodyParser):
    name = "csv"
    media_types = ("text/csv",)

    async def parse(self, request: Any) -> RequestBodyResult:
        return RequestBodyResult(value="csv")


class AnyTextParser(MediaTypeBodyParser):
    name = "any-text"
    media_types = ("text/*",)

    async def parse(self, request: Any) -> RequestBodyResult:
        return RequestBodyResult(value="text")


class UnnamedParser(BodyParser):
    def supports(self, media_type: str) -> bool:
        return media_type == "application/x-custom"

    async def parse(self, request: Any) -> dict[str, Any]:
        return {"value": "custom"}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestParserRegistry:
    def test_first_supporting_parser_wins(self) -> None:
        csv, text = CsvParser(), AnyTextParser()
        registry = ParserRegistry([csv, text])
        assert registry.find("text/csv") is csv
        assert registry.find("text/plain") is text

    def test_order_decides(self) -> None:
        text = AnyTextParser()
        registry = ParserRegistry([text, CsvParser()])
        assert registry.find("text/csv") is text

    def test_no_parser(self) -> None:
        assert ParserRegistry([CsvParser()]).find("image/png") is None

    def test_display_name_falls_back_to_class_name(self) -> None:
        registry = ParserRegistry([UnnamedParser(), CsvParser()])
        assert registry.names() == ["UnnamedParser", "csv"]
        assert len(registry) == 2

    def test_rejects_non_parsers(self) -> None:
        with pytest.raises(PluginError, match="BodyParser instances"):
            ParserRegistry([CsvParser(), object()])  # type: ignore[list-item]

    def test_snapshot_is_immutable(self) -> None:
        parsers = [CsvParser()]
        registry = ParserRegistry(parsers)
        parsers.append(AnyTextParser())
        assert len(registry) == 1

    def test_logs_decisions(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = ParserRegistry([CsvParser(), AnyTextParser()])
        log = logging.getLogger("test.registry")
        with caplog.at_level(logging.DEBUG, logger="test.registry"):
            registry.find("text/plain", log)
        assert "Body parser csv does not support text/plain" in caplog.text
        assert "Body parser any-text found for text/plain" in caplog.text


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class _MockEP:
    def __init__(self, name: str, target: Any) -> None:
        self.name = name
        self._target = target

    def load(self) -> Any:
        if isinstance(self._target, Exception):
            raise self._target
        return self._target


class _MockEPs:
    def __init__(self, items: list[Any]) -> None:
        self._items = items

    def select(self, group: str) -> list[Any]:
        if group == ENTRY_POINT_GROUP:
            return self._items
        return []


def _discover(eps: list[Any], config: GlobalConfig) -> list[BodyParser]:
    with patch(
        "reqbody.parsers.discovery.importlib.metadata.entry_points",
        return_value=_MockEPs(eps),
    ):
        return discover_parsers(config)


class TestDiscovery:
    def test_loads_classes_in_order(self) -> None:
        parsers = _discover(
            [_MockEP("csv", CsvParser), _MockEP("text", AnyTextParser)], GlobalConfig()
        )
        assert [p.display_name for p in parsers] == ["csv", "any-text"]

    def test_accepts_instances_and_factories(self) -> None:
        instance = CsvParser()
        parsers = _discover(
            [_MockEP("csv", instance), _MockEP("custom", lambda: UnnamedParser())],
            GlobalConfig(),
        )
        assert parsers[0] is instance
        assert isinstance(parsers[1], UnnamedParser)

    def test_enabled_list(self) -> None:
        config = GlobalConfig(plugins=PluginsConfig(enabled=["text"]))
        parsers = _discover(
            [_MockEP("csv", CsvParser), _MockEP("text", AnyTextParser)], config
        )
        assert [p.display_name for p in parsers] == ["any-text"]

    def test_disabled_list(self) -> None:
        config = GlobalConfig(plugins=PluginsConfig(disabled=["csv"]))
        parsers = _discover(
            [_MockEP("csv", CsvParser), _MockEP("text", AnyTextParser)], config
        )
        assert [p.display_name for p in parsers] == ["any-text"]

    def test_failed_load_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="reqbody.parsers.discovery"):
            parsers = _discover(
                [_MockEP("broken", ImportError("no module")), _MockEP("csv", CsvParser)],
                GlobalConfig(),
            )
        assert [p.display_name for p in parsers] == ["csv"]
        assert "Failed to load body parser 'broken'" in caplog.text

    def test_no_entry_points(self) -> None:
        assert _discover([], GlobalConfig()) == []

    def test_instantiate_rejects_non_parser(self) -> None:
        with pytest.raises(PluginError, match="did not produce a BodyParser"):
            instantiate_parser("bad", dict)
        with pytest.raises(PluginError, match="not callable"):
            instantiate_parser("bad", 42)
