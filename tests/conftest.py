"""Shared test fixtures for reqbody.

Provides reusable fixtures for building in-memory requests, loading the
OpenAPI fixture document, isolating configuration, managing output state,
and running CLI commands. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional, Union

import pytest

from reqbody.output import OutputFormat, OutputManager, reset_output, set_output
from reqbody.request import BufferedRequest


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during a
    test, the cached references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Request fixtures
# ---------------------------------------------------------------------------


RequestFactory = Callable[..., BufferedRequest]


@pytest.fixture
def make_request() -> RequestFactory:
    """Factory for in-memory requests.

    Example::

        request = make_request(b'{"a": 1}', content_type="application/json")
    """

    def _make(
        body: Union[bytes, str] = b"",
        content_type: Optional[str] = None,
        **headers: str,
    ) -> BufferedRequest:
        all_headers = {name.replace("_", "-"): value for name, value in headers.items()}
        if content_type is not None:
            all_headers["content-type"] = content_type
        return BufferedRequest(headers=all_headers, body=body)

    return _make


# ---------------------------------------------------------------------------
# OpenAPI fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def pets_spec_path() -> Path:
    """Path to the pets OpenAPI 3.0 fixture document."""
    return FIXTURES_DIR / "pets.json"


@pytest.fixture
def pets_spec(pets_spec_path: Path) -> dict[str, Any]:
    """The pets OpenAPI fixture as a dict."""
    with open(pets_spec_path) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of tmp_path,
    clears REQBODY_LIMIT and changes the working directory to tmp_path so
    tests never touch real user config or pick up a project config.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("reqbody.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("REQBODY_LIMIT", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def no_extension_parsers(monkeypatch: pytest.MonkeyPatch) -> None:
    """Hide installed extension parsers from entry-point discovery."""
    monkeypatch.setattr("reqbody.parsers.discovery._select_entry_points", lambda: [])


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager for the duration of the test."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
