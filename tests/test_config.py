"""Tests for reqbody.config -- XDG paths, atomic writes, project config, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from reqbody.config import (
    _atomic_write,
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
)
from reqbody.exceptions import ConfigError
from reqbody.models import BodyParserOptions, GlobalConfig, PluginsConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write *data* as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("reqbody.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "reqbody"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("reqbody.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "custom"))

        assert get_config_dir() == tmp_path / "custom" / "reqbody"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("reqbody.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".local" / "share" / "reqbody"

    def test_fallback_platform(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("reqbody.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".reqbody"
        assert get_data_dir() == tmp_path / ".reqbody" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, '{"ok": true}')
        assert target.read_text(encoding="utf-8") == '{"ok": true}'

    def test_failure_leaves_no_temp_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        target.write_text("original")
        with patch("reqbody.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                _atomic_write(target, "new")
        assert target.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        assert load_global_config() == GlobalConfig()

    def test_round_trip_keeps_aliases(self, isolated_config: Path) -> None:
        config = GlobalConfig(
            body_parser=BodyParserOptions(limit="2mb", json={"strict": False}),
            plugins=PluginsConfig(disabled=["csv"]),
        )
        save_global_config(config)

        stored = json.loads((get_config_dir() / "config.json").read_text())
        assert stored["body_parser"]["json"] == {"strict": False}

        loaded = load_global_config()
        assert loaded.body_parser.limit == "2mb"
        assert loaded.body_parser.json_.strict is False
        assert loaded.plugins.disabled == ["csv"]

    def test_invalid_json(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_shape(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"plugins": {"enabled": 5}})
        with pytest.raises(ConfigError):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_loaded_from_cwd(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "reqbody.json", {"body_parser": {"limit": "10kb"}})
        assert load_project_config() == {"body_parser": {"limit": "10kb"}}

    def test_must_be_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "reqbody.json", [1, 2])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.body_parser.limit is None
        assert config.output.format == "auto"

    def test_project_merges_over_global(self, isolated_config: Path) -> None:
        save_global_config(
            GlobalConfig(body_parser=BodyParserOptions(limit="5mb", json={"strict": False}))
        )
        _write_json(
            isolated_config / "reqbody.json",
            {"body_parser": {"json": {"limit": "1kb"}}},
        )

        config = resolve_config()
        assert config.body_parser.limit == "5mb"
        assert config.body_parser.json_.strict is False
        assert config.body_parser.json_.limit == "1kb"

    def test_env_over_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "reqbody.json", {"body_parser": {"limit": "10kb"}})
        monkeypatch.setenv("REQBODY_LIMIT", "20kb")
        assert resolve_config().body_parser.limit == "20kb"

    def test_cli_over_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REQBODY_LIMIT", "20kb")
        config = resolve_config(cli_limit="30kb", cli_format="json")
        assert config.body_parser.limit == "30kb"
        assert config.output.format == "json"

    def test_invalid_limit(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REQBODY_LIMIT", "plenty")
        with pytest.raises(ConfigError, match="Invalid size limit"):
            resolve_config()
