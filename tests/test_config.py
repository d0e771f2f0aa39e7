"""Tests for specindex.config: XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from specindex.config import (
    atomic_write,
    get_data_dir,
    load_project_config,
    resolve_config,
)
from specindex.exceptions import ConfigError
from specindex.models import DEFAULT_OUTPUT_DIR, DEFAULT_SOURCE_URL, ProductsFormat


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestDataDir:
    """XDG data dir on Linux, ~/.specindex/logs elsewhere."""

    def test_xdg_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specindex.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))

        result = get_data_dir()

        assert result == tmp_path / "xdg" / "specindex"
        assert result.is_dir()

    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specindex.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert get_data_dir() == tmp_path / ".local" / "share" / "specindex"

    def test_non_xdg_platform(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specindex.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert get_data_dir() == tmp_path / ".specindex" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b.txt"
        atomic_write(target, "hello\n")
        assert target.read_text(encoding="utf-8") == "hello\n"

    def test_cleans_up_temp_file_on_failure(self, tmp_path: Path) -> None:
        target = tmp_path / "out.json"
        with patch("specindex.config.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError, match="boom"):
                atomic_write(target, "data")

        assert not target.exists()
        assert os.listdir(tmp_path) == []


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestLoadProjectConfig:
    def test_missing_returns_none(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_reads_cwd_file(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specindex.json", {"vendor": "Acme"})
        assert load_project_config() == {"vendor": "Acme"}

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        (isolated_config / "specindex.json").write_text("{", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_non_object_raises(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specindex.json", ["a"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """CLI > env > project config > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()

        assert config.source == DEFAULT_SOURCE_URL
        assert config.output_dir == DEFAULT_OUTPUT_DIR
        assert config.products_format == ProductsFormat.TS
        assert config.products_filename == "products.ts"
        assert config.shared_visited is False

    def test_project_config_over_defaults(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "specindex.json",
            {"output_dir": "build/data", "products_format": "py"},
        )
        config = resolve_config()

        assert config.output_dir == "build/data"
        assert config.products_filename == "products.py"

    def test_env_over_project_config(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "specindex.json", {"source": "project.json"})
        monkeypatch.setenv("SPECINDEX_SOURCE", "env.json")

        assert resolve_config().source == "env.json"

    def test_cli_over_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECINDEX_OUTPUT_DIR", "env-dir")

        config = resolve_config({"output_dir": "cli-dir", "source": None})

        assert config.output_dir == "cli-dir"
        assert config.source == DEFAULT_SOURCE_URL

    def test_unknown_project_key_rejected(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specindex.json", {"colour": "blue"})
        with pytest.raises(ConfigError, match="Invalid build configuration"):
            resolve_config()

    def test_bad_products_format_rejected(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECINDEX_PRODUCTS_FORMAT", "rust")
        with pytest.raises(ConfigError):
            resolve_config()

    def test_non_positive_timeout_rejected(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError):
            resolve_config({"timeout": 0})

    def test_explicit_project_dir(self, tmp_path: Path, isolated_config: Path) -> None:
        other = tmp_path / "elsewhere"
        _write_json(other / "specindex.json", {"vendor": "Acme"})

        assert resolve_config(project_dir=other).vendor == "Acme"
