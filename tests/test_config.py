"""Tests for archengine.config — project settings from archengine.yml."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from archengine.config import (
    DEFAULT_SCAN_PATHS,
    EngineSettings,
    find_config_file,
    load_settings,
)

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_file(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# find_config_file
# ---------------------------------------------------------------------------


class TestFindConfigFile:
    def test_none_when_absent(self, tmp_path: Path) -> None:
        assert find_config_file(tmp_path) is None

    def test_top_level_file_wins(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "archengine.yml", "scan_paths: [a]\n")
        _write_file(tmp_path / ".archengine" / "config.yml", "scan_paths: [b]\n")
        assert find_config_file(tmp_path) == tmp_path / "archengine.yml"

    def test_hidden_directory_fallback(self, tmp_path: Path) -> None:
        _write_file(tmp_path / ".archengine" / "config.yml", "scan_paths: [b]\n")
        assert find_config_file(tmp_path) == tmp_path / ".archengine" / "config.yml"


# ---------------------------------------------------------------------------
# load_settings
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path)
        assert settings == EngineSettings()
        assert settings.scan_paths == DEFAULT_SCAN_PATHS
        assert settings.source is None

    def test_full_file(self, tmp_path: Path) -> None:
        _write_file(
            tmp_path / "archengine.yml",
            "scan_paths:\n"
            "  - tests/architecture\n"
            "  - checks\n"
            "include_patterns:\n"
            "  - '.*Architecture'\n"
            "exclude_patterns: '.*Legacy.*'\n"
            "parameters:\n"
            "  mode: strict\n"
            "  retries: 3\n",
        )
        settings = load_settings(tmp_path)
        assert settings.scan_paths == ("tests/architecture", "checks")
        assert settings.include_patterns == (".*Architecture",)
        assert settings.exclude_patterns == (".*Legacy.*",)
        assert settings.parameters == {"mode": "strict", "retries": "3"}
        assert settings.source == tmp_path / "archengine.yml"

    def test_missing_keys_use_defaults(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "archengine.yml", "include_patterns: ['.*Rules']\n")
        settings = load_settings(tmp_path)
        assert settings.scan_paths == DEFAULT_SCAN_PATHS
        assert settings.exclude_patterns == ()
        assert settings.parameters == {}

    def test_empty_file(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "archengine.yml", "")
        settings = load_settings(tmp_path)
        assert settings.scan_paths == DEFAULT_SCAN_PATHS
        assert settings.source == tmp_path / "archengine.yml"

    def test_malformed_yaml(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        _write_file(tmp_path / "archengine.yml", "scan_paths: [unclosed\n")
        with caplog.at_level(logging.WARNING):
            settings = load_settings(tmp_path)
        assert settings == EngineSettings()
        assert "Failed to read" in caplog.text

    def test_top_level_not_a_mapping(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_file(tmp_path / "archengine.yml", "- just\n- a list\n")
        with caplog.at_level(logging.WARNING):
            settings = load_settings(tmp_path)
        assert settings == EngineSettings()
        assert "top level must be a mapping" in caplog.text

    def test_wrong_value_types_ignored(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_file(tmp_path / "archengine.yml", "scan_paths: 3\nparameters: [a, b]\n")
        with caplog.at_level(logging.WARNING):
            settings = load_settings(tmp_path)
        assert settings.scan_paths == DEFAULT_SCAN_PATHS
        assert settings.parameters == {}
        assert "Ignoring scan_paths" in caplog.text
        assert "Ignoring parameters" in caplog.text


class TestScanRoots:
    def test_relative_entries_resolve_against_project(self, tmp_path: Path) -> None:
        settings = EngineSettings(scan_paths=("tests", "checks/arch"))
        assert settings.scan_roots(tmp_path) == [
            (tmp_path / "tests").resolve(),
            (tmp_path / "checks" / "arch").resolve(),
        ]

    def test_absolute_entries_kept(self, tmp_path: Path) -> None:
        absolute = tmp_path / "elsewhere"
        settings = EngineSettings(scan_paths=(str(absolute),))
        assert settings.scan_roots(tmp_path / "project") == [absolute.resolve()]
