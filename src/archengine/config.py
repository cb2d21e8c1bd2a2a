"""Project settings: which roots to scan and how to filter rule classes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Checked in order; the first existing file wins.
CONFIG_FILE_NAMES: tuple[str, ...] = ("archengine.yml", ".archengine/config.yml")

# Default scan directories when the config has no scan_paths.
DEFAULT_SCAN_PATHS: tuple[str, ...] = ("tests",)


@dataclass(frozen=True)
class EngineSettings:
    """Settings read from ``archengine.yml`` (or ``.archengine/config.yml``)."""

    scan_paths: tuple[str, ...] = DEFAULT_SCAN_PATHS
    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    parameters: dict[str, str] = field(default_factory=dict)
    source: Path | None = None

    def scan_roots(self, project_root: Path) -> list[Path]:
        """Absolute scan paths; relative entries resolve against *project_root*."""
        return [(project_root / entry).resolve() for entry in self.scan_paths]


def find_config_file(project_root: Path) -> Path | None:
    for name in CONFIG_FILE_NAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


def _string_tuple(data: dict[str, object], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        return tuple(str(item) for item in value)
    logger.warning("Ignoring %s in config: expected a list, got %s", key, type(value).__name__)
    return default


def load_settings(project_root: Path) -> EngineSettings:
    """Load settings for *project_root*.

    Falls back to defaults for a missing file, an unreadable or malformed
    file, and for missing keys.
    """
    config_path = find_config_file(project_root)
    if config_path is None:
        return EngineSettings()

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        logger.warning("Failed to read %s, using default settings", config_path)
        return EngineSettings()

    if data is None:
        return EngineSettings(source=config_path)
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level must be a mapping", config_path)
        return EngineSettings()

    parameters = data.get("parameters", {})
    if not isinstance(parameters, dict):
        logger.warning("Ignoring parameters in %s: expected a mapping", config_path)
        parameters = {}

    return EngineSettings(
        scan_paths=_string_tuple(data, "scan_paths", DEFAULT_SCAN_PATHS),
        include_patterns=_string_tuple(data, "include_patterns", ()),
        exclude_patterns=_string_tuple(data, "exclude_patterns", ()),
        parameters={str(k): str(v) for k, v in parameters.items()},
        source=config_path,
    )
