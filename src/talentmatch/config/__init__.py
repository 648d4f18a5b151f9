"""Bundled YAML resources and operator config files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

PACKAGE_CONFIG_DIR = Path(__file__).resolve().parent


class ConfigFileError(ValueError):
    """A YAML document could not be read as a settings mapping."""


class ConfigManager:
    """Read bundled resources by name and operator files by path."""

    def __init__(self, base_path: str | Path = PACKAGE_CONFIG_DIR):
        self._base_path = Path(base_path)

    def resource(self, name: str) -> Path:
        return self._base_path / f"{name}.yaml"

    def load(self, name: str) -> dict[str, Any]:
        """Load a bundled resource such as ``skill_catalog``."""
        return self.load_path(self.resource(name))

    def load_path(self, path: str | Path) -> dict[str, Any]:
        """Load a YAML mapping; an empty document yields ``{}``."""
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as handle:
                document = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigFileError(f"{path}: invalid YAML ({exc})") from exc
        if document is None:
            return {}
        if not isinstance(document, dict):
            raise ConfigFileError(f"{path}: top-level document must be a mapping")
        return document


__all__ = ["ConfigFileError", "ConfigManager", "PACKAGE_CONFIG_DIR"]
