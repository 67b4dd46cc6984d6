"""reqtraq.config - Configuration loading and defaults.

Configuration lives in a .reqtraq.toml file at (or above) the working
directory, parsed with tomlkit and merged over DEFAULT_CONFIG.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import tomlkit

from reqtraq.validation.attributes import AttributeRule, parse_schema

CONFIG_FILENAME = ".reqtraq.toml"

DEFAULT_CONFIG: dict[str, Any] = {
    "project": {"name": "Reqtraq"},
    "directories": {"certdocs": "certdocs", "code": "."},
    "documents": {"extensions": [".md"]},
    "code": {"extensions": [".c", ".cc", ".h", ".hh", ".go", ".py"]},
    "attributes": [],
}


def parse_toml_document(content: str) -> tomlkit.TOMLDocument:
    """Parse TOML text, keeping formatting for round-trips."""
    return tomlkit.parse(content)


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python values."""
    return parse_toml_document(content).unwrap()


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into a copy of base. Tables merge, other values replace."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


class ConfigLoader:
    """Read-only view over a merged configuration dict with dotted-key access."""

    def __init__(self, data: dict[str, Any], path: Path | None = None) -> None:
        self._data = data
        self.path = path

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Path | None = None) -> "ConfigLoader":
        """Create a loader from raw settings, applying defaults."""
        return cls(merge_configs(DEFAULT_CONFIG, data), path)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted key (e.g. "directories.certdocs")."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)


def find_git_root(start: Path) -> Path | None:
    """Walk up from start to the directory containing .git, if any."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def find_config_file(start: Path) -> Path | None:
    """Find .reqtraq.toml in start or its parents, stopping at the git root."""
    current = start.resolve()
    stop = find_git_root(current)
    for candidate in (current, *current.parents):
        config_path = candidate / CONFIG_FILENAME
        if config_path.is_file():
            return config_path
        if stop is not None and candidate == stop:
            break
    return None


def load_config(path: Path | None = None) -> ConfigLoader:
    """Load configuration from a TOML file, or the defaults if path is None.

    Raises:
        OSError: If the file cannot be read.
        tomlkit.exceptions.ParseError: If the file is not valid TOML.
    """
    if path is None:
        return ConfigLoader.from_dict({})
    data = parse_toml(path.read_text(encoding="utf-8"))
    return ConfigLoader.from_dict(data, path)


def get_attribute_schema(config: ConfigLoader) -> list[AttributeRule]:
    """Build the attribute schema from the [[attributes]] tables."""
    return parse_schema(config.get("attributes", []) or [])


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "ConfigLoader",
    "find_config_file",
    "find_git_root",
    "get_attribute_schema",
    "load_config",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
]
