"""Run configuration — defaults, YAML config files, and CLI overrides."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

import yaml


class ConfigError(Exception):
    """Raised when a configuration file has unknown options or bad values."""


@dataclass(frozen=True)
class Config:
    """Options shared by the loaders and the renderer.

    Example ``lockgraph.yaml``::

        include-versions: true
        dev-deps: true
        subgraph: [serde, serde_derive]
        subgraph-name: serde
    """

    dot_file: str | None = None
    filter: list[str] | None = None
    include_orphans: bool = False
    include_vers: bool = False
    manifest_path: str = "Cargo.toml"
    subgraph: list[str] | None = None
    subgraph_name: str | None = None

    regular_deps: bool = True
    build_deps: bool = False
    dev_deps: bool = False
    optional_deps: bool = False

    @classmethod
    def from_file(cls, filepath: str | Path) -> Config:
        """Load a YAML mapping of option names to values."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        try:
            data = yaml.safe_load(filepath.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"{filepath} must contain a mapping of options")

        values: dict = {}
        all_deps = False
        for raw_key, value in data.items():
            key = str(raw_key).replace("-", "_")
            key = _ALIASES.get(key, key)
            if key == "all_deps":
                all_deps = _check_type(key, value, bool)
                continue
            if key not in _FIELD_TYPES:
                raise ConfigError(f"Unknown option '{raw_key}' in {filepath}")
            values[key] = _check_type(key, value, _FIELD_TYPES[key])

        return cls().merged(all_deps=all_deps, **values)

    def merged(self, all_deps: bool = False, **overrides) -> Config:
        """Return a copy with every non-``None`` override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        for key in changes:
            if key not in _FIELD_TYPES:
                raise ConfigError(f"Unknown option '{key}'")
        if all_deps:
            changes.update(build_deps=True, dev_deps=True, optional_deps=True)
        return replace(self, **changes)

    def honors_filter(self, name: str) -> bool:
        return self.filter is None or name in self.filter


_FIELD_TYPES: dict[str, type] = {
    "dot_file": str,
    "filter": list,
    "include_orphans": bool,
    "include_vers": bool,
    "manifest_path": str,
    "subgraph": list,
    "subgraph_name": str,
    "regular_deps": bool,
    "build_deps": bool,
    "dev_deps": bool,
    "optional_deps": bool,
}

_ALIASES = {"include_versions": "include_vers"}


def _check_type(key: str, value: object, expected: type) -> object:
    if expected is list:
        if not isinstance(value, list):
            raise ConfigError(f"Option '{key}' must be a list")
        return [str(v) for v in value]
    if not isinstance(value, expected):
        raise ConfigError(f"Option '{key}' must be a {expected.__name__}")
    return value
