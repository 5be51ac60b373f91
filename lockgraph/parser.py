"""Parsers for Cargo manifests (Cargo.toml) and lock files (Cargo.lock)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from lockgraph.config import Config
from lockgraph.dep import DeclaredDep, DepKind


class ParseError(Exception):
    """Raised when a manifest or lock file contains unusable content."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = path
        detail = f" ({path})" if path else ""
        super().__init__(f"{message}{detail}")


@dataclass
class Manifest:
    """Root project identity plus its directly declared dependencies."""

    name: str
    version: str
    declared: list[DeclaredDep] = field(default_factory=list)


@dataclass
class LockedPackage:
    """A ``[[package]]`` entry: dependency refs are raw ``"name version"`` strings."""

    name: str
    version: str
    dependencies: list[str] = field(default_factory=list)


def load_toml(filepath: str | Path) -> dict:
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")
    try:
        return tomllib.loads(filepath.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ParseError(f"Invalid TOML: {e}", path=filepath) from e


# ── Cargo.toml ───────────────────────────────────────────────


def parse_manifest(filepath: str | Path, config: Config | None = None) -> Manifest:
    """Read the root package identity and declared dependencies.

    Only the sections enabled in *config* are read. Entries under
    ``[dependencies]`` marked ``optional = true`` are Optional, the rest
    Regular; ``[build-dependencies]`` and ``[dev-dependencies]`` map to
    Build and Dev.
    """
    config = config or Config()
    data = load_toml(filepath)

    package = data.get("package")
    if package is None:
        raise ParseError("No 'package' table found", path=filepath)
    if not isinstance(package, dict):
        raise ParseError("Could not parse 'package' as a table", path=filepath)
    name, version = package.get("name"), package.get("version")
    if not isinstance(name, str) or not isinstance(version, str):
        raise ParseError("'package' needs a string name and version", path=filepath)

    declared: list[DeclaredDep] = []

    for dep_name, spec in _section(data, "dependencies", filepath).items():
        if isinstance(spec, dict) and spec.get("optional") is True:
            if config.optional_deps:
                declared.append(DeclaredDep(_package_name(dep_name, spec), DepKind.OPTIONAL))
        elif config.regular_deps:
            declared.append(DeclaredDep(_package_name(dep_name, spec), DepKind.REGULAR))

    if config.build_deps:
        for dep_name, spec in _section(data, "build-dependencies", filepath).items():
            declared.append(DeclaredDep(_package_name(dep_name, spec), DepKind.BUILD))

    if config.dev_deps:
        for dep_name, spec in _section(data, "dev-dependencies", filepath).items():
            declared.append(DeclaredDep(_package_name(dep_name, spec), DepKind.DEV))

    return Manifest(name=name, version=version, declared=declared)


def _section(data: dict, key: str, filepath: str | Path) -> dict:
    table = data.get(key, {})
    if not isinstance(table, dict):
        raise ParseError(f"'{key}' must be a table", path=filepath)
    return table


def _package_name(dep_name: str, spec: object) -> str:
    """Renamed dependencies (``foo = { package = "bar" }``) lock as ``bar``."""
    if isinstance(spec, dict) and isinstance(spec.get("package"), str):
        return spec["package"]
    return dep_name


# ── Cargo.lock ───────────────────────────────────────────────


def parse_lock(filepath: str | Path) -> list[LockedPackage]:
    """Read every resolved package from a lock file.

    Handles the legacy ``[root]`` table as well as ``[[package]]`` entries.
    """
    data = load_toml(filepath)

    entries: list = []
    if "root" in data:
        entries.append(data["root"])
    packages = data.get("package", [])
    if not isinstance(packages, list):
        raise ParseError("'package' must be an array of tables", path=filepath)
    entries.extend(packages)

    locked: list[LockedPackage] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ParseError("Lock entry is not a table", path=filepath)
        name, version = entry.get("name"), entry.get("version")
        if not isinstance(name, str):
            raise ParseError("Lock entry has no string 'name' field", path=filepath)
        if not isinstance(version, str):
            raise ParseError(f"Lock entry '{name}' has no string 'version' field", path=filepath)
        deps = entry.get("dependencies", [])
        if not isinstance(deps, list):
            raise ParseError(f"'dependencies' of '{name}' must be an array", path=filepath)
        locked.append(LockedPackage(name=name, version=version, dependencies=[str(d) for d in deps]))

    return locked


def split_dep_ref(ref: str, versions_by_name: dict[str, list[str]]) -> tuple[str, str]:
    """Split a lock dependency reference into ``(name, version)``.

    ``"serde 1.0.1 (registry+...)"`` carries its version. Newer lock files
    write a bare ``"serde"`` when only one version is locked; that version
    is looked up in *versions_by_name*.
    """
    parts = ref.split(" ")
    if len(parts) >= 2 and parts[1]:
        return parts[0], parts[1]

    name = parts[0]
    versions = versions_by_name.get(name, [])
    if len(versions) != 1:
        raise ParseError(f"Cannot resolve the version of dependency reference '{ref}'")
    return name, versions[0]
