"""Dependency records — declared kinds and resolved lock-file packages."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class DepKind(Enum):
    """How a dependency is declared, or reached from the root project."""

    REGULAR = "regular"
    BUILD = "build"
    DEV = "dev"
    OPTIONAL = "optional"
    UNKNOWN = "unknown"

    @classmethod
    def from_kinds(cls, kinds: Iterable[DepKind]) -> DepKind:
        """Collapse several kinds into one: Regular > Build > Dev > Optional."""
        present = set(kinds)
        for kind in _PRIORITY:
            if kind in present:
                return kind
        return cls.UNKNOWN


_PRIORITY = (DepKind.REGULAR, DepKind.BUILD, DepKind.DEV, DepKind.OPTIONAL)

_FLAGS = {
    DepKind.REGULAR: "is_regular",
    DepKind.BUILD: "is_build",
    DepKind.DEV: "is_dev",
    DepKind.OPTIONAL: "is_optional",
}


@dataclass(frozen=True)
class DeclaredDep:
    """A dependency listed directly in the manifest."""

    name: str
    kind: DepKind


@dataclass
class ResolvedDep:
    """One ``(name, version)`` package present in the lock file."""

    name: str
    version: str
    is_regular: bool = False
    is_build: bool = False
    is_dev: bool = False
    is_optional: bool = False
    force_write_version: bool = False

    def kinds(self) -> set[DepKind]:
        return {kind for kind, flag in _FLAGS.items() if getattr(self, flag)}

    def kind(self) -> DepKind:
        """The single kind used for coloring."""
        return DepKind.from_kinds(self.kinds())

    def mark(self, kind: DepKind) -> bool:
        """Set the flag for *kind*. Returns ``True`` if it was not set before."""
        flag = _FLAGS.get(kind)
        if flag is None or getattr(self, flag):
            return False
        setattr(self, flag, True)
        return True

    def label(self, include_vers: bool = False) -> str:
        if include_vers or self.force_write_version:
            return f"{self.name} v{self.version}"
        return self.name

    def __repr__(self) -> str:
        return f"ResolvedDep({self.name} v{self.version})"


DeclaredDepsMap = dict[str, list[DepKind]]


def build_declared_map(declared: Iterable[DeclaredDep]) -> DeclaredDepsMap:
    """Group declared dependencies by name, keeping declaration order."""
    deps_map: DeclaredDepsMap = {}
    for dep in declared:
        deps_map.setdefault(dep.name, []).append(dep.kind)
    return deps_map
