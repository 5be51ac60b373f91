"""Project pipeline — manifest + lock file → normalized DepGraph."""

from __future__ import annotations

import logging
from pathlib import Path

from lockgraph.config import Config
from lockgraph.dep import DeclaredDepsMap, build_declared_map
from lockgraph.graph import DepGraph
from lockgraph.parser import LockedPackage, Manifest, parse_lock, parse_manifest, split_dep_ref

logger = logging.getLogger(__name__)


class ProjectError(Exception):
    """Raised when a project cannot be turned into a graph."""


class RootNotFoundError(ProjectError):
    """The manifest's package is missing from the lock file."""

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        super().__init__(f"Root package {name} v{version} not found in the lock file")


def find_manifest(filepath: str | Path, cwd: str | Path | None = None) -> Path:
    """Locate *filepath*, searching parent directories by file name."""
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    manifest = cwd / filepath
    file_name = manifest.name
    directory = manifest.parent

    if manifest.is_file():
        return manifest

    logger.info("Could not find %s in '%s', searching parent directories.", file_name, directory)
    for parent in directory.parents:
        candidate = parent / file_name
        if candidate.is_file():
            logger.info("Found %s in '%s'.", file_name, parent)
            return candidate

    raise ProjectError(f"Could not find `{filepath}` in `{cwd}` or any parent directory")


class Project:
    """Builds the dependency graph of one manifest / lock file pair."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()

    def graph(
        self,
        manifest_path: str | Path,
        lock_path: str | Path | None = None,
    ) -> tuple[DepGraph, DeclaredDepsMap]:
        """Load, ingest, root, and classify the graph.

        Raises :class:`RootNotFoundError` if the manifest's package is not
        among the locked packages.
        """
        manifest_path = Path(manifest_path)
        if lock_path is None:
            lock_path = manifest_path.parent / "Cargo.lock"

        manifest = parse_manifest(manifest_path, self.config)
        graph = self.build_graph(manifest, parse_lock(lock_path))

        if not graph.set_root(manifest.name, manifest.version):
            raise RootNotFoundError(manifest.name, manifest.version)

        declared = build_declared_map(manifest.declared)
        graph.set_resolved_kind(declared)

        if not self.config.include_vers:
            graph.show_version_on_duplicates()

        logger.debug("Built %r for %s v%s", graph, manifest.name, manifest.version)
        return graph, declared

    def build_graph(self, manifest: Manifest, packages: list[LockedPackage]) -> DepGraph:
        """Ingest locked packages, honoring the filter and declared sections."""
        graph = DepGraph()
        declared_names = {dep.name for dep in manifest.declared}

        versions_by_name: dict[str, list[str]] = {}
        for pkg in packages:
            versions_by_name.setdefault(pkg.name, []).append(pkg.version)

        for pkg in packages:
            if pkg.name != manifest.name and not self.config.honors_filter(pkg.name):
                continue

            is_root = pkg.name == manifest.name and pkg.version == manifest.version
            node_id = graph.find_or_add(pkg.name, pkg.version)

            for ref in pkg.dependencies:
                dep_name = ref.split(" ")[0]
                if not self.config.honors_filter(dep_name):
                    continue
                # Section not requested on the command line.
                if is_root and dep_name not in declared_names:
                    continue
                dep_name, dep_version = split_dep_ref(ref, versions_by_name)
                graph.add_child(node_id, dep_name, dep_version)

        return graph
