"""Graph data structures — DepGraph (indexed nodes + edge list) and its passes."""

from __future__ import annotations

import logging
from collections import deque
from itertools import groupby
from typing import NamedTuple

from lockgraph.dep import DeclaredDepsMap, ResolvedDep

logger = logging.getLogger(__name__)


class Edge(NamedTuple):
    """``source`` depends on ``target``; both are node ids."""

    source: int
    target: int

    def __str__(self) -> str:
        return f"n{self.source} -> n{self.target}"


class DepGraph:
    """Directed graph of resolved packages.

    A node's id is its position in ``nodes``. After :meth:`set_root`
    succeeds, id 0 is the root project. Ids are only stable until the next
    pruning pass, so never hold on to one across :meth:`remove_orphans`.
    """

    def __init__(self) -> None:
        self.nodes: list[ResolvedDep] = []
        self.edges: list[Edge] = []

    # ── Construction ──────────────────────────────────────────

    def find(self, name: str, version: str) -> int | None:
        for i, dep in enumerate(self.nodes):
            if dep.name == name and dep.version == version:
                return i
        return None

    def find_or_add(self, name: str, version: str) -> int:
        """Return the id of ``(name, version)``, appending a node if needed."""
        found = self.find(name, version)
        if found is not None:
            return found
        self.nodes.append(ResolvedDep(name=name, version=version))
        return len(self.nodes) - 1

    def add_child(self, parent: int, name: str, version: str) -> int:
        """Add the edge *parent* → ``(name, version)`` and return the child id.

        *parent* is not range-checked here; later passes drop dangling edges.
        """
        child = self.find_or_add(name, version)
        self.edges.append(Edge(parent, child))
        return child

    # ── Queries ───────────────────────────────────────────────

    def get(self, node_id: int) -> ResolvedDep | None:
        if 0 <= node_id < len(self.nodes):
            return self.nodes[node_id]
        return None

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    # ── Root selection ────────────────────────────────────────

    def set_root(self, name: str, version: str) -> bool:
        """Move ``(name, version)`` to id 0, swapping with the current occupant.

        Returns ``False`` if no such node exists.
        """
        root_id = self.find(name, version)
        if root_id is None:
            return False
        if root_id == 0:
            return True

        self.nodes[0], self.nodes[root_id] = self.nodes[root_id], self.nodes[0]

        def _swap(node_id: int) -> int:
            if node_id == 0:
                return root_id
            if node_id == root_id:
                return 0
            return node_id

        self.edges = [Edge(_swap(src), _swap(dst)) for src, dst in self.edges]
        return True

    # ── Normalization ─────────────────────────────────────────

    def normalize_edges(self) -> None:
        """Drop dangling and duplicate edges, then sort by (source, target)."""
        count = len(self.nodes)
        self.edges = sorted({e for e in self.edges if 0 <= e.source < count and 0 <= e.target < count})

    def set_resolved_kind(self, declared: DeclaredDepsMap) -> int:
        """Propagate dependency kinds from the root along every edge.

        Edges leaving the root take the kinds the manifest declares for the
        child; any other edge copies the source's flags onto the target.
        Passes repeat until nothing changes. Returns the number of passes.
        """
        if not self.nodes:
            return 0

        self.nodes[0].is_regular = True
        self.normalize_edges()

        passes = 0
        changed = True
        while changed:
            changed = False
            passes += 1
            for src, dst in self.edges:
                child = self.nodes[dst]
                kinds = declared.get(child.name, ()) if src == 0 else self.nodes[src].kinds()
                for kind in kinds:
                    if child.mark(kind):
                        changed = True

        logger.debug("Kind propagation converged after %d pass(es)", passes)
        return passes

    def show_version_on_duplicates(self) -> None:
        """Flag every node whose name is shared with a node of another version."""
        by_name = sorted(range(len(self.nodes)), key=lambda i: self.nodes[i].name)
        for name, group in groupby(by_name, key=lambda i: self.nodes[i].name):
            ids = list(group)
            if len(ids) < 2:
                continue
            logger.debug("%s appears in %d versions", name, len(ids))
            for node_id in ids:
                self.nodes[node_id].force_write_version = True

    def remove_orphans(self) -> int:
        """Drop every non-root node that nothing depends on.

        Removal cascades: children reachable only from removed nodes are
        removed too. Survivors keep their relative order and are renumbered
        in one step. Returns the number of nodes removed.
        """
        self.normalize_edges()
        count = len(self.nodes)
        if count == 0:
            return 0

        in_degree = [0] * count
        children: list[list[int]] = [[] for _ in range(count)]
        for src, dst in self.edges:
            in_degree[dst] += 1
            children[src].append(dst)

        removed = [False] * count
        queue: deque[int] = deque(i for i in range(1, count) if in_degree[i] == 0)
        while queue:
            node_id = queue.popleft()
            removed[node_id] = True
            for child in children[node_id]:
                in_degree[child] -= 1
                if in_degree[child] == 0 and child != 0:
                    queue.append(child)

        remap: dict[int, int] = {}
        kept: list[ResolvedDep] = []
        for old_id, dep in enumerate(self.nodes):
            if not removed[old_id]:
                remap[old_id] = len(kept)
                kept.append(dep)

        dropped = count - len(kept)
        self.nodes = kept
        self.edges = [
            Edge(remap[src], remap[dst])
            for src, dst in self.edges
            if not removed[src] and not removed[dst]
        ]
        if dropped:
            logger.debug("Removed %d orphan node(s)", dropped)
        return dropped

    def remove_self_loops(self) -> int:
        before = len(self.edges)
        self.edges = [e for e in self.edges if e.source != e.target]
        return before - len(self.edges)

    def finalize(self, include_orphans: bool = False) -> None:
        """Prepare the graph for rendering. Safe to call more than once."""
        self.normalize_edges()
        if not include_orphans:
            self.remove_orphans()
        self.remove_self_loops()

    # ── Dunder helpers ────────────────────────────────────────

    def __len__(self) -> int:
        return self.node_count()

    def __repr__(self) -> str:
        return f"DepGraph(nodes={self.node_count()}, edges={self.edge_count()})"
