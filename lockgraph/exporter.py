"""Export engine — Graphviz DOT output with kind-based styling."""

from __future__ import annotations

import io
from pathlib import Path
from typing import TextIO

from lockgraph.config import Config
from lockgraph.dep import DeclaredDepsMap, DepKind, ResolvedDep
from lockgraph.graph import DepGraph, Edge

NODE_COLORS: dict[DepKind, str] = {
    DepKind.REGULAR: "black",
    DepKind.BUILD: "purple",
    DepKind.DEV: "blue",
    DepKind.OPTIONAL: "red",
    DepKind.UNKNOWN: "orange",
}


# ── Attributes ───────────────────────────────────────────────


def node_attributes(dep: ResolvedDep, node_id: int, include_vers: bool = False) -> str:
    """``[label="...", color=...]`` for one node; the root is drawn as a box."""
    shape = ", shape=box" if node_id == 0 else ""
    return f' [label="{dep.label(include_vers)}", color={NODE_COLORS[dep.kind()]}{shape}];'


def edge_attributes(graph: DepGraph, edge: Edge, declared: DeclaredDepsMap) -> str:
    """Style an edge from the kinds of its two ends.

    An edge leaving the root is styled by how the manifest declares the
    child, not by the child's propagated kind.
    """
    parent = graph.nodes[edge.source].kind()
    child_dep = graph.nodes[edge.target]
    if edge.source == 0:
        child = DepKind.from_kinds(declared.get(child_dep.name, ()))
    else:
        child = child_dep.kind()

    if parent is DepKind.REGULAR and child is DepKind.REGULAR:
        return ";"
    for kind in (DepKind.BUILD, DepKind.DEV, DepKind.OPTIONAL):
        if parent is kind or (parent is DepKind.REGULAR and child is kind):
            return f" [color={NODE_COLORS[kind]}, style=dashed];"
    return f" [color={NODE_COLORS[DepKind.UNKNOWN]}, style=dashed];"


# ── DOT (Graphviz) ───────────────────────────────────────────


def render_dot(graph: DepGraph, declared: DeclaredDepsMap, config: Config, stream: TextIO) -> None:
    """Write an already finalized *graph* to *stream*."""
    subgraph = set(config.subgraph) if config.subgraph is not None else None

    stream.write("digraph dependencies {\n")
    for i, dep in enumerate(graph.nodes):
        if subgraph is not None and dep.name in subgraph:
            continue
        stream.write(f"\tn{i}{node_attributes(dep, i, config.include_vers)}\n")
    stream.write("\n")

    if subgraph is not None:
        stream.write("\tsubgraph cluster_subgraph {\n")
        if config.subgraph_name is not None:
            stream.write(f'\t\tlabel="{config.subgraph_name}";\n')
        stream.write("\t\tcolor=brown;\n")
        stream.write("\t\tstyle=dashed;\n")
        stream.write("\n")
        for i, dep in enumerate(graph.nodes):
            if dep.name in subgraph:
                stream.write(f"\t\tn{i}{node_attributes(dep, i, config.include_vers)}\n")
        stream.write("\t}\n\n")

    for edge in graph.edges:
        stream.write(f"\t{edge}{edge_attributes(graph, edge, declared)}\n")
    stream.write("}\n")


def export_dot(
    graph: DepGraph,
    declared: DeclaredDepsMap,
    config: Config | None = None,
    output: str | Path | None = None,
) -> str:
    """Finalize *graph* and return its DOT representation.

    If *output* is provided, also writes the content to that file path.
    """
    config = config or Config()
    graph.finalize(include_orphans=config.include_orphans)

    buffer = io.StringIO()
    render_dot(graph, declared, config, buffer)
    content = buffer.getvalue()

    if output:
        with Path(output).open("w", encoding="utf-8") as fh:
            fh.write(content)

    return content
