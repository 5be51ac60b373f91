"""Tests for lockgraph.exporter — DOT output and kind-based styling."""

from lockgraph.config import Config
from lockgraph.dep import DepKind
from lockgraph.exporter import edge_attributes, export_dot, node_attributes
from lockgraph.graph import DepGraph, Edge


def _app_lib_sys():
    g = DepGraph()
    root = g.find_or_add("app", "1.0")
    lib = g.add_child(root, "lib", "2.0")
    g.add_child(lib, "sys", "0.1")
    declared = {"lib": [DepKind.REGULAR]}
    g.set_resolved_kind(declared)
    return g, declared


def _build_override():
    """Root declares ``a`` as build-only; regular ``b`` also depends on ``a``."""
    g = DepGraph()
    root = g.find_or_add("app", "1.0")
    a = g.add_child(root, "a", "1.0")
    b = g.add_child(root, "b", "1.0")
    g.add_child(b, "a", "1.0")
    declared = {"a": [DepKind.BUILD], "b": [DepKind.REGULAR]}
    g.set_resolved_kind(declared)
    return g, declared


class TestExportDot:
    def test_regular_chain(self):
        g, declared = _app_lib_sys()
        dot = export_dot(g, declared)
        assert dot == (
            "digraph dependencies {\n"
            '\tn0 [label="app", color=black, shape=box];\n'
            '\tn1 [label="lib", color=black];\n'
            '\tn2 [label="sys", color=black];\n'
            "\n"
            "\tn0 -> n1;\n"
            "\tn1 -> n2;\n"
            "}\n"
        )
        assert "dashed" not in dot

    def test_root_edge_uses_declared_kind(self):
        g, declared = _build_override()
        assert g.nodes[1].is_regular
        dot = export_dot(g, declared)
        assert "\tn0 -> n1 [color=purple, style=dashed];\n" in dot
        assert "\tn0 -> n2;\n" in dot
        assert "\tn2 -> n1;\n" in dot

    def test_duplicate_versions_in_labels(self):
        g = DepGraph()
        root = g.find_or_add("app", "1.0")
        g.add_child(root, "foo", "1.0")
        g.add_child(root, "foo", "2.0")
        declared = {"foo": [DepKind.REGULAR]}
        g.set_resolved_kind(declared)
        g.show_version_on_duplicates()
        dot = export_dot(g, declared, Config(include_vers=False))
        assert 'label="foo v1.0"' in dot
        assert 'label="foo v2.0"' in dot
        assert 'label="app"' in dot

    def test_include_versions(self):
        g, declared = _app_lib_sys()
        dot = export_dot(g, declared, Config(include_vers=True))
        assert 'label="app v1.0"' in dot
        assert 'label="sys v0.1"' in dot

    def test_deterministic(self):
        g, declared = _build_override()
        first = export_dot(g, declared)
        second = export_dot(g, declared)
        assert first == second

    def test_orphans_pruned_unless_included(self):
        g, declared = _app_lib_sys()
        g.find_or_add("stray", "1.0")
        assert "stray" not in export_dot(g, declared)

        g, declared = _app_lib_sys()
        g.find_or_add("stray", "1.0")
        dot = export_dot(g, declared, Config(include_orphans=True))
        assert 'label="stray", color=orange' in dot

    def test_dangling_edges_with_orphans_included(self):
        g, declared = _app_lib_sys()
        g.add_child(7, "lib", "2.0")
        g.add_child(-1, "sys", "0.1")
        dot = export_dot(g, declared, Config(include_orphans=True))
        assert "n7" not in dot
        assert "n-1" not in dot
        assert "\tn1 -> n2;\n" in dot

    def test_self_loops_not_rendered(self):
        g, declared = _app_lib_sys()
        g.edges.append(Edge(1, 1))
        assert "n1 -> n1" not in export_dot(g, declared)

    def test_subgraph_cluster(self):
        g, declared = _app_lib_sys()
        config = Config(subgraph=["sys"], subgraph_name="system")
        dot = export_dot(g, declared, config)
        header, cluster = dot.split("\tsubgraph cluster_subgraph {\n")
        assert '\tn2 [label="sys"' not in header
        assert '\t\tlabel="system";\n' in cluster
        assert "\t\tcolor=brown;\n\t\tstyle=dashed;\n" in cluster
        assert '\t\tn2 [label="sys", color=black];\n' in cluster
        assert "\tn1 -> n2;\n" in cluster

    def test_subgraph_without_name(self):
        g, declared = _app_lib_sys()
        dot = export_dot(g, declared, Config(subgraph=["lib"]))
        assert "cluster_subgraph" in dot
        assert "label=\"\"" not in dot
        assert '\t\tlabel=' not in dot

    def test_write_to_file(self, tmp_path):
        g, declared = _app_lib_sys()
        out = tmp_path / "deps.dot"
        content = export_dot(g, declared, output=str(out))
        assert out.read_text(encoding="utf-8") == content


class TestAttributes:
    def test_node_colors_distinct(self):
        g = DepGraph()
        g.find_or_add("app", "1.0")
        attrs = []
        for i, kind in enumerate([DepKind.BUILD, DepKind.DEV, DepKind.OPTIONAL]):
            node_id = g.find_or_add(f"n{i}", "1")
            g.nodes[node_id].mark(kind)
            attrs.append(node_attributes(g.nodes[node_id], node_id))
        assert "color=purple" in attrs[0]
        assert "color=blue" in attrs[1]
        assert "color=red" in attrs[2]
        assert "shape=box" not in "".join(attrs)

    def test_edge_table(self):
        g = DepGraph()
        for name in ("root", "reg", "build", "dev", "opt", "unk"):
            g.find_or_add(name, "1")
        g.nodes[1].mark(DepKind.REGULAR)
        g.nodes[2].mark(DepKind.BUILD)
        g.nodes[3].mark(DepKind.DEV)
        g.nodes[4].mark(DepKind.OPTIONAL)

        assert edge_attributes(g, Edge(1, 1), {}) == ";"
        assert edge_attributes(g, Edge(1, 2), {}) == " [color=purple, style=dashed];"
        assert edge_attributes(g, Edge(1, 3), {}) == " [color=blue, style=dashed];"
        assert edge_attributes(g, Edge(1, 4), {}) == " [color=red, style=dashed];"
        assert edge_attributes(g, Edge(1, 5), {}) == " [color=orange, style=dashed];"
        assert edge_attributes(g, Edge(2, 1), {}) == " [color=purple, style=dashed];"
        assert edge_attributes(g, Edge(3, 2), {}) == " [color=blue, style=dashed];"
        assert edge_attributes(g, Edge(4, 3), {}) == " [color=red, style=dashed];"
        assert edge_attributes(g, Edge(5, 1), {}) == " [color=orange, style=dashed];"

    def test_root_edge_unknown_when_undeclared(self):
        g = DepGraph()
        g.find_or_add("app", "1")
        g.find_or_add("lib", "1")
        g.nodes[0].mark(DepKind.REGULAR)
        g.nodes[1].mark(DepKind.REGULAR)
        assert edge_attributes(g, Edge(0, 1), {}) == " [color=orange, style=dashed];"
        assert edge_attributes(g, Edge(0, 1), {"lib": [DepKind.DEV]}) == " [color=blue, style=dashed];"
