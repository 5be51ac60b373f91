"""CLI entry point — command routing via Click."""

from __future__ import annotations

import functools
import logging
from collections import Counter

import click

from lockgraph import __version__
from lockgraph.config import Config, ConfigError
from lockgraph.dep import DeclaredDepsMap, DepKind
from lockgraph.exporter import export_dot
from lockgraph.graph import DepGraph
from lockgraph.parser import ParseError
from lockgraph.project import Project, ProjectError, find_manifest


_SHARED_OPTIONS = [
    click.option("--config", "config_file", default=None, help="YAML file with default options."),
    click.option("--manifest-path", "-m", default=None, help="Path to Cargo.toml (default: search upwards)."),
    click.option("--lock-path", default=None, help="Path to Cargo.lock (default: next to the manifest)."),
    click.option("--filter", "filter_", multiple=True, help="Only include these packages (repeatable)."),
    click.option("--include-orphans/--no-include-orphans", default=None, help="Keep packages nothing depends on."),
    click.option("--include-versions/--no-include-versions", default=None, help="Always show versions in labels."),
    click.option("--regular-deps/--no-regular-deps", default=None, help="Read [dependencies]."),
    click.option("--build-deps", is_flag=True, help="Read [build-dependencies]."),
    click.option("--dev-deps", is_flag=True, help="Read [dev-dependencies]."),
    click.option("--optional-deps", is_flag=True, help="Read optional [dependencies]."),
    click.option("--all-deps", is_flag=True, help="Read every dependency section."),
]

# Options only some commands take; passed through into Config.
_PASSTHROUGH = ("dot_file", "subgraph", "subgraph_name")


def _build_config(config_file: str | None, all_deps: bool, **overrides) -> Config:
    try:
        base = Config.from_file(config_file) if config_file else Config()
        return base.merged(all_deps=all_deps, **overrides)
    except ConfigError as e:
        raise click.ClickException(f"Config error: {e}") from e


def _load_graph(config: Config, lock_path: str | None) -> tuple[DepGraph, DeclaredDepsMap]:
    """Shared helper: locate manifest → parse → build graph."""
    try:
        manifest = find_manifest(config.manifest_path)
        return Project(config).graph(manifest, lock_path)
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e
    except ParseError as e:
        raise click.ClickException(f"Parse error: {e}") from e
    except ProjectError as e:
        raise click.ClickException(str(e)) from e


def _common(func):
    """Add the shared options and hand the command a merged ``Config``.

    An option left off the command line keeps the config file value.
    """

    @functools.wraps(func)
    def wrapper(**kwargs):
        extra = {key: kwargs.pop(key) for key in _PASSTHROUGH if key in kwargs}
        if "subgraph" in extra:
            extra["subgraph"] = list(extra["subgraph"]) or None
        config = _build_config(
            kwargs.pop("config_file"),
            kwargs.pop("all_deps"),
            manifest_path=kwargs.pop("manifest_path"),
            filter=list(kwargs.pop("filter_")) or None,
            include_orphans=kwargs.pop("include_orphans"),
            include_vers=kwargs.pop("include_versions"),
            regular_deps=kwargs.pop("regular_deps"),
            build_deps=kwargs.pop("build_deps") or None,
            dev_deps=kwargs.pop("dev_deps") or None,
            optional_deps=kwargs.pop("optional_deps") or None,
            **extra,
        )
        return func(config=config, lock_path=kwargs.pop("lock_path"), **kwargs)

    for option in reversed(_SHARED_OPTIONS):
        wrapper = option(wrapper)
    return wrapper


# ── Main group ───────────────────────────────────────────────


@click.group()
@click.version_option(__version__, prog_name="lockgraph")
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
def main(verbose: bool) -> None:
    """Lock-file Graph — render resolved Cargo dependencies as a Graphviz graph."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── render ───────────────────────────────────────────────────


@main.command()
@click.option("--dot-file", "-o", default=None, help="Write output to file instead of stdout.")
@click.option("--subgraph", multiple=True, help="Group these packages in a cluster (repeatable).")
@click.option("--subgraph-name", default=None, help="Label of the cluster.")
@_common
def render(config: Config, lock_path: str | None) -> None:
    """Export the dependency graph as Graphviz DOT."""
    graph, declared = _load_graph(config, lock_path)
    content = export_dot(graph, declared, config, output=config.dot_file)

    if not config.dot_file:
        click.echo(content, nl=False)
    else:
        click.echo(click.style(f"✓ Written to {config.dot_file}", fg="green"))


# ── summary ──────────────────────────────────────────────────


@main.command()
@_common
def summary(config: Config, lock_path: str | None) -> None:
    """Print node, edge, and per-kind counts for the project."""
    graph, _ = _load_graph(config, lock_path)
    graph.finalize(include_orphans=config.include_orphans)

    kinds = Counter(dep.kind() for dep in graph.nodes)
    names = Counter(dep.name for dep in graph.nodes)
    duplicates = sorted(name for name, count in names.items() if count > 1)

    root = graph.get(0)
    click.echo(click.style("─── Dependency Graph Summary ───", fg="cyan", bold=True))
    click.echo(f"  Root        : {root.label(True) if root else '(none)'}")
    click.echo(f"  Nodes       : {graph.node_count()}")
    click.echo(f"  Edges       : {graph.edge_count()}")
    for kind in DepKind:
        click.echo(f"  {kind.value.capitalize():<12}: {kinds.get(kind, 0)}")

    if duplicates:
        click.echo(click.style(f"  Duplicates  : {', '.join(duplicates)} ⚠", fg="yellow"))
    else:
        click.echo(click.style("  Duplicates  : None ✓", fg="green"))
