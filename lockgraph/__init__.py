"""lockgraph — render a resolved lock file as a Graphviz dependency graph."""

__version__ = "0.1.0"
