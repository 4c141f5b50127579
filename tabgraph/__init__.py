# tabgraph/__init__.py
"""tabgraph: single import, full API."""
from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    # namespaces
    "adapters": "tabgraph.adapters",
    "algorithms": "tabgraph.algorithms",
    "core": "tabgraph.core",
    "ops": "tabgraph.ops",
    "utils": "tabgraph.utils",
    # backend modules (direct convenience)
    "igraph": "tabgraph.adapters.igraph",
    "networkx": "tabgraph.adapters.networkx",
}

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # Core
    "Graph": ("tabgraph.core.graph", "Graph"),
    "Selection": ("tabgraph.core.selection", "Selection"),
    "SelectionKind": ("tabgraph.core.structure", "SelectionKind"),
    "Direction": ("tabgraph.core.structure", "Direction"),

    # Errors
    "ValidationError": ("tabgraph.core.errors", "ValidationError"),
    "InvalidGraphError": ("tabgraph.core.errors", "InvalidGraphError"),
    "EmptyTableError": ("tabgraph.core.errors", "EmptyTableError"),
    "MissingSelectionError": ("tabgraph.core.errors", "MissingSelectionError"),
    "ReservedAttributeError": ("tabgraph.core.errors", "ReservedAttributeError"),
    "InvalidArgumentError": ("tabgraph.core.errors", "InvalidArgumentError"),

    # Mutation with selection
    "mutate_attrs_with_selection": ("tabgraph.ops.mutate", "mutate_attrs_with_selection"),
    "mutate_attrs_ws": ("tabgraph.ops.mutate", "mutate_attrs_ws"),
    "mutate_node_attrs_ws": ("tabgraph.ops.mutate", "mutate_node_attrs_ws"),
    "mutate_edge_attrs_ws": ("tabgraph.ops.mutate", "mutate_edge_attrs_ws"),

    # Predicates
    "is_edge_loop": ("tabgraph.ops.predicates", "is_edge_loop"),
    "is_edge_mutual": ("tabgraph.ops.predicates", "is_edge_mutual"),
    "get_loop_edges": ("tabgraph.ops.predicates", "get_loop_edges"),
    "get_mutual_edges": ("tabgraph.ops.predicates", "get_mutual_edges"),

    # Similarity (python-igraph)
    "get_jaccard_similarity": ("tabgraph.algorithms.similarity", "get_jaccard_similarity"),
    "SimilarityMatrix": ("tabgraph.algorithms.similarity", "SimilarityMatrix"),

    # Backend views (optional dependencies)
    "to_igraph": ("tabgraph.adapters.igraph", "to_igraph"),
    "to_nx": ("tabgraph.adapters.networkx", "to_nx"),

    # Validation
    "is_valid_graph": ("tabgraph.utils.validation", "is_valid_graph"),
}

__all__ = sorted(set(list(_lazy_submodules) + list(_lazy_symbols)))


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))


try:
    __version__ = _pkg_version("tabgraph")
except PackageNotFoundError:
    __version__ = "0.0.0"
