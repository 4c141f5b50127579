from __future__ import annotations

import importlib
from importlib import util
from typing import TYPE_CHECKING

from ._base import GraphAdapter
from ._proxy import BackendProxy

if TYPE_CHECKING:
    from ..core.graph import Graph

__all__ = [
    "available_backends",
    "ensure_materialized",
    "get_adapter",
    "get_proxy",
]

# ---------------------------------------------------------------------------
# 1. Central registry --------------------------------------------------------
# ---------------------------------------------------------------------------
# backend name -> (library import name, adapter submodule, adapter class)
_REGISTRY = {
    "igraph": ("igraph", ".igraph", "IGraphAdapter"),  # pip pkg is python-igraph; import is igraph
    "networkx": ("networkx", ".networkx", "NetworkXAdapter"),
}


def _is_installed(modname: str) -> bool:
    return util.find_spec(modname) is not None


def available_backends() -> dict:
    return {name: _is_installed(mod) for name, (mod, _, _) in _REGISTRY.items()}


# ---------------------------------------------------------------------------
# 2. Public helpers ----------------------------------------------------------
# ---------------------------------------------------------------------------
def get_adapter(name: str) -> GraphAdapter:
    """Return a *new* adapter instance of the requested backend."""
    try:
        modname, submod, cls = _REGISTRY[name.lower()]
    except KeyError:
        raise ValueError(f"No adapter registered for '{name}'") from None
    mod = importlib.import_module(submod, package=__package__)
    return getattr(mod, cls)()


def get_proxy(backend_name: str, graph: "Graph") -> BackendProxy:
    """Return a lazy proxy so users can write `G.nx.<algo>()`."""
    if backend_name not in _REGISTRY:
        raise ValueError(f"No backend '{backend_name}' registered")
    return BackendProxy(graph, backend_name)


def ensure_materialized(backend_name: str, graph: "Graph") -> dict:
    """
    Convert (or re-convert) *graph* into the requested backend object and
    cache the result on the graph's private state object.  Returns the cache
    entry: {"module": igraph, "graph": igraph.Graph, "version": int}
    """
    cache = graph._state._backend_cache               # per-instance cache
    entry = cache.get(backend_name)

    if entry is None or graph._state.dirty_since(entry["version"]) or entry["directed"] != graph.directed:
        # 1. import backend library lazily
        backend_module = importlib.import_module(_REGISTRY[backend_name][0])

        # 2. convert Graph -> backend graph using the registered adapter
        converted = get_adapter(backend_name).export(graph)

        # 3. stash result together with current version counter
        entry = cache[backend_name] = {
            "module":  backend_module,
            "graph":   converted,
            "version": graph._state.version,
            "directed": graph.directed,
        }

    return entry
