try:
    import igraph as ig
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'python-igraph' is not installed. "
        "Install with: pip install python-igraph"
    ) from e

from typing import Any

from ..core.structure import FROM, ID, TO
from ._base import GraphAdapter


def _serialize_value(v: Any) -> Any:
    if hasattr(v, "items"):
        return dict(v)
    return v


def to_igraph(graph, *, directed=None, public_only: bool = True) -> "ig.Graph":
    """
    Export a Graph to python-igraph.

    igraph requires integer vertex indices; vertex ``i`` is the ``i``-th row of
    the node table. The tabgraph id is kept both as vertex attribute ``id`` and
    as its string form in ``name`` (so ``G.vs.find(name="3")`` works). Edge ids
    are stored in edge attribute ``eid``.

    Parameters
    ----------
    graph : Graph
        Source graph instance.
    directed : bool, optional
        Override the graph's own directedness.
    public_only : bool
        If True, strip private attrs starting with "__".

    Returns
    -------
    igraph.Graph
    """
    directed = graph.directed if directed is None else bool(directed)
    nodes = graph.nodes
    edges = graph.edges

    node_ids = nodes[ID].to_list()
    vidx = {v: i for i, v in enumerate(node_ids)}

    G = ig.Graph(directed=directed)
    G.add_vertices(len(node_ids))

    for col in nodes.columns:
        if col == ID or (public_only and col.startswith("__")):
            continue
        G.vs[col] = [_serialize_value(v) for v in nodes[col].to_list()]
    G.vs[ID] = node_ids
    G.vs["name"] = [str(v) for v in node_ids]

    pairs = [(vidx[u], vidx[v]) for u, v in edges.select(FROM, TO).iter_rows()]
    G.add_edges(pairs)
    if pairs:
        for col in edges.columns:
            if col in (ID, FROM, TO) or (public_only and col.startswith("__")):
                continue
            G.es[col] = [_serialize_value(v) for v in edges[col].to_list()]
        G.es["eid"] = edges[ID].to_list()

    return G


class IGraphAdapter(GraphAdapter):
    def export(self, graph, **kwargs):
        return to_igraph(graph, **kwargs)
