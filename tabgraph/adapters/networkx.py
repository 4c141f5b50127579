try:
    import networkx as nx
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'networkx' is not installed. "
        "Install with: pip install networkx"
    ) from e

from typing import Any

from ..core.structure import FROM, ID, TO
from ._base import GraphAdapter


def _serialize_value(v: Any) -> Any:
    if hasattr(v, "items"):
        return dict(v)
    return v


def _row_attrs(row: dict, skip, public_only: bool) -> dict:
    out = {}
    for k, v in row.items():
        if k in skip or v is None:
            continue
        if public_only and str(k).startswith("__"):
            continue
        out[k] = _serialize_value(v)
    return out


def to_nx(graph, *, directed=None, public_only: bool = True):
    """
    Export a Graph to a NetworkX Multi(Di)Graph.

    Parameters
    ----------
    graph : Graph
        Source graph instance.
    directed : bool, optional
        Override the graph's own directedness (MultiDiGraph vs MultiGraph).
    public_only : bool
        If True, strip private attrs starting with "__".

    Returns
    -------
    networkx.MultiGraph | networkx.MultiDiGraph

    Notes
    -----
    Nodes are keyed by their integer id and edges by ``key=<edge id>``.
    Null attribute values are left out of the attribute dicts.
    """
    directed = graph.directed if directed is None else bool(directed)
    G = nx.MultiDiGraph() if directed else nx.MultiGraph()

    for row in graph.nodes.iter_rows(named=True):
        G.add_node(row[ID], **_row_attrs(row, {ID}, public_only))

    for row in graph.edges.iter_rows(named=True):
        G.add_edge(row[FROM], row[TO], key=row[ID], **_row_attrs(row, {ID, FROM, TO}, public_only))

    return G


class NetworkXAdapter(GraphAdapter):
    def export(self, graph, **kwargs):
        return to_nx(graph, **kwargs)
