from __future__ import annotations

import numbers

import polars as pl

from ..core.errors import InvalidArgumentError
from ..core.structure import FROM, ID, TO, SelectionKind
from ..utils.validation import require_rows, require_valid_graph

__all__ = [
    "is_edge_loop",
    "is_edge_mutual",
    "get_loop_edges",
    "get_mutual_edges",
]


def _edge_endpoints(graph, edge) -> tuple[int, int, int]:
    """INTERNAL: Validate a single edge id and return ``(edge_id, from, to)``."""
    require_valid_graph(graph)
    require_rows(graph, SelectionKind.EDGES, "edges can be selected")

    if hasattr(edge, "__len__") and not isinstance(edge, (str, bytes)):
        raise InvalidArgumentError("Only a single value should be provided for `edge`.")
    if isinstance(edge, bool) or not isinstance(edge, numbers.Real):
        raise InvalidArgumentError("The value provided for `edge` should be numeric.")

    rows = graph.edges.filter(pl.col(ID) == edge)
    if rows.height == 0:
        raise InvalidArgumentError("The provided edge ID is not present in the graph.")
    edge_id, u, v = rows.select(ID, FROM, TO).row(0)
    return edge_id, u, v


def is_edge_loop(graph, edge) -> bool:
    """Is the edge a loop edge (``from == to``)?

    Parameters
    ----------
    graph : Graph
    edge : int
        A single numeric edge id.

    Returns
    -------
    bool

    """
    _, u, v = _edge_endpoints(graph, edge)
    return u == v


def is_edge_mutual(graph, edge) -> bool:
    """Is there another edge running in the opposite direction?

    For edge ``u -> v`` this is True when some *other* edge ``v -> u`` exists.
    The queried edge never matches itself, so a lone loop ``v -> v`` is not
    mutual, while two parallel loops on ``v`` are mutual with each other.

    Parameters
    ----------
    graph : Graph
    edge : int
        A single numeric edge id.

    Returns
    -------
    bool

    """
    edge_id, u, v = _edge_endpoints(graph, edge)
    reverse = graph.edges.filter(
        (pl.col(FROM) == v) & (pl.col(TO) == u) & (pl.col(ID) != edge_id)
    )
    return reverse.height > 0


def get_loop_edges(graph) -> list[int]:
    """Ids of every loop edge, in edge table order."""
    require_valid_graph(graph)
    return graph.edges.filter(pl.col(FROM) == pl.col(TO))[ID].to_list()


def get_mutual_edges(graph) -> list[int]:
    """Ids of every edge for which :func:`is_edge_mutual` holds, in edge table order."""
    require_valid_graph(graph)
    e = graph.edges.select(ID, FROM, TO)
    reverse = e.select(
        pl.col(ID).alias("__reverse_id"),
        pl.col(TO).alias(FROM),
        pl.col(FROM).alias(TO),
    )
    matched = (
        e.join(reverse, on=[FROM, TO], how="inner")
        .filter(pl.col(ID) != pl.col("__reverse_id"))[ID]
        .to_list()
    )
    hits = set(matched)
    return [i for i in e[ID].to_list() if i in hits]
