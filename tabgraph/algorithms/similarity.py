from __future__ import annotations

import numbers

import numpy as np
import polars as pl

from ..adapters import manager as _backend_manager
from ..core.errors import InvalidArgumentError
from ..core.structure import ID, Direction
from ..utils.validation import require_valid_graph

__all__ = [
    "SimilarityMatrix",
    "get_jaccard_similarity",
]


class SimilarityMatrix:
    """Square matrix of similarity scores labelled by node id on both axes.

    Parameters
    ----------
    values : numpy.ndarray
        ``n x n`` float array.
    labels : tuple[int, ...]
        Node ids for rows and columns, in query order.

    """

    def __init__(self, values, labels):
        values = np.asarray(values, dtype=float).reshape(len(labels), len(labels))
        values.setflags(write=False)
        self._values = values
        self._labels = tuple(labels)
        self._index = {label: i for i, label in enumerate(self._labels)}

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def labels(self) -> tuple:
        return self._labels

    @property
    def shape(self) -> tuple[int, int]:
        return self._values.shape

    def loc(self, i, j) -> float:
        """Score between node ids ``i`` and ``j``."""
        try:
            return float(self._values[self._index[i], self._index[j]])
        except KeyError:
            raise KeyError(f"Node id not in matrix labels: {i if i not in self._index else j}") from None

    def to_polars(self) -> pl.DataFrame:
        """DataFrame with an ``id`` column followed by one column per node id (as string)."""
        data = {ID: list(self._labels)}
        for k, label in enumerate(self._labels):
            data[str(label)] = self._values[:, k].tolist()
        return pl.DataFrame(data, schema_overrides={ID: pl.Int64})

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"<SimilarityMatrix | n={len(self._labels)} · labels={list(self._labels)}>"


def _coerce_direction(direction) -> Direction:
    try:
        return Direction(direction)
    except ValueError:
        raise InvalidArgumentError("Valid options for `direction` are `all`, `in`, or `out`.") from None


def get_jaccard_similarity(graph, nodes=None, direction="all", round_to: int = 3) -> SimilarityMatrix:
    """Get the Jaccard similarity coefficient scores for one or more nodes.

    For each pair of queried nodes the score is ``|N(i) & N(j)| / |N(i) | N(j)|``
    where ``N`` is the neighborhood under ``direction``. The computation is
    delegated to ``igraph.Graph.similarity_jaccard`` with ``loops=False`` (a node
    is not its own neighbour); the diagonal is 1 by its
    convention.

    Parameters
    ----------
    graph : Graph
    nodes : Iterable[int], optional
        Node ids to score. All nodes (node table order) when omitted.
    direction : {"all", "out", "in"}, default "all"
        ``all`` ignores edge direction; ``out`` uses successors only and ``in``
        predecessors only.
    round_to : int, default 3
        Decimal places kept (``numpy.round``, half to even).

    Returns
    -------
    SimilarityMatrix
        Rows and columns labelled by node id, in query order.

    Raises
    ------
    InvalidGraphError
        The graph is not valid.
    InvalidArgumentError
        Unknown ``direction``, bad ``round_to``, empty ``nodes`` or node ids not in the graph.

    """
    require_valid_graph(graph)
    mode = _coerce_direction(direction)
    if isinstance(round_to, bool) or not isinstance(round_to, numbers.Integral) or round_to < 0:
        raise InvalidArgumentError("`round_to` must be a non-negative integer.")

    node_ids = graph.get_node_ids()
    if nodes is None:
        query = node_ids
    else:
        if isinstance(nodes, (str, bytes)) or not hasattr(nodes, "__iter__"):
            nodes = [nodes]
        query = list(nodes)
        if not query:
            raise InvalidArgumentError("At least one node must be provided in `nodes`.")
        known = set(node_ids)
        if not all(n in known for n in query):
            raise InvalidArgumentError("One or more nodes provided not in graph.")
        query = [int(n) for n in query]

    if not query:
        return SimilarityMatrix(np.zeros((0, 0)), ())

    ig_graph = _backend_manager.ensure_materialized("igraph", graph)["graph"]
    position = {nid: i for i, nid in enumerate(node_ids)}
    j_sim_values = ig_graph.similarity_jaccard(
        vertices=[position[n] for n in query],
        mode=mode.value,
        loops=False,
    )

    # Round all values in matrix
    return SimilarityMatrix(np.round(np.asarray(j_sim_values, dtype=float), int(round_to)), query)
