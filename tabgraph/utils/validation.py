import polars as pl

from ..core.errors import (
    EmptyTableError,
    InvalidGraphError,
    MissingSelectionError,
)
from ..core.structure import FROM, ID, TO, SelectionKind

__all__ = [
    "validity_problems",
    "is_valid_graph",
    "has_nodes",
    "has_edges",
    "has_node_selection",
    "has_edge_selection",
    "require_valid_graph",
    "require_rows",
    "require_selection",
]


def _id_column_problems(df: pl.DataFrame, col: str, table: str) -> list[str]:
    if col not in df.columns:
        return [f"{table} table has no `{col}` column"]
    dtype = df.schema[col]
    if df.height and not dtype.is_integer():
        return [f"{table} table column `{col}` must hold integers, got {dtype}"]
    if df[col].null_count():
        return [f"{table} table column `{col}` contains missing values"]
    return []


def validity_problems(graph) -> list[str]:
    """List every structural invariant the graph currently violates.

    Checks both tables exist and carry their key columns, ids are unique positive
    integers, every edge endpoint refers to an existing node, and the active
    selection only holds ids of the table it scopes.

    Returns
    -------
    list[str]
        Human-readable problems; empty when the graph is valid.

    """
    nodes = getattr(graph, "nodes", None)
    edges = getattr(graph, "edges", None)
    if not isinstance(nodes, pl.DataFrame) or not isinstance(edges, pl.DataFrame):
        return ["graph must hold Polars DataFrames in `nodes` and `edges`"]

    problems = _id_column_problems(nodes, ID, "node")
    for col in (ID, FROM, TO):
        problems += _id_column_problems(edges, col, "edge")
    if problems:
        return problems

    for df, table in ((nodes, "node"), (edges, "edge")):
        if df[ID].n_unique() != df.height:
            problems.append(f"{table} ids are not unique")
        if df.height and df[ID].min() < 1:
            problems.append(f"{table} ids must be positive")

    node_ids = set(nodes[ID].to_list())
    dangling = [
        eid
        for eid, u, v in edges.select(ID, FROM, TO).iter_rows()
        if u not in node_ids or v not in node_ids
    ]
    if dangling:
        problems.append(f"edges {dangling} reference nodes that do not exist")

    selection = getattr(graph, "selection", None)
    if selection is not None:
        scope = node_ids if selection.kind is SelectionKind.NODES else set(edges[ID].to_list())
        stray = [i for i in selection.ids if i not in scope]
        if stray:
            problems.append(f"selection holds unknown {selection.kind.value} ids {stray}")
    return problems


def is_valid_graph(graph) -> bool:
    return not validity_problems(graph)


def has_nodes(graph) -> bool:
    return graph.nodes.height > 0


def has_edges(graph) -> bool:
    return graph.edges.height > 0


def has_node_selection(graph) -> bool:
    """True when a node selection exists (it may hold no ids)."""
    return graph.selection is not None and graph.selection.kind is SelectionKind.NODES


def has_edge_selection(graph) -> bool:
    """True when an edge selection exists (it may hold no ids)."""
    return graph.selection is not None and graph.selection.kind is SelectionKind.EDGES


def require_valid_graph(graph) -> None:
    problems = validity_problems(graph)
    if problems:
        raise InvalidGraphError("The graph object is not valid: " + "; ".join(problems))


def require_rows(graph, kind: SelectionKind, action: str) -> None:
    if kind is SelectionKind.NODES and not has_nodes(graph):
        raise EmptyTableError(f"The graph contains no nodes, so, no {action}.")
    if kind is SelectionKind.EDGES and not has_edges(graph):
        raise EmptyTableError(f"The graph contains no edges, so, no {action}.")


def require_selection(graph, kind: SelectionKind) -> None:
    present = has_node_selection(graph) if kind is SelectionKind.NODES else has_edge_selection(graph)
    if not present:
        noun = "nodes" if kind is SelectionKind.NODES else "edges"
        raise MissingSelectionError(f"There is no selection of {noun} available.")
