"""Attribute mutation masked by the active selection.

Formulas are evaluated over the whole table, then written back only for the
selected rows. Unselected rows keep their value for an existing attribute and
get null for a newly created one. Formulas run in the order given and each one
sees the (masked) result of the previous one.
"""
from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from types import MappingProxyType

import polars as pl

from ..core.errors import InvalidArgumentError, ReservedAttributeError
from ..core.structure import EDGE_RESERVED, ID, MISSING, NODE_RESERVED, SelectionKind
from ..utils.validation import require_rows, require_selection, require_valid_graph

__all__ = [
    "mutate_attrs_with_selection",
    "mutate_attrs_ws",
    "mutate_node_attrs_ws",
    "mutate_edge_attrs_ws",
]

_CANDIDATE = "__tabgraph_candidate__"


def _coerce_kind(kind) -> SelectionKind:
    try:
        return SelectionKind(kind)
    except ValueError:
        raise InvalidArgumentError(
            f"Valid options for `kind` are `nodes` or `edges`, got {kind!r}."
        ) from None


def _normalize_expressions(expressions) -> list[tuple[str, object]]:
    """INTERNAL: Accept a mapping or an iterable of ``(name, formula)`` pairs."""
    if isinstance(expressions, Mapping):
        pairs = list(expressions.items())
    elif isinstance(expressions, (str, bytes)) or not isinstance(expressions, Iterable):
        raise InvalidArgumentError("`expressions` must be a mapping or a list of (name, formula) pairs.")
    else:
        pairs = []
        for item in expressions:
            if not isinstance(item, (tuple, list)) or len(item) != 2:
                raise InvalidArgumentError(f"Expected a (name, formula) pair, got {item!r}.")
            pairs.append((item[0], item[1]))

    if not pairs:
        raise InvalidArgumentError("At least one expression must be provided.")
    for name, _ in pairs:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError(f"Attribute names must be non-empty strings, got {name!r}.")
    return pairs


def _candidate(df: pl.DataFrame, formula):
    """INTERNAL: Turn ``formula`` into something ``with_columns`` evaluates over every row.

    - ``pl.Expr``: used as is (column-wise, nulls propagate).
    - callable: called once per row with a read-only ``{column: value}`` mapping.
    - anything else: broadcast literal.
    """
    if isinstance(formula, pl.Expr):
        return formula.alias(_CANDIDATE)
    if callable(formula):
        values = [formula(MappingProxyType(row)) for row in df.iter_rows(named=True)]
        return pl.Series(_CANDIDATE, values, strict=False)
    return pl.lit(formula).alias(_CANDIDATE)


def _apply_formula(df: pl.DataFrame, name: str, formula, selected: pl.Expr) -> pl.DataFrame:
    staged = df.with_columns(_candidate(df, formula))
    # existing attribute: unselected rows keep their value; new one: null
    previous = pl.col(name) if name in df.columns else pl.lit(MISSING)
    staged = staged.with_columns(
        pl.when(selected).then(pl.col(_CANDIDATE)).otherwise(previous).alias(name)
    )
    return staged.drop(_CANDIDATE)


def _mutate(graph, kind: SelectionKind, expressions, op: str):
    time_function_start = time.perf_counter()

    # Validation happens before any table is touched
    require_valid_graph(graph)
    noun = "node" if kind is SelectionKind.NODES else "edge"
    require_rows(graph, kind, f"{noun} attributes can undergo mutation")
    require_selection(graph, kind)

    pairs = _normalize_expressions(expressions)
    reserved = NODE_RESERVED if kind is SelectionKind.NODES else EDGE_RESERVED
    offending = [name for name, _ in pairs if name in reserved]
    if offending:
        raise ReservedAttributeError(sorted(set(offending)))

    table = "nodes" if kind is SelectionKind.NODES else "edges"
    selected = pl.col(ID).is_in(list(graph.selection.ids))

    # Stage every formula on a scratch frame; commit once all succeeded
    staged = getattr(graph, table)
    for name, formula in pairs:
        staged = _apply_formula(staged, name, formula, selected)

    setattr(graph, table, staged)
    graph._touch()

    graph._log_event(
        op,
        kind=kind,
        attributes=[name for name, _ in pairs],
        selected=len(graph.selection),
        duration_ms=(time.perf_counter() - time_function_start) * 1000.0,
        nodes=graph.nodes.height,
        edges=graph.edges.height,
    )
    graph._after_mutation()
    return graph


def mutate_attrs_with_selection(graph, kind, expressions):
    """Mutate node or edge attributes only for the rows in the active selection.

    Parameters
    ----------
    graph : Graph
        Graph to mutate in place.
    kind : SelectionKind or {"nodes", "edges"}
        Table to mutate; a selection of the same kind must exist (it may be empty).
    expressions : Mapping[str, formula] or Iterable[tuple[str, formula]]
        Ordered ``(attribute, formula)`` pairs. A formula is a Polars expression,
        a callable receiving a read-only row mapping, or a literal value.

    Returns
    -------
    Graph
        The same graph object.

    Raises
    ------
    InvalidGraphError, EmptyTableError, MissingSelectionError
        Graph, table or selection preconditions fail.
    ReservedAttributeError
        A formula targets ``id`` (or ``from``/``to`` for edges).
    InvalidArgumentError
        ``kind`` or ``expressions`` are malformed.

    Notes
    -----
    - The batch is atomic: if a formula raises while being evaluated, the error
      propagates and the graph keeps the tables it had before the call.
    - Unselected rows keep their values. The column itself holds a single
      dtype, so when a formula yields a wider type than the existing column
      the column is promoted to the Polars supertype (an ``Int64`` column
      written with a ``Float64`` formula becomes ``Float64``, and an
      unselected ``3`` reads back as ``3.0``).
    - One audit event is recorded per successful call.

    """
    return _mutate(graph, _coerce_kind(kind), expressions, "mutate_attrs_with_selection")


def mutate_attrs_ws(graph, kind, /, **formulas):
    """Keyword form of :func:`mutate_attrs_with_selection` (keyword order is kept)."""
    return _mutate(graph, _coerce_kind(kind), formulas, "mutate_attrs_ws")


def mutate_node_attrs_ws(graph, /, **formulas):
    """Mutate node attribute values for the nodes in the active selection.

    Examples
    --------
    >>> G.select_nodes([1, 2])
    >>> mutate_node_attrs_ws(G, value=pl.col("value") * 10)
    """
    return _mutate(graph, SelectionKind.NODES, formulas, "mutate_node_attrs_ws")


def mutate_edge_attrs_ws(graph, /, **formulas):
    """Mutate edge attribute values for the edges in the active selection.

    Examples
    --------
    >>> G.select_edges([2, 3])
    >>> mutate_edge_attrs_ws(
    ...     G,
    ...     length=(pl.col("width").log() + 2).round(2),
    ...     area=pl.col("width") * pl.col("length"),
    ... )
    """
    return _mutate(graph, SelectionKind.EDGES, formulas, "mutate_edge_attrs_ws")
