import inspect
import json
import numbers
import time
import warnings
from datetime import UTC, datetime
from enum import Enum
from functools import wraps

import numpy as np
import polars as pl

from ..adapters import manager as _backend_manager
from .errors import InvalidArgumentError, MissingSelectionError, ReservedAttributeError
from .selection import Selection
from .structure import EDGE_RESERVED, FROM, ID, MISSING, NODE_RESERVED, TO, SelectionKind
from ._state import _State

__all__ = [
    "Graph",
]


def _audit_value(x):
    """INTERNAL: JSON-safe form of an audited argument or return value."""
    if isinstance(x, Enum):
        return x.value
    if isinstance(x, Selection):
        return {"kind": x.kind.value, "ids": list(x.ids)}
    if isinstance(x, np.generic):
        return x.item()
    if x is None or isinstance(x, (bool, int, float, str)):
        return x
    if isinstance(x, dict):
        return {str(k): _audit_value(v) for k, v in x.items()}
    if isinstance(x, (list, tuple, range, set, frozenset, pl.Series, np.ndarray)):
        return [_audit_value(v) for v in x]
    if isinstance(x, pl.Expr):
        return str(x)
    # frames, callables, ...: keep the type only
    return f"<<{type(x).__name__}>>"


def _audited(fn):
    """INTERNAL: Record one audit event per call of a table or selection mutator.

    The event carries the bound arguments (defaults applied) and, when not
    ``None``, the return value under ``result``. Nothing is logged if ``fn``
    raises.
    """
    sig = inspect.signature(fn)

    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        bound = sig.bind(self, *args, **kwargs)
        bound.apply_defaults()
        result = fn(self, *args, **kwargs)
        fields = {k: v for k, v in bound.arguments.items() if k != "self"}
        if result is not None:
            fields["result"] = result
        self._log_event(fn.__name__, **fields)
        return result

    return wrapper


class Graph:
    """Graph stored as two Polars tables plus an active selection.

    The node table has an ``id`` column followed by attribute columns; the edge
    table has ``id``, ``from`` and ``to`` followed by attribute columns. Both are
    kept rectangular: a column introduced for one row is null everywhere else.

    Parameters
    ----------
    directed : bool, default True
        Directedness used when deriving backend (igraph / NetworkX) views.
    history : bool, default True
        Record an append-only audit event for every mutation.
    backup_hook : callable, optional
        ``hook(graph)`` called after each successful attribute mutation batch.
        Exceptions raised by the hook are reported as warnings.
    graph_name : str, optional
        Free-form label kept in ``graph_attributes["name"]``.

    Notes
    -----
    - Ids are positive integers handed out by monotonic counters, so an id is
      never reused after its row is removed.
    - ``selection`` is ``None`` when nothing is selected. An existing selection
      with no members is a distinct state (see :meth:`clear_selection`).

    See Also
    --------
    tabgraph.ops.mutate.mutate_attrs_with_selection, tabgraph.ops.predicates

    """

    _NODE_RESERVED = NODE_RESERVED
    _EDGE_RESERVED = EDGE_RESERVED

    # Construction

    def __init__(self, directed=True, *, history=True, backup_hook=None, graph_name=None):
        self.directed = bool(directed)

        # Tables
        self.nodes = pl.DataFrame(schema={ID: pl.Int64})
        self.edges = pl.DataFrame(schema={ID: pl.Int64, FROM: pl.Int64, TO: pl.Int64})
        self.selection = None
        self.graph_attributes = {}
        if graph_name is not None:
            self.graph_attributes["name"] = graph_name

        # Id counters (never rewound)
        self._next_node_id = 1
        self._next_edge_id = 1

        self.backup_hook = backup_hook
        self._state = _State()

        # History and Timeline
        self._history_enabled = bool(history)
        self._history = []  # list[dict]
        self._version = 0
        self._history_clock0 = time.perf_counter_ns()

    def __repr__(self) -> str:
        sel = "none" if self.selection is None else f"{self.selection.kind.value}:{len(self.selection)}"
        return (
            f"<Graph | V={self.nodes.height} · E={self.edges.height} · "
            f"directed={self.directed} · selection={sel}>"
        )

    def _touch(self) -> None:
        # invalidates cached backend views
        self._state.bump()

    # Id helpers

    def _coerce_id(self, value, what: str) -> int:
        if isinstance(value, bool) or not isinstance(value, numbers.Number):
            raise InvalidArgumentError(f"The value provided for `{what}` should be numeric.")
        try:
            as_int = int(value)
        except (TypeError, ValueError, OverflowError):
            raise InvalidArgumentError(f"The value provided for `{what}` should be a whole number.") from None
        if as_int != value:
            raise InvalidArgumentError(f"The value provided for `{what}` should be a whole number.")
        return as_int

    def _resolve_ids(self, df: pl.DataFrame, ids, what: str) -> list[int]:
        """INTERNAL: Validate ``ids`` against ``df`` (``None`` means every row, in table order)."""
        existing = df[ID].to_list()
        if ids is None:
            return existing
        if isinstance(ids, (str, bytes)) or not hasattr(ids, "__iter__"):
            ids = [ids]
        out = [self._coerce_id(i, what) for i in ids]
        known = set(existing)
        missing = [i for i in out if i not in known]
        if missing:
            raise InvalidArgumentError(f"One or more {what}s provided not in graph: {missing}")
        return out

    def _table(self, kind: SelectionKind) -> pl.DataFrame:
        return self.nodes if kind is SelectionKind.NODES else self.edges

    # Builders

    def _append_row(self, df: pl.DataFrame, row: dict) -> pl.DataFrame:
        return pl.concat([df, pl.DataFrame([row])], how="diagonal_relaxed")

    @_audited
    def add_node(self, **attrs) -> int:
        """Add a node and return its new id.

        Parameters
        ----------
        **attrs
            Node attributes. ``id`` is assigned by the graph and cannot be passed.

        Returns
        -------
        int

        """
        bad = sorted(set(attrs) & self._NODE_RESERVED)
        if bad:
            raise ReservedAttributeError(bad)
        node_id = self._next_node_id
        self.nodes = self._append_row(self.nodes, {ID: node_id, **attrs})
        self._next_node_id += 1
        self._touch()
        return node_id

    @_audited
    def add_nodes(self, n: int, **attrs) -> list[int]:
        """Add ``n`` nodes sharing the same attributes; return their ids."""
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n < 0:
            raise InvalidArgumentError("`n` must be a non-negative integer.")
        bad = sorted(set(attrs) & self._NODE_RESERVED)
        if bad:
            raise ReservedAttributeError(bad)
        if n == 0:
            return []
        ids = list(range(self._next_node_id, self._next_node_id + n))
        block = pl.DataFrame({ID: ids, **{k: [v] * n for k, v in attrs.items()}})
        self.nodes = pl.concat([self.nodes, block], how="diagonal_relaxed")
        self._next_node_id += n
        self._touch()
        return ids

    @_audited
    def add_edge(self, from_, to, **attrs) -> int:
        """Add an edge ``from_ -> to`` and return its new id.

        Parameters
        ----------
        from_ : int
            Source node id.
        to : int
            Target node id.
        **attrs
            Edge attributes (``id``, ``from`` and ``to`` are reserved).

        Raises
        ------
        InvalidArgumentError
            If either endpoint is not a node of this graph.

        """
        bad = sorted(set(attrs) & self._EDGE_RESERVED)
        if bad:
            raise ReservedAttributeError(bad)
        u, v = self._resolve_ids(self.nodes, [from_, to], "node")
        edge_id = self._next_edge_id
        self.edges = self._append_row(self.edges, {ID: edge_id, FROM: u, TO: v, **attrs})
        self._next_edge_id += 1
        self._touch()
        return edge_id

    @_audited
    def remove_edge(self, edge_id) -> None:
        (eid,) = self._resolve_ids(self.edges, [edge_id], "edge")
        self.edges = self.edges.filter(pl.col(ID) != eid)
        if self.selection is not None and self.selection.kind is SelectionKind.EDGES:
            self.selection = self.selection.discard([eid])
        self._touch()

    @_audited
    def remove_node(self, node_id) -> None:
        """Remove a node together with every edge incident to it."""
        (nid,) = self._resolve_ids(self.nodes, [node_id], "node")
        incident = (pl.col(FROM) == nid) | (pl.col(TO) == nid)
        dropped = self.edges.filter(incident)[ID].to_list()
        self.edges = self.edges.filter(~incident)
        self.nodes = self.nodes.filter(pl.col(ID) != nid)
        if self.selection is not None:
            gone = [nid] if self.selection.kind is SelectionKind.NODES else dropped
            self.selection = self.selection.discard(gone)
        self._touch()

    # Attributes

    def _set_attrs(self, kind: SelectionKind, attr: str, values, ids) -> pl.DataFrame:
        reserved = self._NODE_RESERVED if kind is SelectionKind.NODES else self._EDGE_RESERVED
        if attr in reserved:
            raise ReservedAttributeError([attr])
        df = self._table(kind)
        targets = self._resolve_ids(df, ids, "node" if kind is SelectionKind.NODES else "edge")

        if isinstance(values, (list, tuple, pl.Series, np.ndarray)):
            values = list(values)
            if len(values) != len(targets):
                raise InvalidArgumentError(
                    f"Got {len(values)} values for {len(targets)} rows; "
                    "provide one value per row or a single value."
                )
        else:
            values = [values] * len(targets)

        lookup = dict(zip(targets, values))
        prior = df[attr].to_list() if attr in df.columns else [MISSING] * df.height
        merged = [lookup[i] if i in lookup else p for i, p in zip(df[ID].to_list(), prior)]
        return df.with_columns(pl.Series(attr, merged, strict=False))

    @_audited
    def set_node_attrs(self, attr, values, ids=None) -> None:
        """Set node attribute ``attr`` for ``ids`` (every node when omitted).

        ``values`` is either a single value broadcast to all targets or one value
        per target, in the order of ``ids`` (table order when ``ids`` is omitted).
        Untargeted nodes keep their value, or get null if the column is new.
        """
        self.nodes = self._set_attrs(SelectionKind.NODES, attr, values, ids)
        self._touch()

    @_audited
    def set_edge_attrs(self, attr, values, ids=None) -> None:
        """Edge counterpart of :meth:`set_node_attrs`."""
        self.edges = self._set_attrs(SelectionKind.EDGES, attr, values, ids)
        self._touch()

    def get_node_df(self) -> pl.DataFrame:
        return self.nodes.clone()

    def get_edge_df(self) -> pl.DataFrame:
        return self.edges.clone()

    def get_node_ids(self) -> list[int]:
        return self.nodes[ID].to_list()

    def get_edge_ids(self) -> list[int]:
        return self.edges[ID].to_list()

    def number_of_nodes(self) -> int:
        return self.nodes.height

    def number_of_edges(self) -> int:
        return self.edges.height

    # Selection

    def _select(self, kind: SelectionKind, ids) -> None:
        current = self.selection
        if current is None or current.kind is not kind:
            current = Selection(kind)
        self.selection = current.replace(ids)

    @_audited
    def select_nodes(self, nodes=None) -> None:
        """Replace the active selection with ``nodes`` (all nodes when omitted)."""
        self._select(SelectionKind.NODES, self._resolve_ids(self.nodes, nodes, "node"))

    @_audited
    def select_edges(self, edges=None) -> None:
        """Replace the active selection with ``edges`` (all edges when omitted)."""
        self._select(SelectionKind.EDGES, self._resolve_ids(self.edges, edges, "edge"))

    @_audited
    def invert_selection(self) -> None:
        """Select every id of the scoped table that is currently not selected."""
        if self.selection is None:
            raise MissingSelectionError("There is no selection available to invert.")
        universe = self._table(self.selection.kind)[ID].to_list()
        self.selection = self.selection.invert(universe)

    @_audited
    def clear_selection(self, drop: bool = False) -> None:
        """Empty the active selection.

        Parameters
        ----------
        drop : bool, default False
            If True, remove the selection altogether (``selection`` becomes
            ``None``); otherwise keep an empty selection of the same kind.

        """
        if drop or self.selection is None:
            self.selection = None
        else:
            self.selection = self.selection.cleared()

    def get_selection(self) -> tuple:
        return () if self.selection is None else self.selection.ids

    @property
    def selection_kind(self):
        return None if self.selection is None else self.selection.kind

    # Copy

    def copy(self):
        """Independent copy: tables, selection, counters, options and history."""
        new_graph = Graph(
            directed=self.directed,
            history=self._history_enabled,
            backup_hook=self.backup_hook,
        )
        new_graph.nodes = self.nodes.clone()
        new_graph.edges = self.edges.clone()
        new_graph.selection = self.selection
        new_graph.graph_attributes = dict(self.graph_attributes)
        new_graph._next_node_id = self._next_node_id
        new_graph._next_edge_id = self._next_edge_id
        new_graph._history = [dict(evt) for evt in self._history]
        new_graph._version = self._version
        return new_graph

    # Backends

    def export(self, fmt: str = "igraph", **kwargs):
        """Export the graph through the adapter registered as ``fmt`` ("igraph" or "networkx")."""
        adapter = _backend_manager.get_adapter(fmt)
        return adapter.export(self, **kwargs)

    @property
    def ig(self):
        """On-demand accessor for python-igraph methods.

        Examples
        --------
        >>> G.ig.degree()
        """
        return _backend_manager.get_proxy("igraph", self)

    @property
    def nx(self):
        """On-demand accessor for NetworkX algorithms.

        Examples
        --------
        >>> G.nx.degree_centrality()
        """
        return _backend_manager.get_proxy("networkx", self)

    # Post-mutation hook

    def _after_mutation(self) -> None:
        if self.backup_hook is None:
            return
        try:
            self.backup_hook(self)
        except Exception as exc:
            warnings.warn(
                f"Backup hook failed after mutation: {exc!r}",
                RuntimeWarning,
                stacklevel=3,
            )

    # History and Timeline

    def _log_event(self, op: str, **fields):
        """INTERNAL: Append one audit event; bumps the history version."""
        if not self._history_enabled:
            return
        self._version += 1
        evt = {
            "version": self._version,
            "ts_utc": datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z"),
            "mono_ns": time.perf_counter_ns() - self._history_clock0,
            "op": op,
        }
        evt.update((k, _audit_value(v)) for k, v in fields.items())
        self._history.append(evt)

    def history(self, as_df: bool = False):
        """Return the append-only mutation history.

        Parameters
        ----------
        as_df : bool, default False
            If True, return a Polars DF [DataFrame]; otherwise return a list of dicts.

        Returns
        -------
        list[dict] or polars.DataFrame
            Each event includes: 'version', 'ts_utc' (UTC ISO-8601), 'mono_ns'
            (monotonic nanoseconds since graph creation), 'op', and op-specific
            fields. In the DataFrame form op-specific fields are JSON-encoded
            strings so events of different operations share one schema.

        """
        if not as_df:
            return list(self._history)
        core = ("version", "ts_utc", "mono_ns", "op")
        rows = [
            {k: (v if k in core or v is None else json.dumps(v)) for k, v in evt.items()}
            for evt in self._history
        ]
        if not rows:
            return pl.DataFrame(
                schema={"version": pl.Int64, "ts_utc": pl.Utf8, "mono_ns": pl.Int64, "op": pl.Utf8}
            )
        return pl.from_dicts(rows, infer_schema_length=None)

    def export_history(self, path: str):
        """Write the mutation history to disk.

        Parameters
        ----------
        path : str
            Output path. Supported extensions: '.parquet', '.ndjson' (a.k.a. '.jsonl'),
            '.json', '.csv'. Unknown extensions default to Parquet by appending '.parquet'.

        Returns
        -------
        int
            Number of events written. Returns 0 if the history is empty.

        """
        if not self._history:
            return 0
        p = str(path).lower()
        if p.endswith(".ndjson") or p.endswith(".jsonl"):
            with open(path, "w", encoding="utf-8") as f:
                for evt in self._history:
                    f.write(json.dumps(evt, ensure_ascii=False) + "\n")
            return len(self._history)
        if p.endswith(".json"):
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self._history, f, ensure_ascii=False)
            return len(self._history)
        df = self.history(as_df=True)
        if p.endswith(".csv"):
            df.write_csv(path)
        elif p.endswith(".parquet"):
            df.write_parquet(path)
        else:
            # Default to Parquet if unknown
            df.write_parquet(str(path) + ".parquet")
        return len(df)

    def enable_history(self, flag: bool = True):
        """Enable or disable in-memory mutation logging."""
        self._history_enabled = bool(flag)

    def clear_history(self):
        """Clear the in-memory mutation log. Files exported earlier are left alone."""
        self._history.clear()

    def mark(self, label: str):
        """Insert a manual marker into the mutation history."""
        self._log_event("mark", label=label)
