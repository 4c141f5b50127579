from enum import Enum


class SelectionKind(str, Enum):
    """Which table a selection scopes (NODES, EDGES).

    Attributes:
        NODES: Selection of node ids
        EDGES: Selection of edge ids
    """

    NODES = "nodes"
    EDGES = "edges"


class Direction(str, Enum):
    """Neighborhood direction used by similarity scores (ALL, OUT, IN)."""

    ALL = "all"
    OUT = "out"
    IN = "in"


# Canonical column names
ID = "id"
FROM = "from"
TO = "to"

# Structural columns no attribute pathway may write
NODE_RESERVED = frozenset({ID})
EDGE_RESERVED = frozenset({ID, FROM, TO})

MISSING = None

"""
Tables are plain Polars DataFrames keyed by an integer ``id`` column.
Missing attribute values are stored as Polars nulls (``None`` on the Python side).
"""

__all__ = [
    "SelectionKind",
    "Direction",
    "ID",
    "FROM",
    "TO",
    "NODE_RESERVED",
    "EDGE_RESERVED",
    "MISSING",
]
