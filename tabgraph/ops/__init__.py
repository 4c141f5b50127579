from .mutate import (
    mutate_attrs_with_selection,
    mutate_attrs_ws,
    mutate_edge_attrs_ws,
    mutate_node_attrs_ws,
)
from .predicates import get_loop_edges, get_mutual_edges, is_edge_loop, is_edge_mutual

__all__ = [
    "mutate_attrs_with_selection",
    "mutate_attrs_ws",
    "mutate_edge_attrs_ws",
    "mutate_node_attrs_ws",
    "get_loop_edges",
    "get_mutual_edges",
    "is_edge_loop",
    "is_edge_mutual",
]
