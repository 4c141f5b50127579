from .validation import (
    has_edge_selection,
    has_edges,
    has_node_selection,
    has_nodes,
    is_valid_graph,
    validity_problems,
)

__all__ = [
    "has_edge_selection",
    "has_edges",
    "has_node_selection",
    "has_nodes",
    "is_valid_graph",
    "validity_problems",
]
