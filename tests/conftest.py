import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]  # project root
sys.path.insert(0, str(ROOT))

from tabgraph.core.graph import Graph


@pytest.fixture
def path_graph():
    """4-node path 1->2->3->4 with edge attribute `width` = [3.4, 2.3, 7.2]."""
    G = Graph(directed=True)
    G.add_nodes(4)
    for u in (1, 2, 3):
        G.add_edge(u, u + 1)
    G.set_edge_attrs("width", [3.4, 2.3, 7.2])
    return G


@pytest.fixture
def mutual_graph():
    """Edges 1:1->2, 2:2->1 (mutual pair), 3:1->3 (lone), 4:3->3 (loop)."""
    G = Graph(directed=True)
    G.add_nodes(4)
    G.add_edge(1, 2)
    G.add_edge(2, 1)
    G.add_edge(1, 3)
    G.add_edge(3, 3)
    return G


@pytest.fixture
def valued_nodes():
    """Five nodes with a numeric `value` and a string `label`."""
    G = Graph()
    for i, label in enumerate("abcde", start=1):
        G.add_node(value=float(i), label=label)
    G.add_edge(1, 2)
    G.add_edge(2, 3)
    return G
