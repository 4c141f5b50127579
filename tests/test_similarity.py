import numpy as np
import polars as pl
import pytest

pytest.importorskip("igraph")

from tabgraph.algorithms.similarity import SimilarityMatrix, get_jaccard_similarity
from tabgraph.core.errors import InvalidArgumentError, InvalidGraphError
from tabgraph.core.graph import Graph
from tabgraph.core.structure import Direction


@pytest.fixture
def fan_graph():
    """Directed edges 1->3, 2->3, 1->4."""
    G = Graph(directed=True)
    G.add_nodes(4)
    G.add_edge(1, 3)
    G.add_edge(2, 3)
    G.add_edge(1, 4)
    return G


@pytest.fixture
def triangle_tail():
    """Undirected triangle 1-2-3 with a tail 3-4."""
    G = Graph(directed=False)
    G.add_nodes(4)
    for u, v in ((1, 2), (1, 3), (2, 3), (3, 4)):
        G.add_edge(u, v)
    return G


class TestJaccard:
    def test_path_all_directions(self, path_graph):
        m = get_jaccard_similarity(path_graph)
        assert m.labels == (1, 2, 3, 4)
        expected = np.array(
            [
                [1.0, 0.0, 0.5, 0.0],
                [0.0, 1.0, 0.0, 0.5],
                [0.5, 0.0, 1.0, 0.0],
                [0.0, 0.5, 0.0, 1.0],
            ]
        )
        np.testing.assert_allclose(m.values, expected)

    def test_symmetric_with_unit_diagonal(self, triangle_tail):
        m = get_jaccard_similarity(triangle_tail, nodes=[4, 2, 1])
        np.testing.assert_allclose(m.values, m.values.T)
        np.testing.assert_allclose(np.diag(m.values), 1.0)

    def test_out_and_in(self, fan_graph):
        out = get_jaccard_similarity(fan_graph, direction="out")
        assert out.loc(1, 2) == pytest.approx(0.5)
        assert out.loc(3, 4) == 0.0

        inn = get_jaccard_similarity(fan_graph, direction=Direction.IN)
        assert inn.loc(3, 4) == pytest.approx(0.5)
        assert inn.loc(1, 2) == 0.0
        np.testing.assert_allclose(np.diag(inn.values), 1.0)

    def test_rounding(self, triangle_tail):
        default = get_jaccard_similarity(triangle_tail)
        assert default.loc(1, 2) == pytest.approx(0.333)
        assert default.loc(1, 3) == pytest.approx(0.25)

        two = get_jaccard_similarity(triangle_tail, round_to=2)
        assert two.loc(1, 2) == pytest.approx(0.33)
        scaled = two.values * 100
        np.testing.assert_allclose(scaled, np.round(scaled), atol=1e-9)

        zero = get_jaccard_similarity(triangle_tail, round_to=0)
        assert set(np.unique(zero.values)) <= {0.0, 1.0}

    def test_labels_follow_caller_order(self, path_graph):
        m = get_jaccard_similarity(path_graph, nodes=[3, 1])
        assert m.labels == (3, 1)
        assert m.shape == (2, 2)
        assert m.values[0, 1] == pytest.approx(0.5)

    def test_to_polars(self, path_graph):
        df = get_jaccard_similarity(path_graph, nodes=[1, 3]).to_polars()
        assert df.columns == ["id", "1", "3"]
        assert df["id"].to_list() == [1, 3]
        assert df.filter(pl.col("id") == 1)["3"].item() == pytest.approx(0.5)

    def test_isolated_nodes_and_empty_graph(self):
        G = Graph()
        G.add_nodes(2)
        m = get_jaccard_similarity(G)
        np.testing.assert_allclose(m.values, np.eye(2))
        assert len(get_jaccard_similarity(Graph())) == 0

    def test_does_not_log_or_mutate(self, path_graph):
        n_events = len(path_graph.history())
        before = path_graph.get_edge_df()
        get_jaccard_similarity(path_graph)
        assert len(path_graph.history()) == n_events
        assert path_graph.edges.equals(before)

    def test_view_refreshes_after_changes(self, path_graph):
        assert get_jaccard_similarity(path_graph).loc(1, 3) == pytest.approx(0.5)
        path_graph.add_edge(1, 4)
        # N(1)={2,4}, N(3)={2,4}
        assert get_jaccard_similarity(path_graph).loc(1, 3) == pytest.approx(1.0)

    def test_node_is_not_its_own_neighbour(self):
        G = Graph(directed=True)
        G.add_nodes(3)
        G.add_edge(1, 2)
        # N_out(1)={2}, N_out(2)={}
        out = get_jaccard_similarity(G, direction="out")
        assert out.loc(1, 2) == 0.0
        assert out.loc(1, 3) == 0.0
        # N(1)={2}, N(2)={1}
        assert get_jaccard_similarity(G, direction="all").loc(1, 2) == 0.0


class TestJaccardValidation:
    def test_direction(self, path_graph):
        with pytest.raises(InvalidArgumentError):
            get_jaccard_similarity(path_graph, direction="both")

    def test_unknown_nodes(self, path_graph):
        with pytest.raises(InvalidArgumentError):
            get_jaccard_similarity(path_graph, nodes=[1, 7])
        with pytest.raises(InvalidArgumentError):
            get_jaccard_similarity(path_graph, nodes=[])

    def test_round_to(self, path_graph):
        for bad in (-1, 1.5, True):
            with pytest.raises(InvalidArgumentError):
                get_jaccard_similarity(path_graph, round_to=bad)

    def test_invalid_graph(self, path_graph):
        path_graph.edges = path_graph.edges.with_columns(pl.lit(9, dtype=pl.Int64).alias("to"))
        with pytest.raises(InvalidGraphError):
            get_jaccard_similarity(path_graph)


def test_matrix_lookup_errors():
    m = SimilarityMatrix(np.eye(2), (5, 6))
    assert m.loc(5, 5) == 1.0
    with pytest.raises(KeyError):
        m.loc(5, 7)
    assert not m.values.flags.writeable
