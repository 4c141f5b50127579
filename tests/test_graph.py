import json

import polars as pl
import pytest

from tabgraph.core.errors import InvalidArgumentError, ReservedAttributeError
from tabgraph.core.graph import Graph
from tabgraph.utils.validation import is_valid_graph, validity_problems


class TestBuilders:
    def test_ids_are_sequential(self):
        G = Graph()
        assert G.add_node(label="a") == 1
        assert G.add_nodes(3, label="b") == [2, 3, 4]
        assert G.add_edge(1, 2, rel="x") == 1
        assert G.get_node_ids() == [1, 2, 3, 4]
        assert G.nodes["label"].to_list() == ["a", "b", "b", "b"]
        assert G.edges.columns == ["id", "from", "to", "rel"]

    def test_new_attribute_back_fills(self):
        G = Graph()
        G.add_node()
        G.add_node(weight=2.5)
        assert G.nodes["weight"].to_list() == [None, 2.5]

    def test_edge_needs_existing_nodes(self):
        G = Graph()
        G.add_nodes(2)
        with pytest.raises(InvalidArgumentError):
            G.add_edge(1, 3)
        assert G.number_of_edges() == 0

    def test_reserved_names(self):
        G = Graph()
        with pytest.raises(ReservedAttributeError):
            G.add_node(id=5)
        G.add_nodes(2)
        with pytest.raises(ReservedAttributeError):
            G.add_edge(1, 2, **{"from": 2})
        with pytest.raises(ReservedAttributeError):
            G.set_node_attrs("id", [7, 8])

    def test_add_nodes_rejects_bad_count(self):
        with pytest.raises(InvalidArgumentError):
            Graph().add_nodes(-1)
        assert Graph().add_nodes(0) == []


class TestAttributes:
    def test_set_edge_attrs_per_row(self, path_graph):
        assert path_graph.edges["width"].to_list() == pytest.approx([3.4, 2.3, 7.2])

    def test_set_edge_attrs_subset(self, path_graph):
        path_graph.set_edge_attrs("color", "red", ids=[2])
        path_graph.set_edge_attrs("width", [9.0], ids=[3])
        assert path_graph.edges["color"].to_list() == [None, "red", None]
        assert path_graph.edges["width"].to_list() == pytest.approx([3.4, 2.3, 9.0])

    def test_wrong_number_of_values(self, path_graph):
        with pytest.raises(InvalidArgumentError):
            path_graph.set_edge_attrs("width", [1.0, 2.0])

    def test_tables_are_copies(self, path_graph):
        df = path_graph.get_edge_df()
        df = df.with_columns(pl.lit(0.0).alias("width"))
        assert path_graph.edges["width"].to_list() != df["width"].to_list()


class TestValidity:
    def test_valid_graph(self, path_graph):
        assert is_valid_graph(path_graph)
        assert validity_problems(path_graph) == []

    def test_duplicate_ids(self, path_graph):
        path_graph.nodes = pl.concat([path_graph.nodes, path_graph.nodes.head(1)])
        assert any("not unique" in p for p in validity_problems(path_graph))

    def test_dangling_edge(self, path_graph):
        path_graph.edges = path_graph.edges.with_columns(pl.lit(42, dtype=pl.Int64).alias("from"))
        assert not is_valid_graph(path_graph)

    def test_stray_selection(self, path_graph):
        path_graph.select_edges([3])
        path_graph.edges = path_graph.edges.head(2)
        assert any("selection" in p for p in validity_problems(path_graph))

    def test_missing_key_column(self, path_graph):
        path_graph.edges = path_graph.edges.drop("to")
        assert validity_problems(path_graph) == ["edge table has no `to` column"]

    def test_not_a_graph(self):
        assert not is_valid_graph(object())


class TestHistory:
    def test_builder_events(self):
        G = Graph()
        G.add_nodes(2)
        G.add_edge(1, 2, weight=1.5)
        events = G.history()
        assert [e["op"] for e in events] == ["add_nodes", "add_edge"]
        assert events[1]["result"] == 1
        assert events[1]["attrs"] == {"weight": 1.5}
        assert events[0]["ts_utc"].endswith("Z")
        assert events[0]["mono_ns"] <= events[1]["mono_ns"]

    def test_audited_arguments_are_json_safe(self, path_graph):
        n_events = len(path_graph.history())
        path_graph.set_node_attrs("rank", pl.Series([4, 3]), ids=[1, 2])
        path_graph.clear_selection()
        evt_set, evt_clear = path_graph.history()[n_events:]
        assert evt_set["op"] == "set_node_attrs"
        assert evt_set["values"] == [4, 3]
        assert evt_set["ids"] == [1, 2]
        assert evt_clear == {**evt_clear, "op": "clear_selection", "drop": False}
        json.dumps(path_graph.history())

    def test_failed_call_is_not_logged(self, path_graph):
        n_events = len(path_graph.history())
        with pytest.raises(InvalidArgumentError):
            path_graph.select_nodes([99])
        assert len(path_graph.history()) == n_events

    def test_as_df_and_marks(self, path_graph):
        path_graph.mark("checkpoint")
        df = path_graph.history(as_df=True)
        assert isinstance(df, pl.DataFrame)
        assert df.height == len(path_graph.history())
        assert df["op"].to_list()[-1] == "mark"
        assert {"version", "ts_utc", "mono_ns", "op"} <= set(df.columns)

    def test_empty_history_frame(self):
        df = Graph(history=False).history(as_df=True)
        assert df.height == 0

    def test_clear_history(self, path_graph):
        path_graph.clear_history()
        assert path_graph.history() == []
        assert path_graph.export_history("unused.json") == 0

    def test_export_ndjson_and_json(self, path_graph, tmp_path):
        n = len(path_graph.history())
        assert path_graph.export_history(str(tmp_path / "h.ndjson")) == n
        lines = (tmp_path / "h.ndjson").read_text(encoding="utf-8").splitlines()
        assert len(lines) == n
        assert json.loads(lines[0])["op"] == "add_nodes"

        assert path_graph.export_history(str(tmp_path / "h.json")) == n
        events = json.loads((tmp_path / "h.json").read_text(encoding="utf-8"))
        assert events[-1]["op"] == "set_edge_attrs"

    def test_export_csv(self, path_graph, tmp_path):
        n = path_graph.export_history(str(tmp_path / "h.csv"))
        assert pl.read_csv(tmp_path / "h.csv").height == n


class TestCopy:
    def test_copy_is_independent(self, path_graph):
        path_graph.select_edges([1])
        clone = path_graph.copy()
        clone.set_edge_attrs("width", 0.0)
        clone.add_node()
        assert path_graph.edges["width"].to_list() == pytest.approx([3.4, 2.3, 7.2])
        assert path_graph.number_of_nodes() == 4
        assert clone.get_selection() == (1,)
        assert clone.add_edge(1, 2) == 4

    def test_repr(self, path_graph):
        path_graph.select_edges([1, 2])
        assert repr(path_graph) == "<Graph | V=4 · E=3 · directed=True · selection=edges:2>"
