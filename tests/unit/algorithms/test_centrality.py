"""Unit tests for degree, betweenness and PageRank centrality."""

import pytest

from cpgscope.algorithms import (
    betweenness_centrality,
    centrality_statistics,
    degree_centrality,
    normalize_betweenness,
    pagerank,
    top_nodes,
)
from cpgscope.validation import UnsupportedAlgorithmError
from tests.factories import build_graph, chain_graph


class TestDegreeCentrality:
    def test_total_degree(self, chain):
        assert degree_centrality(chain) == {"n0": 1.0, "n1": 2.0, "n2": 2.0, "n3": 2.0, "n4": 1.0}

    def test_in_and_out(self, chain):
        assert degree_centrality(chain, "in")["n0"] == 0.0
        assert degree_centrality(chain, "out")["n4"] == 0.0

    def test_multi_edges_and_self_loops_count(self):
        graph = build_graph([("a", "b"), ("a", "b"), ("a", "a")])
        scores = degree_centrality(graph, "out")
        assert scores == {"a": 3.0, "b": 0.0}
        assert degree_centrality(graph)["a"] == 4.0

    def test_normalized_is_clamped(self, hub):
        scores = degree_centrality(hub, normalize=True)
        assert scores["hub"] == 1.0
        assert scores["p0"] == pytest.approx(0.2)
        assert all(0.0 <= s <= 1.0 for s in scores.values())

    def test_isolated_node_scores_zero(self):
        graph = build_graph([("a", "b")], nodes=["z"])
        assert degree_centrality(graph, normalize=True)["z"] == 0.0

    def test_single_node_normalization(self):
        graph = build_graph([], nodes=["solo"])
        assert degree_centrality(graph, normalize=True) == {"solo": 0.0}

    def test_empty_graph(self, empty_graph):
        assert degree_centrality(empty_graph) == {}

    def test_unknown_direction(self, chain):
        with pytest.raises(UnsupportedAlgorithmError):
            degree_centrality(chain, "diagonal")


class TestBetweennessCentrality:
    def test_chain(self, chain):
        assert betweenness_centrality(chain) == {"n0": 0.0, "n1": 3.0, "n2": 4.0, "n3": 3.0, "n4": 0.0}

    def test_hub(self, hub):
        scores = betweenness_centrality(hub)
        assert scores["hub"] == pytest.approx(90.0)
        assert scores["p3"] == 0.0
        assert normalize_betweenness(scores)["hub"] == pytest.approx(1.0)

    def test_diamond_splits_paths(self):
        graph = build_graph([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        scores = betweenness_centrality(graph)
        assert scores["b"] == pytest.approx(0.5)
        assert scores["c"] == pytest.approx(0.5)

    def test_parallel_edges_do_not_double_paths(self):
        graph = build_graph([("a", "b"), ("a", "b"), ("b", "c"), ("b", "b")])
        assert betweenness_centrality(graph)["b"] == pytest.approx(1.0)

    def test_worker_count_does_not_change_result(self):
        graph = build_graph(
            [(f"n{i}", f"n{(i * 7 + 3) % 150}") for i in range(150)]
            + [(f"n{i}", f"n{i + 1}") for i in range(149)]
        )
        assert betweenness_centrality(graph, max_workers=4) == betweenness_centrality(graph)

    def test_normalize_small_graphs(self):
        assert normalize_betweenness({"a": 0.0, "b": 0.0}) == {"a": 0.0, "b": 0.0}

    def test_empty_graph(self, empty_graph):
        assert betweenness_centrality(empty_graph) == {}


class TestPageRank:
    def test_cycle_is_uniform(self, cycle):
        scores = pagerank(cycle)
        for score in scores.values():
            assert score == pytest.approx(1 / 3, abs=1e-6)

    def test_sums_to_one_with_dangling_nodes(self):
        scores = pagerank(chain_graph(6))
        assert sum(scores.values()) == pytest.approx(1.0)
        assert scores["n5"] > scores["n0"]

    def test_hub_dominates(self, hub):
        scores = pagerank(hub)
        assert max(scores, key=scores.get) == "hub"

    def test_zero_damping_is_uniform(self, chain):
        scores = pagerank(chain, damping=0.0)
        assert all(s == pytest.approx(0.2) for s in scores.values())

    def test_invalid_parameters(self, chain):
        with pytest.raises(ValueError):
            pagerank(chain, damping=1.5)
        with pytest.raises(ValueError):
            pagerank(chain, max_iterations=0)

    def test_empty_graph(self, empty_graph):
        assert pagerank(empty_graph) == {}


class TestSummaries:
    def test_statistics(self):
        stats = centrality_statistics({"a": 1.0, "b": 3.0})
        assert stats == {"min": 1.0, "max": 3.0, "mean": 2.0, "stdev": 1.0, "count": 2}

    def test_statistics_empty(self):
        assert centrality_statistics({})["count"] == 0

    def test_top_nodes_ties_by_id(self):
        ranked = top_nodes({"b": 1.0, "a": 1.0, "c": 2.0}, limit=2)
        assert ranked == [{"node_id": "c", "score": 2.0}, {"node_id": "a", "score": 1.0}]
