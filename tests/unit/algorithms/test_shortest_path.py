"""Unit tests for BFS / Dijkstra shortest path with depth budgets."""

import pytest

from cpgscope.algorithms import shortest_path, shortest_path_length
from cpgscope.validation import (
    InvalidWeightError,
    MaxDepthReachedError,
    NodeNotFoundError,
    NoPathFoundError,
)
from tests.factories import build_graph


@pytest.fixture
def shortcut():
    """a -> b -> c is cheap, the direct a -> c edge is expensive."""
    return build_graph([("a", "b"), ("b", "c"), ("a", "c")])


@pytest.fixture
def ten_chain():
    """node_0 -> node_1 -> ... -> node_9."""
    return build_graph([(f"node_{i}", f"node_{i + 1}") for i in range(9)])


WEIGHTS = {"e0": 1.0, "e1": 1.0, "e2": 5.0}


def by_id(edge):
    return WEIGHTS[edge.id]


class TestUnweighted:
    def test_chain(self, chain):
        assert shortest_path(chain, "n0", "n4") == ["n0", "n1", "n2", "n3", "n4"]
        assert shortest_path_length(chain, "n0", "n4") == 4.0

    def test_fewest_hops(self, shortcut):
        assert shortest_path(shortcut, "a", "c") == ["a", "c"]

    def test_source_equals_target(self, chain):
        assert shortest_path(chain, "n2", "n2") == ["n2"]
        assert shortest_path_length(chain, "n2", "n2") == 0.0

    def test_ties_follow_edge_order(self):
        graph = build_graph([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        assert shortest_path(graph, "a", "d") == ["a", "b", "d"]

    def test_exact_depth_budget_suffices(self, chain):
        assert shortest_path(chain, "n0", "n4", max_depth=4)[-1] == "n4"

    def test_budget_exhausted(self, chain):
        with pytest.raises(MaxDepthReachedError) as exc_info:
            shortest_path(chain, "n0", "n4", max_depth=2)
        assert exc_info.value.max_depth == 2

    def test_unreachable(self, disjoint):
        with pytest.raises(NoPathFoundError):
            shortest_path(disjoint, "a", "d")

    def test_unreachable_within_budget_is_not_depth_error(self, disjoint):
        with pytest.raises(NoPathFoundError):
            shortest_path(disjoint, "a", "d", max_depth=1)

    def test_ten_node_chain_budget(self, ten_chain):
        assert shortest_path(ten_chain, "node_0", "node_5", max_depth=10) == [f"node_{i}" for i in range(6)]
        with pytest.raises(MaxDepthReachedError):
            shortest_path(ten_chain, "node_0", "node_9", max_depth=5)

    def test_frontier_left_at_budget_is_depth_error(self):
        graph = build_graph([("s", "a"), ("a", "b"), ("b", "c")], nodes=["t"])
        with pytest.raises(MaxDepthReachedError):
            shortest_path(graph, "s", "t", max_depth=1)
        with pytest.raises(NoPathFoundError):
            shortest_path(graph, "s", "t", max_depth=3)

    def test_against_edge_direction(self, chain):
        with pytest.raises(NoPathFoundError):
            shortest_path(chain, "n4", "n0")

    def test_missing_endpoint(self, chain):
        with pytest.raises(NodeNotFoundError):
            shortest_path(chain, "n0", "nowhere")

    def test_negative_depth(self, chain):
        with pytest.raises(ValueError):
            shortest_path(chain, "n0", "n1", max_depth=-1)


class TestWeighted:
    def test_cheapest_path(self, shortcut):
        assert shortest_path(shortcut, "a", "c", weight_function=by_id) == ["a", "b", "c"]
        assert shortest_path_length(shortcut, "a", "c", weight_function=by_id) == 2.0

    def test_depth_budget_counts_hops(self, shortcut):
        path = shortest_path(shortcut, "a", "c", weight_function=by_id, max_depth=1)
        assert path == ["a", "c"]

    def test_budget_exhausted(self, chain):
        with pytest.raises(MaxDepthReachedError):
            shortest_path(chain, "n0", "n4", weight_function=lambda e: 1.0, max_depth=2)

    def test_unreachable(self, disjoint):
        with pytest.raises(NoPathFoundError):
            shortest_path(disjoint, "a", "d", weight_function=lambda e: 1.0)

    def test_ten_node_chain_budget(self, ten_chain):
        unit = lambda e: 1.0  # noqa: E731
        assert shortest_path(ten_chain, "node_0", "node_5", weight_function=unit, max_depth=10)[-1] == "node_5"
        with pytest.raises(MaxDepthReachedError):
            shortest_path(ten_chain, "node_0", "node_9", weight_function=unit, max_depth=5)

    def test_reachable_set_exhausted_within_budget(self):
        graph = build_graph([("s", "a"), ("s", "c"), ("a", "c")], nodes=["t"])
        with pytest.raises(NoPathFoundError):
            shortest_path(graph, "s", "t", max_depth=1)
        with pytest.raises(NoPathFoundError):
            shortest_path(graph, "s", "t", weight_function=lambda e: 1.0, max_depth=1)

    def test_cheaper_longer_route_does_not_hide_path_within_budget(self):
        graph = build_graph([("s", "b"), ("b", "t"), ("s", "c"), ("c", "b")])
        costs = {"e0": 1.0, "e1": 1.0, "e2": 0.5, "e3": 0.1}
        weight = lambda e: costs[e.id]  # noqa: E731

        assert shortest_path(graph, "s", "t", weight_function=weight) == ["s", "c", "b", "t"]
        assert shortest_path_length(graph, "s", "t", weight_function=weight) == pytest.approx(1.6)
        assert shortest_path(graph, "s", "t", weight_function=weight, max_depth=2) == ["s", "b", "t"]
        assert shortest_path_length(graph, "s", "t", weight_function=weight, max_depth=2) == pytest.approx(2.0)
        with pytest.raises(MaxDepthReachedError):
            shortest_path(graph, "s", "t", weight_function=weight, max_depth=1)

    def test_negative_weight(self, shortcut):
        with pytest.raises(InvalidWeightError) as exc_info:
            shortest_path(shortcut, "a", "c", weight_function=lambda e: -1.0)
        assert exc_info.value.code == "invalid_weight"

    def test_zero_weights_allowed(self, chain):
        assert shortest_path_length(chain, "n0", "n3", weight_function=lambda e: 0.0) == 0.0
