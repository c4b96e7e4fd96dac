"""
Differential tests for dependency impact analysis and code communities.

Reference: networkx.single_source_shortest_path_length with a cutoff,
forward for dependents and over the reversed graph for dependencies.

Properties verified:
- Downstream and upstream sets equal the reference depth-bounded reach
- transitive_impact_score >= direct_impact_score >= 0
- Reach and transitive score grow monotonically with depth
- Communities partition the node set for both algorithms
"""

import networkx as nx
import pytest
from hypothesis import given, strategies as st

from cpgscope.models import CommunityAlgorithm, EdgeKind
from cpgscope.semantic import dependency_impact_analysis, identify_code_communities
from tests.differential.reference import to_networkx
from tests.differential.strategies import cpg_graphs, graphs_with_node


def reference_reach(graph, start, depth, forward=True, kinds=None):
    """Nodes within ``depth`` hops of ``start``, start excluded."""
    nx_graph = to_networkx(graph, kinds)
    if not forward:
        nx_graph = nx_graph.reverse(copy=False)
    reach = set(nx.single_source_shortest_path_length(nx_graph, start, cutoff=depth))
    reach.discard(start)
    return reach


@given(graphs_with_node(), st.integers(min_value=0, max_value=5))
def test_reach_matches_networkx(case, depth):
    graph, node_id = case
    impact = dependency_impact_analysis(graph, node_id, depth=depth)

    assert set(impact.downstream_nodes) == set(reference_reach(graph, node_id, depth))
    assert set(impact.upstream_nodes) == set(reference_reach(graph, node_id, depth, forward=False))
    assert len(impact.downstream_nodes) == len(set(impact.downstream_nodes))


@given(graphs_with_node(), st.integers(min_value=0, max_value=5), st.sets(st.sampled_from(list(EdgeKind))))
def test_filtered_reach_matches_networkx(case, depth, kinds):
    graph, node_id = case
    impact = dependency_impact_analysis(graph, node_id, depth=depth, dependency_types=kinds)
    assert set(impact.downstream_nodes) == set(reference_reach(graph, node_id, depth, kinds=kinds))


@given(graphs_with_node(), st.integers(min_value=0, max_value=5))
def test_transitive_at_least_direct(case, depth):
    graph, node_id = case
    impact = dependency_impact_analysis(graph, node_id, depth=depth)
    assert impact.direct_impact_score >= 0.0
    assert impact.transitive_impact_score >= impact.direct_impact_score - 1e-12


@given(graphs_with_node(), st.integers(min_value=0, max_value=4))
def test_monotonic_in_depth(case, depth):
    graph, node_id = case
    shallow = dependency_impact_analysis(graph, node_id, depth=depth)
    deep = dependency_impact_analysis(graph, node_id, depth=depth + 1)

    assert set(shallow.downstream_nodes) <= set(deep.downstream_nodes)
    assert set(shallow.upstream_nodes) <= set(deep.upstream_nodes)
    assert deep.transitive_impact_score >= shallow.transitive_impact_score - 1e-12
    assert deep.direct_impact_score == pytest.approx(shallow.direct_impact_score) or depth == 0


@given(graphs_with_node(), st.integers(min_value=1, max_value=5))
def test_affected_communities_cover_downstream(case, depth):
    graph, node_id = case
    communities = identify_code_communities(graph)
    impact = dependency_impact_analysis(graph, node_id, depth=depth, communities=communities)

    owner = {member: c.community_id for c in communities for member in c.member_nodes}
    assert impact.affected_communities == sorted({owner[n] for n in impact.downstream_nodes})


@given(cpg_graphs(), st.sampled_from(list(CommunityAlgorithm)))
def test_communities_partition_nodes(graph, algorithm):
    communities = identify_code_communities(graph, algorithm=algorithm)

    members = [n for c in communities for n in c.member_nodes]
    assert sorted(members) == sorted(graph.nodes)
    assert [c.community_id for c in communities] == list(range(len(communities)))
    for community in communities:
        assert community.member_nodes == sorted(community.member_nodes)
        assert community.dominant_node_types


@given(cpg_graphs(), st.sampled_from(list(CommunityAlgorithm)))
def test_communities_deterministic(graph, algorithm):
    first = identify_code_communities(graph, algorithm=algorithm)
    second = identify_code_communities(graph, algorithm=algorithm)
    assert [c.member_nodes for c in first] == [c.member_nodes for c in second]
