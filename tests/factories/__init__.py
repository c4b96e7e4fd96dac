"""Factory Boy factories for cpgscope graph models.

Usage:
    from tests.factories import CPGNodeFactory, CPGEdgeFactory, build_graph

    # Create a node
    node = CPGNodeFactory()

    # Create an edge between two ids
    edge = CPGEdgeFactory(from_node_id="a", to_node_id="b", data_flow=True)

    # Create a whole snapshot from (from, to) pairs
    graph = build_graph([("a", "b"), ("b", "c")])
"""

from .graph import (
    CPGEdgeFactory,
    CPGNodeFactory,
    build_graph,
    chain_graph,
    clusters_graph,
    cycle_graph,
    hub_graph,
)

__all__ = [
    "CPGEdgeFactory",
    "CPGNodeFactory",
    "build_graph",
    "chain_graph",
    "clusters_graph",
    "cycle_graph",
    "hub_graph",
]
