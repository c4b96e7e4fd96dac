"""Graph primitives: adjacency index, neighbour queries and lookup indexes."""

from cpgscope.graph.index import (
    GraphIndex,
    edge_kind_filter,
    edges_by_kind,
    graph_summary,
    incident_edges,
    neighbors,
    nodes_by_category,
    nodes_by_kind,
    nodes_by_line,
)

__all__ = [
    "GraphIndex",
    "edge_kind_filter",
    "edges_by_kind",
    "graph_summary",
    "incident_edges",
    "neighbors",
    "nodes_by_category",
    "nodes_by_kind",
    "nodes_by_line",
]
