"""Structural graph algorithms: SCC, centrality, shortest path, communities."""

from cpgscope.algorithms.centrality import (
    betweenness_centrality,
    centrality_statistics,
    degree_centrality,
    normalize_betweenness,
    pagerank,
    top_nodes,
)
from cpgscope.algorithms.community import label_propagation, louvain, modularity
from cpgscope.algorithms.scc import cyclic_components, strongly_connected_components
from cpgscope.algorithms.shortest_path import shortest_path, shortest_path_length

__all__ = [
    "betweenness_centrality",
    "centrality_statistics",
    "cyclic_components",
    "degree_centrality",
    "label_propagation",
    "louvain",
    "modularity",
    "normalize_betweenness",
    "pagerank",
    "shortest_path",
    "shortest_path_length",
    "strongly_connected_components",
    "top_nodes",
]
