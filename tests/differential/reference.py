"""networkx views of CPG snapshots, used as reference implementations."""

import networkx as nx


def to_networkx(graph, kinds=None):
    """MultiDiGraph with one edge per CPG edge, keyed by edge id.

    ``kinds`` keeps only edges of those kinds; every node stays.
    """
    nx_graph = nx.MultiDiGraph()
    nx_graph.add_nodes_from(graph.nodes)
    for edge in graph.edges:
        if kinds is None or edge.kind in kinds:
            nx_graph.add_edge(edge.from_node_id, edge.to_node_id, key=edge.id)
    return nx_graph


def to_simple_digraph(graph):
    """Collapse parallel edges and drop self-loops."""
    nx_graph = nx.DiGraph(to_networkx(graph))
    nx_graph.remove_edges_from(list(nx.selfloop_edges(nx_graph)))
    return nx_graph


def hop_distances(graph, source, kinds=None, reverse=False):
    """Node id -> fewest hops from ``source`` over every reachable node."""
    nx_graph = to_networkx(graph, kinds)
    if reverse:
        nx_graph = nx_graph.reverse(copy=False)
    return nx.single_source_shortest_path_length(nx_graph, source)
