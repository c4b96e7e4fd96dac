"""Adjacency index and primitive queries over a CPG snapshot.

``GraphIndex`` is built once per analysis call. It validates the snapshot
(fail fast on dangling edges) and precomputes ordered in/out adjacency so
every algorithm shares the same deterministic traversal order: nodes in
``CPGData.nodes`` insertion order, edges in ``CPGData.edges`` order.
"""

from collections import Counter
from typing import Callable, Dict, List, Optional, Union

from cpgscope.models import CPGData, CPGEdge, Direction, EdgeKind
from cpgscope.validation import coerce_enum, validate_graph, validate_node

EdgeFilter = Callable[[CPGEdge], bool]


class GraphIndex:
    """Ordered adjacency lists for one immutable snapshot.

    Attributes:
        graph: The indexed snapshot
        node_ids: Node ids in iteration order
        out_edges: node id -> outgoing edges in edge-list order
        in_edges: node id -> incoming edges in edge-list order
    """

    def __init__(
        self,
        graph: CPGData,
        out_edges: Dict[str, List[CPGEdge]],
        in_edges: Dict[str, List[CPGEdge]],
    ):
        self.graph = graph
        self.node_ids: List[str] = list(graph.nodes)
        self.out_edges = out_edges
        self.in_edges = in_edges

    @classmethod
    def build(cls, graph: CPGData, edge_filter: Optional[EdgeFilter] = None) -> "GraphIndex":
        """Validate ``graph`` and index its (optionally filtered) edges.

        Args:
            graph: CPG snapshot
            edge_filter: Predicate selecting the edges to keep

        Raises:
            InvalidGraphError: If an edge references a missing node
        """
        validate_graph(graph)
        out_edges: Dict[str, List[CPGEdge]] = {node_id: [] for node_id in graph.nodes}
        in_edges: Dict[str, List[CPGEdge]] = {node_id: [] for node_id in graph.nodes}
        for edge in graph.edges:
            if edge_filter is not None and not edge_filter(edge):
                continue
            out_edges[edge.from_node_id].append(edge)
            in_edges[edge.to_node_id].append(edge)
        return cls(graph, out_edges, in_edges)

    def __len__(self) -> int:
        return len(self.node_ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.out_edges

    def successors(self, node_id: str) -> List[str]:
        """Targets of outgoing edges, duplicates preserved."""
        return [edge.to_node_id for edge in self.out_edges[node_id]]

    def predecessors(self, node_id: str) -> List[str]:
        """Sources of incoming edges, duplicates preserved."""
        return [edge.from_node_id for edge in self.in_edges[node_id]]

    def distinct_successors(self, node_id: str) -> List[str]:
        """Successors without duplicates or self-loops, first occurrence order."""
        seen = {node_id}
        result = []
        for edge in self.out_edges[node_id]:
            if edge.to_node_id not in seen:
                seen.add(edge.to_node_id)
                result.append(edge.to_node_id)
        return result

    def undirected_weights(self) -> Dict[str, Dict[str, float]]:
        """Symmetric edge-multiplicity weights, self-loops dropped."""
        weights: Dict[str, Dict[str, float]] = {node_id: {} for node_id in self.node_ids}
        for node_id in self.node_ids:
            for edge in self.out_edges[node_id]:
                other = edge.to_node_id
                if other == node_id:
                    continue
                weights[node_id][other] = weights[node_id].get(other, 0.0) + 1.0
                weights[other][node_id] = weights[other].get(node_id, 0.0) + 1.0
        return weights

    def neighbors(self, node_id: str, direction: Direction = Direction.OUT) -> List[str]:
        """Neighbour ids; see :func:`neighbors`."""
        if direction is Direction.OUT:
            return self.successors(node_id)
        if direction is Direction.IN:
            return self.predecessors(node_id)
        if direction is Direction.BOTH:
            seen = set()
            result = []
            for neighbor in self.successors(node_id) + self.predecessors(node_id):
                if neighbor not in seen:
                    seen.add(neighbor)
                    result.append(neighbor)
            return result
        raise AssertionError(f"Unhandled direction: {direction}")

    def incident_edges(self, node_id: str, direction: Direction = Direction.OUT) -> List[CPGEdge]:
        """Incident edges; see :func:`incident_edges`."""
        if direction is Direction.OUT:
            return list(self.out_edges[node_id])
        if direction is Direction.IN:
            return list(self.in_edges[node_id])
        if direction is Direction.BOTH:
            return list(self.out_edges[node_id]) + list(self.in_edges[node_id])
        raise AssertionError(f"Unhandled direction: {direction}")


def edge_kind_filter(kinds) -> Optional[EdgeFilter]:
    """Build an edge predicate keeping only ``kinds`` (None keeps everything)."""
    if kinds is None:
        return None
    allowed = frozenset(coerce_enum(kind, EdgeKind) for kind in kinds)
    return lambda edge: edge.kind in allowed


def neighbors(
    graph: CPGData,
    node_id: str,
    direction: Union[Direction, str] = Direction.OUT,
) -> List[str]:
    """Return the neighbours of ``node_id``.

    ``OUT`` lists the targets of outgoing edges in edge-list order with
    duplicates preserved (a double edge yields the neighbour twice). ``IN``
    is symmetric. ``BOTH`` concatenates OUT then IN and deduplicates by node
    id, keeping first occurrences.

    Args:
        graph: CPG snapshot
        node_id: Node to query
        direction: ``out``, ``in`` or ``both``

    Returns:
        List of neighbour node ids (empty for a disconnected node)

    Raises:
        NodeNotFoundError: If ``node_id`` is not in the graph
        InvalidGraphError: If the graph has dangling edges
    """
    direction = coerce_enum(direction, Direction)
    validate_node(graph, node_id)
    return GraphIndex.build(graph).neighbors(node_id, direction)


def incident_edges(
    graph: CPGData,
    node_id: str,
    direction: Union[Direction, str] = Direction.OUT,
) -> List[CPGEdge]:
    """Return the edges touching ``node_id``.

    Same direction semantics as :func:`neighbors`, but full edge records are
    returned and ``BOTH`` is never deduplicated; callers tell in from out by
    each edge's own endpoints.

    Raises:
        NodeNotFoundError: If ``node_id`` is not in the graph
    """
    direction = coerce_enum(direction, Direction)
    validate_node(graph, node_id)
    return GraphIndex.build(graph).incident_edges(node_id, direction)


# ============================================================================
# Lookup indexes
# ============================================================================


def nodes_by_kind(graph: CPGData, ast_kind: str) -> List[str]:
    """Ids of nodes with the given ``ast_kind``, in node order."""
    return [node.id for node in graph.nodes.values() if node.ast_kind == ast_kind]


def nodes_by_line(graph: CPGData, line: int) -> List[str]:
    """Ids of nodes whose metadata points at ``line``."""
    return [node.id for node in graph.nodes.values() if node.metadata.line == line]


def nodes_by_category(graph: CPGData, category: str) -> List[str]:
    """Ids of nodes tagged with a semantic ``category``."""
    return [
        node.id for node in graph.nodes.values() if category in node.metadata.node_category
    ]


def edges_by_kind(graph: CPGData, kind: Union[EdgeKind, str]) -> List[CPGEdge]:
    """Edges of one relationship layer, in edge order."""
    kind = coerce_enum(kind, EdgeKind)
    return [edge for edge in graph.edges if edge.kind is kind]


def graph_summary(graph: CPGData) -> Dict[str, object]:
    """Counts describing the snapshot's shape.

    Returns:
        Dictionary with node/edge counts, per-kind breakdowns, self-loop
        and isolated node counts
    """
    index = GraphIndex.build(graph)
    isolated = sum(
        1 for node_id in index.node_ids
        if not index.out_edges[node_id] and not index.in_edges[node_id]
    )
    return {
        "node_count": graph.node_count,
        "edge_count": graph.edge_count,
        "nodes_by_kind": dict(Counter(node.ast_kind for node in graph.nodes.values())),
        "edges_by_kind": dict(Counter(edge.kind.value for edge in graph.edges)),
        "self_loops": sum(1 for edge in graph.edges if edge.is_self_loop),
        "isolated_nodes": isolated,
    }
