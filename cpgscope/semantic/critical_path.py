"""Critical path analysis under a semantic cost model.

The critical path between two nodes is the simple path with the highest
total semantic cost: the chain of calls and data hand-offs where a change,
a slowdown or a tainted value is most expensive. Candidate paths are
enumerated by depth-limited DFS over the (optionally filtered) edge set.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from cpgscope.graph.index import GraphIndex, edge_kind_filter
from cpgscope.logging_config import get_logger
from cpgscope.models import CPGData, CPGEdge, CriticalPathResult, PathType
from cpgscope.semantic.weights import SemanticContext, SemanticWeights, edge_weight_breakdown
from cpgscope.validation import (
    MaxDepthReachedError,
    NoPathFoundError,
    coerce_enum,
    validate_node,
    validate_non_negative,
)

logger = get_logger(__name__)

DEFAULT_CRITICAL_PATH_DEPTH = 10
DEFAULT_MAX_CANDIDATE_PATHS = 64


def _enumerate_paths(
    index: GraphIndex,
    source: str,
    target: str,
    max_depth: Optional[int],
    max_candidates: int,
) -> Tuple[List[List[CPGEdge]], bool]:
    """Simple edge paths from source to target in DFS discovery order.

    Returns:
        Tuple of (candidate edge paths, whether max_depth pruned the search)
    """
    candidates: List[List[CPGEdge]] = []
    truncated = False

    path_nodes = [source]
    path_edges: List[CPGEdge] = []
    on_path = {source}
    # Next outgoing edge position for each node on the current path
    positions = [0]

    while positions and len(candidates) < max_candidates:
        node = path_nodes[-1]
        outgoing = index.out_edges[node]
        position = positions[-1]
        if position >= len(outgoing):
            positions.pop()
            path_nodes.pop()
            on_path.discard(node)
            if path_edges:
                path_edges.pop()
            continue
        positions[-1] = position + 1

        edge = outgoing[position]
        successor = edge.to_node_id
        if successor in on_path:
            continue

        hops = len(path_edges) + 1
        if max_depth is not None and hops > max_depth:
            truncated = True
            continue
        if successor == target:
            candidates.append(path_edges + [edge])
            continue
        if max_depth is not None and hops >= max_depth:
            # Pruned only if the simple path could have gone on
            if any(
                step.to_node_id not in on_path and step.to_node_id != successor
                for step in index.out_edges[successor]
            ):
                truncated = True
            continue

        path_nodes.append(successor)
        path_edges.append(edge)
        on_path.add(successor)
        positions.append(0)

    return candidates, truncated


def _empty_factors() -> Dict[str, Any]:
    return {"edge_type_costs": {}, "node_type_penalties": {}, "default_edge_cost": 0.0}


def _score_path(
    graph: CPGData,
    edges: List[CPGEdge],
    weights: SemanticWeights,
) -> Tuple[float, Dict[str, Any]]:
    """Total cost of a path and its breakdown by cost factor."""
    factors = _empty_factors()
    total = 0.0
    for edge in edges:
        matched, base, penalties = edge_weight_breakdown(edge, graph, weights)
        if matched is None:
            factors["default_edge_cost"] += base
        else:
            edge_costs = factors["edge_type_costs"]
            edge_costs[matched] = edge_costs.get(matched, 0.0) + base
        node_penalties = factors["node_type_penalties"]
        for category, penalty in penalties.items():
            node_penalties[category] = node_penalties.get(category, 0.0) + penalty
        total += base + sum(penalties.values())
    return total, factors


def semantic_critical_path(
    graph: CPGData,
    source: str,
    target: str,
    cost_factors: Union[SemanticWeights, SemanticContext, Mapping[str, Any], None] = None,
    path_type: Union[PathType, str] = PathType.ANY,
    max_depth: Optional[int] = DEFAULT_CRITICAL_PATH_DEPTH,
    max_candidate_paths: int = DEFAULT_MAX_CANDIDATE_PATHS,
) -> CriticalPathResult:
    """Find the highest-cost path from ``source`` to ``target``.

    Args:
        graph: CPG snapshot
        source: Start node id
        target: End node id
        cost_factors: Cost model (SemanticWeights, SemanticContext or mapping);
            None weighs every edge 1.0, making the critical path the longest one
        path_type: ``any``, ``execution`` (call graph + control flow) or
            ``data_dependency`` (data flow)
        max_depth: Maximum number of edges on a candidate path
        max_candidate_paths: Stop enumerating after this many candidates

    Returns:
        CriticalPathResult; ties go to the path with fewer hops, then to the
        first one discovered

    Raises:
        NodeNotFoundError: If either endpoint is missing
        MaxDepthReachedError: If no path was found and max_depth pruned the search
        NoPathFoundError: If the target is unreachable over the filtered edges
    """
    path_type = coerce_enum(path_type, PathType)
    validate_non_negative(max_depth, "max_depth")
    if max_candidate_paths < 1:
        raise ValueError(f"max_candidate_paths must be >= 1, got {max_candidate_paths}")

    weights = SemanticWeights.from_value(cost_factors)
    index = GraphIndex.build(graph, edge_filter=edge_kind_filter(path_type.edge_kinds()))
    validate_node(graph, source)
    validate_node(graph, target)

    if source == target:
        return CriticalPathResult(
            path=[source],
            edge_ids=[],
            total_cost=0.0,
            contributing_factors=_empty_factors(),
            candidates_considered=1,
        )

    candidates, truncated = _enumerate_paths(index, source, target, max_depth, max_candidate_paths)
    if not candidates:
        if truncated:
            raise MaxDepthReachedError(source, target, max_depth)
        raise NoPathFoundError(source, target)

    best_edges: List[CPGEdge] = []
    best_cost = 0.0
    best_factors: Dict[str, Any] = {}
    for position, edges in enumerate(candidates):
        cost, factors = _score_path(graph, edges, weights)
        if position == 0 or cost > best_cost or (cost == best_cost and len(edges) < len(best_edges)):
            best_edges, best_cost, best_factors = edges, cost, factors

    result = CriticalPathResult(
        path=[source] + [edge.to_node_id for edge in best_edges],
        edge_ids=[edge.id for edge in best_edges],
        total_cost=best_cost,
        contributing_factors=best_factors,
        candidates_considered=len(candidates),
    )
    logger.debug(
        f"Critical path {source} -> {target}: {result.hops} hops, cost {best_cost:.2f}",
        extra={"candidates": len(candidates), "path_type": path_type.value},
    )
    return result
