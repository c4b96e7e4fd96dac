"""Shortest paths with an explicit depth budget.

Unweighted searches use breadth-first search (shortest by hop count);
weighted searches use Dijkstra's algorithm. Both distinguish a target that
is genuinely unreachable (``NoPathFoundError``) from one that is merely out
of reach within ``max_depth`` edges (``MaxDepthReachedError``), so callers
can decide whether retrying with a larger budget makes sense.

Ties between equal-cost paths follow edge-list insertion order.
"""

import heapq
import itertools
import math
from typing import Callable, Dict, List, Optional, Tuple

from cpgscope.graph.index import GraphIndex
from cpgscope.logging_config import get_logger
from cpgscope.models import CPGData, CPGEdge
from cpgscope.validation import (
    InvalidWeightError,
    MaxDepthReachedError,
    NoPathFoundError,
    validate_node,
    validate_non_negative,
)

logger = get_logger(__name__)

WeightFunction = Callable[[CPGEdge], float]


def _rebuild(parents: Dict[str, Optional[str]], target: str) -> List[str]:
    path = [target]
    while parents[path[-1]] is not None:
        path.append(parents[path[-1]])
    path.reverse()
    return path


def _bfs(index: GraphIndex, source: str, target: str, max_depth: Optional[int]) -> Tuple[List[str], float]:
    parents: Dict[str, Optional[str]] = {source: None}
    frontier = [source]
    depth = 0

    while frontier:
        if max_depth is not None and depth >= max_depth:
            # Budget spent: is there anything left beyond the frontier?
            for node in frontier:
                if any(edge.to_node_id not in parents for edge in index.out_edges[node]):
                    raise MaxDepthReachedError(source, target, max_depth)
            break

        next_frontier = []
        for node in frontier:
            for edge in index.out_edges[node]:
                successor = edge.to_node_id
                if successor in parents:
                    continue
                parents[successor] = node
                if successor == target:
                    return _rebuild(parents, target), float(depth + 1)
                next_frontier.append(successor)
        frontier = next_frontier
        depth += 1

    raise NoPathFoundError(source, target)


def _dijkstra(
    index: GraphIndex,
    source: str,
    target: str,
    weight_function: WeightFunction,
    max_depth: Optional[int],
) -> Tuple[List[str], float]:
    # With a budget, labels are (node, hops) so a cheaper but longer route to a
    # node cannot hide a costlier one that still fits in max_depth.
    bounded = max_depth is not None
    counter = itertools.count()
    start = (source, 0)
    distance: Dict[Tuple[str, int], float] = {start: 0.0}
    parents: Dict[Tuple[str, int], Optional[Tuple[str, int]]] = {start: None}
    # Fewest hops of any settled label per node; a later label with at least
    # as many hops is dominated.
    settled_hops: Dict[str, int] = {}
    frontier_nodes: List[str] = []
    heap: List[Tuple[float, int, Tuple[str, int]]] = [(0.0, next(counter), start)]

    while heap:
        cost, _, label = heapq.heappop(heap)
        node, hops = label
        if cost > distance[label] or settled_hops.get(node, math.inf) <= hops:
            continue
        settled_hops[node] = hops
        if node == target:
            path = []
            while label is not None:
                path.append(label[0])
                label = parents[label]
            path.reverse()
            return path, cost

        if bounded and hops >= max_depth:
            frontier_nodes.append(node)
            continue

        for edge in index.out_edges[node]:
            weight = float(weight_function(edge))
            if weight < 0 or math.isnan(weight):
                raise InvalidWeightError(edge.id, weight)
            successor = (edge.to_node_id, hops + 1 if bounded else 0)
            if settled_hops.get(successor[0], math.inf) <= successor[1]:
                continue
            candidate = cost + weight
            if successor not in distance or candidate < distance[successor]:
                distance[successor] = candidate
                parents[successor] = label
                heapq.heappush(heap, (candidate, next(counter), successor))

    # Every node within max_depth hops has been settled by now.
    for node in frontier_nodes:
        if any(edge.to_node_id not in settled_hops for edge in index.out_edges[node]):
            raise MaxDepthReachedError(source, target, max_depth)
    raise NoPathFoundError(source, target)


def _search(
    graph: CPGData,
    source: str,
    target: str,
    weight_function: Optional[WeightFunction],
    max_depth: Optional[int],
) -> Tuple[List[str], float]:
    validate_non_negative(max_depth, "max_depth")
    index = GraphIndex.build(graph)
    validate_node(graph, source)
    validate_node(graph, target)

    if source == target:
        return [source], 0.0
    if weight_function is None:
        return _bfs(index, source, target, max_depth)
    return _dijkstra(index, source, target, weight_function, max_depth)


def shortest_path(
    graph: CPGData,
    source: str,
    target: str,
    weight_function: Optional[WeightFunction] = None,
    max_depth: Optional[int] = None,
) -> List[str]:
    """Find the shortest path from ``source`` to ``target``.

    Args:
        graph: CPG snapshot
        source: Start node id
        target: End node id
        weight_function: Edge -> non-negative cost. None means constant 1.0
            and uses breadth-first search
        max_depth: Maximum number of edges on the path (None = unbounded)

    Returns:
        Node ids from source to target inclusive; ``[source]`` when equal

    Raises:
        NodeNotFoundError: If either endpoint is missing
        NoPathFoundError: If the reachable set is exhausted without the target
        MaxDepthReachedError: If unexplored nodes remain when the budget runs out
        InvalidWeightError: If the weight function returns a negative value
    """
    path, cost = _search(graph, source, target, weight_function, max_depth)
    logger.debug(
        f"Shortest path {source} -> {target}: {len(path) - 1} hops",
        extra={"cost": cost, "weighted": weight_function is not None},
    )
    return path


def shortest_path_length(
    graph: CPGData,
    source: str,
    target: str,
    weight_function: Optional[WeightFunction] = None,
    max_depth: Optional[int] = None,
) -> float:
    """Total cost of the shortest path (hop count when unweighted).

    Raises the same errors as :func:`shortest_path`.
    """
    _, cost = _search(graph, source, target, weight_function, max_depth)
    return cost
