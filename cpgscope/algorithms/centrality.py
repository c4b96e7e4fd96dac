"""Centrality measures over a CPG snapshot.

- Degree centrality: counts incident edges (In / Out / Total)
- Betweenness centrality: Brandes' algorithm. High betweenness marks
  architectural bottlenecks, nodes many execution paths flow through
- PageRank: stationary distribution of a random walk with teleportation

Every function returns a score for every node in the graph, including
isolated nodes (``0.0`` for degree and betweenness); an empty graph yields
``{}``.
"""

import math
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from cpgscope.graph.index import GraphIndex
from cpgscope.logging_config import get_logger
from cpgscope.models import CPGData, DegreeDirection
from cpgscope.validation import coerce_enum

logger = get_logger(__name__)

# Sources per Brandes work unit. Fixed so the reduction order, and with it
# the floating point result, does not depend on the worker count.
BETWEENNESS_CHUNK_SIZE = 64


def degree_centrality(
    graph: CPGData,
    direction: Union[DegreeDirection, str] = DegreeDirection.TOTAL,
    normalize: bool = False,
) -> Dict[str, float]:
    """Count incident edges per node.

    Multi-edges count individually; a self-loop counts once as an outgoing
    and once as an incoming edge.

    Args:
        graph: CPG snapshot
        direction: ``total``, ``in`` or ``out``
        normalize: Divide by ``max(1, n - 1)``, clamped to 1.0

    Returns:
        Mapping node id -> score; normalized scores lie in [0.0, 1.0]
    """
    direction = coerce_enum(direction, DegreeDirection)
    index = GraphIndex.build(graph)

    scores: Dict[str, float] = {}
    for node_id in index.node_ids:
        if direction is DegreeDirection.OUT:
            raw = len(index.out_edges[node_id])
        elif direction is DegreeDirection.IN:
            raw = len(index.in_edges[node_id])
        elif direction is DegreeDirection.TOTAL:
            raw = len(index.out_edges[node_id]) + len(index.in_edges[node_id])
        else:
            raise AssertionError(f"Unhandled degree direction: {direction}")
        scores[node_id] = float(raw)

    if normalize and scores:
        scale = max(1, len(scores) - 1)
        scores = {node_id: min(1.0, score / scale) for node_id, score in scores.items()}
    return scores


def _single_source_dependencies(
    index: GraphIndex,
    adjacency: Dict[str, List[str]],
    source: str,
) -> Dict[str, float]:
    """Brandes' dependency accumulation for one source (unweighted BFS)."""
    sigma: Dict[str, float] = {source: 1.0}
    distance: Dict[str, int] = {source: 0}
    predecessors: Dict[str, List[str]] = {source: []}
    order: List[str] = []

    queue = deque([source])
    while queue:
        node = queue.popleft()
        order.append(node)
        for successor in adjacency[node]:
            if successor not in distance:
                distance[successor] = distance[node] + 1
                sigma[successor] = 0.0
                predecessors[successor] = []
                queue.append(successor)
            if distance[successor] == distance[node] + 1:
                sigma[successor] += sigma[node]
                predecessors[successor].append(node)

    delta: Dict[str, float] = {node: 0.0 for node in order}
    dependencies: Dict[str, float] = {}
    for node in reversed(order):
        coefficient = (1.0 + delta[node]) / sigma[node]
        for predecessor in predecessors[node]:
            delta[predecessor] += sigma[predecessor] * coefficient
        if node != source:
            dependencies[node] = delta[node]
    return dependencies


def _accumulate_chunk(
    index: GraphIndex,
    adjacency: Dict[str, List[str]],
    sources: Sequence[str],
) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for source in sources:
        for node, value in _single_source_dependencies(index, adjacency, source).items():
            totals[node] = totals.get(node, 0.0) + value
    return totals


def betweenness_centrality(
    graph: CPGData,
    max_workers: Optional[int] = None,
) -> Dict[str, float]:
    """Raw betweenness centrality using Brandes' algorithm.

    One BFS per source node accumulates the fraction of shortest paths
    through every other node, O(VE) overall. Parallel edges collapse to a
    single path and self-loops are ignored. Scores are not normalized;
    divide by ``(n-1)(n-2)`` (see :func:`normalize_betweenness`) if needed.

    Sources are split into fixed-size chunks which may run on worker
    threads; chunk results are reduced in chunk order so the output is
    identical for any ``max_workers``.

    Args:
        graph: CPG snapshot
        max_workers: Thread count (None or 1 runs inline)

    Returns:
        Mapping node id -> raw betweenness score
    """
    index = GraphIndex.build(graph)
    if not index.node_ids:
        return {}

    adjacency = {node_id: index.distinct_successors(node_id) for node_id in index.node_ids}
    chunks = [
        index.node_ids[start:start + BETWEENNESS_CHUNK_SIZE]
        for start in range(0, len(index.node_ids), BETWEENNESS_CHUNK_SIZE)
    ]

    if max_workers and max_workers > 1 and len(chunks) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            partials = list(
                executor.map(lambda chunk: _accumulate_chunk(index, adjacency, chunk), chunks)
            )
    else:
        partials = [_accumulate_chunk(index, adjacency, chunk) for chunk in chunks]

    scores = {node_id: 0.0 for node_id in index.node_ids}
    for partial in partials:
        for node_id, value in partial.items():
            scores[node_id] += value

    logger.debug(
        f"Calculated betweenness centrality for {len(scores)} nodes",
        extra={"chunks": len(chunks), "max_workers": max_workers or 1},
    )
    return scores


def normalize_betweenness(scores: Dict[str, float]) -> Dict[str, float]:
    """Scale raw directed betweenness into [0, 1] by ``(n-1)(n-2)``."""
    n = len(scores)
    if n <= 2:
        return {node_id: 0.0 for node_id in scores}
    scale = float((n - 1) * (n - 2))
    return {node_id: score / scale for node_id, score in scores.items()}


def pagerank(
    graph: CPGData,
    damping: float = 0.85,
    max_iterations: int = 100,
    tolerance: float = 1e-6,
) -> Dict[str, float]:
    """PageRank by power iteration.

    Transition probabilities are normalized by out-degree (a double edge
    carries twice the weight). Teleportation is uniform and dangling nodes
    (no out-edges) spread their mass uniformly over all nodes, so the scores
    always sum to 1.0.

    Args:
        graph: CPG snapshot
        damping: Probability of following an edge rather than teleporting
        max_iterations: Iteration cap
        tolerance: Stop once the L1 change between iterations drops below this

    Returns:
        Mapping node id -> PageRank score
    """
    if not 0.0 <= damping <= 1.0:
        raise ValueError(f"damping must be in [0, 1], got {damping}")
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")

    index = GraphIndex.build(graph)
    n = len(index.node_ids)
    if n == 0:
        return {}

    position = {node_id: i for i, node_id in enumerate(index.node_ids)}
    sources = np.array([position[e.from_node_id] for e in graph.edges], dtype=np.int64)
    targets = np.array([position[e.to_node_id] for e in graph.edges], dtype=np.int64)
    out_degree = np.bincount(sources, minlength=n).astype(float)
    dangling = out_degree == 0
    safe_degree = np.where(dangling, 1.0, out_degree)

    ranks = np.full(n, 1.0 / n)
    iterations = 0
    change = math.inf
    for iterations in range(1, max_iterations + 1):
        share = ranks / safe_degree
        flow = np.bincount(targets, weights=share[sources], minlength=n) if len(sources) else np.zeros(n)
        dangling_mass = ranks[dangling].sum()
        updated = damping * (flow + dangling_mass / n) + (1.0 - damping) / n
        change = float(np.abs(updated - ranks).sum())
        ranks = updated
        if change < tolerance:
            break

    logger.debug(
        f"PageRank finished after {iterations} iterations",
        extra={"l1_change": change, "converged": change < tolerance},
    )
    return {node_id: float(ranks[position[node_id]]) for node_id in index.node_ids}


def centrality_statistics(scores: Dict[str, float]) -> Dict[str, float]:
    """Statistical summary of a centrality map.

    Returns:
        Dictionary with min, max, mean, stdev (population) and count
    """
    if not scores:
        return {"min": 0.0, "max": 0.0, "mean": 0.0, "stdev": 0.0, "count": 0}
    values = np.fromiter(scores.values(), dtype=float, count=len(scores))
    return {
        "min": float(values.min()),
        "max": float(values.max()),
        "mean": float(values.mean()),
        "stdev": float(values.std()),
        "count": len(scores),
    }


def top_nodes(scores: Dict[str, float], limit: int = 10) -> List[Dict[str, Any]]:
    """Highest scoring nodes, ties broken by node id."""
    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [{"node_id": node_id, "score": score} for node_id, score in ranked[:limit]]
