"""Community detection on the undirected projection of a CPG.

Edge direction is dropped and parallel edges add weight; self-loops are
ignored. Both algorithms are fully deterministic: nodes are visited in
sorted id order and ties always go to the lowest community label, which
corresponds to the lowest node id.
"""

from typing import Dict, List, Sequence, Tuple

from cpgscope.graph.index import GraphIndex
from cpgscope.logging_config import get_logger
from cpgscope.models import CPGData

logger = get_logger(__name__)

# Modularity gains below this are treated as no improvement
MODULARITY_EPSILON = 1e-12
MAX_LOCAL_PASSES = 1000


def _to_partition(node_ids: Sequence[str], labels: Sequence[int]) -> List[List[str]]:
    groups: Dict[int, List[str]] = {}
    for node_id, label in zip(node_ids, labels):
        groups.setdefault(label, []).append(node_id)
    communities = [sorted(members) for members in groups.values()]
    return sorted(communities, key=lambda members: members[0])


def _local_moving(adjacency: List[Dict[int, float]], loops: List[float]) -> Tuple[List[int], bool]:
    """Greedily move nodes between neighbouring communities while modularity improves."""
    n = len(adjacency)
    degree = [sum(adjacency[i].values()) + 2.0 * loops[i] for i in range(n)]
    total_weight = sum(degree)
    community = list(range(n))
    if total_weight == 0:
        return community, False

    totals = degree[:]
    moved_any = False
    for _ in range(MAX_LOCAL_PASSES):
        improved = False
        for i in range(n):
            current = community[i]
            links: Dict[int, float] = {}
            for j, weight in adjacency[i].items():
                links[community[j]] = links.get(community[j], 0.0) + weight

            totals[current] -= degree[i]
            best = current
            best_gain = links.get(current, 0.0) - totals[current] * degree[i] / total_weight
            for candidate in sorted(links):
                if candidate == current:
                    continue
                gain = links[candidate] - totals[candidate] * degree[i] / total_weight
                if gain > best_gain + MODULARITY_EPSILON:
                    best, best_gain = candidate, gain
            totals[best] += degree[i]

            if best != current:
                community[i] = best
                improved = moved_any = True
        if not improved:
            break
    return community, moved_any


def _aggregate(
    adjacency: List[Dict[int, float]],
    loops: List[float],
    community: List[int],
) -> Tuple[List[Dict[int, float]], List[float], List[int]]:
    """Contract each community into a super-node."""
    renumber: Dict[int, int] = {}
    for label in community:
        if label not in renumber:
            renumber[label] = len(renumber)
    mapping = [renumber[label] for label in community]

    size = len(renumber)
    new_adjacency: List[Dict[int, float]] = [{} for _ in range(size)]
    new_loops = [0.0] * size
    for i, neighbours in enumerate(adjacency):
        a = mapping[i]
        new_loops[a] += loops[i]
        for j, weight in neighbours.items():
            b = mapping[j]
            if a == b:
                # Each internal pair is visited from both ends
                new_loops[a] += weight / 2.0
            else:
                new_adjacency[a][b] = new_adjacency[a].get(b, 0.0) + weight
    return new_adjacency, new_loops, mapping


def louvain(graph: CPGData) -> List[List[str]]:
    """Partition the graph with the Louvain method.

    Repeats two phases until the top level stops improving: (a) move each
    node into the neighbouring community with the largest modularity gain,
    (b) contract every community into a super-node.

    Returns:
        Communities as sorted member lists, ordered by smallest member
    """
    index = GraphIndex.build(graph)
    node_ids = sorted(index.node_ids)
    if not node_ids:
        return []

    position = {node_id: i for i, node_id in enumerate(node_ids)}
    weights = index.undirected_weights()
    adjacency = [
        {position[other]: weight for other, weight in weights[node_id].items()}
        for node_id in node_ids
    ]
    loops = [0.0] * len(node_ids)
    membership = list(range(len(node_ids)))

    levels = 0
    while True:
        community, moved = _local_moving(adjacency, loops)
        if not moved:
            break
        adjacency, loops, mapping = _aggregate(adjacency, loops, community)
        membership = [mapping[m] for m in membership]
        levels += 1

    communities = _to_partition(node_ids, membership)
    logger.debug(f"Louvain found {len(communities)} communities in {levels} levels")
    return communities


def label_propagation(graph: CPGData, max_iterations: int = 100) -> List[List[str]]:
    """Partition the graph by asynchronous label propagation.

    Each node starts with its own id as label and repeatedly adopts the
    label carrying the most edge weight among its neighbours (lowest label
    on ties) until no label changes or ``max_iterations`` rounds have run.

    Returns:
        Communities as sorted member lists, ordered by smallest member
    """
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")

    index = GraphIndex.build(graph)
    node_ids = sorted(index.node_ids)
    weights = index.undirected_weights()
    labels = {node_id: node_id for node_id in node_ids}

    rounds = 0
    for rounds in range(1, max_iterations + 1):
        changed = False
        for node_id in node_ids:
            counts: Dict[str, float] = {}
            for other, weight in weights[node_id].items():
                counts[labels[other]] = counts.get(labels[other], 0.0) + weight
            if not counts:
                continue
            strongest = max(counts.values())
            best = min(label for label, count in counts.items() if count == strongest)
            if best != labels[node_id]:
                labels[node_id] = best
                changed = True
        if not changed:
            break

    label_ids = {label: i for i, label in enumerate(sorted(set(labels.values())))}
    communities = _to_partition(node_ids, [label_ids[labels[n]] for n in node_ids])
    logger.debug(f"Label propagation found {len(communities)} communities after {rounds} rounds")
    return communities


def modularity(graph: CPGData, communities: Sequence[Sequence[str]]) -> float:
    """Newman modularity of a partition of the undirected projection.

    Returns:
        Modularity in [-0.5, 1]; 0.0 for a graph without (non-loop) edges
    """
    index = GraphIndex.build(graph)
    weights = index.undirected_weights()
    degree = {node_id: sum(weights[node_id].values()) for node_id in index.node_ids}
    total = sum(degree.values())
    if total == 0:
        return 0.0

    score = 0.0
    for members in communities:
        member_set = set(members)
        internal = sum(
            weight
            for node_id in members
            for other, weight in weights[node_id].items()
            if other in member_set
        )
        community_degree = sum(degree[node_id] for node_id in members)
        score += internal / total - (community_degree / total) ** 2
    return score
