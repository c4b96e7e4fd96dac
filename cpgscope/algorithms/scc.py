"""Strongly connected components via Tarjan's algorithm.

SCC finds cycles in directed graphs in O(V+E) time. Every node is assigned
to exactly one component; components with size > 1 certify a cycle through
every member (circular dependencies, mutual recursion).

The DFS is iterative so deep call chains never hit the interpreter's
recursion limit.
"""

from typing import Dict, Iterable, List, Optional, Union

from cpgscope.graph.index import GraphIndex, edge_kind_filter
from cpgscope.logging_config import get_logger
from cpgscope.models import CPGData, EdgeKind

logger = get_logger(__name__)


def _tarjan(index: GraphIndex) -> List[List[str]]:
    discovery: Dict[str, int] = {}
    low_link: Dict[str, int] = {}
    on_stack = set()
    stack: List[str] = []
    components: List[List[str]] = []
    counter = 0

    for root in index.node_ids:
        if root in discovery:
            continue

        # Each frame: (node, position of next outgoing edge to examine)
        work: List[List] = [[root, 0]]
        discovery[root] = low_link[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)

        while work:
            frame = work[-1]
            node, position = frame
            edges = index.out_edges[node]

            if position < len(edges):
                frame[1] = position + 1
                successor = edges[position].to_node_id
                if successor not in discovery:
                    discovery[successor] = low_link[successor] = counter
                    counter += 1
                    stack.append(successor)
                    on_stack.add(successor)
                    work.append([successor, 0])
                elif successor in on_stack:
                    low_link[node] = min(low_link[node], discovery[successor])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                low_link[parent] = min(low_link[parent], low_link[node])

            if low_link[node] == discovery[node]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                component.reverse()
                components.append(component)

    assert not stack, "Tarjan stack must be empty after the final root"
    return components


def strongly_connected_components(
    graph: CPGData,
    edge_kinds: Optional[Iterable[Union[EdgeKind, str]]] = None,
) -> List[List[str]]:
    """Partition the graph into strongly connected components.

    Args:
        graph: CPG snapshot (may be cyclic, disconnected, have multi-edges)
        edge_kinds: Only follow edges of these kinds (None = all edges)

    Returns:
        List of components, each a list of node ids. Output order is
        deterministic for a given snapshot but carries no meaning; compare
        components by set membership.

    Raises:
        InvalidGraphError: If an edge references a missing node
    """
    kinds = None if edge_kinds is None else list(edge_kinds)
    index = GraphIndex.build(graph, edge_filter=edge_kind_filter(kinds))
    components = _tarjan(index)
    logger.debug(
        f"SCC complete: {len(components)} components over {len(index)} nodes",
        extra={"cyclic_components": sum(1 for c in components if len(c) > 1)},
    )
    return components


def cyclic_components(
    graph: CPGData,
    min_size: int = 2,
    edge_kinds: Optional[Iterable[Union[EdgeKind, str]]] = None,
) -> List[List[str]]:
    """Components of at least ``min_size`` nodes, largest first.

    Args:
        graph: CPG snapshot
        min_size: Minimum number of members (default 2: actual cycles)
        edge_kinds: Only follow edges of these kinds (None = all edges)

    Returns:
        Components sorted by size descending, then by smallest member id
    """
    components = [
        c for c in strongly_connected_components(graph, edge_kinds) if len(c) >= min_size
    ]
    return sorted(components, key=lambda c: (-len(c), min(c)))
