"""Code community identification.

Wraps the structural partitioning algorithms and describes each community
in code terms (which kinds of AST elements it is made of).
"""

from collections import Counter
from typing import Dict, List, Sequence, Union

from cpgscope.algorithms.community import label_propagation, louvain
from cpgscope.logging_config import get_logger
from cpgscope.models import CodeCommunity, CommunityAlgorithm, CPGData
from cpgscope.validation import coerce_enum

logger = get_logger(__name__)

# Readable noun for common ast_kind tags; unknown kinds are used as-is
KIND_NOUNS: Dict[str, str] = {
    "function_def": "function",
    "method_def": "method",
    "module_def": "module",
    "class_def": "class",
    "call_site": "call site",
    "variable": "variable",
    "parameter": "parameter",
    "literal": "literal",
    "block": "block",
    "statement": "statement",
    "expression": "expression",
}


def _pluralize(noun: str) -> str:
    if noun.endswith(("s", "x", "ch", "sh")):
        return noun + "es"
    return noun + "s"


def describe_community(kind_counts: Counter) -> str:
    """Summarize member kinds, e.g. ``"3 functions, 1 module; dominated by function_def"``."""
    ranked = sorted(kind_counts.items(), key=lambda item: (-item[1], item[0]))
    parts = []
    for kind, count in ranked:
        noun = KIND_NOUNS.get(kind, kind)
        parts.append(f"{count} {noun if count == 1 else _pluralize(noun)}")
    return f"{', '.join(parts)}; dominated by {ranked[0][0]}"


def _build_communities(graph: CPGData, partition: Sequence[Sequence[str]]) -> List[CodeCommunity]:
    communities = []
    for community_id, members in enumerate(partition):
        counts = Counter(graph.nodes[node_id].ast_kind for node_id in members)
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        communities.append(CodeCommunity(
            community_id=community_id,
            member_nodes=list(members),
            dominant_node_types=[kind for kind, _ in ranked],
            description_summary=describe_community(counts),
        ))
    return communities


def identify_code_communities(
    graph: CPGData,
    algorithm: Union[CommunityAlgorithm, str] = CommunityAlgorithm.LOUVAIN,
    max_iterations: int = 100,
) -> List[CodeCommunity]:
    """Partition the graph into communities of closely related code.

    Args:
        graph: CPG snapshot
        algorithm: ``louvain`` or ``label_propagation``
        max_iterations: Round cap for label propagation

    Returns:
        Communities covering every node exactly once, numbered from 0 in
        order of their smallest member id

    Raises:
        UnsupportedAlgorithmError: If the algorithm tag is unknown
    """
    algorithm = coerce_enum(algorithm, CommunityAlgorithm)
    if algorithm is CommunityAlgorithm.LOUVAIN:
        partition = louvain(graph)
    elif algorithm is CommunityAlgorithm.LABEL_PROPAGATION:
        partition = label_propagation(graph, max_iterations=max_iterations)
    else:
        raise AssertionError(f"Unhandled community algorithm: {algorithm}")

    communities = _build_communities(graph, partition)
    logger.debug(
        f"Identified {len(communities)} code communities",
        extra={"algorithm": algorithm.value, "nodes": graph.node_count},
    )
    return communities
