"""Error taxonomy and input validation with helpful error messages.

Every expected failure of the analysis engine is raised as a subclass of
:class:`CPGAnalysisError`. Each subclass carries a stable ``code`` so callers
(query layer, AI bridge, repository layer) can branch on the failure without
parsing messages:

- ``node_not_found``: referenced node id absent from the graph
- ``invalid_graph``: an edge references a node that does not exist
- ``no_path_found``: target genuinely unreachable from source
- ``max_depth_reached``: search budget exhausted before resolution
- ``invalid_weight``: a weight function produced a negative value
- ``unsupported_edge_kind``: an edge kind outside the known relationship layers
- ``unsupported_smell`` / ``unsupported_algorithm``: unknown configuration tag
"""

from enum import Enum
from typing import Any, Iterable, List, Optional, Type, TypeVar, TYPE_CHECKING

from cpgscope.logging_config import get_logger

if TYPE_CHECKING:
    from cpgscope.models import CPGData

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)


class CPGAnalysisError(Exception):
    """Base class for expected analysis failures.

    This exception includes helpful error messages and suggestions for fixing the issue.
    """

    code = "analysis_error"

    def __init__(self, message: str, suggestion: Optional[str] = None):
        self.message = message
        self.suggestion = suggestion
        full_message = message
        if suggestion:
            full_message += f"\n\nSuggestion: {suggestion}"
        super().__init__(full_message)


class NodeNotFoundError(CPGAnalysisError):
    """Raised when a referenced node id is absent from the graph."""

    code = "node_not_found"

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(
            f"Node not found in graph: {node_id!r}",
            "Check the node id against CPGData.nodes for this snapshot",
        )


class InvalidGraphError(CPGAnalysisError):
    """Raised when edges reference nodes that do not exist."""

    code = "invalid_graph"

    def __init__(self, dangling_edges: List[str]):
        self.dangling_edges = dangling_edges
        shown = ", ".join(dangling_edges[:5])
        if len(dangling_edges) > 5:
            shown += f" ... ({len(dangling_edges)} edges total)"
        super().__init__(
            f"Graph has edges referencing missing nodes: {shown}",
            "Rebuild the CPG snapshot; every edge endpoint must be present in nodes",
        )


class NoPathFoundError(CPGAnalysisError):
    """Raised when the target is unreachable from the source."""

    code = "no_path_found"

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"No path from {source!r} to {target!r}")


class MaxDepthReachedError(CPGAnalysisError):
    """Raised when the depth budget runs out before the search resolves."""

    code = "max_depth_reached"

    def __init__(self, source: str, target: str, max_depth: int):
        self.source = source
        self.target = target
        self.max_depth = max_depth
        super().__init__(
            f"Search from {source!r} to {target!r} exhausted max_depth={max_depth}",
            "Retry with a larger max_depth",
        )


class InvalidWeightError(CPGAnalysisError):
    """Raised when a weight function returns a negative value."""

    code = "invalid_weight"

    def __init__(self, edge_id: str, weight: float):
        self.edge_id = edge_id
        self.weight = weight
        super().__init__(
            f"Weight function returned negative weight {weight} for edge {edge_id!r}",
            "Dijkstra requires non-negative edge weights",
        )


class UnsupportedEdgeKindError(CPGAnalysisError):
    """Raised when an edge carries a kind outside the known relationship layers."""

    code = "unsupported_edge_kind"

    def __init__(self, kind: Any, supported: Iterable[str]):
        self.kind = kind
        super().__init__(
            f"Unsupported edge kind: {kind!r}",
            f"Map builder-specific kinds onto one of: {', '.join(supported)}; "
            "keep the original label in subkind",
        )


class UnsupportedSmellError(CPGAnalysisError):
    """Raised for an unrecognized smell tag."""

    code = "unsupported_smell"

    def __init__(self, smell: Any, supported: Iterable[str]):
        self.smell = smell
        super().__init__(
            f"Unsupported smell: {smell!r}",
            f"Use one of: {', '.join(supported)}",
        )


class UnsupportedAlgorithmError(CPGAnalysisError):
    """Raised for an unrecognized algorithm (or direction/path type) tag."""

    code = "unsupported_algorithm"

    def __init__(self, algorithm: Any, supported: Iterable[str]):
        self.algorithm = algorithm
        super().__init__(
            f"Unsupported algorithm: {algorithm!r}",
            f"Use one of: {', '.join(supported)}",
        )


def validate_graph(graph: "CPGData") -> None:
    """Fail fast if any edge references a missing node.

    Args:
        graph: CPG snapshot to check

    Raises:
        InvalidGraphError: If one or more edges are dangling
    """
    nodes = graph.nodes
    dangling = [
        edge.id
        for edge in graph.edges
        if edge.from_node_id not in nodes or edge.to_node_id not in nodes
    ]
    if dangling:
        logger.warning(f"Rejecting graph with {len(dangling)} dangling edges")
        raise InvalidGraphError(dangling)


def validate_node(graph: "CPGData", node_id: str) -> str:
    """Ensure ``node_id`` exists in the graph.

    Returns:
        The node id, unchanged

    Raises:
        NodeNotFoundError: If the node is absent
    """
    if node_id not in graph.nodes:
        raise NodeNotFoundError(node_id)
    return node_id


def validate_non_negative(value: Optional[int], name: str) -> Optional[int]:
    """Validate an optional search bound."""
    if value is not None and value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def coerce_enum(
    value: Any,
    enum_cls: Type[E],
    error_cls: Type[CPGAnalysisError] = UnsupportedAlgorithmError,
) -> E:
    """Convert a string tag (or enum member) into ``enum_cls``.

    Args:
        value: Enum member or its string value (case-insensitive)
        enum_cls: Target enum type
        error_cls: Error raised for unknown tags

    Returns:
        Matching enum member
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.lower())
        except ValueError:
            pass
    raise error_cls(value, [member.value for member in enum_cls])
