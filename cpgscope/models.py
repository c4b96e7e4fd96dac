"""Data models for cpgscope.

This module defines the core data structures used throughout the engine:
- Graph snapshot: CPGNode, CPGEdge and the immutable CPGData container
- Enumerations: edge kinds, traversal directions, algorithm and smell tags
- Results: critical paths, impact reports, communities and smell findings

All models are dataclasses. Graph records are frozen: the engine never
mutates a snapshot, it only reads it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from cpgscope.validation import UnsupportedEdgeKindError


class Severity(str, Enum):
    """Finding severity levels ordered by impact.

    Example:
        >>> Severity.HIGH.value
        'high'
    """
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class EdgeKind(str, Enum):
    """Relationship layers overlaid in the code property graph.

    Attributes:
        CALL_GRAPH: Call site or function calls another function
        DATA_FLOW: Value flows from a definition to a use
        CONTROL_FLOW: Execution may continue from one node to another
        MODULE_DEPENDENCY: Module imports, aliases or requires another module
        AST_STRUCTURAL: Syntactic parent/child relationship
        REFERENCE: General reference (use to declaration)
    """
    CALL_GRAPH = "call_graph"
    DATA_FLOW = "data_flow"
    CONTROL_FLOW = "control_flow"
    MODULE_DEPENDENCY = "module_dependency"
    AST_STRUCTURAL = "ast_structural"
    REFERENCE = "reference"


class Direction(str, Enum):
    """Adjacency direction for neighbour queries."""
    OUT = "out"
    IN = "in"
    BOTH = "both"


class DegreeDirection(str, Enum):
    """Which incident edges count towards degree centrality."""
    TOTAL = "total"
    IN = "in"
    OUT = "out"


class PathType(str, Enum):
    """Edge-set filter applied before critical path search.

    Attributes:
        ANY: All edges
        EXECUTION: Call graph and control flow edges
        DATA_DEPENDENCY: Data flow edges
    """
    ANY = "any"
    EXECUTION = "execution"
    DATA_DEPENDENCY = "data_dependency"

    def edge_kinds(self) -> Optional[frozenset]:
        """Edge kinds kept by this filter, or None for all edges."""
        if self is PathType.ANY:
            return None
        if self is PathType.EXECUTION:
            return frozenset({EdgeKind.CALL_GRAPH, EdgeKind.CONTROL_FLOW})
        if self is PathType.DATA_DEPENDENCY:
            return frozenset({EdgeKind.DATA_FLOW})
        raise AssertionError(f"Unhandled path type: {self}")


class CommunityAlgorithm(str, Enum):
    """Community detection algorithms."""
    LOUVAIN = "louvain"
    LABEL_PROPAGATION = "label_propagation"


class SmellType(str, Enum):
    """Architectural smells the detectors can report."""
    GOD_OBJECT = "god_object"
    CYCLIC_DEPENDENCIES = "cyclic_dependencies"
    SHOTGUN_SURGERY = "shotgun_surgery"


# Keys of a node metadata bag that map onto typed fields
_NODE_METADATA_KEYS = ("line", "complexity_score", "node_category")


@dataclass(frozen=True)
class NodeMetadata:
    """Typed core of a node's metadata bag plus an extensible side table.

    Attributes:
        line: Source line of the originating AST element
        complexity_score: Complexity estimate computed by the builder
        node_category: Semantic categories (e.g. "io_operation", "db_operation")
        extra: Consumer-specific annotations not interpreted by the engine
    """
    line: Optional[int] = None
    complexity_score: Optional[float] = None
    node_category: Tuple[str, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NodeMetadata":
        """Split a plain metadata bag into typed fields and ``extra``.

        ``node_category`` may be a single string or a list of strings.
        """
        if not data:
            return cls()
        category = data.get("node_category")
        if category is None:
            categories: Tuple[str, ...] = ()
        elif isinstance(category, str):
            categories = (category,)
        else:
            categories = tuple(category)
        complexity = data.get("complexity_score")
        return cls(
            line=data.get("line"),
            complexity_score=float(complexity) if complexity is not None else None,
            node_category=categories,
            extra={k: v for k, v in data.items() if k not in _NODE_METADATA_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        if self.line is not None:
            data["line"] = self.line
        if self.complexity_score is not None:
            data["complexity_score"] = self.complexity_score
        if self.node_category:
            data["node_category"] = list(self.node_category)
        return data


@dataclass(frozen=True)
class EdgeMetadata:
    """Typed core of an edge's metadata bag.

    Attributes:
        weight_hint: Precomputed weight supplied by the builder
        extra: Remaining annotations
    """
    weight_hint: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EdgeMetadata":
        if not data:
            return cls()
        hint = data.get("weight_hint", data.get("weight"))
        return cls(
            weight_hint=float(hint) if hint is not None else None,
            extra={k: v for k, v in data.items() if k not in ("weight_hint", "weight")},
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        if self.weight_hint is not None:
            data["weight_hint"] = self.weight_hint
        return data


@dataclass(frozen=True)
class CPGNode:
    """Node of the code property graph.

    Example:
        >>> node = CPGNode(
        ...     id="MyApp.Users.fetch/1",
        ...     ast_kind="function_def",
        ...     metadata=NodeMetadata(line=12, node_category=("db_operation",)),
        ... )
    """
    id: str
    ast_kind: str
    source_ref: Optional[Any] = None
    metadata: NodeMetadata = field(default_factory=NodeMetadata)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CPGNode":
        return cls(
            id=data["id"],
            ast_kind=data.get("ast_kind", "unknown"),
            source_ref=data.get("source_ref"),
            metadata=NodeMetadata.from_dict(data.get("metadata")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ast_kind": self.ast_kind,
            "source_ref": self.source_ref,
            "metadata": self.metadata.to_dict(),
        }


def _edge_kind(value: Any) -> EdgeKind:
    try:
        return EdgeKind(value)
    except ValueError:
        raise UnsupportedEdgeKindError(value, [kind.value for kind in EdgeKind]) from None


@dataclass(frozen=True)
class CPGEdge:
    """Directed edge of the code property graph.

    Attributes:
        id: Edge identifier
        from_node_id: Source node id
        to_node_id: Target node id
        kind: Relationship layer. Builder-specific kinds must be mapped onto
            EdgeKind (keeping the original label in subkind); anything else
            raises UnsupportedEdgeKindError
        subkind: Free-form refinement (e.g. "direct_call", "return_value")
        metadata: Typed metadata with optional weight hint
    """
    id: str
    from_node_id: str
    to_node_id: str
    kind: EdgeKind
    subkind: Optional[str] = None
    metadata: EdgeMetadata = field(default_factory=EdgeMetadata)

    def __post_init__(self) -> None:
        # Plain strings hash differently from EdgeKind members
        if not isinstance(self.kind, EdgeKind):
            object.__setattr__(self, "kind", _edge_kind(self.kind))

    @property
    def is_self_loop(self) -> bool:
        return self.from_node_id == self.to_node_id

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "CPGEdge":
        from_id = data.get("from_node_id", data.get("from"))
        to_id = data.get("to_node_id", data.get("to"))
        return cls(
            id=data.get("id") or f"edge_{index}_{from_id}_{to_id}",
            from_node_id=from_id,
            to_node_id=to_id,
            kind=_edge_kind(data.get("kind", EdgeKind.AST_STRUCTURAL.value)),
            subkind=data.get("subkind"),
            metadata=EdgeMetadata.from_dict(data.get("metadata")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from_node_id": self.from_node_id,
            "to_node_id": self.to_node_id,
            "kind": self.kind.value,
            "subkind": self.subkind,
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class CPGData:
    """Immutable snapshot of a code property graph.

    Attributes:
        nodes: Mapping of node id to node; insertion order is iteration order
        edges: Ordered edges; order is the traversal tie-break order
        result_cache: Advisory bag for caller-attached results (never written here)
        metadata: Snapshot-level information (source file, generator version, ...)
    """
    nodes: Dict[str, CPGNode] = field(default_factory=dict)
    edges: Tuple[CPGEdge, ...] = ()
    result_cache: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @classmethod
    def build(
        cls,
        nodes: Iterable[CPGNode],
        edges: Iterable[CPGEdge] = (),
        **metadata: Any,
    ) -> "CPGData":
        """Create a snapshot from node and edge sequences.

        Raises:
            ValueError: If two nodes share an id
        """
        node_map: Dict[str, CPGNode] = {}
        for node in nodes:
            if node.id in node_map:
                raise ValueError(f"Duplicate node id: {node.id!r}")
            node_map[node.id] = node
        return cls(nodes=node_map, edges=tuple(edges), metadata=dict(metadata))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CPGData":
        """Create a snapshot from the builder's plain-dict representation.

        ``nodes`` may be a list of node dicts or a mapping of id to node dict.
        """
        raw_nodes = data.get("nodes", [])
        if isinstance(raw_nodes, dict):
            raw_nodes = [{"id": node_id, **node} for node_id, node in raw_nodes.items()]
        snapshot = cls.build(
            (CPGNode.from_dict(n) for n in raw_nodes),
            (CPGEdge.from_dict(e, i) for i, e in enumerate(data.get("edges", []))),
            **data.get("metadata", {}),
        )
        return cls(
            nodes=snapshot.nodes,
            edges=snapshot.edges,
            result_cache=dict(data.get("result_cache") or {}),
            metadata=snapshot.metadata,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes.values()],
            "edges": [edge.to_dict() for edge in self.edges],
            "metadata": dict(self.metadata),
        }


# ============================================================================
# Analysis results
# ============================================================================


@dataclass
class CriticalPathResult:
    """Highest-cost path between two nodes under a semantic cost model.

    Attributes:
        path: Node ids from source to target
        edge_ids: Ids of the edges traversed, one per hop
        total_cost: Sum of semantic edge weights along the path
        contributing_factors: Breakdown of ``total_cost`` by cost factor
        candidates_considered: Number of simple paths compared
    """
    path: List[str]
    edge_ids: List[str]
    total_cost: float
    contributing_factors: Dict[str, Any]
    candidates_considered: int = 1

    @property
    def hops(self) -> int:
        return len(self.path) - 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": list(self.path),
            "edge_ids": list(self.edge_ids),
            "total_cost": self.total_cost,
            "contributing_factors": self.contributing_factors,
            "candidates_considered": self.candidates_considered,
        }


@dataclass
class ImpactAnalysis:
    """Change impact of a single node.

    Attributes:
        node_id: Analysed node
        downstream_nodes: Nodes reachable forward within the depth bound
        upstream_nodes: Nodes reaching the node within the depth bound
        direct_impact_score: Weighted count of 1-hop downstream nodes
        transitive_impact_score: Distance-decayed weight of all downstream nodes
        affected_communities: Distinct community ids touched downstream
    """
    node_id: str
    downstream_nodes: List[str]
    upstream_nodes: List[str]
    direct_impact_score: float
    transitive_impact_score: float
    affected_communities: List[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "downstream_nodes": list(self.downstream_nodes),
            "upstream_nodes": list(self.upstream_nodes),
            "direct_impact_score": self.direct_impact_score,
            "transitive_impact_score": self.transitive_impact_score,
            "affected_communities": list(self.affected_communities),
        }


@dataclass
class CodeCommunity:
    """Cluster of densely connected nodes.

    Attributes:
        community_id: Sequential id, ordered by smallest member id
        member_nodes: Sorted member node ids
        dominant_node_types: ``ast_kind`` values ranked by frequency
        description_summary: Short derived description
    """
    community_id: int
    member_nodes: List[str]
    dominant_node_types: List[str]
    description_summary: str

    @property
    def size(self) -> int:
        return len(self.member_nodes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "community_id": self.community_id,
            "member_nodes": list(self.member_nodes),
            "dominant_node_types": list(self.dominant_node_types),
            "description_summary": self.description_summary,
        }


@dataclass
class SmellFinding:
    """Architectural smell detected by a detector.

    Attributes:
        smell: Smell type
        detector: Name of the detector that produced the finding
        title: Short title describing the issue
        description: Detailed description with context
        node_id: Offending node (god object, shotgun surgery)
        nodes_in_cycle: Cycle members (cyclic dependencies)
        cycle_size: Number of nodes in the cycle
        severity: Severity level, None where severity does not apply
        evidence: Metric values that triggered the finding
        suggested_fix: Optional fix suggestion
        estimated_effort: Estimated effort to fix

    Example:
        >>> finding = SmellFinding(
        ...     smell=SmellType.GOD_OBJECT,
        ...     detector="GodObjectDetector",
        ...     title="God object: Accounts",
        ...     description="Accounts is coupled to 12 of 13 nodes",
        ...     node_id="Accounts",
        ...     severity=Severity.HIGH,
        ...     evidence={"centrality_scores": {"degree": 0.92, "betweenness": 0.4}},
        ... )
    """
    smell: SmellType
    detector: str
    title: str
    description: str
    node_id: Optional[str] = None
    nodes_in_cycle: List[str] = field(default_factory=list)
    cycle_size: int = 0
    severity: Optional[Severity] = None
    evidence: Dict[str, Any] = field(default_factory=dict)
    suggested_fix: Optional[str] = None
    estimated_effort: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "smell": self.smell.value,
            "detector": self.detector,
            "title": self.title,
            "description": self.description,
            "node_id": self.node_id,
            "nodes_in_cycle": list(self.nodes_in_cycle),
            "cycle_size": self.cycle_size,
            "severity": self.severity.value if self.severity else None,
            "evidence": self.evidence,
            "suggested_fix": self.suggested_fix,
            "estimated_effort": self.estimated_effort,
        }
