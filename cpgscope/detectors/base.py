"""Base detector interface."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields
from functools import cached_property
from typing import Any, Dict, List, Mapping, Optional, Union

from cpgscope.algorithms.centrality import (
    betweenness_centrality,
    degree_centrality,
    normalize_betweenness,
    pagerank,
)
from cpgscope.logging_config import get_logger
from cpgscope.models import CodeCommunity, CommunityAlgorithm, CPGData, DegreeDirection, Severity, SmellFinding, SmellType
from cpgscope.semantic.communities import identify_code_communities

logger = get_logger(__name__)


@dataclass
class SmellThresholds:
    """Thresholds controlling when a smell is reported.

    Attributes:
        degree_high: Normalized degree above which a god object is high severity
        degree_medium: Normalized degree above which a god object is reported
        betweenness_high: Normalized betweenness for high severity
        betweenness_medium: Normalized betweenness for a report
        community_spread: Affected communities a change must exceed (shotgun surgery)
        fanout: Downstream nodes a change must exceed (shotgun surgery)
        impact_depth: Hop budget of the impact analysis behind shotgun surgery
        cycle_edge_kinds: Edge kinds considered for cycles (None = all kinds)
    """
    degree_high: float = 0.8
    degree_medium: float = 0.5
    betweenness_high: float = 0.7
    betweenness_medium: float = 0.5
    community_spread: int = 2
    fanout: int = 5
    impact_depth: int = 3
    cycle_edge_kinds: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SmellThresholds":
        """Create thresholds from a mapping, keeping defaults for missing keys.

        Raises:
            ValueError: If the mapping contains unknown keys
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown smell thresholds: {', '.join(unknown)}")
        values = dict(data)
        if values.get("cycle_edge_kinds") is not None:
            values["cycle_edge_kinds"] = list(values["cycle_edge_kinds"])
        return cls(**values)

    @classmethod
    def coerce(cls, value: Union["SmellThresholds", Mapping[str, Any], None]) -> "SmellThresholds":
        if isinstance(value, SmellThresholds):
            return value
        return cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AnalysisContext:
    """Structural metrics shared by the detectors of one detection run.

    Each metric is computed on first access and reused afterwards; the
    context lives only as long as the run, nothing is cached across calls.
    """

    def __init__(
        self,
        graph: CPGData,
        community_algorithm: CommunityAlgorithm = CommunityAlgorithm.LOUVAIN,
        max_workers: Optional[int] = None,
        pagerank_params: Optional[Dict[str, Any]] = None,
        community_max_iterations: int = 100,
    ):
        self.graph = graph
        self.community_algorithm = community_algorithm
        self.max_workers = max_workers
        self.pagerank_params = pagerank_params or {}
        self.community_max_iterations = community_max_iterations

    @cached_property
    def degree(self) -> Dict[str, float]:
        """Normalized total degree."""
        return degree_centrality(self.graph, DegreeDirection.TOTAL, normalize=True)

    @cached_property
    def raw_degree(self) -> Dict[str, float]:
        return degree_centrality(self.graph, DegreeDirection.TOTAL)

    @cached_property
    def betweenness_raw(self) -> Dict[str, float]:
        return betweenness_centrality(self.graph, max_workers=self.max_workers)

    @cached_property
    def betweenness(self) -> Dict[str, float]:
        """Normalized betweenness."""
        return normalize_betweenness(self.betweenness_raw)

    @cached_property
    def pagerank(self) -> Dict[str, float]:
        return pagerank(self.graph, **self.pagerank_params)

    @cached_property
    def communities(self) -> List[CodeCommunity]:
        return identify_code_communities(
            self.graph,
            algorithm=self.community_algorithm,
            max_iterations=self.community_max_iterations,
        )


class SmellDetector(ABC):
    """Abstract base class for architectural smell detectors."""

    smell: SmellType

    def __init__(self, thresholds: Optional[SmellThresholds] = None):
        """Initialize detector.

        Args:
            thresholds: Reporting thresholds (defaults when omitted)
        """
        self.thresholds = thresholds or SmellThresholds()

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def detect(self, context: AnalysisContext) -> List[SmellFinding]:
        """Run detection over the context's graph.

        Args:
            context: Shared metrics for the graph under analysis

        Returns:
            List of findings
        """
        pass

    @abstractmethod
    def severity(self, finding: SmellFinding) -> Optional[Severity]:
        """Calculate severity of a finding.

        Args:
            finding: Finding to assess

        Returns:
            Severity level, or None where severity does not apply
        """
        pass
