"""Analyzer facade binding configuration defaults to every engine operation.

Every method is a thin call into the algorithm, semantic or detector layer;
arguments left as ``None`` fall back to the analyzer's ``CPGScopeConfig``.
Depth budgets default to ``CONFIGURED`` instead; an explicit ``None``
requests an unbounded search.
"""

import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from cpgscope.algorithms.centrality import (
    betweenness_centrality,
    centrality_statistics,
    degree_centrality,
    pagerank,
    top_nodes,
)
from cpgscope.algorithms.community import modularity
from cpgscope.algorithms.scc import cyclic_components, strongly_connected_components
from cpgscope.algorithms.shortest_path import shortest_path
from cpgscope.config import CPGScopeConfig
from cpgscope.detectors.base import AnalysisContext, SmellThresholds
from cpgscope.detectors.engine import SmellDetectionEngine
from cpgscope.graph.index import graph_summary, incident_edges, neighbors
from cpgscope.logging_config import LogContext, get_logger, log_operation
from cpgscope.models import (
    CodeCommunity,
    CommunityAlgorithm,
    CPGData,
    CPGEdge,
    CriticalPathResult,
    DegreeDirection,
    Direction,
    EdgeKind,
    ImpactAnalysis,
    PathType,
    SmellFinding,
    SmellType,
)
from cpgscope.semantic.communities import identify_code_communities
from cpgscope.semantic.critical_path import semantic_critical_path
from cpgscope.semantic.impact import dependency_impact_analysis
from cpgscope.semantic.weights import SemanticContext, make_weight_function
from cpgscope.validation import coerce_enum, validate_graph

logger = get_logger(__name__)

# Marker for "use the configured depth budget"
CONFIGURED: Any = object()


class GraphAnalyzer:
    """Runs cpgscope analyses with configured defaults.

    Example:
        >>> analyzer = GraphAnalyzer(load_config())
        >>> report = analyzer.run_full_analysis(CPGData.from_dict(raw))
        >>> report["smells"]["cyclic_dependencies"]
    """

    def __init__(self, config: Optional[CPGScopeConfig] = None):
        """Initialize analyzer.

        Args:
            config: Configuration supplying defaults (built-in defaults if None)
        """
        self.config = config or CPGScopeConfig()

    # ------------------------------------------------------------------
    # Graph primitives
    # ------------------------------------------------------------------

    def neighbors(self, graph: CPGData, node_id: str, direction: Union[Direction, str] = Direction.OUT) -> List[str]:
        return neighbors(graph, node_id, direction)

    def incident_edges(
        self, graph: CPGData, node_id: str, direction: Union[Direction, str] = Direction.OUT
    ) -> List[CPGEdge]:
        return incident_edges(graph, node_id, direction)

    # ------------------------------------------------------------------
    # Structural algorithms
    # ------------------------------------------------------------------

    def strongly_connected_components(self, graph: CPGData) -> List[List[str]]:
        return strongly_connected_components(graph)

    def degree_centrality(
        self,
        graph: CPGData,
        direction: Union[DegreeDirection, str] = DegreeDirection.TOTAL,
        normalize: bool = False,
    ) -> Dict[str, float]:
        return degree_centrality(graph, direction, normalize)

    def betweenness_centrality(self, graph: CPGData) -> Dict[str, float]:
        return betweenness_centrality(graph, max_workers=self.config.centrality.max_workers)

    def pagerank(self, graph: CPGData) -> Dict[str, float]:
        return pagerank(graph, **self._pagerank_params())

    def shortest_path(
        self,
        graph: CPGData,
        source: str,
        target: str,
        weight_function: Optional[Callable[[CPGEdge], float]] = None,
        max_depth: Optional[int] = CONFIGURED,
        semantic: bool = False,
    ) -> List[str]:
        """Shortest path; ``semantic=True`` weighs edges with the configured cost model."""
        if semantic and weight_function is None:
            weight_function = make_weight_function(graph, self.config.paths.semantic_context())
        if max_depth is CONFIGURED:
            max_depth = self.config.paths.max_depth
        return shortest_path(graph, source, target, weight_function, max_depth)

    # ------------------------------------------------------------------
    # Semantic layer
    # ------------------------------------------------------------------

    def semantic_critical_path(
        self,
        graph: CPGData,
        source: str,
        target: str,
        cost_factors: Optional[Union[SemanticContext, Dict[str, Any]]] = None,
        path_type: Union[PathType, str] = PathType.ANY,
        max_depth: Optional[int] = CONFIGURED,
    ) -> CriticalPathResult:
        paths = self.config.paths
        return semantic_critical_path(
            graph,
            source,
            target,
            cost_factors=cost_factors if cost_factors is not None else paths.semantic_context(),
            path_type=path_type,
            max_depth=paths.critical_path_max_depth if max_depth is CONFIGURED else max_depth,
            max_candidate_paths=paths.max_candidate_paths,
        )

    def dependency_impact_analysis(
        self,
        graph: CPGData,
        node_id: str,
        depth: Optional[int] = None,
        dependency_types: Optional[Iterable[Union[EdgeKind, str]]] = None,
        communities: Optional[List[CodeCommunity]] = None,
    ) -> ImpactAnalysis:
        impact = self.config.impact
        return dependency_impact_analysis(
            graph,
            node_id,
            depth=depth if depth is not None else impact.depth,
            dependency_types=dependency_types if dependency_types is not None else impact.dependency_types,
            community_algorithm=self.config.communities.algorithm,
            communities=communities,
        )

    def identify_code_communities(
        self,
        graph: CPGData,
        algorithm: Optional[Union[CommunityAlgorithm, str]] = None,
    ) -> List[CodeCommunity]:
        communities = self.config.communities
        return identify_code_communities(
            graph,
            algorithm=algorithm if algorithm is not None else communities.algorithm,
            max_iterations=communities.max_iterations,
        )

    # ------------------------------------------------------------------
    # Smells
    # ------------------------------------------------------------------

    def detect_architectural_smells(
        self,
        graph: CPGData,
        smells_to_detect: Optional[Iterable[Union[SmellType, str]]] = None,
        thresholds: Optional[Union[SmellThresholds, Dict[str, Any]]] = None,
        context: Optional[AnalysisContext] = None,
    ) -> Dict[str, List[SmellFinding]]:
        detectors = self.config.detectors
        engine = SmellDetectionEngine(
            thresholds if thresholds is not None else detectors.thresholds,
            community_algorithm=self.config.communities.algorithm,
            max_workers=self.config.centrality.max_workers,
        )
        if smells_to_detect is None:
            smells_to_detect = detectors.enabled
        return engine.detect(graph, smells_to_detect, context=context)

    # ------------------------------------------------------------------
    # Full analysis
    # ------------------------------------------------------------------

    def _pagerank_params(self) -> Dict[str, Any]:
        centrality = self.config.centrality
        return {
            "damping": centrality.damping,
            "max_iterations": centrality.max_iterations,
            "tolerance": centrality.tolerance,
        }

    @log_operation("full_analysis")
    def run_full_analysis(self, graph: CPGData) -> Dict[str, Any]:
        """Run every analysis over one snapshot.

        Centrality and community results are computed once and shared with
        the smell detectors.

        Returns:
            Dictionary with ``summary``, ``components``, ``centrality``,
            ``top_nodes``, ``communities``, ``modularity`` and ``smells``
        """
        start_time = time.time()
        validate_graph(graph)
        algorithm = coerce_enum(self.config.communities.algorithm, CommunityAlgorithm)
        context = AnalysisContext(
            graph,
            community_algorithm=algorithm,
            max_workers=self.config.centrality.max_workers,
            pagerank_params=self._pagerank_params(),
            community_max_iterations=self.config.communities.max_iterations,
        )
        top_n = self.config.centrality.top_n

        with LogContext(node_count=graph.node_count, edge_count=graph.edge_count):
            logger.info("Starting full graph analysis")

            components = strongly_connected_components(graph)
            cycles = cyclic_components(graph)
            communities = context.communities
            smells = self.detect_architectural_smells(graph, context=context)

            report = {
                "summary": graph_summary(graph),
                "components": {
                    "count": len(components),
                    "cyclic": len(cycles),
                    "largest_cycle": len(cycles[0]) if cycles else 0,
                },
                "centrality": {
                    "degree": centrality_statistics(context.degree),
                    "betweenness": centrality_statistics(context.betweenness),
                    "pagerank": centrality_statistics(context.pagerank),
                },
                "top_nodes": {
                    "degree": top_nodes(context.degree, top_n),
                    "betweenness": top_nodes(context.betweenness, top_n),
                    "pagerank": top_nodes(context.pagerank, top_n),
                },
                "communities": [community.to_dict() for community in communities],
                "modularity": modularity(graph, [c.member_nodes for c in communities]),
                "smells": {
                    smell: [finding.to_dict() for finding in findings]
                    for smell, findings in smells.items()
                },
            }

            logger.info("Full graph analysis complete", extra={
                "communities": len(communities),
                "cycles": len(cycles),
                "findings": sum(len(f) for f in smells.values()),
                "duration_seconds": round(time.time() - start_time, 3),
            })
        return report
