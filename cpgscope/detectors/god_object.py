"""God object detector.

A god object is a node the rest of the graph is funnelled through: it is
either coupled to a large share of all nodes (normalized degree) or sits on
a large share of all shortest paths (normalized betweenness).
"""

from typing import List, Optional

from cpgscope.detectors.base import AnalysisContext, SmellDetector
from cpgscope.logging_config import get_logger
from cpgscope.models import Severity, SmellFinding, SmellType

logger = get_logger(__name__)


class GodObjectDetector(SmellDetector):
    """Detects nodes with excessive degree or betweenness centrality."""

    smell = SmellType.GOD_OBJECT

    def detect(self, context: AnalysisContext) -> List[SmellFinding]:
        """Find god objects in the graph.

        Returns:
            One finding per flagged node, in node order
        """
        graph = context.graph
        findings: List[SmellFinding] = []
        if graph.node_count == 0:
            return findings

        degree = context.degree
        betweenness = context.betweenness
        for node_id, node in graph.nodes.items():
            severity = self._calculate_severity(degree[node_id], betweenness[node_id])
            if severity is None:
                continue

            raw_degree = int(context.raw_degree[node_id])
            findings.append(SmellFinding(
                smell=self.smell,
                detector=self.name,
                title=f"God object: {node_id}",
                description=(
                    f"{node.ast_kind} '{node_id}' has {raw_degree} incident edges "
                    f"(normalized degree {degree[node_id]:.2f}) and normalized "
                    f"betweenness {betweenness[node_id]:.2f}. Too much of the graph "
                    f"depends on or flows through it."
                ),
                node_id=node_id,
                severity=severity,
                evidence={
                    "centrality_scores": {
                        "degree": degree[node_id],
                        "betweenness": betweenness[node_id],
                        "betweenness_raw": context.betweenness_raw[node_id],
                        "pagerank": context.pagerank[node_id],
                    },
                    "raw_degree": raw_degree,
                    "ast_kind": node.ast_kind,
                },
                suggested_fix=self._suggest_fix(degree[node_id], betweenness[node_id]),
                estimated_effort=self._estimate_effort(severity),
            ))

        logger.debug(f"GodObjectDetector flagged {len(findings)} nodes")
        return findings

    def severity(self, finding: SmellFinding) -> Optional[Severity]:
        """Calculate severity from the finding's centrality evidence."""
        scores = finding.evidence.get("centrality_scores", {})
        return self._calculate_severity(scores.get("degree", 0.0), scores.get("betweenness", 0.0))

    def _calculate_severity(self, degree: float, betweenness: float) -> Optional[Severity]:
        """Map normalized centralities onto a severity.

        Returns:
            HIGH or MEDIUM, or None when the node is below both thresholds
        """
        t = self.thresholds
        if degree > t.degree_high or betweenness > t.betweenness_high:
            return Severity.HIGH
        if degree > t.degree_medium or betweenness > t.betweenness_medium:
            return Severity.MEDIUM
        return None

    def _suggest_fix(self, degree: float, betweenness: float) -> str:
        suggestions = []
        if degree > self.thresholds.degree_medium:
            suggestions.append(
                "Split responsibilities: group the incident edges by the feature "
                "they serve and extract each group into its own module"
            )
        if betweenness > self.thresholds.betweenness_medium:
            suggestions.append(
                "Remove the bottleneck: let callers depend on narrow interfaces "
                "instead of routing every interaction through this node"
            )
        return "\n".join(f"{i}. {s}" for i, s in enumerate(suggestions, 1))

    def _estimate_effort(self, severity: Severity) -> str:
        if severity == Severity.HIGH:
            return "Large (1-2 weeks)"
        return "Medium (3-5 days)"
