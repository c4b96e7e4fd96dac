"""
Shotgun Surgery Detector.

Detects nodes whose change ripples into many other nodes spread across
several communities, meaning a single edit forces follow-up edits all over
the codebase (shotgun surgery).
"""

from typing import List, Optional

from cpgscope.detectors.base import AnalysisContext, SmellDetector
from cpgscope.logging_config import get_logger
from cpgscope.models import Severity, SmellFinding, SmellType
from cpgscope.semantic.impact import dependency_impact_analysis

logger = get_logger(__name__)


class ShotgunSurgeryDetector(SmellDetector):
    """Detect nodes with wide, community-spanning change impact."""

    smell = SmellType.SHOTGUN_SURGERY

    def detect(self, context: AnalysisContext) -> List[SmellFinding]:
        """
        Detect nodes whose downstream impact crosses too many communities.

        Returns:
            List of findings for nodes exceeding both the fan-out and the
            community spread thresholds.
        """
        graph = context.graph
        t = self.thresholds
        findings: List[SmellFinding] = []

        for node_id, node in graph.nodes.items():
            impact = dependency_impact_analysis(
                graph,
                node_id,
                depth=t.impact_depth,
                communities=context.communities,
            )
            community_count = len(impact.affected_communities)
            downstream_count = len(impact.downstream_nodes)
            if community_count <= t.community_spread or downstream_count <= t.fanout:
                continue

            severity = self._calculate_severity(community_count, downstream_count)
            findings.append(SmellFinding(
                smell=self.smell,
                detector=self.name,
                title=f"Shotgun surgery risk: {node_id}",
                description=(
                    f"Changing {node.ast_kind} '{node_id}' affects {downstream_count} "
                    f"nodes across {community_count} communities within "
                    f"{t.impact_depth} hops."
                ),
                node_id=node_id,
                severity=severity,
                evidence={
                    "impact_analysis": impact.to_dict(),
                    "community_count": community_count,
                    "downstream_count": downstream_count,
                },
                suggested_fix=(
                    "Consolidate the behaviour its dependents rely on:\n"
                    "1. Introduce a facade so dependents use one stable entry point\n"
                    "2. Move code that always changes together into the same module\n"
                    "3. Hide volatile details behind an interface"
                ),
                estimated_effort=self._estimate_effort(downstream_count),
            ))

        logger.debug(f"ShotgunSurgeryDetector found {len(findings)} nodes")
        return findings

    def severity(self, finding: SmellFinding) -> Optional[Severity]:
        """Calculate severity from community spread and fan-out evidence."""
        return self._calculate_severity(
            finding.evidence.get("community_count", 0),
            finding.evidence.get("downstream_count", 0),
        )

    def _calculate_severity(self, community_count: int, downstream_count: int) -> Severity:
        t = self.thresholds
        if community_count > 2 * t.community_spread and downstream_count > 2 * t.fanout:
            return Severity.HIGH
        return Severity.MEDIUM

    def _estimate_effort(self, downstream_count: int) -> str:
        if downstream_count >= 50:
            return "Large (1-2 weeks)"
        elif downstream_count >= 20:
            return "Medium (3-5 days)"
        else:
            return "Small (1-2 days)"
