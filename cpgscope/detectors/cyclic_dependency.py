"""Cyclic dependency detector using Tarjan's algorithm."""

from typing import List, Optional

from cpgscope.algorithms.scc import cyclic_components
from cpgscope.detectors.base import AnalysisContext, SmellDetector
from cpgscope.logging_config import get_logger
from cpgscope.models import Severity, SmellFinding, SmellType

logger = get_logger(__name__)


class CyclicDependencyDetector(SmellDetector):
    """Detects strongly connected components of two or more nodes."""

    smell = SmellType.CYCLIC_DEPENDENCIES

    def detect(self, context: AnalysisContext) -> List[SmellFinding]:
        """Find circular dependencies in the graph.

        Only edges of ``thresholds.cycle_edge_kinds`` are followed when set.

        Returns:
            One finding per cycle, largest first
        """
        findings: List[SmellFinding] = []
        cycles = cyclic_components(context.graph, edge_kinds=self.thresholds.cycle_edge_kinds)

        for cycle in cycles:
            members = sorted(cycle)
            size = len(members)
            preview = " -> ".join(members[:5])
            if size > 5:
                preview += f" ... ({size} nodes total)"

            findings.append(SmellFinding(
                smell=self.smell,
                detector=self.name,
                title=f"Circular dependency involving {size} nodes",
                description=f"Found circular dependency chain: {preview}",
                nodes_in_cycle=members,
                cycle_size=size,
                evidence={"cycle_length": size},
                suggested_fix=self._suggest_fix(size),
                estimated_effort=self._estimate_effort(size),
            ))

        logger.debug(f"CyclicDependencyDetector found {len(findings)} cycles")
        return findings

    def severity(self, finding: SmellFinding) -> Optional[Severity]:
        """Cycles carry no severity: every cycle is a structural fact."""
        return None

    def _suggest_fix(self, cycle_length: int) -> str:
        """Suggest how to fix the circular dependency.

        Args:
            cycle_length: Number of nodes in the cycle

        Returns:
            Fix suggestion
        """
        if cycle_length >= 5:
            return (
                "Large circular dependency detected. Consider:\n"
                "1. Extract shared interfaces/types into a separate module\n"
                "2. Use dependency injection to break tight coupling\n"
                "3. Refactor into layers with clear dependency direction\n"
                "4. Apply the Dependency Inversion Principle"
            )
        return (
            "Small circular dependency. Consider:\n"
            "1. Merge the circular modules if they're tightly coupled\n"
            "2. Extract common dependencies to a third module\n"
            "3. Replace one direction of the call with a callback or event"
        )

    def _estimate_effort(self, cycle_length: int) -> str:
        if cycle_length >= 10:
            return "Large (2-4 days)"
        elif cycle_length >= 5:
            return "Medium (1-2 days)"
        else:
            return "Small (2-4 hours)"
