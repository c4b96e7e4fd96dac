"""Detection engine that orchestrates the architectural smell detectors."""

import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from cpgscope.detectors.base import AnalysisContext, SmellDetector, SmellThresholds
from cpgscope.detectors.cyclic_dependency import CyclicDependencyDetector
from cpgscope.detectors.god_object import GodObjectDetector
from cpgscope.detectors.shotgun_surgery import ShotgunSurgeryDetector
from cpgscope.logging_config import LogContext, get_logger
from cpgscope.models import CommunityAlgorithm, CPGData, SmellFinding, SmellType
from cpgscope.validation import UnsupportedSmellError, coerce_enum, validate_graph

logger = get_logger(__name__)

DETECTORS: Dict[SmellType, Type[SmellDetector]] = {
    SmellType.GOD_OBJECT: GodObjectDetector,
    SmellType.CYCLIC_DEPENDENCIES: CyclicDependencyDetector,
    SmellType.SHOTGUN_SURGERY: ShotgunSurgeryDetector,
}


class SmellDetectionEngine:
    """Runs the selected detectors over one graph snapshot."""

    def __init__(
        self,
        thresholds: Union[SmellThresholds, Mapping[str, Any], None] = None,
        community_algorithm: Union[CommunityAlgorithm, str] = CommunityAlgorithm.LOUVAIN,
        max_workers: Optional[int] = None,
    ):
        """Initialize detection engine.

        Args:
            thresholds: SmellThresholds or a mapping of threshold overrides
            community_algorithm: Algorithm used for community-aware detectors
            max_workers: Thread count for betweenness centrality
        """
        self.thresholds = SmellThresholds.coerce(thresholds)
        self.community_algorithm = coerce_enum(community_algorithm, CommunityAlgorithm)
        self.max_workers = max_workers

    def _resolve_smells(self, smells_to_detect: Optional[Iterable[Union[SmellType, str]]]) -> List[SmellType]:
        """Validate every requested tag before anything runs."""
        if smells_to_detect is None:
            return list(DETECTORS)
        resolved: List[SmellType] = []
        for smell in smells_to_detect:
            smell_type = coerce_enum(smell, SmellType, UnsupportedSmellError)
            if smell_type not in resolved:
                resolved.append(smell_type)
        return resolved

    def detect(
        self,
        graph: CPGData,
        smells_to_detect: Optional[Iterable[Union[SmellType, str]]] = None,
        context: Optional[AnalysisContext] = None,
    ) -> Dict[str, List[SmellFinding]]:
        """Run detectors and group their findings by smell.

        Args:
            graph: CPG snapshot
            smells_to_detect: Smell tags to run (None = all, empty = none)
            context: Metrics already computed for ``graph`` by the caller

        Returns:
            Mapping smell tag -> findings, one key per requested smell

        Raises:
            UnsupportedSmellError: If a tag is unknown (raised before any detector runs)
            InvalidGraphError: If the graph has dangling edges
        """
        smells = self._resolve_smells(smells_to_detect)
        if not smells:
            return {}

        validate_graph(graph)
        if context is None or context.graph is not graph:
            context = AnalysisContext(graph, self.community_algorithm, self.max_workers)
        results: Dict[str, List[SmellFinding]] = {}

        for smell in smells:
            detector = DETECTORS[smell](self.thresholds)
            detector_name = detector.name

            with LogContext(detector=detector_name):
                start_time = time.time()
                logger.info(f"Running detector: {detector_name}")
                try:
                    findings = detector.detect(context)
                except Exception as e:
                    logger.error(
                        f"Detector failed: {detector_name}",
                        extra={"error": str(e), "duration_seconds": round(time.time() - start_time, 3)},
                        exc_info=True,
                    )
                    raise

                logger.info(f"Detector complete: {detector_name}", extra={
                    "findings_count": len(findings),
                    "duration_seconds": round(time.time() - start_time, 3),
                })
            results[smell.value] = findings

        logger.info("All detectors complete", extra={
            "total_findings": sum(len(f) for f in results.values()),
            "detectors_run": len(smells),
        })
        return results


def detect_architectural_smells(
    graph: CPGData,
    smells_to_detect: Optional[Iterable[Union[SmellType, str]]] = None,
    thresholds: Union[SmellThresholds, Mapping[str, Any], None] = None,
) -> Dict[str, List[SmellFinding]]:
    """Detect architectural smells in a CPG snapshot.

    Args:
        graph: CPG snapshot
        smells_to_detect: ``god_object``, ``cyclic_dependencies``,
            ``shotgun_surgery``; None runs all of them
        thresholds: SmellThresholds or mapping of overrides

    Returns:
        Mapping smell tag -> list of findings
    """
    return SmellDetectionEngine(thresholds).detect(graph, smells_to_detect)
