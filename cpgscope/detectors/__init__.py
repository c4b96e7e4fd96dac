"""Architectural smell detectors."""

from cpgscope.detectors.base import AnalysisContext, SmellDetector, SmellThresholds
from cpgscope.detectors.cyclic_dependency import CyclicDependencyDetector
from cpgscope.detectors.engine import DETECTORS, SmellDetectionEngine, detect_architectural_smells
from cpgscope.detectors.god_object import GodObjectDetector
from cpgscope.detectors.shotgun_surgery import ShotgunSurgeryDetector

__all__ = [
    "AnalysisContext",
    "CyclicDependencyDetector",
    "DETECTORS",
    "GodObjectDetector",
    "ShotgunSurgeryDetector",
    "SmellDetectionEngine",
    "SmellDetector",
    "SmellThresholds",
    "detect_architectural_smells",
]
