"""Semantic layer: code-aware weights, critical paths, impact and communities."""

from cpgscope.semantic.communities import describe_community, identify_code_communities
from cpgscope.semantic.critical_path import semantic_critical_path
from cpgscope.semantic.impact import DEPENDENCY_WEIGHTS, dependency_impact_analysis
from cpgscope.semantic.weights import (
    GOAL_PRESETS,
    SemanticContext,
    SemanticWeights,
    make_weight_function,
    semantic_edge_weight,
)

__all__ = [
    "DEPENDENCY_WEIGHTS",
    "GOAL_PRESETS",
    "SemanticContext",
    "SemanticWeights",
    "dependency_impact_analysis",
    "describe_community",
    "identify_code_communities",
    "make_weight_function",
    "semantic_critical_path",
    "semantic_edge_weight",
]
