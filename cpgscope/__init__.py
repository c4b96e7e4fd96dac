"""
cpgscope - Code Property Graph Analysis Engine

Computes structural and semantic metrics over a code property graph:
strongly connected components, centrality, shortest and critical paths,
change impact, code communities and architectural smells.
"""

__version__ = "0.1.0"

# Public name -> defining module
_EXPORTS = {
    "CPGData": "cpgscope.models",
    "CPGEdge": "cpgscope.models",
    "CPGNode": "cpgscope.models",
    "EdgeKind": "cpgscope.models",
    "GraphAnalyzer": "cpgscope.analyzer",
    "CPGScopeConfig": "cpgscope.config",
    "load_config": "cpgscope.config",
    "CPGAnalysisError": "cpgscope.validation",
    "SemanticContext": "cpgscope.semantic",
    "semantic_critical_path": "cpgscope.semantic",
    "dependency_impact_analysis": "cpgscope.semantic",
    "identify_code_communities": "cpgscope.semantic",
    "detect_architectural_smells": "cpgscope.detectors",
    "configure_logging": "cpgscope.logging_config",
}


def __getattr__(name: str):
    """Lazy imports for public API - avoids loading numpy until an analysis is needed."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'cpgscope' has no attribute {name!r}")
    import importlib
    return getattr(importlib.import_module(module_name), name)


__all__ = ["__version__", *_EXPORTS]
