"""Global pytest configuration and fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import logging
import sys
from pathlib import Path

import pytest


# =============================================================================
# Path Setup
# =============================================================================

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cpgscope.logging_config import ROOT_LOGGER_NAME, clear_context  # noqa: E402
from cpgscope.models import CPGData, EdgeKind  # noqa: E402
from tests.factories import build_graph, chain_graph, cycle_graph, hub_graph  # noqa: E402


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "slow: Slow tests (>30 seconds)"
    )
    config.addinivalue_line(
        "markers", "property: Hypothesis property-based tests"
    )


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() and LogContext state between tests."""
    yield
    clear_context()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = True
    root.setLevel(logging.NOTSET)


# =============================================================================
# Graph fixtures
# =============================================================================


@pytest.fixture
def empty_graph():
    """Snapshot without nodes or edges."""
    return CPGData()


@pytest.fixture
def chain():
    """n0 -> n1 -> n2 -> n3 -> n4."""
    return chain_graph(5)


@pytest.fixture
def cycle():
    """n0 -> n1 -> n2 -> n0."""
    return cycle_graph(3)


@pytest.fixture
def hub():
    """Hub with bidirectional call edges to ten peripheral nodes."""
    return hub_graph(10)


@pytest.fixture
def disjoint():
    """Two components that never meet: a -> b and c -> d."""
    return build_graph([("a", "b"), ("c", "d")])


@pytest.fixture
def mixed_kinds():
    """One edge of every relationship layer fanning out from ``root``."""
    return build_graph(
        [
            ("root", "call", EdgeKind.CALL_GRAPH),
            ("root", "data", EdgeKind.DATA_FLOW),
            ("root", "flow", EdgeKind.CONTROL_FLOW),
            ("root", "mod", EdgeKind.MODULE_DEPENDENCY),
            ("root", "ast", EdgeKind.AST_STRUCTURAL),
            ("root", "ref", EdgeKind.REFERENCE),
        ]
    )
