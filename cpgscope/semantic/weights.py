"""Code-aware edge weighting.

A semantic cost model turns a structural edge into a cost that reflects
what traversing it means in code terms: which kind of relationship it is
(``edge_type_costs`` keyed by edge subkind) and what kind of code it lands
on (``node_type_penalties`` keyed by the target node's categories).

    weight = edge_type_costs[edge.subkind]              (default 1.0)
           + sum(node_type_penalties[c] for c in target categories)

When an edge's subkind has no configured cost, the builder's
``weight_hint`` is used if present.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from cpgscope.models import CPGData, CPGEdge
from cpgscope.validation import InvalidGraphError

DEFAULT_EDGE_COST = 1.0

# Preset cost models per analysis goal
GOAL_PRESETS: Dict[str, Dict[str, Dict[str, float]]] = {
    "performance": {
        "node_type_penalties": {
            "io_operation": 5.0,
            "db_operation": 8.0,
            "network_operation": 6.0,
            "computation": 2.0,
        },
        "edge_type_costs": {
            "direct_call": 1.0,
            "dynamic_call": 2.0,
            "message_send": 3.0,
            "loop_back": 4.0,
        },
    },
    "security": {
        "node_type_penalties": {
            "external_input": 8.0,
            "db_operation": 5.0,
            "file_operation": 4.0,
            "io_operation": 3.0,
        },
        "edge_type_costs": {
            "parameter": 2.0,
            "return_value": 1.5,
            "assignment": 1.0,
        },
    },
    "maintainability": {
        "node_type_penalties": {
            "high_complexity": 4.0,
            "side_effect": 2.0,
        },
        "edge_type_costs": {
            "dynamic_call": 3.0,
            "direct_call": 1.0,
        },
    },
}


@dataclass(frozen=True)
class SemanticWeights:
    """Cost factors of a semantic model.

    Attributes:
        node_type_penalties: node category -> penalty added when an edge lands on it
        edge_type_costs: edge subkind -> base cost of traversing the edge
    """
    node_type_penalties: Dict[str, float] = field(default_factory=dict)
    edge_type_costs: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_value(
        cls, value: Union["SemanticWeights", "SemanticContext", Mapping[str, Any], None]
    ) -> "SemanticWeights":
        """Coerce weights, a context, or a plain mapping into ``SemanticWeights``."""
        if value is None:
            return cls()
        if isinstance(value, SemanticWeights):
            return value
        if isinstance(value, SemanticContext):
            return value.weights
        if "weights" in value:
            return cls.from_value(value["weights"])
        return cls(
            node_type_penalties={k: float(v) for k, v in (value.get("node_type_penalties") or {}).items()},
            edge_type_costs={k: float(v) for k, v in (value.get("edge_type_costs") or {}).items()},
        )


@dataclass(frozen=True)
class SemanticContext:
    """Analysis goal plus the cost model serving it."""
    goal: str = "general"
    weights: SemanticWeights = field(default_factory=SemanticWeights)

    @classmethod
    def for_goal(cls, goal: str) -> "SemanticContext":
        """Preset context for ``performance``, ``security`` or ``maintainability``.

        Unknown goals get neutral weights (every edge costs 1.0).
        """
        preset = GOAL_PRESETS.get(goal, {})
        return cls(goal=goal, weights=SemanticWeights.from_value(preset))


def edge_weight_breakdown(
    edge: CPGEdge,
    graph: CPGData,
    weights: SemanticWeights,
) -> Tuple[Optional[str], float, Dict[str, float]]:
    """Split an edge's semantic weight into its cost factors.

    Returns:
        Tuple of (matched edge subkind or None for the default cost,
        base edge cost, {category: penalty})
    """
    target = graph.nodes.get(edge.to_node_id)
    if target is None:
        raise InvalidGraphError([edge.id])

    if edge.subkind is not None and edge.subkind in weights.edge_type_costs:
        matched: Optional[str] = edge.subkind
        base = weights.edge_type_costs[edge.subkind]
    else:
        matched = None
        hint = edge.metadata.weight_hint
        base = hint if hint is not None else DEFAULT_EDGE_COST

    penalties = {
        category: weights.node_type_penalties[category]
        for category in target.metadata.node_category
        if category in weights.node_type_penalties
    }
    return matched, base, penalties


def semantic_edge_weight(
    edge: CPGEdge,
    graph: CPGData,
    context: Union[SemanticContext, SemanticWeights, Mapping[str, Any], None] = None,
) -> float:
    """Cost of traversing ``edge`` under the context's cost model.

    Args:
        edge: Edge being traversed
        graph: Snapshot containing the edge's target node
        context: SemanticContext, SemanticWeights, or a mapping with
            ``weights`` / ``node_type_penalties`` / ``edge_type_costs``

    Returns:
        Edge type cost plus the penalties of every category of the target node
    """
    _, base, penalties = edge_weight_breakdown(edge, graph, SemanticWeights.from_value(context))
    return base + sum(penalties.values())


def make_weight_function(
    graph: CPGData,
    context: Union[SemanticContext, SemanticWeights, Mapping[str, Any], None] = None,
) -> Callable[[CPGEdge], float]:
    """Weight function for ``shortest_path`` bound to a graph and cost model."""
    weights = SemanticWeights.from_value(context)

    def weight(edge: CPGEdge) -> float:
        return semantic_edge_weight(edge, graph, weights)

    return weight
