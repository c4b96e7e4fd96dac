"""Unit tests for the error taxonomy and input validation."""

import pytest

from cpgscope.models import CommunityAlgorithm, CPGData, SmellType
from cpgscope.validation import (
    CPGAnalysisError,
    InvalidGraphError,
    InvalidWeightError,
    MaxDepthReachedError,
    NodeNotFoundError,
    NoPathFoundError,
    UnsupportedAlgorithmError,
    UnsupportedEdgeKindError,
    UnsupportedSmellError,
    coerce_enum,
    validate_graph,
    validate_node,
    validate_non_negative,
)
from tests.factories import CPGEdgeFactory, CPGNodeFactory


class TestErrorCodes:
    @pytest.mark.parametrize(
        "error,code",
        [
            (NodeNotFoundError("x"), "node_not_found"),
            (InvalidGraphError(["e1"]), "invalid_graph"),
            (NoPathFoundError("a", "b"), "no_path_found"),
            (MaxDepthReachedError("a", "b", 3), "max_depth_reached"),
            (InvalidWeightError("e1", -1.0), "invalid_weight"),
            (UnsupportedEdgeKindError("x", ["call_graph"]), "unsupported_edge_kind"),
            (UnsupportedSmellError("x", ["god_object"]), "unsupported_smell"),
            (UnsupportedAlgorithmError("x", ["louvain"]), "unsupported_algorithm"),
        ],
    )
    def test_stable_codes(self, error, code):
        assert isinstance(error, CPGAnalysisError)
        assert error.code == code

    def test_suggestion_in_message(self):
        error = MaxDepthReachedError("a", "b", 2)
        assert "Suggestion: Retry with a larger max_depth" in str(error)
        assert error.max_depth == 2

    def test_invalid_graph_message_truncates(self):
        error = InvalidGraphError([f"e{i}" for i in range(8)])
        assert "8 edges total" in str(error)


class TestValidateGraph:
    def test_dangling_edge(self):
        graph = CPGData.build(
            [CPGNodeFactory(id="a")],
            [CPGEdgeFactory(id="bad", from_node_id="a", to_node_id="ghost")],
        )
        with pytest.raises(InvalidGraphError) as exc_info:
            validate_graph(graph)
        assert exc_info.value.dangling_edges == ["bad"]

    def test_empty_graph_is_valid(self):
        validate_graph(CPGData())

    def test_validate_node(self, chain):
        assert validate_node(chain, "n0") == "n0"
        with pytest.raises(NodeNotFoundError):
            validate_node(chain, "missing")

    def test_validate_non_negative(self):
        assert validate_non_negative(None, "depth") is None
        assert validate_non_negative(0, "depth") == 0
        with pytest.raises(ValueError, match="depth must be >= 0"):
            validate_non_negative(-1, "depth")


class TestCoerceEnum:
    def test_member_passthrough(self):
        assert coerce_enum(CommunityAlgorithm.LOUVAIN, CommunityAlgorithm) is CommunityAlgorithm.LOUVAIN

    def test_case_insensitive_string(self):
        assert coerce_enum("Label_Propagation", CommunityAlgorithm) is CommunityAlgorithm.LABEL_PROPAGATION

    def test_unknown_tag_uses_error_class(self):
        with pytest.raises(UnsupportedSmellError):
            coerce_enum("spaghetti", SmellType, UnsupportedSmellError)

    def test_non_string_rejected(self):
        with pytest.raises(UnsupportedAlgorithmError):
            coerce_enum(42, CommunityAlgorithm)
