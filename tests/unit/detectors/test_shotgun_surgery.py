"""Unit tests for ShotgunSurgeryDetector."""

import pytest

from cpgscope.detectors import AnalysisContext, ShotgunSurgeryDetector, SmellThresholds
from cpgscope.models import Severity, SmellType
from tests.factories import clusters_graph


@pytest.fixture
def fanned_out():
    """Four 3-node clusters; c0_0 calls into the other three."""
    return clusters_graph(clusters=4, size=3)


class TestShotgunSurgeryDetector:
    """Test community-spanning impact detection."""

    def test_flags_the_bridging_cluster(self, fanned_out):
        """Members of the bridging cluster reach every community within 3 hops."""
        context = AnalysisContext(fanned_out)
        assert len(context.communities) == 4

        findings = ShotgunSurgeryDetector().detect(context)

        assert [f.node_id for f in findings] == ["c0_0", "c0_1", "c0_2"]
        finding = findings[0]
        assert finding.smell == SmellType.SHOTGUN_SURGERY
        assert finding.severity == Severity.MEDIUM
        assert finding.evidence["community_count"] == 4
        assert finding.evidence["downstream_count"] == 11
        assert finding.evidence["impact_analysis"]["node_id"] == "c0_0"
        assert finding.estimated_effort == "Small (1-2 days)"

    def test_high_severity_at_double_thresholds(self, fanned_out):
        thresholds = SmellThresholds(community_spread=1, fanout=4)
        findings = ShotgunSurgeryDetector(thresholds).detect(AnalysisContext(fanned_out))
        assert findings[0].severity == Severity.HIGH

    def test_shallow_impact_depth(self, fanned_out):
        """With one hop c0_0 reaches only 5 nodes, not more than the fanout."""
        thresholds = SmellThresholds(impact_depth=1)
        assert ShotgunSurgeryDetector(thresholds).detect(AnalysisContext(fanned_out)) == []

    def test_chain_is_clean(self, chain):
        assert ShotgunSurgeryDetector().detect(AnalysisContext(chain)) == []

    def test_severity_recomputed_from_evidence(self, fanned_out):
        detector = ShotgunSurgeryDetector()
        finding = detector.detect(AnalysisContext(fanned_out))[0]
        assert detector.severity(finding) == Severity.MEDIUM
