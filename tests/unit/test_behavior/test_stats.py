"""Unit tests for ComplianceStats."""

import pytest

from compliancesim.behavior.decision import ComplianceDecision
from compliancesim.behavior.stats import ComplianceStats


def _scenario():
    stats = ComplianceStats("test-statute")
    stats.record(ComplianceDecision.COMPLY, 0.9)
    stats.record(ComplianceDecision.COMPLY, 0.8)
    stats.record(ComplianceDecision.EVADE, 0.3)
    stats.record(ComplianceDecision.UNAWARE, 0.0)
    return stats


class TestComplianceStats:
    def test_empty_rates_are_zero(self):
        stats = ComplianceStats("s1")
        assert stats.compliance_rate() == 0.0
        assert stats.evasion_rate() == 0.0
        assert stats.unaware_rate() == 0.0
        assert stats.guidance_rate() == 0.0
        assert stats.avg_compliance_prob == 0.0

    def test_mixed_population(self):
        stats = _scenario()
        assert stats.total_agents == 4
        assert (stats.complied, stats.evaded, stats.unaware) == (2, 1, 1)
        assert stats.compliance_rate() == pytest.approx(0.5)
        assert stats.evasion_rate() == pytest.approx(0.25)
        assert stats.unaware_rate() == pytest.approx(0.25)
        assert stats.avg_compliance_prob == pytest.approx(0.5)

    def test_seek_guidance_is_tallied_separately(self):
        stats = ComplianceStats("s1")
        stats.record(ComplianceDecision.SEEK_GUIDANCE, 1.0)
        assert stats.sought_guidance == 1
        assert stats.complied == 0
        assert stats.guidance_rate() == 1.0

    def test_accepts_decision_values(self):
        stats = ComplianceStats("s1")
        stats.record("comply", 0.5)
        stats.record("seek_guidance", 0.5)
        assert stats.complied == 1
        assert stats.sought_guidance == 1
        assert stats.total_agents == 2

    def test_rejects_unknown_decision(self):
        stats = ComplianceStats("s1")
        with pytest.raises(ValueError, match="Unknown compliance decision"):
            stats.record("bogus", 0.5)
        assert stats.total_agents == 0
        assert stats.sought_guidance == 0
        assert stats.avg_compliance_prob == 0.0

    def test_rates_never_exceed_one(self):
        stats = _scenario()
        stats.record(ComplianceDecision.SEEK_GUIDANCE, 0.7)
        total = (
            stats.compliance_rate() + stats.evasion_rate()
            + stats.unaware_rate() + stats.guidance_rate()
        )
        assert total == pytest.approx(1.0)
        assert stats.compliance_rate() + stats.evasion_rate() + stats.unaware_rate() <= 1.0

    def test_summary_format(self):
        assert _scenario().summary() == (
            "Statute test-statute: Compliance=50.0% (2/4), "
            "Evasion=25.0% (1/4), Unaware=1 Avg P(comply)=0.50"
        )

    def test_summary_when_empty(self):
        assert ComplianceStats("s1").summary() == (
            "Statute s1: Compliance=0.0% (0/0), Evasion=0.0% (0/0), Unaware=0 Avg P(comply)=0.00"
        )

    def test_merge(self):
        first = _scenario()
        second = ComplianceStats("test-statute")
        second.record(ComplianceDecision.COMPLY, 1.0)
        second.record(ComplianceDecision.COMPLY, 1.0)
        second.record(ComplianceDecision.COMPLY, 1.0)
        second.record(ComplianceDecision.COMPLY, 1.0)

        merged = first.merge(second)
        assert merged.total_agents == 8
        assert merged.complied == 6
        assert merged.avg_compliance_prob == pytest.approx(0.75)
        # Inputs are untouched.
        assert first.total_agents == 4

    def test_merge_with_empty(self):
        merged = ComplianceStats("s1").merge(ComplianceStats("s1"))
        assert merged.total_agents == 0
        assert merged.avg_compliance_prob == 0.0

    def test_merge_rejects_other_statute(self):
        with pytest.raises(ValueError, match="Cannot merge"):
            ComplianceStats("a").merge(ComplianceStats("b"))

    def test_dict_roundtrip(self):
        stats = _scenario()
        assert ComplianceStats.from_dict(stats.to_dict()) == stats
