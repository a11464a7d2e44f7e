"""Population-level compliance statistics."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from compliancesim.behavior.decision import ComplianceDecision, parse_decision


@dataclass
class ComplianceStats:
    """Streaming tally of decisions about one statute.

    The running mean of recorded probabilities is updated incrementally;
    no per-agent values are stored.

    Attributes:
        statute_id: Statute the decisions refer to.
        total_agents: Number of decisions recorded.
        complied: Decisions to comply.
        evaded: Decisions to evade.
        unaware: Agents that did not recognise the statute.
        sought_guidance: Agents that asked for guidance.
        avg_compliance_prob: Mean of the recorded compliance probabilities.
    """

    statute_id: str = ""
    total_agents: int = 0
    complied: int = 0
    evaded: int = 0
    unaware: int = 0
    sought_guidance: int = 0
    avg_compliance_prob: float = 0.0

    def record(self, decision: ComplianceDecision | str, probability: float) -> None:
        """Add one decision and its estimated compliance probability.

        Raises:
            ValueError: If ``decision`` is not a known compliance decision.
        """
        decision = parse_decision(decision)
        self.total_agents += 1
        n = self.total_agents
        self.avg_compliance_prob = (self.avg_compliance_prob * (n - 1) + probability) / n

        if decision is ComplianceDecision.COMPLY:
            self.complied += 1
        elif decision is ComplianceDecision.EVADE:
            self.evaded += 1
        elif decision is ComplianceDecision.UNAWARE:
            self.unaware += 1
        elif decision is ComplianceDecision.SEEK_GUIDANCE:
            self.sought_guidance += 1

    def _rate(self, count: int) -> float:
        if self.total_agents == 0:
            return 0.0
        return count / self.total_agents

    def compliance_rate(self) -> float:
        return self._rate(self.complied)

    def evasion_rate(self) -> float:
        return self._rate(self.evaded)

    def unaware_rate(self) -> float:
        return self._rate(self.unaware)

    def guidance_rate(self) -> float:
        return self._rate(self.sought_guidance)

    def merge(self, other: ComplianceStats) -> ComplianceStats:
        """Combine two reporting windows for the same statute.

        Raises:
            ValueError: If the statute ids differ.
        """
        if other.statute_id != self.statute_id:
            raise ValueError(
                f"Cannot merge stats for {other.statute_id!r} into {self.statute_id!r}"
            )
        total = self.total_agents + other.total_agents
        avg = 0.0
        if total:
            avg = (
                self.avg_compliance_prob * self.total_agents
                + other.avg_compliance_prob * other.total_agents
            ) / total
        return ComplianceStats(
            statute_id=self.statute_id,
            total_agents=total,
            complied=self.complied + other.complied,
            evaded=self.evaded + other.evaded,
            unaware=self.unaware + other.unaware,
            sought_guidance=self.sought_guidance + other.sought_guidance,
            avg_compliance_prob=avg,
        )

    def summary(self) -> str:
        """One-line human-readable report."""
        return (
            f"Statute {self.statute_id}: "
            f"Compliance={self.compliance_rate() * 100:.1f}% ({self.complied}/{self.total_agents}), "
            f"Evasion={self.evasion_rate() * 100:.1f}% ({self.evaded}/{self.total_agents}), "
            f"Unaware={self.unaware} Avg P(comply)={self.avg_compliance_prob:.2f}"
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComplianceStats:
        return cls(**data)
