"""Period-by-period driver for compliance simulations.

ComplianceEnvironment mediates between a population and the statutes it
must obey. Each call to ``run_period`` walks every agent through one
simulated period:

1. apply the messages it received since the previous period,
2. build its ComplianceContext,
3. let it decide,
4. record the decision and a compliance probability estimate.

Outcomes are fed back separately with ``apply_outcomes`` once their
consequences are known.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable

from compliancesim.behavior.agent import BehavioralAgent, Statute
from compliancesim.behavior.decision import (
    DEFAULT_TRIALS,
    ComplianceContext,
    ComplianceDecision,
)
from compliancesim.behavior.messages import DEFAULT_CREDIBILITY, ComplianceExperience
from compliancesim.behavior.network import CommunicationNetwork
from compliancesim.behavior.population import BehavioralPopulation
from compliancesim.behavior.stats import ComplianceStats

logger = logging.getLogger(__name__)

ContextFactory = Callable[[BehavioralAgent], ComplianceContext]
OutcomeFunction = Callable[[BehavioralAgent, ComplianceDecision], "float | None"]


@dataclass
class PeriodReport:
    """Result of one simulated period for one statute.

    Attributes:
        date: Date of the period.
        statute_id: Statute the agents decided on.
        stats: Aggregated decisions.
        decisions: Decision per agent id.
        messages_applied: Messages processed before deciding.
    """

    date: date
    statute_id: str
    stats: ComplianceStats
    decisions: dict[uuid.UUID, ComplianceDecision] = field(default_factory=dict)
    messages_applied: int = 0

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "statute_id": self.statute_id,
            "stats": self.stats.to_dict(),
            "decisions": {str(k): v.value for k, v in self.decisions.items()},
            "messages_applied": self.messages_applied,
        }


class ComplianceEnvironment:
    """Runs a population through successive compliance periods.

    Args:
        agents: Agents to simulate.
        network: Network carrying messages between them (a fresh, empty
            network if omitted).
        probability_trials: Monte-Carlo trials per compliance estimate.
        probability_seed: If set, estimates use per-trial generators
            derived from this seed instead of the agents' own streams.
        message_retention_days: If set, messages older than this many days
            before the current period are pruned after each period.
    """

    def __init__(
        self,
        agents: list[BehavioralAgent] | None = None,
        network: CommunicationNetwork | None = None,
        probability_trials: int = DEFAULT_TRIALS,
        probability_seed: int | None = None,
        message_retention_days: int | None = None,
    ):
        if probability_trials < 1:
            raise ValueError(f"probability_trials must be >= 1, got {probability_trials}")
        if message_retention_days is not None and message_retention_days < 0:
            raise ValueError(
                f"message_retention_days must be >= 0 or None, got {message_retention_days}"
            )
        self._agents: dict[uuid.UUID, BehavioralAgent] = {}
        self.network = network or CommunicationNetwork()
        self.probability_trials = probability_trials
        self.probability_seed = probability_seed
        self.message_retention_days = message_retention_days
        self.reports: list[PeriodReport] = []
        self._message_cursor: date | None = None

        for agent in (agents or []):
            self.register_agent(agent)

    @classmethod
    def from_population(cls, population: BehavioralPopulation, **kwargs) -> ComplianceEnvironment:
        return cls(agents=population.agents, network=population.network, **kwargs)

    def register_agent(self, agent: BehavioralAgent) -> None:
        self._agents[agent.id] = agent
        self.network.add_agent(agent.id)

    @property
    def agents(self) -> list[BehavioralAgent]:
        return list(self._agents.values())

    def get_agent(self, agent_id: uuid.UUID) -> BehavioralAgent | None:
        return self._agents.get(agent_id)

    # -----------------------------------------------------------------
    # Periods
    # -----------------------------------------------------------------

    def run_period(
        self,
        statute: Statute | str,
        context: ComplianceContext | ContextFactory,
        period: date,
        since: date | None = None,
    ) -> PeriodReport:
        """Simulate one period of decisions about ``statute``.

        Args:
            statute: Statute (or statute id) being applied.
            context: Shared context, or a callable building one per agent.
            period: Date of this period.
            since: Apply messages sent on or after this date. Defaults to
                the day after the newest date already covered by message
                processing (the latest period run, or the newest message
                applied), so no message is applied twice even when several
                statutes share a period. The first period applies every
                stored message.
        """
        statute_id = statute if isinstance(statute, str) else statute.id
        if since is None:
            since = self._next_message_date()

        stats = ComplianceStats(statute_id)
        report = PeriodReport(date=period, statute_id=statute_id, stats=stats)

        covered = max(period, since)
        for agent in self._agents.values():
            for message in self.network.get_messages_for(agent.id, since):
                covered = max(covered, message.timestamp)
            report.messages_applied += self.network.process_messages_for_agent(
                agent.id, agent.profile, since
            )
        if self._message_cursor is None or covered > self._message_cursor:
            self._message_cursor = covered

        for agent in self._agents.values():
            ctx = context(agent) if callable(context) else context
            decision = agent.decide_compliance(statute_id, ctx, period)
            probability = agent.compliance_probability(
                ctx, trials=self.probability_trials, seed=self.probability_seed
            )
            stats.record(decision, probability)
            report.decisions[agent.id] = decision

        self.reports.append(report)
        logger.info("Period %s: %s", period.isoformat(), stats.summary())

        if self.message_retention_days is not None:
            self.network.clear_messages_before(period - timedelta(days=self.message_retention_days))
        return report

    def apply_outcomes(self, statute_id: str, outcome: OutcomeFunction) -> int:
        """Feed consequences of each agent's latest decision back to it.

        ``outcome`` receives the agent and its latest decision on the
        statute and returns the realised payoff, or None to skip the agent.

        Returns:
            Number of agents that learned from an outcome.
        """
        learned = 0
        for agent in self._agents.values():
            decision = agent.last_decision(statute_id)
            if decision is None:
                continue
            value = outcome(agent, decision)
            if value is None:
                continue
            agent.learn_from_outcome(statute_id, decision.is_compliant, value)
            learned += 1
        return learned

    def share_experience(
        self,
        statute_id: str,
        sent_on: date | None = None,
        credibility: float = DEFAULT_CREDIBILITY,
    ) -> int:
        """Have every agent broadcast its latest comply/evade decision.

        Unaware and seek-guidance decisions are not shared. Messages are
        dated the day after the newest date message processing has covered
        unless ``sent_on`` is given, so the next period picks them up.

        Returns:
            Number of messages sent.
        """
        if sent_on is None:
            sent_on = self._next_message_date()
        sent = 0
        for agent in self._agents.values():
            decision = agent.last_decision(statute_id)
            if decision not in (ComplianceDecision.COMPLY, ComplianceDecision.EVADE):
                continue
            self.network.broadcast(
                agent.id,
                ComplianceExperience(
                    statute_id=statute_id,
                    complied=decision is ComplianceDecision.COMPLY,
                    outcome=agent.model.average_outcome(statute_id),
                ),
                sent_on,
                credibility=credibility,
            )
            sent += 1
        return sent

    def _next_message_date(self) -> date:
        if self._message_cursor is None:
            return date.min
        return self._message_cursor + timedelta(days=1)

    def reports_for(self, statute_id: str) -> list[PeriodReport]:
        return [r for r in self.reports if r.statute_id == statute_id]

    def cumulative_stats(self, statute_id: str) -> ComplianceStats:
        """All periods for a statute merged into one tally."""
        total = ComplianceStats(statute_id)
        for report in self.reports_for(statute_id):
            total = total.merge(report.stats)
        return total
