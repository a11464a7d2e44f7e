"""Behavioral agent.

A BehavioralAgent binds a ComplianceModel to the legal entity it
simulates (a person, a company, an institution) and keeps a complete,
append-only audit trail of every compliance decision it makes.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol, runtime_checkable

from compliancesim.behavior.decision import (
    DEFAULT_TRIALS,
    ComplianceContext,
    ComplianceDecision,
    ComplianceModel,
    parse_decision,
)
from compliancesim.behavior.profile import BehavioralProfile

logger = logging.getLogger(__name__)


@runtime_checkable
class LegalEntity(Protocol):
    """Anything the rule-evaluation layer can identify."""

    id: uuid.UUID


@runtime_checkable
class Statute(Protocol):
    """A legal rule, known to this engine only by its id."""

    id: str


@dataclass
class BasicEntity:
    """Minimal legal entity: an id plus free-form string attributes."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    attributes: dict[str, str] = field(default_factory=dict)

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value


Interaction = tuple[date, str, ComplianceDecision]


class BehavioralAgent:
    """A simulated actor making compliance decisions.

    Args:
        entity: The legal entity this agent represents. Its ``id`` becomes
            the agent id; entities without one get a fresh UUID.
        profile: Behavioral disposition (defaults to BehavioralProfile()).
        seed: Seed for the agent's decision generator.
        rng: Existing generator to draw from (takes precedence over seed).
        model: Pre-built ComplianceModel; overrides profile/seed/rng.
        **model_kwargs: Passed through to ComplianceModel
            (max_history_size, learning_policy).
    """

    def __init__(
        self,
        entity: Any = None,
        profile: BehavioralProfile | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
        model: ComplianceModel | None = None,
        **model_kwargs: Any,
    ):
        self.entity = entity if entity is not None else BasicEntity()
        entity_id = getattr(self.entity, "id", None)
        self.id: uuid.UUID = entity_id if entity_id is not None else uuid.uuid4()
        self.model = model or ComplianceModel(profile, seed=seed, rng=rng, **model_kwargs)
        self._interactions: list[Interaction] = []

    @property
    def profile(self) -> BehavioralProfile:
        return self.model.profile

    @property
    def history(self) -> tuple[Interaction, ...]:
        """Every (date, statute_id, decision) in call order."""
        return tuple(self._interactions)

    @property
    def interaction_history(self) -> tuple[Interaction, ...]:
        return self.history

    def decide_compliance(
        self,
        statute: Statute | str,
        context: ComplianceContext,
        date: date,
    ) -> ComplianceDecision:
        """Decide on ``statute`` and append the decision to the history.

        Unaware and seek-guidance outcomes are recorded too.
        """
        statute_id = statute if isinstance(statute, str) else statute.id
        decision = self.model.decide(context)
        self._interactions.append((date, statute_id, decision))
        logger.debug("[%s] %s on %s: %s", self.id, statute_id, date.isoformat(), decision.value)
        return decision

    def learn_from_outcome(self, statute_id: str, complied: bool, outcome: float) -> None:
        self.model.record_outcome(statute_id, complied, outcome)

    def compliance_probability(
        self,
        context: ComplianceContext,
        trials: int = DEFAULT_TRIALS,
        seed: int | None = None,
    ) -> float:
        return self.model.compliance_probability(context, trials=trials, seed=seed)

    def last_decision(self, statute_id: str | None = None) -> ComplianceDecision | None:
        """Most recent decision, optionally restricted to one statute."""
        for _, sid, decision in reversed(self._interactions):
            if statute_id is None or sid == statute_id:
                return decision
        return None

    def decision_counts(self, statute_id: str | None = None) -> dict[ComplianceDecision, int]:
        """Count of each decision kind, optionally for one statute."""
        counts: dict[ComplianceDecision, int] = {}
        for _, sid, decision in self._interactions:
            if statute_id is None or sid == statute_id:
                counts[decision] = counts.get(decision, 0) + 1
        return counts

    # -----------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the agent; the entity is reduced to its id."""
        return {
            "id": str(self.id),
            "model": self.model.to_dict(),
            "interaction_history": [
                [d.isoformat(), sid, decision.value]
                for d, sid, decision in self._interactions
            ],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        entity: Any = None,
        seed: int | None = None,
    ) -> BehavioralAgent:
        agent_id = uuid.UUID(data["id"])
        agent = cls(
            entity=entity if entity is not None else BasicEntity(id=agent_id),
            model=ComplianceModel.from_dict(data["model"], seed=seed),
        )
        agent.id = agent_id
        agent._interactions = [
            (date.fromisoformat(d), sid, parse_decision(value))
            for d, sid, value in data.get("interaction_history", [])
        ]
        return agent

    def __repr__(self) -> str:
        return (
            f"BehavioralAgent(id={self.id}, strategy={self.profile.strategy.value}, "
            f"decisions={len(self._interactions)})"
        )

