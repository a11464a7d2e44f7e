"""Compliance decision model.

ComplianceModel decides whether an agent complies with a statute in a
given situation. Every decision first passes an awareness gate driven by
the agent's knowledge of the law; aware agents then apply one of five
strategies (see DecisionStrategy). Outcomes fed back through
record_outcome build a per-statute ledger and an experience counter.

All randomness comes from a ``random.Random`` owned by the model, so a
seeded model replays the same sequence of decisions.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any

from compliancesim.behavior.profile import (
    BehavioralProfile,
    DecisionStrategy,
)

logger = logging.getLogger(__name__)

DEFAULT_TRIALS = 100
DEFAULT_MAX_HISTORY = 100


class ComplianceDecision(Enum):
    """What an agent did about an obligation."""

    COMPLY = "comply"
    EVADE = "evade"
    UNAWARE = "unaware"
    SEEK_GUIDANCE = "seek_guidance"

    @property
    def is_compliant(self) -> bool:
        """True for decisions counted as complying (incl. seeking guidance)."""
        return self in (ComplianceDecision.COMPLY, ComplianceDecision.SEEK_GUIDANCE)


def parse_decision(value: ComplianceDecision | str) -> ComplianceDecision:
    if isinstance(value, ComplianceDecision):
        return value
    try:
        return ComplianceDecision(value)
    except ValueError:
        raise ValueError(f"Unknown compliance decision: {value!r}") from None


class LearningPolicy(Enum):
    """How recorded outcomes feed back into the profile.

    RECORD_ONLY keeps the outcome ledger without touching the profile.
    REINFORCE nudges base_compliance toward whichever choice paid off and
    raises risk_aversion after a costly evasion.
    """

    RECORD_ONLY = "record_only"
    REINFORCE = "reinforce"


@dataclass
class ComplianceContext:
    """Situational facts for one compliance decision.

    Values are used as given; callers validate ranges beforehand.

    Attributes:
        statute_id: Identifier of the statute being applied.
        legal_result: Already-evaluated legal effect, carried opaquely.
        enforcement_probability: Perceived chance of being caught (0-1).
        penalty_severity: Penalty if caught evading (utility units).
        evasion_benefit: Gain from not complying (utility units).
        compliance_cost: Cost of complying (utility units).
        social_norm: Share of peers believed to comply (0-1).
    """

    statute_id: str
    legal_result: Any = None
    enforcement_probability: float = 0.5
    penalty_severity: float = 0.0
    evasion_benefit: float = 0.0
    compliance_cost: float = 0.0
    social_norm: float = 0.5

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict.

        ``legal_result`` is kept only when it is a JSON-friendly scalar,
        list or dict; anything else is reduced to its ``repr``.
        """
        legal = self.legal_result
        if legal is not None and not isinstance(legal, (str, int, float, bool, list, dict)):
            legal = repr(legal)
        return {
            "statute_id": self.statute_id,
            "legal_result": legal,
            "enforcement_probability": self.enforcement_probability,
            "penalty_severity": self.penalty_severity,
            "evasion_benefit": self.evasion_benefit,
            "compliance_cost": self.compliance_cost,
            "social_norm": self.social_norm,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComplianceContext:
        return cls(
            statute_id=data["statute_id"],
            legal_result=data.get("legal_result"),
            enforcement_probability=data.get("enforcement_probability", 0.5),
            penalty_severity=data.get("penalty_severity", 0.0),
            evasion_benefit=data.get("evasion_benefit", 0.0),
            compliance_cost=data.get("compliance_cost", 0.0),
            social_norm=data.get("social_norm", 0.5),
        )


class ComplianceModel:
    """Stateful decision-maker bound to one behavioral profile.

    Args:
        profile: The agent's disposition. Owned by this model.
        seed: Seed for the model's private generator.
        rng: An existing generator to draw from (takes precedence over seed).
        max_history_size: Outcomes kept per statute (None = unbounded).
        learning_policy: Whether outcomes adjust the profile.

    Raises:
        ValueError: If max_history_size is given and < 1.
    """

    def __init__(
        self,
        profile: BehavioralProfile | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
        max_history_size: int | None = DEFAULT_MAX_HISTORY,
        learning_policy: LearningPolicy = LearningPolicy.RECORD_ONLY,
    ):
        if max_history_size is not None and max_history_size < 1:
            raise ValueError(f"max_history_size must be >= 1 or None, got {max_history_size}")
        self.profile = profile or BehavioralProfile()
        self.decision_history: dict[str, deque[tuple[bool, float]]] = {}
        self.experience = 0.0
        self.max_history_size = max_history_size
        self.learning_policy = learning_policy
        self._rng = rng if rng is not None else random.Random(seed)

    @classmethod
    def with_rng(
        cls,
        profile: BehavioralProfile,
        rng: random.Random,
        **kwargs: Any,
    ) -> ComplianceModel:
        """Create a model drawing from a caller-owned generator."""
        return cls(profile, rng=rng, **kwargs)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def clone(self, rng: random.Random | None = None) -> ComplianceModel:
        """Independent copy of profile, history and experience.

        The clone keeps drawing from this model's generator unless ``rng``
        is given.
        """
        twin = ComplianceModel(
            self.profile.copy(),
            rng=rng if rng is not None else self._rng,
            max_history_size=self.max_history_size,
            learning_policy=self.learning_policy,
        )
        twin.decision_history = {
            sid: deque(entries, maxlen=self.max_history_size)
            for sid, entries in self.decision_history.items()
        }
        twin.experience = self.experience
        return twin

    # -----------------------------------------------------------------
    # Deciding
    # -----------------------------------------------------------------

    def decide(self, context: ComplianceContext) -> ComplianceDecision:
        """Decide whether to comply in the given context."""
        if not self._is_aware(context.statute_id):
            return ComplianceDecision.UNAWARE

        strategy = self.profile.strategy
        if strategy is DecisionStrategy.RATIONAL:
            decision = self._rational(context)
        elif strategy is DecisionStrategy.BOUNDED_RATIONAL:
            decision = self._bounded_rational(context)
        elif strategy is DecisionStrategy.RULE_FOLLOWING:
            decision = self._rule_following(context)
        elif strategy is DecisionStrategy.OPPORTUNISTIC:
            decision = self._opportunistic(context)
        else:
            decision = self._random()

        logger.debug(
            "[%s] %s decided %s", context.statute_id, strategy.value, decision.value
        )
        return decision

    def _is_aware(self, statute_id: str) -> bool:
        # Prior dealings with a statute make it easier to recognise.
        awareness = self.profile.knowledge_level
        if statute_id in self.decision_history:
            awareness = min(awareness + 0.2, 1.0)
        return self._rng.random() < awareness

    def _rational(self, context: ComplianceContext) -> ComplianceDecision:
        comply_utility = -context.compliance_cost
        evade_utility = (
            context.evasion_benefit
            - context.enforcement_probability * context.penalty_severity
        )
        if comply_utility >= evade_utility:
            return ComplianceDecision.COMPLY
        return ComplianceDecision.EVADE

    def _bounded_rational(self, context: ComplianceContext) -> ComplianceDecision:
        p = self.profile
        # Perception noise grows with ignorance.
        noise = 1.0 - p.knowledge_level
        perceived_enforcement = context.enforcement_probability * (
            1.0 + (self._rng.random() - 0.5) * noise
        )
        perceived_penalty = context.penalty_severity * (
            1.0 + (self._rng.random() - 0.5) * noise
        )
        risk_adjusted_penalty = perceived_penalty * (1.0 + p.risk_aversion)

        social_pressure = context.social_norm * p.social_influence
        comply_utility = -context.compliance_cost + social_pressure * 10.0
        evade_utility = context.evasion_benefit - (
            max(0.0, min(1.0, perceived_enforcement)) * risk_adjusted_penalty
        )
        compliance_bias = p.base_compliance * 5.0

        if comply_utility + compliance_bias >= evade_utility:
            return ComplianceDecision.COMPLY
        return ComplianceDecision.EVADE

    def _rule_following(self, context: ComplianceContext) -> ComplianceDecision:
        if context.compliance_cost > 100.0 and context.social_norm < 0.3:
            return ComplianceDecision.SEEK_GUIDANCE
        return ComplianceDecision.COMPLY

    def _opportunistic(self, context: ComplianceContext) -> ComplianceDecision:
        threshold = 0.5 - self.profile.risk_aversion * 0.3
        if context.enforcement_probability > threshold:
            return ComplianceDecision.COMPLY
        return ComplianceDecision.EVADE

    def _random(self) -> ComplianceDecision:
        if self._rng.random() < self.profile.base_compliance:
            return ComplianceDecision.COMPLY
        return ComplianceDecision.EVADE

    # -----------------------------------------------------------------
    # Learning
    # -----------------------------------------------------------------

    def record_outcome(self, statute_id: str, complied: bool, outcome: float) -> None:
        """Log the consequence of a past decision and accumulate experience."""
        entries = self.decision_history.get(statute_id)
        if entries is None:
            entries = deque(maxlen=self.max_history_size)
            self.decision_history[statute_id] = entries
        entries.append((complied, outcome))
        self.experience += self.profile.learning_rate

        if self.learning_policy is LearningPolicy.REINFORCE:
            self._reinforce(complied, outcome)

    def _reinforce(self, complied: bool, outcome: float) -> None:
        if outcome == 0:
            return
        p = self.profile
        step = p.learning_rate * 0.1
        paid_off = (outcome > 0) == complied
        p.base_compliance += step if paid_off else -step
        if not complied and outcome < 0:
            p.risk_aversion += p.learning_rate * 0.05
        p.clamp()

    def history_for(self, statute_id: str) -> list[tuple[bool, float]]:
        """Recorded (complied, outcome) pairs for a statute, oldest first."""
        return list(self.decision_history.get(statute_id, ()))

    def average_outcome(self, statute_id: str) -> float:
        """Mean recorded outcome for a statute. Returns 0.0 if none."""
        entries = self.decision_history.get(statute_id)
        if not entries:
            return 0.0
        return sum(outcome for _, outcome in entries) / len(entries)

    def statutes_seen(self) -> list[str]:
        return list(self.decision_history.keys())

    # -----------------------------------------------------------------
    # Estimation
    # -----------------------------------------------------------------

    def compliance_probability(
        self,
        context: ComplianceContext,
        trials: int = DEFAULT_TRIALS,
        seed: int | None = None,
    ) -> float:
        """Monte-Carlo estimate of P(comply or seek guidance) in ``context``.

        Each trial runs ``decide`` on a fresh clone of this model. Without
        a seed the clones draw from this model's own stream, so repeated
        calls vary. With a seed every trial gets its own generator seeded
        from ``seed``; the estimate is then repeatable and this model's
        stream is left untouched.

        Raises:
            ValueError: If trials < 1.
        """
        if trials < 1:
            raise ValueError(f"trials must be >= 1, got {trials}")

        seeder = random.Random(seed) if seed is not None else None
        compliant = 0
        for _ in range(trials):
            trial_rng = random.Random(seeder.getrandbits(64)) if seeder else None
            if self.clone(rng=trial_rng).decide(context).is_compliant:
                compliant += 1
        return compliant / trials

    # -----------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize profile, history and experience (not the RNG state)."""
        return {
            "profile": self.profile.to_dict(),
            "decision_history": {
                sid: [[complied, outcome] for complied, outcome in entries]
                for sid, entries in self.decision_history.items()
            },
            "experience": self.experience,
            "max_history_size": self.max_history_size,
            "learning_policy": self.learning_policy.value,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> ComplianceModel:
        model = cls(
            BehavioralProfile.from_dict(data["profile"]),
            seed=seed,
            rng=rng,
            max_history_size=data.get("max_history_size", DEFAULT_MAX_HISTORY),
            learning_policy=LearningPolicy(data.get("learning_policy", LearningPolicy.RECORD_ONLY.value)),
        )
        for sid, entries in data.get("decision_history", {}).items():
            model.decision_history[sid] = deque(
                ((bool(c), float(o)) for c, o in entries), maxlen=model.max_history_size
            )
        model.experience = float(data.get("experience", 0.0))
        return model

    def __repr__(self) -> str:
        return (
            f"ComplianceModel(strategy={self.profile.strategy.value}, "
            f"experience={self.experience:.2f}, statutes={len(self.decision_history)})"
        )
