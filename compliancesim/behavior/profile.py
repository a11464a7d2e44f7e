"""Behavioral profiles for compliance agents.

A BehavioralProfile bundles the stable disposition of one agent: which
decision strategy it uses and how knowledgeable, risk-averse, and
socially suggestible it is. Presets reproduce the common archetypes, and
NormalProfileDistribution samples heterogeneous profiles around a preset.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class DecisionStrategy(Enum):
    """Decision algorithm an aware agent applies."""

    RATIONAL = "rational"
    BOUNDED_RATIONAL = "bounded_rational"
    RULE_FOLLOWING = "rule_following"
    OPPORTUNISTIC = "opportunistic"
    RANDOM = "random"


# Fields kept inside [0, 1] at all times.
CLAMPED_FIELDS = (
    "base_compliance",
    "risk_aversion",
    "knowledge_level",
    "social_influence",
    "learning_rate",
)


@dataclass
class BehavioralProfile:
    """Parameter bundle describing an agent's disposition.

    Mutated only through CommunicationNetwork.process_messages_for_agent
    (and the owning model when it learns with LearningPolicy.REINFORCE).

    Attributes:
        strategy: Decision algorithm used once the agent is aware.
        base_compliance: Baseline propensity to comply (0-1).
        risk_aversion: 0 = risk-neutral, 1 = highly risk-averse.
        discount_rate: How strongly future consequences are discounted.
        knowledge_level: 0 = unaware of the law, 1 = perfect knowledge.
        social_influence: 0 = independent, 1 = conformist.
        learning_rate: Experience gained per recorded outcome (0-1).
    """

    strategy: DecisionStrategy = DecisionStrategy.BOUNDED_RATIONAL
    base_compliance: float = 0.8
    risk_aversion: float = 0.5
    discount_rate: float = 0.03
    knowledge_level: float = 0.7
    social_influence: float = 0.4
    learning_rate: float = 0.1

    def __post_init__(self) -> None:
        self.clamp()

    def clamp(self) -> None:
        """Pull every probability-like field back into [0, 1]."""
        for name in CLAMPED_FIELDS:
            setattr(self, name, _clamp(getattr(self, name)))

    def copy(self) -> BehavioralProfile:
        return replace(self)

    # -----------------------------------------------------------------
    # Presets
    # -----------------------------------------------------------------

    @staticmethod
    def new(strategy: DecisionStrategy) -> BehavioralProfile:
        """Default parameters with the given strategy."""
        return BehavioralProfile(strategy=strategy)

    @staticmethod
    def rational() -> BehavioralProfile:
        """Fully informed expected-utility maximiser."""
        return BehavioralProfile(
            strategy=DecisionStrategy.RATIONAL,
            base_compliance=1.0,
            risk_aversion=0.0,
            knowledge_level=1.0,
            learning_rate=0.0,
            social_influence=0.0,
        )

    @staticmethod
    def rule_following() -> BehavioralProfile:
        """Complies by default, asks for guidance when the rule is costly."""
        return BehavioralProfile(
            strategy=DecisionStrategy.RULE_FOLLOWING,
            base_compliance=1.0,
            risk_aversion=1.0,
            knowledge_level=0.8,
            learning_rate=0.05,
            social_influence=0.3,
        )

    @staticmethod
    def opportunistic() -> BehavioralProfile:
        """Complies only when enforcement looks likely."""
        return BehavioralProfile(
            strategy=DecisionStrategy.OPPORTUNISTIC,
            base_compliance=0.3,
            risk_aversion=0.2,
            knowledge_level=0.9,
            learning_rate=0.15,
            social_influence=0.1,
        )

    @staticmethod
    def random_actor(base_compliance: float = 0.5) -> BehavioralProfile:
        """Coin-flip agent biased by ``base_compliance``."""
        return BehavioralProfile(
            strategy=DecisionStrategy.RANDOM,
            base_compliance=base_compliance,
        )

    # -----------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        data["strategy"] = self.strategy.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BehavioralProfile:
        """Rebuild a profile from ``to_dict()`` output.

        Raises:
            ValueError: If ``strategy`` is not a known strategy value.
        """
        values = dict(data)
        values["strategy"] = parse_strategy(values.get("strategy", DecisionStrategy.BOUNDED_RATIONAL.value))
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})


def parse_strategy(value: DecisionStrategy | str) -> DecisionStrategy:
    if isinstance(value, DecisionStrategy):
        return value
    try:
        return DecisionStrategy(value)
    except ValueError:
        raise ValueError(f"Unknown decision strategy: {value!r}") from None


@runtime_checkable
class ProfileDistribution(Protocol):
    """Protocol for sampling BehavioralProfile instances."""

    def sample(self, strategy: DecisionStrategy, rng: random.Random) -> BehavioralProfile:
        """Return a new profile for an agent using ``strategy``."""
        ...


class PresetProfileDistribution:
    """Hands out the preset matching each strategy, without variation."""

    def sample(self, strategy: DecisionStrategy, rng: random.Random) -> BehavioralProfile:
        return preset_for(strategy)


class NormalProfileDistribution:
    """Gaussian jitter around each strategy's preset, clamped to [0, 1].

    Args:
        stds: Standard deviation per profile field. Fields not listed keep
            the preset value.
    """

    def __init__(self, stds: dict[str, float] | None = None):
        self._stds = stds or {
            "base_compliance": 0.1,
            "risk_aversion": 0.1,
            "knowledge_level": 0.1,
            "social_influence": 0.1,
        }

    def sample(self, strategy: DecisionStrategy, rng: random.Random) -> BehavioralProfile:
        profile = preset_for(strategy)
        for name, std in self._stds.items():
            current = getattr(profile, name)
            setattr(profile, name, rng.gauss(current, std))
        profile.clamp()
        return profile


def preset_for(strategy: DecisionStrategy) -> BehavioralProfile:
    """The archetypal profile for a strategy."""
    if strategy is DecisionStrategy.RATIONAL:
        return BehavioralProfile.rational()
    if strategy is DecisionStrategy.RULE_FOLLOWING:
        return BehavioralProfile.rule_following()
    if strategy is DecisionStrategy.OPPORTUNISTIC:
        return BehavioralProfile.opportunistic()
    if strategy is DecisionStrategy.RANDOM:
        return BehavioralProfile.random_actor()
    return BehavioralProfile.new(strategy)


def _clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, v))
