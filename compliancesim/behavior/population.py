"""Population factory for compliance simulations.

Creates a group of BehavioralAgents whose strategies follow a weighted
mix, together with a CommunicationNetwork connecting them.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from typing import Any, Sequence

from compliancesim.behavior.agent import BasicEntity, BehavioralAgent
from compliancesim.behavior.decision import DEFAULT_MAX_HISTORY, LearningPolicy
from compliancesim.behavior.network import CommunicationNetwork
from compliancesim.behavior.profile import (
    DecisionStrategy,
    PresetProfileDistribution,
    ProfileDistribution,
)

logger = logging.getLogger(__name__)

DEFAULT_MIX = {
    DecisionStrategy.BOUNDED_RATIONAL: 0.7,
    DecisionStrategy.RULE_FOLLOWING: 0.2,
    DecisionStrategy.OPPORTUNISTIC: 0.1,
}


@dataclass
class StrategyMix:
    """Relative weights of decision strategies in a population.

    Weights are normalised to sum to 1. An empty or all-zero mapping
    falls back to 70% bounded-rational, 20% rule-following and 10%
    opportunistic.
    """

    weights: dict[DecisionStrategy, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        positive = {s: w for s, w in self.weights.items() if w > 0}
        total = sum(positive.values())
        if total <= 0:
            positive, total = dict(DEFAULT_MIX), 1.0
        self.weights = {s: w / total for s, w in positive.items()}

    def sample(self, rng: random.Random) -> DecisionStrategy:
        """Draw one strategy according to the weights."""
        r = rng.random()
        cumulative = 0.0
        for strategy, weight in self.weights.items():
            cumulative += weight
            if r <= cumulative:
                return strategy
        return next(reversed(self.weights))


class BehavioralPopulation:
    """A collection of agents with their communication network.

    Use ``build()`` to construct populations conveniently.

    Attributes:
        agents: The BehavioralAgent instances.
        network: The network connecting them.
    """

    def __init__(self, agents: list[BehavioralAgent], network: CommunicationNetwork):
        self.agents = agents
        self.network = network
        self._by_id = {a.id: a for a in agents}

    @property
    def size(self) -> int:
        return len(self.agents)

    def get(self, agent_id: uuid.UUID) -> BehavioralAgent | None:
        return self._by_id.get(agent_id)

    def strategy_counts(self) -> dict[DecisionStrategy, int]:
        counts: dict[DecisionStrategy, int] = {}
        for agent in self.agents:
            strategy = agent.profile.strategy
            counts[strategy] = counts.get(strategy, 0) + 1
        return counts

    def mean_profile_value(self, name: str) -> float:
        """Mean of one profile field across the population (0.0 if empty)."""
        if not self.agents:
            return 0.0
        return sum(getattr(a.profile, name) for a in self.agents) / len(self.agents)

    @classmethod
    def build(
        cls,
        size: int | None = None,
        entities: Sequence[Any] | None = None,
        mix: StrategyMix | dict[DecisionStrategy, float] | None = None,
        profiles: ProfileDistribution | None = None,
        graph_type: str = "small_world",
        seed: int | None = None,
        max_history_size: int | None = DEFAULT_MAX_HISTORY,
        learning_policy: LearningPolicy = LearningPolicy.RECORD_ONLY,
    ) -> BehavioralPopulation:
        """Create a population and its network.

        Args:
            size: Number of agents to create with fresh BasicEntity ids.
            entities: Existing legal entities to wrap (overrides size).
            mix: Strategy weights.
            profiles: How to turn a strategy into a profile (presets by default).
            graph_type: One of "small_world", "complete", "random", "none".
            seed: Seed from which every agent generator is derived.
            max_history_size: Per-statute outcome history kept by each agent.
            learning_policy: Learning policy for every agent.

        Raises:
            ValueError: If neither size nor entities is given, or size < 0.
        """
        if entities is None:
            if size is None:
                raise ValueError("Either size or entities must be given")
            if size < 0:
                raise ValueError(f"size must be >= 0, got {size}")
            entities = [BasicEntity() for _ in range(size)]

        if not isinstance(mix, StrategyMix):
            mix = StrategyMix(dict(mix or {}))
        profiles = profiles or PresetProfileDistribution()
        rng = random.Random(seed)

        agents: list[BehavioralAgent] = []
        for entity in entities:
            strategy = mix.sample(rng)
            agents.append(BehavioralAgent(
                entity=entity,
                profile=profiles.sample(strategy, rng),
                seed=rng.randint(0, 2**31),
                max_history_size=max_history_size,
                learning_policy=learning_policy,
            ))

        network = _build_network([a.id for a in agents], graph_type, rng)
        logger.info(
            "Built population of %d agents (%s graph, %d connections)",
            len(agents), graph_type, network.edge_count,
        )
        return cls(agents, network)


def _build_network(
    ids: list[uuid.UUID], graph_type: str, rng: random.Random
) -> CommunicationNetwork:
    if graph_type == "complete":
        return CommunicationNetwork.complete(ids)
    if graph_type == "random":
        return CommunicationNetwork.random_erdos_renyi(ids, p=0.1, rng=rng)
    if graph_type == "none":
        network = CommunicationNetwork()
        for agent_id in ids:
            network.add_agent(agent_id)
        return network
    k = min(4, len(ids) - 1) if len(ids) > 1 else 0
    if k < 2:
        return CommunicationNetwork.complete(ids)
    return CommunicationNetwork.small_world(ids, k=k, p_rewire=0.1, rng=rng)
