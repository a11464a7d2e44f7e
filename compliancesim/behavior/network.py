"""Communication network between behavioral agents.

CommunicationNetwork combines three things:

- an undirected connectivity graph (who can hear whom),
- a directed trust matrix (how much an agent believes a given peer),
- an ordered message log.

Messages are only visible along edges created with ``connect``: an
unconnected sender is never heard, even when it addresses the recipient
directly. ``process_messages_for_agent`` turns the visible messages into
updates of the recipient's BehavioralProfile.
"""

from __future__ import annotations

import logging
import random
import uuid
from datetime import date
from typing import Any, Iterable

from compliancesim.behavior.messages import (
    DEFAULT_CREDIBILITY,
    Advice,
    AgentMessage,
    ComplianceExperience,
    EnforcementAlert,
    MessageType,
    SocialNorm,
    StatuteInfo,
)
from compliancesim.behavior.profile import BehavioralProfile

logger = logging.getLogger(__name__)

DEFAULT_TRUST = 0.5


class CommunicationNetwork:
    """Social graph, trust matrix and message bus for compliance agents."""

    def __init__(self) -> None:
        self.messages: list[AgentMessage] = []
        self.connections: dict[uuid.UUID, list[uuid.UUID]] = {}
        self.trust: dict[uuid.UUID, dict[uuid.UUID, float]] = {}

    @property
    def agents(self) -> set[uuid.UUID]:
        """Every agent id that has at least been added to the graph."""
        return set(self.connections)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def edge_count(self) -> int:
        """Number of undirected connections."""
        return sum(len(peers) for peers in self.connections.values()) // 2

    # -----------------------------------------------------------------
    # Graph
    # -----------------------------------------------------------------

    def add_agent(self, agent_id: uuid.UUID) -> None:
        self.connections.setdefault(agent_id, [])

    def connect(self, agent1: uuid.UUID, agent2: uuid.UUID) -> None:
        """Connect two agents in both directions. Repeated calls are no-ops."""
        peers1 = self.connections.setdefault(agent1, [])
        peers2 = self.connections.setdefault(agent2, [])
        if agent2 not in peers1:
            peers1.append(agent2)
        if agent1 not in peers2:
            peers2.append(agent1)

    def disconnect(self, agent1: uuid.UUID, agent2: uuid.UUID) -> None:
        """Remove the connection between two agents, if any."""
        peers1 = self.connections.get(agent1, [])
        peers2 = self.connections.get(agent2, [])
        if agent2 in peers1:
            peers1.remove(agent2)
        if agent1 in peers2:
            peers2.remove(agent1)

    def is_connected(self, agent1: uuid.UUID, agent2: uuid.UUID) -> bool:
        return agent2 in self.connections.get(agent1, ())

    def get_connections(self, agent_id: uuid.UUID) -> list[uuid.UUID]:
        """Peers of ``agent_id`` (empty for unknown ids)."""
        return list(self.connections.get(agent_id, ()))

    # -----------------------------------------------------------------
    # Trust
    # -----------------------------------------------------------------

    def set_trust(self, from_id: uuid.UUID, to_id: uuid.UUID, trust_level: float) -> None:
        """Set how much ``from_id`` trusts ``to_id`` (clamped to [0, 1])."""
        self.trust.setdefault(from_id, {})[to_id] = max(0.0, min(1.0, trust_level))

    def get_trust(self, from_id: uuid.UUID, to_id: uuid.UUID) -> float:
        """Trust from ``from_id`` toward ``to_id``; 0.5 when never set."""
        return self.trust.get(from_id, {}).get(to_id, DEFAULT_TRUST)

    # -----------------------------------------------------------------
    # Messages
    # -----------------------------------------------------------------

    def send_message(self, message: AgentMessage) -> None:
        self.messages.append(message)

    def send(
        self,
        sender: uuid.UUID,
        message_type: MessageType,
        timestamp: date,
        receiver: uuid.UUID | None = None,
        credibility: float = DEFAULT_CREDIBILITY,
    ) -> AgentMessage:
        """Build, store and return a message."""
        message = AgentMessage(
            sender=sender,
            receiver=receiver,
            message_type=message_type,
            timestamp=timestamp,
            credibility=credibility,
        )
        self.send_message(message)
        return message

    def broadcast(
        self,
        sender: uuid.UUID,
        message_type: MessageType,
        timestamp: date,
        credibility: float = DEFAULT_CREDIBILITY,
    ) -> AgentMessage:
        """Send a message to every connected peer of ``sender``."""
        return self.send(sender, message_type, timestamp, None, credibility)

    def get_messages_for(self, agent_id: uuid.UUID, since: date) -> list[AgentMessage]:
        """Messages ``agent_id`` can see that were sent on or after ``since``.

        A message is visible when it is a broadcast or addressed to the
        agent, and its sender is connected to the agent.
        """
        return [
            m
            for m in self.messages
            if m.timestamp >= since
            and (m.receiver is None or m.receiver == agent_id)
            and self.is_connected(agent_id, m.sender)
        ]

    def process_messages_for_agent(
        self,
        agent_id: uuid.UUID,
        profile: BehavioralProfile,
        since: date,
    ) -> int:
        """Update ``profile`` in place from every visible message since ``since``.

        Each message acts with strength
        ``trust(agent, sender) * credibility * profile.social_influence``.
        base_compliance, knowledge_level and risk_aversion are clamped to
        [0, 1] after every message.

        Returns:
            Number of messages applied.
        """
        messages = self.get_messages_for(agent_id, since)
        for message in messages:
            influence = (
                self.get_trust(agent_id, message.sender)
                * message.credibility
                * profile.social_influence
            )
            _apply_message(profile, message.message_type, influence)
            profile.base_compliance = _clamp(profile.base_compliance)
            profile.knowledge_level = _clamp(profile.knowledge_level)
            profile.risk_aversion = _clamp(profile.risk_aversion)

        if messages:
            logger.debug(
                "[%s] applied %d messages since %s (base_compliance=%.3f)",
                agent_id, len(messages), since.isoformat(), profile.base_compliance,
            )
        return len(messages)

    def clear_messages_before(self, cutoff: date) -> int:
        """Drop messages older than ``cutoff``. Returns how many were dropped."""
        before = len(self.messages)
        self.messages = [m for m in self.messages if m.timestamp >= cutoff]
        dropped = before - len(self.messages)
        if dropped:
            logger.debug("Pruned %d messages older than %s", dropped, cutoff.isoformat())
        return dropped

    # -----------------------------------------------------------------
    # Topology generators
    # -----------------------------------------------------------------

    @classmethod
    def complete(cls, agent_ids: Iterable[uuid.UUID]) -> CommunicationNetwork:
        """Every pair of agents connected."""
        ids = list(agent_ids)
        net = cls()
        for agent_id in ids:
            net.add_agent(agent_id)
        for i, a in enumerate(ids):
            for b in ids[i + 1 :]:
                net.connect(a, b)
        return net

    @classmethod
    def random_erdos_renyi(
        cls,
        agent_ids: Iterable[uuid.UUID],
        p: float = 0.1,
        rng: random.Random | None = None,
    ) -> CommunicationNetwork:
        """Erdos-Renyi graph: each pair is connected with probability p."""
        rng = rng or random.Random()
        ids = list(agent_ids)
        net = cls()
        for agent_id in ids:
            net.add_agent(agent_id)
        for i, a in enumerate(ids):
            for b in ids[i + 1 :]:
                if rng.random() < p:
                    net.connect(a, b)
        return net

    @classmethod
    def small_world(
        cls,
        agent_ids: Iterable[uuid.UUID],
        k: int = 4,
        p_rewire: float = 0.1,
        rng: random.Random | None = None,
    ) -> CommunicationNetwork:
        """Watts-Strogatz small-world graph.

        Builds a ring where each agent is connected to its k nearest
        neighbours, then moves each ring edge to a random new peer with
        probability p_rewire. Fewer than three agents yield a complete
        graph.
        """
        rng = rng or random.Random()
        ids = list(agent_ids)
        n = len(ids)
        if n < 3:
            return cls.complete(ids)

        half_k = max(1, min(k, n - 1) // 2)
        net = cls()
        for agent_id in ids:
            net.add_agent(agent_id)

        for i in range(n):
            for j in range(1, half_k + 1):
                net.connect(ids[i], ids[(i + j) % n])

        for i in range(n):
            for j in range(1, half_k + 1):
                if rng.random() >= p_rewire:
                    continue
                source = ids[i]
                candidates = [
                    other for other in ids
                    if other != source and not net.is_connected(source, other)
                ]
                if candidates:
                    net.disconnect(source, ids[(i + j) % n])
                    net.connect(source, rng.choice(candidates))

        return net

    # -----------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "connections": {
                str(a): [str(b) for b in peers] for a, peers in self.connections.items()
            },
            "trust": {
                str(a): {str(b): level for b, level in row.items()}
                for a, row in self.trust.items()
            },
            "messages": [m.to_dict() for m in self.messages],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommunicationNetwork:
        net = cls()
        for a, peers in data.get("connections", {}).items():
            net.connections[uuid.UUID(a)] = [uuid.UUID(b) for b in peers]
        for a, row in data.get("trust", {}).items():
            net.trust[uuid.UUID(a)] = {uuid.UUID(b): float(level) for b, level in row.items()}
        net.messages = [AgentMessage.from_dict(m) for m in data.get("messages", [])]
        return net

    def __repr__(self) -> str:
        return (
            f"CommunicationNetwork(agents={len(self.connections)}, "
            f"edges={self.edge_count}, messages={len(self.messages)})"
        )


def _apply_message(profile: BehavioralProfile, message_type: MessageType, influence: float) -> None:
    if isinstance(message_type, StatuteInfo):
        if message_type.compliance_recommended:
            profile.base_compliance += influence * 0.1
        else:
            profile.base_compliance -= influence * 0.1
        profile.knowledge_level += influence * 0.05
    elif isinstance(message_type, ComplianceExperience):
        if message_type.complied:
            profile.base_compliance += influence * 0.05
        else:
            profile.base_compliance -= influence * 0.05
    elif isinstance(message_type, EnforcementAlert):
        if message_type.enforcement_level > 0.7:
            profile.risk_aversion += influence * 0.1
    elif isinstance(message_type, SocialNorm):
        # Pull toward the stated norm rather than a flat bump.
        gap = message_type.compliance_rate - profile.base_compliance
        profile.base_compliance += gap * influence
    elif isinstance(message_type, Advice):
        profile.knowledge_level += influence * 0.02


def _clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, v))
