"""Messages exchanged between agents over a CommunicationNetwork.

Each message carries one of five payload variants. The variants are
plain frozen dataclasses; the network dispatches on their type.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Union

DEFAULT_CREDIBILITY = 0.8


@dataclass(frozen=True)
class StatuteInfo:
    """Information about a statute, with a recommendation to comply or not."""

    statute_id: str
    compliance_recommended: bool
    reason: str = ""


@dataclass(frozen=True)
class ComplianceExperience:
    """A peer sharing what happened when it complied (or did not)."""

    statute_id: str
    complied: bool
    outcome: float = 0.0


@dataclass(frozen=True)
class EnforcementAlert:
    """Word of enforcement activity, with its perceived intensity (0-1)."""

    statute_id: str
    enforcement_level: float
    location: str | None = None


@dataclass(frozen=True)
class SocialNorm:
    """What share of peers is believed to comply."""

    statute_id: str
    compliance_rate: float
    peer_count: int = 0


@dataclass(frozen=True)
class Advice:
    """General advice on a topic."""

    topic: str
    content: str = ""


MessageType = Union[StatuteInfo, ComplianceExperience, EnforcementAlert, SocialNorm, Advice]

_MESSAGE_TYPES: dict[str, type] = {
    "StatuteInfo": StatuteInfo,
    "ComplianceExperience": ComplianceExperience,
    "EnforcementAlert": EnforcementAlert,
    "SocialNorm": SocialNorm,
    "Advice": Advice,
}


def message_type_to_dict(message_type: MessageType) -> dict[str, Any]:
    """Serialize a payload with a ``type`` tag naming its variant."""
    return {"type": type(message_type).__name__, **asdict(message_type)}


def message_type_from_dict(data: dict[str, Any]) -> MessageType:
    """Rebuild a payload from ``message_type_to_dict()`` output.

    Raises:
        ValueError: If the ``type`` tag is missing or unknown.
    """
    values = dict(data)
    tag = values.pop("type", None)
    cls = _MESSAGE_TYPES.get(tag)
    if cls is None:
        raise ValueError(f"Unknown message type: {tag!r}")
    return cls(**values)


@dataclass
class AgentMessage:
    """One communication event.

    Attributes:
        sender: Id of the sending agent.
        message_type: Payload variant.
        timestamp: Date the message was sent.
        receiver: Id of the addressee, or None for a broadcast.
        credibility: How believable the message is (clamped to 0-1).
        id: Unique message id.
    """

    sender: uuid.UUID
    message_type: MessageType
    timestamp: date
    receiver: uuid.UUID | None = None
    credibility: float = DEFAULT_CREDIBILITY
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        self.credibility = max(0.0, min(1.0, self.credibility))

    @property
    def is_broadcast(self) -> bool:
        return self.receiver is None

    def with_credibility(self, credibility: float) -> AgentMessage:
        """Set the credibility (clamped) and return self for chaining."""
        self.credibility = max(0.0, min(1.0, credibility))
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "sender": str(self.sender),
            "receiver": str(self.receiver) if self.receiver is not None else None,
            "message_type": message_type_to_dict(self.message_type),
            "timestamp": self.timestamp.isoformat(),
            "credibility": self.credibility,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AgentMessage:
        receiver = data.get("receiver")
        return cls(
            id=uuid.UUID(data["id"]),
            sender=uuid.UUID(data["sender"]),
            receiver=uuid.UUID(receiver) if receiver is not None else None,
            message_type=message_type_from_dict(data["message_type"]),
            timestamp=date.fromisoformat(data["timestamp"]),
            credibility=data.get("credibility", DEFAULT_CREDIBILITY),
        )
