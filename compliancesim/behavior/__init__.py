"""Behavioral compliance simulation components.

Provides behavioral profiles, a compliance decision model with five
strategies, agents with audit trails, population statistics, and a
trust-weighted communication network through which agents influence each
other's dispositions.
"""

from compliancesim.behavior.profile import (
    BehavioralProfile,
    DecisionStrategy,
    NormalProfileDistribution,
    PresetProfileDistribution,
    ProfileDistribution,
    preset_for,
)
from compliancesim.behavior.decision import (
    ComplianceContext,
    ComplianceDecision,
    ComplianceModel,
    LearningPolicy,
)
from compliancesim.behavior.agent import (
    BasicEntity,
    BehavioralAgent,
    LegalEntity,
    Statute,
)
from compliancesim.behavior.stats import ComplianceStats
from compliancesim.behavior.messages import (
    Advice,
    AgentMessage,
    ComplianceExperience,
    EnforcementAlert,
    MessageType,
    SocialNorm,
    StatuteInfo,
)
from compliancesim.behavior.network import CommunicationNetwork
from compliancesim.behavior.population import (
    BehavioralPopulation,
    StrategyMix,
)
from compliancesim.behavior.environment import (
    ComplianceEnvironment,
    PeriodReport,
)

__all__ = [
    # Profiles
    "BehavioralProfile",
    "DecisionStrategy",
    "NormalProfileDistribution",
    "PresetProfileDistribution",
    "ProfileDistribution",
    "preset_for",
    # Decisions
    "ComplianceContext",
    "ComplianceDecision",
    "ComplianceModel",
    "LearningPolicy",
    # Agents
    "BasicEntity",
    "BehavioralAgent",
    "LegalEntity",
    "Statute",
    # Stats
    "ComplianceStats",
    # Messages
    "Advice",
    "AgentMessage",
    "ComplianceExperience",
    "EnforcementAlert",
    "MessageType",
    "SocialNorm",
    "StatuteInfo",
    # Network
    "CommunicationNetwork",
    # Population
    "BehavioralPopulation",
    "StrategyMix",
    # Environment
    "ComplianceEnvironment",
    "PeriodReport",
]
