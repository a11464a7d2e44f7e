"""compliancesim - behavioral compliance simulation.

Models how agents decide whether to comply with legal rules, learn from
outcomes, and influence each other over a communication network.
"""

import logging

from compliancesim.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_file_logging,
    enable_json_logging,
    enable_timed_file_logging,
    set_level,
    set_module_level,
)
from compliancesim.behavior import (
    Advice,
    AgentMessage,
    BasicEntity,
    BehavioralAgent,
    BehavioralPopulation,
    BehavioralProfile,
    CommunicationNetwork,
    ComplianceContext,
    ComplianceDecision,
    ComplianceEnvironment,
    ComplianceExperience,
    ComplianceModel,
    ComplianceStats,
    DecisionStrategy,
    EnforcementAlert,
    LearningPolicy,
    PeriodReport,
    SocialNorm,
    StatuteInfo,
    StrategyMix,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_file_logging",
    "enable_json_logging",
    "enable_timed_file_logging",
    "set_level",
    "set_module_level",
    # Engine
    "Advice",
    "AgentMessage",
    "BasicEntity",
    "BehavioralAgent",
    "BehavioralPopulation",
    "BehavioralProfile",
    "CommunicationNetwork",
    "ComplianceContext",
    "ComplianceDecision",
    "ComplianceEnvironment",
    "ComplianceExperience",
    "ComplianceModel",
    "ComplianceStats",
    "DecisionStrategy",
    "EnforcementAlert",
    "LearningPolicy",
    "PeriodReport",
    "SocialNorm",
    "StatuteInfo",
    "StrategyMix",
]
