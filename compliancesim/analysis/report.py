"""Tabular and graphical reporting for compliance simulations.

Turns stats, agent histories and profiles into pandas DataFrames, and
draws compliance trends across periods with matplotlib.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import pandas as pd

from compliancesim.behavior.stats import ComplianceStats

if TYPE_CHECKING:
    from compliancesim.behavior.agent import BehavioralAgent
    from compliancesim.behavior.environment import PeriodReport

logger = logging.getLogger(__name__)

STATS_COLUMNS = [
    "statute_id",
    "total_agents",
    "complied",
    "evaded",
    "unaware",
    "sought_guidance",
    "avg_compliance_prob",
    "compliance_rate",
    "evasion_rate",
    "unaware_rate",
]


def stats_frame(stats: Iterable[ComplianceStats]) -> pd.DataFrame:
    """One row per ComplianceStats, counters plus derived rates."""
    rows = []
    for s in stats:
        row = s.to_dict()
        row["compliance_rate"] = s.compliance_rate()
        row["evasion_rate"] = s.evasion_rate()
        row["unaware_rate"] = s.unaware_rate()
        rows.append(row)
    return pd.DataFrame(rows, columns=STATS_COLUMNS)


def period_frame(reports: Iterable[PeriodReport]) -> pd.DataFrame:
    """Per-period stats with the period date as the first column."""
    reports = list(reports)
    frame = stats_frame(r.stats for r in reports)
    frame.insert(0, "date", pd.to_datetime([r.date for r in reports]))
    frame["messages_applied"] = [r.messages_applied for r in reports]
    return frame


def history_frame(agents: Iterable[BehavioralAgent]) -> pd.DataFrame:
    """Every recorded decision of every agent, one row each."""
    rows = [
        {
            "agent_id": str(agent.id),
            "date": d,
            "statute_id": statute_id,
            "decision": decision.value,
        }
        for agent in agents
        for d, statute_id, decision in agent.history
    ]
    return pd.DataFrame(rows, columns=["agent_id", "date", "statute_id", "decision"])


def profile_frame(agents: Iterable[BehavioralAgent]) -> pd.DataFrame:
    """Current behavioral profile and experience of each agent."""
    rows = []
    for agent in agents:
        row = {"agent_id": str(agent.id)}
        row.update(agent.profile.to_dict())
        row["experience"] = agent.model.experience
        rows.append(row)
    return pd.DataFrame(rows)


def plot_compliance_trend(
    reports: Iterable[PeriodReport],
    path: str | Path,
    title: str | None = None,
) -> Path:
    """Save a line chart of compliance, evasion and unaware rates per period.

    Returns:
        The path the figure was written to.
    """
    from matplotlib.backends.backend_agg import FigureCanvasAgg
    from matplotlib.figure import Figure

    frame = period_frame(reports)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Own Agg canvas, no pyplot state.
    fig = Figure(figsize=(10, 5))
    FigureCanvasAgg(fig)
    ax = fig.subplots()
    ax.plot(frame["date"], frame["compliance_rate"], marker="o", label="Compliance")
    ax.plot(frame["date"], frame["evasion_rate"], marker="s", label="Evasion")
    ax.plot(frame["date"], frame["unaware_rate"], marker="^", label="Unaware")
    ax.plot(frame["date"], frame["avg_compliance_prob"], linestyle="--", label="Avg P(comply)")
    ax.set_ylim(0.0, 1.0)
    ax.set_xlabel("Period")
    ax.set_ylabel("Share of agents")
    statute_ids = sorted(set(frame["statute_id"]))
    ax.set_title(title or f"Compliance trend ({', '.join(statute_ids)})")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    fig.savefig(path, dpi=150)

    logger.info("Saved compliance trend chart to %s", path)
    return path
