"""Reporting tools for compliance simulation results.

- **report**: pandas DataFrames of stats, histories and profiles, plus
  matplotlib trend charts
"""

from compliancesim.analysis.report import (
    history_frame,
    period_frame,
    plot_compliance_trend,
    profile_frame,
    stats_frame,
)

__all__ = [
    "history_frame",
    "period_frame",
    "plot_compliance_trend",
    "profile_frame",
    "stats_frame",
]
