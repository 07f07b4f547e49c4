"""
Dashboard Service — select a snapshot, run every metric, merge the result.

Business Rules:
- All eight computations run against the same snapshot
- Month-filtered dashboards compare KPIs against the previous calendar
  month (when dashboard_compare_previous_month is on); unfiltered
  dashboards carry no change fields
- Lead-source and salesperson filters apply to both the current and the
  comparison snapshot
- Each call is independent: no state is carried between runs

Called by: routers/dashboard.py
Depends on: services/pipeline_metrics.py, services/pipeline_breakdowns.py,
            services/opportunity_store.py
"""

import logging
from datetime import datetime
from typing import Sequence

from ..config import settings
from .opportunity_store import OpportunityStore
from .pipeline_breakdowns import (
    compute_lead_sources,
    compute_salespeople,
    compute_trend_series,
    lead_source_of,
    salesperson_of,
)
from .pipeline_metrics import (
    compute_call_metrics,
    compute_funnel,
    compute_kpis,
    compute_show_up_rates,
    compute_time_metrics,
)

log = logging.getLogger("pipeline.dashboard")


# ── Month helpers ──────────────────────────────────────────────────────


def parse_month(value: str) -> tuple[int, int]:
    """'2024-03' → (2024, 3). Raises ValueError on anything else."""
    m = datetime.strptime(value.strip(), "%Y-%m")
    return m.year, m.month


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


# ── Snapshot selection ─────────────────────────────────────────────────


def filter_opportunities(
    opportunities: Sequence, lead_source: str | None = None, salesperson: str | None = None
) -> list:
    """Keep opportunities matching the given lead source and/or salesperson.

    Blank values on a record match the defaults, as on the leaderboard.
    """
    out = list(opportunities)
    if lead_source:
        out = [o for o in out if lead_source_of(o) == lead_source]
    if salesperson:
        out = [o for o in out if salesperson_of(o) == salesperson]
    return out


def select_opportunities(
    store: OpportunityStore,
    year: int | None = None,
    month: int | None = None,
    lead_source: str | None = None,
    salesperson: str | None = None,
) -> dict:
    """Fetch the current snapshot and, for a month view, the comparison one."""
    if year is None or month is None:
        current = store.get_all()
        return {
            "period": None,
            "comparison_period": None,
            "opportunities": filter_opportunities(current, lead_source, salesperson),
            "comparison": None,
        }

    current = store.get_created_in_month(year, month)
    comparison = None
    comparison_period = None
    if settings.dashboard_compare_previous_month:
        py, pm = previous_month(year, month)
        comparison = filter_opportunities(store.get_created_in_month(py, pm), lead_source, salesperson)
        comparison_period = format_month(py, pm)

    return {
        "period": format_month(year, month),
        "comparison_period": comparison_period,
        "opportunities": filter_opportunities(current, lead_source, salesperson),
        "comparison": comparison,
    }


# ── Composition ────────────────────────────────────────────────────────


def build_dashboard(opportunities: Sequence, comparison: Sequence | None = None) -> dict:
    """Run all eight computations on one snapshot and merge them."""
    snapshot = list(opportunities)
    return {
        "kpis": compute_kpis(snapshot, comparison),
        "show_up_rates": compute_show_up_rates(snapshot),
        "funnel_data": compute_funnel(snapshot),
        "time_metrics": compute_time_metrics(snapshot),
        "call_metrics": compute_call_metrics(snapshot),
        "trend_data": compute_trend_series(snapshot),
        "lead_sources": compute_lead_sources(snapshot),
        "salespeople": compute_salespeople(snapshot),
    }


def get_dashboard(
    store: OpportunityStore,
    year: int | None = None,
    month: int | None = None,
    lead_source: str | None = None,
    salesperson: str | None = None,
) -> dict:
    """Dashboard for the whole pipeline, or for one creation month."""
    selection = select_opportunities(store, year, month, lead_source, salesperson)
    result = build_dashboard(selection["opportunities"], selection["comparison"])
    log.info(
        "Dashboard built: period=%s opportunities=%d",
        selection["period"] or "all",
        len(selection["opportunities"]),
    )
    return {
        "period": selection["period"],
        "comparison_period": selection["comparison_period"],
        **result,
    }
