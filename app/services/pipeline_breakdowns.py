"""
Pipeline Breakdowns — Trend Series, Lead Sources and Salesperson Leaderboard.

Groups a snapshot of opportunities by creation month, acquisition channel
or owner and computes per-group revenue and conversion figures.

Business Rules:
- Month buckets come from created_at only, never from call dates
- Revenue only counts for won deals; cash collected counts for all
- Missing lead source groups as "Referrals", missing salesperson as
  "Unknown" (the defaults applied on create)
- Leaderboard default order is by salesperson name so consumers can
  re-sort predictably; rank_salespeople() gives the "top performer" order

Called by: services/dashboard_service.py, routers/dashboard.py
Depends on: services/pipeline_metrics.py (field access helpers)
"""

import logging
from collections import defaultdict
from typing import Sequence

from ..config import settings
from ..utils.normalization import mean, percent, round_half_up
from .pipeline_metrics import call_count, cash_of, is_won_deal, revenue_of, won_revenue

log = logging.getLogger("pipeline.breakdowns")

SALESPERSON_SORT_FIELDS = (
    "salesperson",
    "total_revenue",
    "deals_won",
    "closing_rate",
    "avg_deal_size",
    "total_calls",
)


def _group(opportunities: Sequence, key) -> dict[str, list]:
    groups: dict[str, list] = defaultdict(list)
    for opp in opportunities:
        k = key(opp)
        if k is not None:
            groups[k].append(opp)
    return groups


# ── Trend Series ───────────────────────────────────────────────────────


def _period_of(opp) -> str | None:
    created = getattr(opp, "created_at", None)
    if not created:
        return None
    return f"{created.year:04d}-{created.month:02d}"


def compute_trend_series(opportunities: Sequence) -> list[dict]:
    """One entry per creation month (YYYY-MM), oldest first."""
    groups = _group(opportunities, _period_of)
    series = []
    for period in sorted(groups):
        bucket = groups[period]
        won = sum(1 for o in bucket if is_won_deal(o))
        series.append({
            "period": period,
            "revenue": sum(won_revenue(o) for o in bucket),
            "deals": len(bucket),
            "closing_rate": percent(won, len(bucket)),
            "cash_collected": sum(cash_of(o) for o in bucket),
        })
    return series


# ── Lead Sources ───────────────────────────────────────────────────────


def lead_source_of(opp) -> str:
    return (getattr(opp, "lead_source", None) or "").strip() or settings.default_lead_source


def compute_lead_sources(opportunities: Sequence) -> list[dict]:
    """Count, share, won revenue and conversion per acquisition channel.

    Sorted by count (largest first), ties by source name.
    """
    total = len(opportunities)
    groups = _group(opportunities, lead_source_of)
    rows = []
    for source, members in groups.items():
        won = sum(1 for o in members if is_won_deal(o))
        rows.append({
            "source": source,
            "count": len(members),
            "percentage": int(round_half_up(percent(len(members), total))),
            "revenue": sum(won_revenue(o) for o in members),
            "conversion_rate": int(round_half_up(percent(won, len(members)))),
        })
    rows.sort(key=lambda r: (-r["count"], r["source"]))
    return rows


# ── Salesperson Leaderboard ────────────────────────────────────────────


def salesperson_of(opp) -> str:
    return (getattr(opp, "salesperson", None) or "").strip() or settings.default_salesperson


def compute_salespeople(opportunities: Sequence) -> list[dict]:
    """Per-salesperson revenue, wins, closing rate, deal size and call volume.

    Ordered by salesperson name.
    """
    groups = _group(opportunities, salesperson_of)
    rows = []
    for name in sorted(groups):
        members = groups[name]
        won = [o for o in members if is_won_deal(o)]
        rows.append({
            "salesperson": name,
            "total_revenue": sum(revenue_of(o) for o in won),
            "deals_won": len(won),
            "closing_rate": percent(len(won), len(members)),
            "avg_deal_size": mean([revenue_of(o) for o in won]),
            "total_calls": sum(call_count(o) for o in members),
        })
    log.debug("Leaderboard built: %d salespeople", len(rows))
    return rows


def rank_salespeople(
    entries: list[dict], sort_by: str = "total_revenue", descending: bool = True
) -> list[dict]:
    """Re-sort leaderboard rows; ties keep their name order."""
    if sort_by not in SALESPERSON_SORT_FIELDS:
        raise ValueError(f"Cannot sort salespeople by {sort_by!r}")
    return sorted(entries, key=lambda e: e[sort_by], reverse=descending)
