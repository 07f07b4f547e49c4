"""
Pipeline Metrics — KPIs, Show-Up Rates, Funnel, Time and Call Metrics.

Pure functions over a snapshot of opportunities (ORM rows or
OpportunityRecord, anything with the same attributes). Nothing here
touches the database or mutates its input, so every function can run
concurrently against the same list.

Business Rules:
- Revenue only counts for deals with deal_status == "Won"; cash collected
  counts for every deal
- A call was scheduled when its date is set, and happened when it also has
  a positive duration. A duration without a date is ignored. Call-length
  averages count every recorded duration, 0 included
- Division by zero yields 0, never NaN
- Percent change vs. a comparison period is 0 when the previous value is 0
- Rounding is half-up and per field: closing rate / time / call metrics to
  1 decimal, show-up rates and average deal size to integers

Called by: services/dashboard_service.py, routers/dashboard.py
Depends on: utils/normalization.py, schemas/opportunity.py (slot names)
"""

import logging
from datetime import date, datetime, time
from typing import Iterable, Sequence

from ..schemas.opportunity import CALL_SLOTS, CLOSING_SLOTS, DISCOVERY_SLOTS
from ..utils.normalization import mean, parse_minutes, percent, round_half_up, safe_float, safe_minutes

log = logging.getLogger("pipeline.metrics")

# ── Constants ──────────────────────────────────────────────────────────

# slot → result key / display name, in pipeline order
SLOT_KEYS = {
    "discovery1": "first_discovery",
    "discovery2": "second_discovery",
    "discovery3": "third_discovery",
    "closing1": "first_closing",
    "closing2": "second_closing",
    "closing3": "third_closing",
}
SLOT_NAMES = {
    "discovery1": "First Discovery",
    "discovery2": "Second Discovery",
    "discovery3": "Third Discovery",
    "closing1": "First Closing",
    "closing2": "Second Closing",
    "closing3": "Third Closing",
}

KPI_FIELDS = (
    "total_revenue",
    "cash_collected",
    "closing_rate",
    "proposals_pitched",
    "avg_sales_cycle",
    "total_calls",
    "avg_deal_size",
)


# ── Field access ───────────────────────────────────────────────────────


def slot_date(opp, slot: str):
    """Scheduled date of a call slot, or None."""
    return getattr(opp, f"{slot}_date", None) or None


def slot_duration(opp, slot: str) -> int | None:
    """Minutes of a call that happened, or None.

    Ignored when the slot has no date: a call can't happen unscheduled.
    """
    if slot_date(opp, slot) is None:
        return None
    minutes = safe_minutes(getattr(opp, f"{slot}_duration", None))
    return minutes or None


def logged_duration(opp, slot: str) -> int | None:
    """Minutes recorded for a scheduled call, 0 included; None if not recorded."""
    if slot_date(opp, slot) is None:
        return None
    return parse_minutes(getattr(opp, f"{slot}_duration", None))


def call_count(opp) -> int:
    """Number of scheduled calls across all six slots."""
    return sum(1 for slot in CALL_SLOTS if slot_date(opp, slot) is not None)


def is_won_deal(opp) -> bool:
    return opp.deal_status == "Won"


def revenue_of(opp) -> float:
    return safe_float(opp.revenue)


def won_revenue(opp) -> float:
    """Revenue that counts toward totals: only for won deals."""
    return revenue_of(opp) if is_won_deal(opp) else 0.0


def cash_of(opp) -> float:
    return safe_float(opp.cash_collected)


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    return datetime.fromisoformat(str(value))


def days_between(start, end) -> float | None:
    """Absolute elapsed days between two dates, None if either is missing."""
    if not start or not end:
        return None
    delta = _as_datetime(end) - _as_datetime(start)
    return abs(delta.total_seconds()) / 86400


def _first_present(opp, slots: Iterable[str]):
    for slot in slots:
        d = slot_date(opp, slot)
        if d is not None:
            return d
    return None


def _avg_days(values: Iterable[float | None]) -> float:
    return round_half_up(mean([v for v in values if v is not None]), 1)


# ── KPI Aggregator ─────────────────────────────────────────────────────


def average_sales_cycle(opportunities: Sequence) -> float:
    """Mean days from first discovery to resolution, for won or lost deals.

    The end date is the latest call that was scheduled, looking at
    closing3, closing2, closing1, then discovery3, discovery2, discovery1.
    """
    cycles = []
    for opp in opportunities:
        start = slot_date(opp, "discovery1")
        if start is None or not (opp.is_won or opp.is_lost):
            continue
        end = _first_present(opp, tuple(reversed(CLOSING_SLOTS)) + tuple(reversed(DISCOVERY_SLOTS)))
        cycles.append(days_between(start, end))
    return _avg_days(cycles)


def _kpi_values(opportunities: Sequence) -> dict:
    total = len(opportunities)
    won = [o for o in opportunities if is_won_deal(o)]
    won_with_revenue = [r for r in (revenue_of(o) for o in won) if r > 0]

    return {
        "total_revenue": sum(revenue_of(o) for o in won),
        "cash_collected": sum(cash_of(o) for o in opportunities),
        "closing_rate": round_half_up(percent(len(won), total), 1),
        "proposals_pitched": sum(1 for o in opportunities if o.proposal_status == "Pitched"),
        "avg_sales_cycle": average_sales_cycle(opportunities),
        "total_calls": sum(call_count(o) for o in opportunities),
        "avg_deal_size": int(round_half_up(mean(won_with_revenue))),
    }


def _percent_change(current: float, previous: float) -> float:
    """Growth vs. previous period in percent; 0 when growing from zero."""
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def compute_kpis(opportunities: Sequence, comparison: Sequence | None = None) -> dict:
    """Headline KPIs, with month-over-month changes when comparison is given."""
    result = _kpi_values(opportunities)

    if comparison is not None:
        previous = _kpi_values(comparison)
        for field in KPI_FIELDS:
            result[f"{field}_change"] = _percent_change(result[field], previous[field])

    log.debug(
        "KPIs computed for %d opportunities (comparison=%s)",
        len(opportunities),
        "none" if comparison is None else len(comparison),
    )
    return result


# ── Show-Up Rates ──────────────────────────────────────────────────────


def compute_show_up_rates(opportunities: Sequence) -> dict:
    """Share of scheduled calls that actually happened, per slot and overall.

    Overall is weighted by volume: total completed / total scheduled, not
    the mean of the six slot rates.
    """
    result = {}
    total_scheduled = 0
    total_completed = 0

    for slot in CALL_SLOTS:
        scheduled = sum(1 for o in opportunities if slot_date(o, slot) is not None)
        completed = sum(1 for o in opportunities if slot_duration(o, slot) is not None)
        result[SLOT_KEYS[slot]] = int(round_half_up(percent(completed, scheduled)))
        total_scheduled += scheduled
        total_completed += completed

    result["overall"] = int(round_half_up(percent(total_completed, total_scheduled)))
    return result


# ── Funnel ─────────────────────────────────────────────────────────────


def _count(opportunities: Sequence, predicate) -> int:
    return sum(1 for o in opportunities if predicate(o))


def compute_funnel(opportunities: Sequence) -> dict:
    """Stage graph for the Sankey chart: 8 fixed nodes, observed edges.

    The edge rules are a fixed, partial transition model. Won is always
    attributed to the third-closing node, and only first closing has an
    edge to Lost. Edges with a zero count are omitted.
    """
    nodes = [
        {
            "id": SLOT_KEYS[slot],
            "name": SLOT_NAMES[slot],
            "value": _count(opportunities, lambda o, s=slot: slot_date(o, s) is not None),
        }
        for slot in CALL_SLOTS
    ]
    nodes.append({"id": "won", "name": "Won", "value": _count(opportunities, lambda o: bool(o.is_won))})
    nodes.append({"id": "lost", "name": "Lost", "value": _count(opportunities, lambda o: bool(o.is_lost))})

    def has(o, slot):
        return slot_date(o, slot) is not None

    def any_closing(o):
        return any(has(o, s) for s in CLOSING_SLOTS)

    rules = []
    for current, nxt in (("discovery1", "discovery2"), ("discovery2", "discovery3")):
        rules.append((
            current, nxt,
            lambda o, c=current, n=nxt: has(o, c) and has(o, n),
        ))
        rules.append((
            current, "closing1",
            lambda o, c=current, n=nxt: has(o, c) and not has(o, n) and has(o, "closing1"),
        ))
        rules.append((
            current, "lost",
            lambda o, c=current, n=nxt: (
                has(o, c) and not has(o, n) and not has(o, "closing1") and bool(o.is_lost)
            ),
        ))
    rules.append(("discovery3", "closing1", lambda o: has(o, "discovery3") and has(o, "closing1")))
    rules.append(("closing1", "closing2", lambda o: has(o, "closing1") and has(o, "closing2")))
    rules.append(("closing2", "closing3", lambda o: has(o, "closing2") and has(o, "closing3")))
    rules.append(("closing3", "won", lambda o: any_closing(o) and bool(o.is_won)))
    rules.append(("closing1", "lost", lambda o: has(o, "closing1") and bool(o.is_lost)))

    links = []
    for source, target, predicate in rules:
        value = _count(opportunities, predicate)
        if value > 0:
            links.append({
                "source": SLOT_KEYS.get(source, source),
                "target": SLOT_KEYS.get(target, target),
                "value": value,
            })

    return {"nodes": nodes, "links": links}


# ── Time Metrics ───────────────────────────────────────────────────────


def _final_close_date(opp):
    return _first_present(opp, ("closing3", "closing2", "closing1"))


def compute_time_metrics(opportunities: Sequence) -> dict:
    """Average days between pipeline milestones (1 decimal, 0 if no data)."""
    to_final_close = _avg_days(
        days_between(slot_date(o, "discovery1"), _final_close_date(o)) for o in opportunities
    )
    return {
        "discovery_to_closing": _avg_days(
            days_between(slot_date(o, "discovery1"), slot_date(o, "closing1")) for o in opportunities
        ),
        "discovery_to_final_close": to_final_close,
        "between_discovery": _avg_days(
            days_between(slot_date(o, "discovery1"), slot_date(o, "discovery2")) for o in opportunities
        ),
        "between_closing": _avg_days(
            days_between(slot_date(o, "closing1"), slot_date(o, "closing2")) for o in opportunities
        ),
        # Same measure under the name the sales-cycle widget reads
        "sales_cycle": to_final_close,
    }


# ── Call Metrics ───────────────────────────────────────────────────────


def compute_call_metrics(opportunities: Sequence) -> dict:
    """Average call length per call class, and average revenue of won deals.

    avg_revenue includes won deals with zero revenue, unlike the KPI
    avg_deal_size which skips them.
    """
    discovery = [
        d for o in opportunities for s in DISCOVERY_SLOTS if (d := logged_duration(o, s)) is not None
    ]
    closing = [
        d for o in opportunities for s in CLOSING_SLOTS if (d := logged_duration(o, s)) is not None
    ]
    revenues = [revenue_of(o) for o in opportunities if o.is_won]

    return {
        "discovery_duration": round_half_up(mean(discovery), 1),
        "closing_duration": round_half_up(mean(closing), 1),
        "avg_revenue": round_half_up(mean(revenues), 1),
    }
