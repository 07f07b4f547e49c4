"""Calendar service — call events and monthly summary for the calendar view.

Every scheduled call slot on an opportunity becomes one event. The month
summary pairs the events of a month with the opportunities created in it.

Business Rules:
- One event per slot with a date; duration/recording ride along if set
- Month filter applies to the event date, not the opportunity's creation
- Events are ordered by date, then pipeline slot order, then opportunity id
- Summary closing rate is a whole percentage (won / opportunities)

Called by: routers/dashboard.py
Depends on: services/pipeline_metrics.py
"""

from typing import Sequence

from ..schemas.opportunity import CALL_SLOTS
from ..utils.normalization import percent, round_half_up
from .pipeline_metrics import cash_of, is_won_deal, slot_date, slot_duration, won_revenue

_SLOT_LABELS = {
    "discovery1": "Discovery 1",
    "discovery2": "Discovery 2",
    "discovery3": "Discovery 3",
    "closing1": "Closing 1",
    "closing2": "Closing 2",
    "closing3": "Closing 3",
}
_SLOT_ORDER = {slot: i for i, slot in enumerate(CALL_SLOTS)}


def build_calendar_events(
    opportunities: Sequence, year: int | None = None, month: int | None = None
) -> list[dict]:
    """Flatten scheduled calls into calendar events, optionally for one month."""
    events = []
    for opp in opportunities:
        for slot in CALL_SLOTS:
            d = slot_date(opp, slot)
            if d is None:
                continue
            if year is not None and month is not None and (d.year, d.month) != (year, month):
                continue
            events.append({
                "id": f"{opp.id}-{slot}",
                "title": f"{_SLOT_LABELS[slot]} - {opp.name}",
                "opportunity_id": opp.id,
                "opportunity_name": opp.name,
                "date": d.isoformat(),
                "type": slot,
                "duration": slot_duration(opp, slot),
                "recording": getattr(opp, f"{slot}_recording", None) or None,
            })
    events.sort(key=lambda e: (e["date"], _SLOT_ORDER[e["type"]], e["opportunity_id"]))
    return events


def summarize_month(opportunities: Sequence, events: list[dict]) -> dict:
    """Call counts plus deal outcomes for the opportunities of a month."""
    won = sum(1 for o in opportunities if is_won_deal(o))
    return {
        "total_events": len(events),
        "discovery_calls": sum(1 for e in events if e["type"].startswith("discovery")),
        "closing_calls": sum(1 for e in events if e["type"].startswith("closing")),
        "opportunities": len(opportunities),
        "won": won,
        "lost": sum(1 for o in opportunities if o.deal_status == "Lost"),
        "revenue": sum(won_revenue(o) for o in opportunities),
        "cash_collected": sum(cash_of(o) for o in opportunities),
        "closing_rate": int(round_half_up(percent(won, len(opportunities)))),
    }
