"""Dashboard API — pipeline metrics, salesperson leaderboard, call calendar."""

from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_store, month_query, validate_year_month
from ..schemas.dashboard import CalendarResponse, DashboardResponse, SalespersonLeaderboardResponse
from ..schemas.opportunity import LeadSource
from ..services.opportunity_store import OpportunityStore

router = APIRouter(tags=["dashboard"])


@router.get("/api/dashboard", response_model=DashboardResponse, response_model_exclude_none=True)
def get_dashboard(
    period: tuple[int, int] | None = Depends(month_query),
    lead_source: LeadSource | None = Query(None),
    salesperson: str | None = Query(None),
    store: OpportunityStore = Depends(get_store),
):
    from ..services.dashboard_service import get_dashboard as build

    year, month = period if period else (None, None)
    return build(store, year, month, lead_source, salesperson)


@router.get("/api/dashboard/salespeople", response_model=SalespersonLeaderboardResponse)
def list_salesperson_leaderboard(
    sort_by: str = Query("total_revenue"),
    order: str = Query("desc"),
    period: tuple[int, int] | None = Depends(month_query),
    store: OpportunityStore = Depends(get_store),
):
    from ..services.pipeline_breakdowns import compute_salespeople, rank_salespeople

    if order not in ("asc", "desc"):
        raise HTTPException(400, "order must be 'asc' or 'desc'")
    opps = store.get_created_in_month(*period) if period else store.get_all()
    try:
        entries = rank_salespeople(compute_salespeople(opps), sort_by, descending=order == "desc")
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"sort_by": sort_by, "order": order, "entries": entries}


@router.get(
    "/api/dashboard/{year}/{month}",
    response_model=DashboardResponse,
    response_model_exclude_none=True,
)
def get_month_dashboard(
    year: int,
    month: int,
    lead_source: LeadSource | None = Query(None),
    salesperson: str | None = Query(None),
    store: OpportunityStore = Depends(get_store),
):
    from ..services.dashboard_service import get_dashboard as build

    validate_year_month(year, month)
    return build(store, year, month, lead_source, salesperson)


@router.get("/api/calendar/{year}/{month}", response_model=CalendarResponse)
def get_calendar(year: int, month: int, store: OpportunityStore = Depends(get_store)):
    from ..services.calendar_service import build_calendar_events, summarize_month
    from ..services.dashboard_service import format_month

    validate_year_month(year, month)
    events = build_calendar_events(store.get_all(), year, month)
    created = store.get_created_in_month(year, month)
    return {
        "month": format_month(year, month),
        "events": events,
        "summary": summarize_month(created, events),
    }
