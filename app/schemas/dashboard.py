"""
schemas/dashboard.py — Response models for dashboard and calendar endpoints

Mirror the dicts produced by services/pipeline_metrics.py,
services/pipeline_breakdowns.py and services/calendar_service.py, and
serialize them camelCase for the dashboard frontend.

Called by: routers/dashboard.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Metrics ─────────────────────────────────────────────────────────────


class KPIData(_CamelModel):
    total_revenue: float = 0
    cash_collected: float = 0
    closing_rate: float = 0
    proposals_pitched: int = 0
    avg_sales_cycle: float = 0
    total_calls: int = 0
    avg_deal_size: int = 0

    # Only present when a comparison period was supplied
    total_revenue_change: float | None = None
    cash_collected_change: float | None = None
    closing_rate_change: float | None = None
    proposals_pitched_change: float | None = None
    avg_sales_cycle_change: float | None = None
    total_calls_change: float | None = None
    avg_deal_size_change: float | None = None


class ShowUpRates(_CamelModel):
    first_discovery: int = 0
    second_discovery: int = 0
    third_discovery: int = 0
    first_closing: int = 0
    second_closing: int = 0
    third_closing: int = 0
    overall: int = 0


class FunnelNode(_CamelModel):
    id: str
    name: str
    value: int = 0


class FunnelLink(_CamelModel):
    source: str
    target: str
    value: int


class FunnelData(_CamelModel):
    nodes: list[FunnelNode] = Field(default_factory=list)
    links: list[FunnelLink] = Field(default_factory=list)


class TimeMetrics(_CamelModel):
    discovery_to_closing: float = 0
    discovery_to_final_close: float = 0
    between_discovery: float = 0
    between_closing: float = 0
    sales_cycle: float = 0


class CallMetrics(_CamelModel):
    discovery_duration: float = 0
    closing_duration: float = 0
    avg_revenue: float = 0


class TrendPoint(_CamelModel):
    period: str
    revenue: float = 0
    deals: int = 0
    closing_rate: float = 0
    cash_collected: float = 0


class LeadSourceStats(_CamelModel):
    source: str
    count: int = 0
    percentage: int = 0
    revenue: float = 0
    conversion_rate: int = 0


class SalespersonStats(_CamelModel):
    salesperson: str
    total_revenue: float = 0
    deals_won: int = 0
    closing_rate: float = 0
    avg_deal_size: float = 0
    total_calls: int = 0


# ── Aggregate responses ─────────────────────────────────────────────────


class DashboardResponse(_CamelModel):
    period: str | None = None
    comparison_period: str | None = None
    kpis: KPIData
    show_up_rates: ShowUpRates
    funnel_data: FunnelData
    time_metrics: TimeMetrics
    call_metrics: CallMetrics
    trend_data: list[TrendPoint] = Field(default_factory=list)
    lead_sources: list[LeadSourceStats] = Field(default_factory=list)
    salespeople: list[SalespersonStats] = Field(default_factory=list)


class SalespersonLeaderboardResponse(_CamelModel):
    sort_by: str
    order: str
    entries: list[SalespersonStats] = Field(default_factory=list)


class CalendarEvent(_CamelModel):
    id: str
    title: str
    opportunity_id: int
    opportunity_name: str
    date: str
    type: str
    duration: int | None = None
    recording: str | None = None


class MonthSummary(_CamelModel):
    total_events: int = 0
    discovery_calls: int = 0
    closing_calls: int = 0
    opportunities: int = 0
    won: int = 0
    lost: int = 0
    revenue: float = 0
    cash_collected: float = 0
    closing_rate: int = 0


class CalendarResponse(_CamelModel):
    month: str
    events: list[CalendarEvent] = Field(default_factory=list)
    summary: MonthSummary
