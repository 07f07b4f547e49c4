"""
schemas/opportunity.py — Pydantic models for Opportunity endpoints

Validates creates and partial updates, and describes the record shape the
analytics services read.

Business Rules:
- Opportunity name is required and non-empty
- Lead source, proposal status and deal status are closed vocabularies
- Durations are minutes and cannot be negative
- deal_status and the is_won/is_lost flags must not contradict each other
- Wire format is camelCase (discovery1Date, dealStatus, ...); snake_case is
  accepted on input too

Called by: routers/opportunities.py, services/opportunity_store.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

LeadSource = Literal[
    "Referrals",
    "Cold Calling",
    "Community",
    "Video-channel",
    "Internal team member",
]
ProposalStatus = Literal["N/A", "Created", "Pitched"]
DealStatus = Literal["Open", "Won", "Lost"]

LEAD_SOURCES: tuple[str, ...] = LeadSource.__args__
DEAL_STATUSES: tuple[str, ...] = DealStatus.__args__

# Call slots in pipeline order
DISCOVERY_SLOTS = ("discovery1", "discovery2", "discovery3")
CLOSING_SLOTS = ("closing1", "closing2", "closing3")
CALL_SLOTS = DISCOVERY_SLOTS + CLOSING_SLOTS


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_flags(deal_status, is_won, is_lost) -> None:
    if is_won and is_lost:
        raise ValueError("An opportunity cannot be both won and lost")
    if deal_status is None:
        return
    if is_won is not None and is_won != (deal_status == "Won"):
        raise ValueError(f"is_won contradicts deal_status {deal_status!r}")
    if is_lost is not None and is_lost != (deal_status == "Lost"):
        raise ValueError(f"is_lost contradicts deal_status {deal_status!r}")


# ── Write models ─────────────────────────────────────────────────────


class _CallSlotFields(_CamelModel):
    discovery1_date: date | None = None
    discovery1_duration: int | None = Field(default=None, ge=0)
    discovery1_recording: str | None = None
    discovery2_date: date | None = None
    discovery2_duration: int | None = Field(default=None, ge=0)
    discovery2_recording: str | None = None
    discovery3_date: date | None = None
    discovery3_duration: int | None = Field(default=None, ge=0)
    discovery3_recording: str | None = None
    closing1_date: date | None = None
    closing1_duration: int | None = Field(default=None, ge=0)
    closing1_recording: str | None = None
    closing2_date: date | None = None
    closing2_duration: int | None = Field(default=None, ge=0)
    closing2_recording: str | None = None
    closing3_date: date | None = None
    closing3_duration: int | None = Field(default=None, ge=0)
    closing3_recording: str | None = None


class OpportunityCreate(_CallSlotFields):
    name: str
    lead_source: LeadSource | None = None
    salesperson: str | None = None
    proposal_status: ProposalStatus = "N/A"
    revenue: Decimal = Decimal("0")
    cash_collected: Decimal = Decimal("0")
    deal_status: DealStatus | None = None
    is_won: bool | None = None
    is_lost: bool | None = None
    contacts: list[dict] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    notes: str | None = None
    conversation: list[dict] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Opportunity name is required")
        return v

    @model_validator(mode="after")
    def flags_consistent(self) -> "OpportunityCreate":
        _check_flags(self.deal_status, self.is_won, self.is_lost)
        return self


class OpportunityUpdate(_CallSlotFields):
    """Partial update — only fields present in the payload are applied."""

    name: str | None = None
    lead_source: LeadSource | None = None
    salesperson: str | None = None
    proposal_status: ProposalStatus | None = None
    revenue: Decimal | None = None
    cash_collected: Decimal | None = None
    deal_status: DealStatus | None = None
    is_won: bool | None = None
    is_lost: bool | None = None
    contacts: list[dict] | None = None
    files: list[str] | None = None
    notes: str | None = None
    conversation: list[dict] | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        if not v:
            raise ValueError("Opportunity name cannot be blank")
        return v

    # Omit these to leave them unchanged; an explicit null is not a value
    @field_validator("proposal_status", "revenue", "cash_collected", "deal_status", "is_won", "is_lost")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @model_validator(mode="after")
    def flags_consistent(self) -> "OpportunityUpdate":
        _check_flags(self.deal_status, self.is_won, self.is_lost)
        return self


# ── Read model ───────────────────────────────────────────────────────


class OpportunityRecord(_CamelModel):
    """A stored opportunity as the analytics and the API see it.

    Numeric fields stay loosely typed: the analytics coerce anything
    unparseable to zero instead of failing.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int = 0
    name: str = ""
    lead_source: str = "Referrals"
    salesperson: str = "Unknown"
    created_at: date = Field(default_factory=date.today)

    discovery1_date: date | None = None
    discovery1_duration: int | str | None = None
    discovery1_recording: str | None = None
    discovery2_date: date | None = None
    discovery2_duration: int | str | None = None
    discovery2_recording: str | None = None
    discovery3_date: date | None = None
    discovery3_duration: int | str | None = None
    discovery3_recording: str | None = None
    closing1_date: date | None = None
    closing1_duration: int | str | None = None
    closing1_recording: str | None = None
    closing2_date: date | None = None
    closing2_duration: int | str | None = None
    closing2_recording: str | None = None
    closing3_date: date | None = None
    closing3_duration: int | str | None = None
    closing3_recording: str | None = None

    proposal_status: str = "N/A"
    revenue: Decimal | float | str | None = "0"
    cash_collected: Decimal | float | str | None = "0"
    deal_status: str = "Open"
    is_won: bool = False
    is_lost: bool = False

    contacts: list[dict] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    notes: str | None = None
    conversation: list[dict] = Field(default_factory=list)

    @field_validator("contacts", "files", "conversation", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return [] if v is None else v
