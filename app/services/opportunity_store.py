"""Opportunity store — the record collaborator behind the dashboard.

The analytics only need "give me a snapshot". This module hides where the
snapshot comes from behind a small interface with two implementations:

  - SqlOpportunityStore: SQLAlchemy session (production)
  - InMemoryOpportunityStore: dict-backed (tests, demos)

Business Rules:
- New opportunities get defaults: lead source "Referrals", salesperson
  "Unknown", proposal "N/A", deal "Open", revenue and cash "0"
- id and created_at are assigned on create and never changed by update
- deal_status and the is_won/is_lost flags are kept in sync on every write

Usage:
    from app.services.opportunity_store import SqlOpportunityStore
    store = SqlOpportunityStore(db)
    opps = store.get_created_in_month(2024, 3)
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Protocol, Sequence

from sqlalchemy.orm import Session

from ..config import settings
from ..models import Opportunity
from ..schemas.opportunity import OpportunityRecord

log = logging.getLogger("pipeline.store")

_IMMUTABLE_FIELDS = {"id", "created_at"}
# never written as None on update
_REQUIRED_FIELDS = {"name", "proposal_status", "revenue", "cash_collected", "deal_status", "is_won", "is_lost"}


class OpportunityStore(Protocol):
    def get_all(self) -> Sequence: ...

    def get_created_in_month(self, year: int, month: int) -> Sequence: ...

    def get(self, opportunity_id: int): ...

    def create(self, data: dict, created_at: date | None = None): ...

    def update(self, opportunity_id: int, data: dict): ...

    def delete(self, opportunity_id: int) -> bool: ...


# ── Shared write rules ─────────────────────────────────────────────────


def sync_deal_flags(changes: dict, current_status: str = "Open") -> dict:
    """Resolve deal_status/is_won/is_lost from a (partial) change set.

    An explicit deal_status wins; otherwise a flag set to True picks the
    status, and clearing the flag of the current status reopens the deal.
    Returns a new dict with all three keys set.
    """
    out = dict(changes)
    status = out.get("deal_status")
    if status is None:
        if out.get("is_won"):
            status = "Won"
        elif out.get("is_lost"):
            status = "Lost"
        elif out.get("is_won") is False and current_status == "Won":
            status = "Open"
        elif out.get("is_lost") is False and current_status == "Lost":
            status = "Open"
        else:
            status = current_status
    out["deal_status"] = status
    out["is_won"] = status == "Won"
    out["is_lost"] = status == "Lost"
    return out


def apply_create_defaults(data: dict) -> dict:
    """Fill in the defaults a brand-new opportunity starts with."""
    out = {k: v for k, v in data.items() if k not in _IMMUTABLE_FIELDS}
    out["lead_source"] = out.get("lead_source") or settings.default_lead_source
    out["salesperson"] = (out.get("salesperson") or "").strip() or settings.default_salesperson
    out["proposal_status"] = out.get("proposal_status") or "N/A"
    if out.get("revenue") is None:
        out["revenue"] = Decimal("0")
    if out.get("cash_collected") is None:
        out["cash_collected"] = Decimal("0")
    for key in ("contacts", "files", "conversation"):
        if out.get(key) is None:
            out[key] = []
    return sync_deal_flags(out)


def _clean_update(data: dict, current_status: str) -> dict:
    changes = {
        k: v
        for k, v in data.items()
        if k not in _IMMUTABLE_FIELDS and not (v is None and k in _REQUIRED_FIELDS)
    }
    if "salesperson" in changes:
        changes["salesperson"] = (changes["salesperson"] or "").strip() or settings.default_salesperson
    if "lead_source" in changes and not changes["lead_source"]:
        changes["lead_source"] = settings.default_lead_source
    if {"deal_status", "is_won", "is_lost"} & changes.keys():
        changes = sync_deal_flags(changes, current_status)
    return changes


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


# ── SQLAlchemy store ───────────────────────────────────────────────────


class SqlOpportunityStore:
    """Opportunity store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> list[Opportunity]:
        return self.db.query(Opportunity).order_by(Opportunity.id).all()

    def get_created_in_month(self, year: int, month: int) -> list[Opportunity]:
        start, end = _month_bounds(year, month)
        return (
            self.db.query(Opportunity)
            .filter(Opportunity.created_at >= start, Opportunity.created_at < end)
            .order_by(Opportunity.id)
            .all()
        )

    def get(self, opportunity_id: int) -> Opportunity | None:
        return self.db.get(Opportunity, opportunity_id)

    def create(self, data: dict, created_at: date | None = None) -> Opportunity:
        opp = Opportunity(**apply_create_defaults(data), created_at=created_at or date.today())
        self.db.add(opp)
        self.db.commit()
        self.db.refresh(opp)
        log.info(f"Opportunity {opp.id} created: {opp.name!r}")
        return opp

    def update(self, opportunity_id: int, data: dict) -> Opportunity | None:
        opp = self.get(opportunity_id)
        if not opp:
            return None
        for field, value in _clean_update(data, opp.deal_status).items():
            setattr(opp, field, value)
        self.db.commit()
        self.db.refresh(opp)
        return opp

    def delete(self, opportunity_id: int) -> bool:
        opp = self.get(opportunity_id)
        if not opp:
            return False
        self.db.delete(opp)
        self.db.commit()
        log.info(f"Opportunity {opportunity_id} deleted")
        return True


# ── In-memory store ────────────────────────────────────────────────────


class InMemoryOpportunityStore:
    """Dict-backed store. Not thread-safe; one per test or demo."""

    def __init__(self):
        self._records: dict[int, OpportunityRecord] = {}
        self._next_id = 1

    def get_all(self) -> list[OpportunityRecord]:
        return [self._records[k] for k in sorted(self._records)]

    def get_created_in_month(self, year: int, month: int) -> list[OpportunityRecord]:
        start, end = _month_bounds(year, month)
        return [r for r in self.get_all() if start <= r.created_at < end]

    def get(self, opportunity_id: int) -> OpportunityRecord | None:
        return self._records.get(opportunity_id)

    def create(self, data: dict, created_at: date | None = None) -> OpportunityRecord:
        record = OpportunityRecord(
            id=self._next_id,
            created_at=created_at or date.today(),
            **apply_create_defaults(data),
        )
        self._records[record.id] = record
        self._next_id += 1
        return record

    def update(self, opportunity_id: int, data: dict) -> OpportunityRecord | None:
        existing = self._records.get(opportunity_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=_clean_update(data, existing.deal_status))
        self._records[opportunity_id] = updated
        return updated

    def delete(self, opportunity_id: int) -> bool:
        return self._records.pop(opportunity_id, None) is not None


# ── Sample data ────────────────────────────────────────────────────────

SAMPLE_OPPORTUNITIES = [
    {
        "name": "TechCorp Solutions",
        "lead_source": "Referrals",
        "discovery1_date": date(2024, 3, 5),
        "discovery1_duration": 45,
        "discovery1_recording": "https://zoom.us/rec/123",
        "discovery2_date": date(2024, 3, 12),
        "discovery2_duration": 38,
        "discovery2_recording": "https://zoom.us/rec/456",
        "closing1_date": date(2024, 3, 20),
        "closing1_duration": 55,
        "closing1_recording": "https://zoom.us/rec/789",
        "proposal_status": "Pitched",
        "revenue": Decimal("32500"),
        "cash_collected": Decimal("16250"),
        "deal_status": "Won",
        "files": ["proposal_techcorp.pdf", "contract_signed.pdf"],
    },
    {
        "name": "Global Industries Inc",
        "lead_source": "Cold Calling",
        "discovery1_date": date(2024, 3, 8),
        "discovery1_duration": 42,
        "proposal_status": "Created",
    },
    {
        "name": "StartupX Ventures",
        "lead_source": "Community",
        "discovery1_date": date(2024, 3, 15),
        "discovery1_duration": 50,
        "discovery2_date": date(2024, 3, 22),
        "discovery2_duration": 45,
        "discovery3_date": date(2024, 3, 29),
        "discovery3_duration": 40,
        "closing1_date": date(2024, 4, 5),
        "closing1_duration": 60,
        "closing2_date": date(2024, 4, 12),
        "closing2_duration": 55,
        "closing3_date": date(2024, 4, 19),
        "closing3_duration": 50,
        "proposal_status": "Pitched",
        "revenue": Decimal("45000"),
        "cash_collected": Decimal("45000"),
        "deal_status": "Won",
        "files": ["proposal_startupx.pdf"],
    },
]


def seed_sample_data(store: OpportunityStore) -> int:
    """Insert the sample opportunities into an empty store. Returns count added."""
    if store.get_all():
        return 0
    for data in SAMPLE_OPPORTUNITIES:
        store.create(data)
    log.info(f"Seeded {len(SAMPLE_OPPORTUNITIES)} sample opportunities")
    return len(SAMPLE_OPPORTUNITIES)
