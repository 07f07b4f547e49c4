"""
dependencies.py — Shared FastAPI Dependencies

Reusable dependency functions for the opportunity store and common query
parsing. All routers import from here instead of building their own.

Business Rules:
- get_store wraps the request's DB session in a SqlOpportunityStore
- month query params are YYYY-MM; anything else is a 400
- path year/month must be a real calendar month

Called by: all routers
Depends on: database, services/opportunity_store.py
"""

import logging

from fastapi import Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .database import get_db
from .services.dashboard_service import parse_month
from .services.opportunity_store import OpportunityStore, SqlOpportunityStore

log = logging.getLogger(__name__)


def get_store(db: Session = Depends(get_db)) -> OpportunityStore:
    return SqlOpportunityStore(db)


def month_query(
    month: str | None = Query(None, description="YYYY-MM format"),
) -> tuple[int, int] | None:
    """Parse an optional ?month=YYYY-MM into (year, month)."""
    if not month:
        return None
    try:
        return parse_month(month)
    except ValueError:
        raise HTTPException(400, "Invalid month format, use YYYY-MM")


def validate_year_month(year: int, month: int) -> tuple[int, int]:
    if not 1 <= month <= 12 or not 1900 <= year <= 9999:
        raise HTTPException(400, f"Invalid year/month: {year}/{month}")
    return year, month
