"""
routers/opportunities.py — Opportunity CRUD Routes

Thin create/read/update/delete surface over the opportunity store. All
business defaults and deal-flag syncing live in services/opportunity_store.py.

Business Rules:
- POST applies defaults (Referrals / Unknown / N/A / Open / "0")
- PATCH is partial: only fields present in the body change
- id and created_at can't be changed
- Unknown ids are a 404

Called by: main.py (router mount)
Depends on: dependencies, schemas/opportunity.py, services/opportunity_store.py
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from loguru import logger

from ..dependencies import get_store, validate_year_month
from ..schemas.opportunity import LeadSource, OpportunityCreate, OpportunityRecord, OpportunityUpdate
from ..services.dashboard_service import filter_opportunities
from ..services.opportunity_store import OpportunityStore

router = APIRouter(tags=["opportunities"])


def _to_record(opp) -> OpportunityRecord:
    return OpportunityRecord.model_validate(opp)


@router.get("/api/opportunities", response_model=list[OpportunityRecord])
def list_opportunities(
    lead_source: LeadSource | None = Query(None),
    salesperson: str | None = Query(None),
    store: OpportunityStore = Depends(get_store),
):
    opps = filter_opportunities(store.get_all(), lead_source, salesperson)
    return [_to_record(o) for o in opps]


@router.get("/api/opportunities/month/{year}/{month}", response_model=list[OpportunityRecord])
def list_opportunities_for_month(
    year: int,
    month: int,
    store: OpportunityStore = Depends(get_store),
):
    validate_year_month(year, month)
    return [_to_record(o) for o in store.get_created_in_month(year, month)]


@router.get("/api/opportunities/{opportunity_id}", response_model=OpportunityRecord)
def get_opportunity(opportunity_id: int, store: OpportunityStore = Depends(get_store)):
    opp = store.get(opportunity_id)
    if not opp:
        raise HTTPException(404, "Opportunity not found")
    return _to_record(opp)


@router.post("/api/opportunities", response_model=OpportunityRecord, status_code=201)
def create_opportunity(payload: OpportunityCreate, store: OpportunityStore = Depends(get_store)):
    opp = store.create(payload.model_dump())
    logger.info("Opportunity created", opportunity_id=opp.id, salesperson=opp.salesperson)
    return _to_record(opp)


@router.patch("/api/opportunities/{opportunity_id}", response_model=OpportunityRecord)
def update_opportunity(
    opportunity_id: int,
    payload: OpportunityUpdate,
    store: OpportunityStore = Depends(get_store),
):
    opp = store.update(opportunity_id, payload.model_dump(exclude_unset=True))
    if not opp:
        raise HTTPException(404, "Opportunity not found")
    return _to_record(opp)


@router.delete("/api/opportunities/{opportunity_id}", status_code=204)
def delete_opportunity(opportunity_id: int, store: OpportunityStore = Depends(get_store)):
    if not store.delete(opportunity_id):
        raise HTTPException(404, "Opportunity not found")
    logger.info("Opportunity deleted", opportunity_id=opportunity_id)
    return Response(status_code=204)
