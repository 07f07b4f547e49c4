"""
conftest.py — Shared Test Fixtures for the Pipeline Tracker

Provides an in-memory SQLite database, a FastAPI TestClient wired to it,
and a factory for persisted opportunities.

Business Rules:
- All tests run against an isolated in-memory DB
- Each test function gets fresh tables (created and dropped per test)

Called by: all test files via pytest autodiscovery
Depends on: app.models (Base), app.database (get_db)
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"  # Must be set before importing app modules
os.environ["SEED_SAMPLE_DATA"] = "false"

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base, Opportunity
from app.services.opportunity_store import SqlOpportunityStore

# ── In-memory SQLite engine ──────────────────────────────────────────

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def store(db_session: Session) -> SqlOpportunityStore:
    return SqlOpportunityStore(db_session)


@pytest.fixture()
def make_opportunity(store: SqlOpportunityStore):
    """Factory: persist an opportunity with defaults applied by the store."""

    def _make(name: str = "Acme Corp", created_at: date | None = None, **fields) -> Opportunity:
        return store.create({"name": name, **fields}, created_at=created_at)

    return _make


@pytest.fixture()
def client(db_session: Session) -> TestClient:
    """FastAPI TestClient with get_db overridden to use the test session."""
    from app.database import get_db
    from app.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
