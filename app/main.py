"""
Pipeline Tracker — sales opportunity tracking and dashboard metrics.

Application entry point: lifespan, error handlers and router mounts.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import SessionLocal, create_tables
from app.logging_config import setup_logging
from app.routers import dashboard, opportunities
from app.schemas.errors import ErrorResponse


# --- App Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    create_tables()
    logger.info("tables_ready")
    if settings.seed_sample_data:
        from app.services.opportunity_store import SqlOpportunityStore, seed_sample_data

        db = SessionLocal()
        try:
            seed_sample_data(SqlOpportunityStore(db))
        finally:
            db.close()
    yield


# --- FastAPI App ---
app = FastAPI(title="Pipeline Tracker", version="1.0.0", lifespan=lifespan)


# --- Error Handlers ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error("HTTP {} on {}: {}", exc.status_code, request.url.path, exc.detail)
    else:
        logger.warning("HTTP {} on {}: {}", exc.status_code, request.url.path, exc.detail)
    body = ErrorResponse(error=str(exc.detail), status_code=exc.status_code, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    detail = [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.warning("Validation failed on {}: {} error(s)", request.url.path, len(detail))
    body = ErrorResponse(error="Validation error", status_code=422, path=request.url.path, detail=detail)
    return JSONResponse(status_code=422, content=body.model_dump())


# --- Routers ---
app.include_router(opportunities.router)
app.include_router(dashboard.router)


@app.get("/health")
def health():
    return {"status": "ok"}
