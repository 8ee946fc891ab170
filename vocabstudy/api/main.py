"""
FastAPI application for the vocab study engine.

Provides REST API for:
- Study lists (weakest retention first)
- Answer checking with fuzzy matching
- Per-item stats and per-person progress profiles
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from vocabstudy import __version__
from vocabstudy.api.routers import study_router
from vocabstudy.db.database import get_engine, init_db
from vocabstudy.errors import Conflict, InvalidArgument, NotFound, StorageUnavailable, StudyError
from vocabstudy.log import configure_logging

settings = get_settings()

ERROR_STATUS: dict[type[StudyError], int] = {
    NotFound: 404,
    InvalidArgument: 422,
    Conflict: 409,
    StorageUnavailable: 503,
}


def _check_database_health() -> tuple[str, str | None]:
    """
    Check database connectivity.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok", None
    except SQLAlchemyError as e:
        return "error", str(e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    configure_logging(settings)
    logger.info("Starting vocab study service...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    logger.info("Shutting down vocab study service...")


app = FastAPI(
    title="Vocab Study",
    description="Fuzzy-matched vocabulary drilling with per-item retention tracking.",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StudyError)
async def study_error_handler(request: Request, exc: StudyError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 500)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status, content={"detail": str(exc)})


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "vocab-study",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with an actual database round trip."""
    db_status, db_error = _check_database_health()

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "components": {"database": db_status},
        "config": {
            "match_mode": settings.match_mode,
            "accept_threshold": settings.accept_threshold,
            "default_study_limit": settings.default_study_limit,
        },
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


# ========================================
# Include Routers
# ========================================

app.include_router(study_router.router, prefix="/api/study", tags=["Study"])
