"""
Review Insights FastAPI Application
===================================

REST API for the review analysis engine.

Endpoints:
    GET  /api/health                        - Health check
    POST /api/reviews/analysis              - Analyze posted reviews
    GET  /api/reviews/{business}/analysis   - Analyze stored reviews

Usage:
    uvicorn src.api.main:app --reload --port 8000

    Or with CLI:
    python -m src.api.main
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import os

from src.data.config import get_settings
from src.orchestrator.logging_config import configure_logging

from .models import HealthResponse
from .review_routes import router as review_router
from . import db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging(get_settings().logging)
    logger.info("Starting review insights API...")

    # Pool is optional: posted-review analysis works without a database
    db.get_pool()

    yield

    db.close_pool()
    logger.info("Review insights API stopped")


app = FastAPI(
    title="Review Insights API",
    description="Temporal, trend, cluster and seasonal analysis of customer reviews",
    version=get_settings().app_version,
    lifespan=lifespan,
)

# CORS configuration
# CORS_ORIGINS env var (comma-separated) adds origins to the local defaults
_default_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra_origins = os.getenv("CORS_ORIGINS", "")
if _extra_origins:
    _default_origins.extend(o.strip() for o in _extra_origins.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_default_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(review_router)


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Reports "degraded" rather than failing when the database is unreachable.
    """
    db_health = db.check_health()
    overall = "healthy" if db_health["status"] == "connected" else "degraded"

    return HealthResponse(
        status=overall,
        version=get_settings().app_version,
        database=db_health["status"],
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("src.api.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
