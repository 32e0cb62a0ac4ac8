"""TRENDLINE — FastAPI Application Entry Point.

Time-series rollups for the marketing dashboard.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.trend_routes import router as trend_router
from app.core.logging import get_logger
from app.core.metric_registry import FAMILIES

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the serving configuration; warn when GET /trends cannot fetch."""
    logger.info(
        f"Serving families {sorted(FAMILIES)} in {settings.report_timezone}, "
        f"weeks starting {settings.week_start}"
    )
    if not settings.sheet_id:
        logger.warning("SHEET_ID is not set; GET /trends will return 502")
    yield


app = FastAPI(
    title="TRENDLINE",
    description="Monthly, weekly, year-over-year and KPI rollups over daily marketing metrics.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(trend_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "trendline",
        "version": "1.0.0",
    }
