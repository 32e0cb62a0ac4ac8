"""TRENDLINE — Trend API Routes."""

from datetime import date
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import settings
from app.connectors.sheets.client import SheetsAPIError
from app.core.exceptions import NoDataError
from app.core.metric_registry import FAMILIES, MetricFamily, get_family
from app.analyzer.pipeline import build_trends_from_rows, fetch_and_build
from app.core.logging import get_logger

logger = get_logger("api.trends")

router = APIRouter(tags=["Trends"])


# ── Request Models ──


class ComputeTrendsRequest(BaseModel):
    """Request body for POST /trends/{family}."""

    rows: List[Union[List[Any], Dict[str, Any]]]
    """Sheet rows (date in column 0) or objects with a "date" key plus metric names."""
    as_of: Optional[date] = None
    """Report date; defaults to today in the reporting timezone."""
    skip_header: bool = False
    """Ignore the first row (sheet header)."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "rows": [
                        {"date": "2026-10-01", "clicks": "10", "spend": "$5.00"},
                        {"date": "10/2/2026", "clicks": "20", "spend": "$15.00"},
                    ],
                    "as_of": "2026-10-02",
                }
            ]
        }
    }


# ── Helpers ──


def _resolve_family(name: str) -> MetricFamily:
    family = get_family(name)
    if family is None:
        raise HTTPException(status_code=404, detail=f"Unknown metric family '{name}'")
    return family


def _cached(payload: Dict[str, Any]) -> JSONResponse:
    max_age = settings.cache_max_age
    return JSONResponse(
        content=payload,
        headers={
            "Cache-Control": f"public, s-maxage={max_age}, stale-while-revalidate={max_age * 2}"
        },
    )


# ── Endpoints ──


@router.get("/families")
async def list_families():
    """List the metric families the engine can roll up."""
    return {
        "status": "success",
        "families": [
            {
                "name": f.name,
                "description": f.description,
                "raw_metrics": f.raw_names,
                "derived_metrics": [d.name for d in f.derived_metrics],
            }
            for f in FAMILIES.values()
        ],
    }


@router.get("/trends/{family}")
async def get_trends(
    family: str,
    as_of: Optional[date] = Query(None, description="Report date (YYYY-MM-DD)"),
):
    """Fetch the family's sheet and return monthly, weekly, YoY and KPI views."""
    fam = _resolve_family(family)
    report_date = as_of or settings.today()
    try:
        report = await fetch_and_build(fam, report_date)
    except NoDataError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SheetsAPIError as e:
        logger.error(f"Sheets fetch failed for {family}: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch {family} data")
    except Exception as e:
        logger.error(f"Trend build failed for {family}: {e}")
        raise HTTPException(
            status_code=500, detail=f"Failed to build {family} trends: {str(e)}"
        )
    return _cached(report.to_payload())


@router.post("/trends/{family}")
async def compute_trends(family: str, request: ComputeTrendsRequest):
    """Run the rollup engine over caller-supplied rows."""
    fam = _resolve_family(family)
    report_date = request.as_of or settings.today()
    try:
        report = build_trends_from_rows(
            request.rows, fam, report_date, skip_header=request.skip_header
        )
    except NoDataError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Trend build failed for {family}: {e}")
        raise HTTPException(
            status_code=500, detail=f"Failed to build {family} trends: {str(e)}"
        )
    return report.to_payload()
