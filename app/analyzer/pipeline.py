"""TRENDLINE — Rollup Pipeline Orchestrator.

Runs the full data flow:
  raw rows → normalize → day facts → run engines → TrendsReport

The engine half is a pure function of (facts, family, as_of): no clock,
no I/O, no shared state, so two calls with the same inputs give the same
report. The only I/O (fetching rows) lives in ``fetch_and_build``.
"""

from datetime import date
from typing import Iterable, List, Optional

from app.config import settings
from app.connectors.sheets.client import SheetsClient
from app.connectors.sheets.transformer import Row, normalize_rows
from app.core.calendar import iso_week
from app.core.exceptions import NoDataError
from app.core.metric_registry import MetricFamily
from app.models.day_fact import DayFact
from app.models.trend_models import TrendsReport
from app.analyzer.kpi_engine import compute_kpis
from app.analyzer.monthly_engine import compute_monthly_trends
from app.analyzer.weekly_engine import compute_weekly_trends
from app.analyzer.yoy_engine import compute_monthly_yoy, compute_weekly_yoy
from app.core.logging import get_logger, timed

logger = get_logger("analyzer.pipeline")


def run_rollups(
    facts: List[DayFact],
    family: MetricFamily,
    as_of: date,
    first_weekday: Optional[str] = None,
    yoy_min_year: Optional[int] = None,
    yoy_year_count: Optional[int] = None,
) -> TrendsReport:
    """Build every view for ``family`` from ``facts`` as of ``as_of``."""
    if not facts:
        raise NoDataError(f"No {family.name} data found")

    first_weekday = first_weekday or settings.week_start
    min_year = yoy_min_year if yoy_min_year is not None else settings.yoy_min_year
    year_count = yoy_year_count or settings.yoy_year_count
    facts = sorted(facts, key=lambda f: f.date)

    with timed(
        logger,
        f"Rollups complete for {family.name} as of {as_of.isoformat()}",
        family=family.name,
        row_count=len(facts),
    ):
        report = TrendsReport(
            monthly_trends=compute_monthly_trends(facts, family, as_of),
            weekly_trends=compute_weekly_trends(facts, family, as_of, first_weekday),
            weekly_yoy=compute_weekly_yoy(facts, family, as_of, min_year, year_count),
            monthly_yoy=compute_monthly_yoy(facts, family, as_of, min_year, year_count),
            kpi=compute_kpis(facts, family, as_of, first_weekday),
            current_week=iso_week(as_of),
            current_month=as_of.month,
        )
    return report


def build_trends_from_rows(
    rows: Iterable[Row],
    family: MetricFamily,
    as_of: date,
    skip_header: bool = False,
    **options,
) -> TrendsReport:
    """Normalize raw rows, then run the engine over them."""
    facts = normalize_rows(rows, family, skip_header=skip_header)
    return run_rollups(facts, family, as_of, **options)


async def fetch_and_build(
    family: MetricFamily,
    as_of: date,
    client: Optional[SheetsClient] = None,
) -> TrendsReport:
    """Fetch the family's sheet range and build its report."""
    owns_client = client is None
    client = client or SheetsClient()
    try:
        rows = await client.fetch_values(family.sheet_range)
    finally:
        if owns_client:
            await client.close()

    # Header row plus at least one data row
    if len(rows) < 2:
        raise NoDataError(f"No {family.name} data found")
    return build_trends_from_rows(rows, family, as_of, skip_header=True)
