"""TRENDLINE — Year-over-Year Engine.

Aggregates raw sums per (year, ISO week) and per (year, month), then derives
ratio metrics from the aggregated sums. Tables always list every slot
(W1..W52, Jan..Dec) so the dashboard can line years up positionally.
"""

from collections import defaultdict
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from app.core.calendar import MONTH_NAMES
from app.core.metric_registry import MetricFamily
from app.models.day_fact import DayFact
from app.models.trend_models import YoYRow, YoYTable
from app.core.logging import get_logger

logger = get_logger("analyzer.yoy")

WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12

PeriodSums = Dict[Tuple[int, int], Dict[str, float]]


def yoy_years(as_of: date, min_year: int, count: int) -> List[int]:
    """The ``count`` most recent years up to as_of's year, not before ``min_year``."""
    first = max(min_year, as_of.year - count + 1)
    return list(range(first, as_of.year + 1))


def _aggregate(
    facts: List[DayFact],
    family: MetricFamily,
    min_year: int,
    key: Callable[[DayFact], Tuple[int, int]],
) -> PeriodSums:
    sums: PeriodSums = {}
    for f in facts:
        k = key(f)
        if k[0] < min_year:
            continue
        bucket = sums.setdefault(k, defaultdict(float))
        for name in family.raw_names:
            bucket[name] += f.get(name)
    return sums


def aggregate_by_iso_week(
    facts: List[DayFact], family: MetricFamily, min_year: int
) -> PeriodSums:
    """Raw sums keyed by (ISO year, ISO week)."""
    return _aggregate(facts, family, min_year, lambda f: (f.iso_year, f.iso_week))


def aggregate_by_month(
    facts: List[DayFact], family: MetricFamily, min_year: int
) -> PeriodSums:
    """Raw sums keyed by (calendar year, month)."""
    return _aggregate(facts, family, min_year, lambda f: (f.year, f.month))


def _build_table(
    period: str,
    sums: PeriodSums,
    family: MetricFamily,
    years: List[int],
    slots: int,
    label: Callable[[int], str],
) -> YoYTable:
    data: Dict[str, List[YoYRow]] = {}
    for metric in family.metric_names:
        rows = []
        for n in range(1, slots + 1):
            values: Dict[int, Optional[float]] = {}
            for year in years:
                bucket = sums.get((year, n))
                values[year] = None if bucket is None else family.value(metric, bucket)
            rows.append(YoYRow(period_num=n, label=label(n), values=values))
        data[metric] = rows
    return YoYTable(period=period, years=years, data=data)


def compute_weekly_yoy(
    facts: List[DayFact],
    family: MetricFamily,
    as_of: date,
    min_year: int,
    year_count: int,
) -> YoYTable:
    """52 ISO-week rows per metric, one column per year."""
    years = yoy_years(as_of, min_year, year_count)
    sums = aggregate_by_iso_week(facts, family, min_year)
    table = _build_table(
        "week", sums, family, years, WEEKS_PER_YEAR, lambda n: f"W{n}"
    )
    logger.info(
        f"Built weekly YoY for {years} from {len(sums)} populated weeks",
        extra={"family": family.name},
    )
    return table


def compute_monthly_yoy(
    facts: List[DayFact],
    family: MetricFamily,
    as_of: date,
    min_year: int,
    year_count: int,
) -> YoYTable:
    """12 calendar-month rows per metric, one column per year."""
    years = yoy_years(as_of, min_year, year_count)
    sums = aggregate_by_month(facts, family, min_year)
    return _build_table(
        "month", sums, family, years, MONTHS_PER_YEAR, lambda n: MONTH_NAMES[n - 1]
    )
