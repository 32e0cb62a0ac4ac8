"""TRENDLINE — Weekly Trend Engine.

Day-by-day running totals for the current week, the five weeks before it,
and the same week last year. Days after the as-of date are None (not yet
known); a day that happened with zero activity is 0.
"""

from datetime import date, timedelta
from typing import Dict, List, Optional

from app.core.calendar import (
    closest_weekday_last_year,
    short_date_label,
    week_start,
    weekday_labels,
)
from app.core.metric_registry import MetricFamily
from app.models.day_fact import DayFact
from app.models.trend_models import WeeklyTrends, WeekTrendRow
from app.core.logging import get_logger

logger = get_logger("analyzer.weekly")

WEEK_LABELS = [
    "Current Week",
    "Last Week",
    "2 Weeks Ago",
    "3 Weeks Ago",
    "4 Weeks Ago",
    "5 Weeks Ago",
]
PRIOR_YEAR_LABEL = "Same Week LY"


def _week_rows(
    start: date,
    label: str,
    by_date: Dict[date, DayFact],
    family: MetricFamily,
    as_of: date,
    day_names: List[str],
) -> Dict[str, WeekTrendRow]:
    """One WeekTrendRow per metric for the 7 days from ``start``."""
    running = family.empty_sums()
    seen = False
    daily: Dict[str, Dict[str, Optional[float]]] = {m: {} for m in family.metric_names}

    for offset, day_name in enumerate(day_names):
        day = start + timedelta(days=offset)
        if day > as_of:
            for m in family.metric_names:
                daily[m][day_name] = None
            continue

        fact = by_date.get(day)
        if fact is not None:
            seen = True
            for name in family.raw_names:
                running[name] += fact.get(name)

        # A past day without a row repeats the running total once the week has data
        for m in family.metric_names:
            daily[m][day_name] = family.value(m, running) if seen else None

    return {
        m: WeekTrendRow(
            week_label=label,
            week_start=short_date_label(start),
            daily_cumulative=daily[m],
            week_total=family.value(m, running) if seen else None,
        )
        for m in family.metric_names
    }


def compute_weekly_trends(
    facts: List[DayFact],
    family: MetricFamily,
    as_of: date,
    first_weekday: str = "sun",
) -> WeeklyTrends:
    """Six trailing weeks plus Same Week LY, per metric."""
    by_date = {f.date: f for f in facts}
    day_names = weekday_labels(first_weekday)
    current_start = week_start(as_of, first_weekday)

    starts = [
        (current_start - timedelta(weeks=w), label)
        for w, label in enumerate(WEEK_LABELS)
    ]
    starts.append((closest_weekday_last_year(current_start), PRIOR_YEAR_LABEL))

    data: Dict[str, List[WeekTrendRow]] = {m: [] for m in family.metric_names}
    for start, label in starts:
        rows = _week_rows(start, label, by_date, family, as_of, day_names)
        for m in family.metric_names:
            data[m].append(rows[m])

    logger.info(
        f"Built weekly trends for week of {current_start.isoformat()}",
        extra={"family": family.name},
    )
    return WeeklyTrends(data=data, days=day_names)
