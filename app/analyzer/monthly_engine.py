"""TRENDLINE — Monthly Rollup Engine.

Groups day facts by month and produces a cumulative-by-week series
(Wk 1..Wk 5) plus month totals for every metric. Ratio metrics are computed
from the running raw sums at each step.
"""

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from app.core.calendar import month_key, month_label, shift_months
from app.core.exceptions import NoCurrentMonthDataError
from app.core.metric_registry import MetricFamily
from app.models.day_fact import DayFact
from app.models.trend_models import WEEK_COLUMNS, MonthlyTrends, MonthRollup
from app.core.logging import get_logger

logger = get_logger("analyzer.monthly")

ROW_LABELS = [
    "Current Month",
    "Last Month",
    "2 Months Ago",
    "3 Months Ago",
    "4 Months Ago",
    "5 Months Ago",
]
PRIOR_YEAR_LABEL = "Same Month PY"


def _rollup_month(key: str, days: List[DayFact], family: MetricFamily) -> MonthRollup:
    """Build one month's cumulative weekly buckets."""
    by_week: Dict[int, List[DayFact]] = defaultdict(list)
    for d in days:
        by_week[d.week_of_month].append(d)

    # Running raw sums carry through empty weeks; empty weeks still report None
    running = family.empty_sums()
    cumulative: Dict[str, Dict[str, Optional[float]]] = {
        m: {} for m in family.metric_names
    }
    for wk_num, wk in enumerate(WEEK_COLUMNS, start=1):
        week_days = by_week.get(wk_num, [])
        if not week_days:
            for m in family.metric_names:
                cumulative[m][wk] = None
            continue
        for d in week_days:
            for name in family.raw_names:
                running[name] += d.get(name)
        for m in family.metric_names:
            cumulative[m][wk] = family.value(m, running)

    totals = {m: family.value(m, running) for m in family.metric_names}
    year, month = (int(p) for p in key.split("-"))
    return MonthRollup(
        month_key=key,
        month_label=month_label(year, month),
        cumulative=cumulative,
        totals=totals,
        grand_total=totals.get(family.grand_total_metric, 0.0),
    )


def build_month_rollups(
    facts: List[DayFact], family: MetricFamily
) -> Dict[str, MonthRollup]:
    """Roll up every month present in ``facts``, keyed by 'YYYY-MM'."""
    months: Dict[str, List[DayFact]] = defaultdict(list)
    for f in facts:
        months[f.month_key].append(f)
    return {
        key: _rollup_month(key, months[key], family) for key in sorted(months)
    }


def compute_monthly_trends(
    facts: List[DayFact],
    family: MetricFamily,
    as_of: date,
) -> MonthlyTrends:
    """Current month, the five calendar months before it, and the same month PY.

    Months missing from the data are skipped rather than zero-filled.
    """
    rollups = build_month_rollups(facts, family)
    current_key = month_key(as_of)
    if current_key not in rollups:
        raise NoCurrentMonthDataError(current_key)

    rows: List[MonthRollup] = []
    for offset, label in enumerate(ROW_LABELS):
        year, month = shift_months(as_of.year, as_of.month, -offset)
        rollup = rollups.get(f"{year}-{month:02d}")
        if rollup is not None:
            rows.append(rollup.with_label(label))

    py = rollups.get(f"{as_of.year - 1}-{as_of.month:02d}")
    if py is not None:
        rows.append(py.with_label(PRIOR_YEAR_LABEL))

    logger.info(
        f"Built {len(rows)} monthly rows from {len(rollups)} months",
        extra={"family": family.name},
    )
    return MonthlyTrends(months=rows)
