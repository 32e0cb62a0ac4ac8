"""TRENDLINE — KPI Engine.

Computes headline KPIs for the as-of date against prior-year windows:
yesterday and this-week are weekday-aligned, MTD and YTD are calendar-aligned.
Every window value is computed from the window's raw sums.
"""

from datetime import date, timedelta
from typing import Dict, List

from app.core.calendar import closest_weekday_last_year, shift_years, week_start
from app.core.metric_registry import MetricFamily
from app.models.day_fact import DayFact
from app.models.trend_models import KPIComparison, MetricKPI
from app.core.logging import get_logger

logger = get_logger("analyzer.kpi")


def _sum_range(
    facts: List[DayFact], family: MetricFamily, start: date, end: date
) -> Dict[str, float]:
    """Raw metric sums over the inclusive window [start, end]."""
    sums = family.empty_sums()
    for f in facts:
        if start <= f.date <= end:
            for name in family.raw_names:
                sums[name] += f.get(name)
    return sums


def change_pct(value: float, py: float) -> float:
    """Percent change rounded to one decimal; 0 against a zero baseline."""
    if py == 0:
        return 0.0
    return round((value - py) / py * 100, 1)


def _compare(value: float, py: float) -> KPIComparison:
    return KPIComparison(
        value=value, py=py, change_pct=change_pct(value, py), diff=value - py
    )


def compute_kpis(
    facts: List[DayFact],
    family: MetricFamily,
    as_of: date,
    first_weekday: str = "sun",
) -> Dict[str, MetricKPI]:
    """KPI block for every metric in the family."""
    yesterday = as_of - timedelta(days=1)
    yesterday_py = closest_weekday_last_year(yesterday)

    # This week vs the aligned PY week, same number of elapsed days
    this_week_start = week_start(as_of, first_weekday)
    py_week_start = closest_weekday_last_year(this_week_start)
    py_week_end = py_week_start + (as_of - this_week_start)

    mtd_start = as_of.replace(day=1)
    py_mtd_start = shift_years(mtd_start, -1)
    py_as_of = shift_years(as_of, -1)

    ytd_start = as_of.replace(month=1, day=1)
    py_ytd_start = shift_years(ytd_start, -1)

    windows = {
        "today": _sum_range(facts, family, as_of, as_of),
        "yesterday": _sum_range(facts, family, yesterday, yesterday),
        "yesterday_py": _sum_range(facts, family, yesterday_py, yesterday_py),
        "this_week": _sum_range(facts, family, this_week_start, as_of),
        "this_week_py": _sum_range(facts, family, py_week_start, py_week_end),
        "mtd": _sum_range(facts, family, mtd_start, as_of),
        "mtd_py": _sum_range(facts, family, py_mtd_start, py_as_of),
        "ytd": _sum_range(facts, family, ytd_start, as_of),
        "ytd_py": _sum_range(facts, family, py_ytd_start, py_as_of),
    }

    kpis: Dict[str, MetricKPI] = {}
    for m in family.metric_names:
        v = {name: family.value(m, sums) for name, sums in windows.items()}
        kpis[m] = MetricKPI(
            today=v["today"],
            yesterday=_compare(v["yesterday"], v["yesterday_py"]),
            this_week=_compare(v["this_week"], v["this_week_py"]),
            mtd=_compare(v["mtd"], v["mtd_py"]),
            ytd=_compare(v["ytd"], v["ytd_py"]),
        )

    logger.info(
        f"Computed {len(kpis)} KPIs as of {as_of.isoformat()} "
        f"(yesterday PY {yesterday_py.isoformat()}, week PY {py_week_start.isoformat()})",
        extra={"family": family.name},
    )
    return kpis
