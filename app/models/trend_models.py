"""TRENDLINE — Rollup Output Models (Versioned).

Immutable value objects produced by the analyzer engines. ``to_payload()``
renders the stable JSON shape consumed by the dashboard; that shape is the
same for every metric family, only the metric keys differ.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

WEEK_COLUMNS = ["Wk 1", "Wk 2", "Wk 3", "Wk 4", "Wk 5"]


class _Frozen(BaseModel):
    model_config = {"frozen": True}


# ─────────────────────────────────────────────
# MONTHLY TRENDS
# ─────────────────────────────────────────────


class MonthRollup(_Frozen):
    """One month: cumulative-by-week series and month totals per metric."""

    month_key: str
    month_label: str
    row_label: str = ""
    cumulative: Dict[str, Dict[str, Optional[float]]]  # metric → {"Wk 1": v}
    totals: Dict[str, float]
    grand_total: float = 0.0

    def with_label(self, row_label: str) -> "MonthRollup":
        return self.model_copy(update={"row_label": row_label})

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "month_key": self.month_key,
            "month_label": self.month_label,
            "row_label": self.row_label,
        }
        for metric, series in self.cumulative.items():
            payload[metric] = dict(series)
            payload[f"{metric}_total"] = self.totals[metric]
        payload["grand_total"] = self.grand_total
        return payload


class MonthlyTrends(_Frozen):
    months: List[MonthRollup]
    weeks: List[str] = WEEK_COLUMNS

    def to_payload(self) -> Dict[str, Any]:
        return {
            "months": [m.to_payload() for m in self.months],
            "weeks": list(self.weeks),
        }


# ─────────────────────────────────────────────
# WEEKLY TRENDS
# ─────────────────────────────────────────────


class WeekTrendRow(_Frozen):
    """Day-by-day running total for one week."""

    week_label: str
    week_start: str  # "Feb 08"
    daily_cumulative: Dict[str, Optional[float]]  # "Sun" → value | None
    week_total: Optional[float]


class WeeklyTrends(_Frozen):
    data: Dict[str, List[WeekTrendRow]]
    days: List[str]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "data": {
                metric: [row.model_dump() for row in rows]
                for metric, rows in self.data.items()
            },
            "days": list(self.days),
        }


# ─────────────────────────────────────────────
# YEAR OVER YEAR
# ─────────────────────────────────────────────


class YoYRow(_Frozen):
    """One week or month slot with a value per year."""

    period_num: int
    label: str
    values: Dict[int, Optional[float]]  # year → value | None


class YoYTable(_Frozen):
    """Positionally aligned per-year comparison (1..52 weeks or 1..12 months)."""

    period: str  # "week" | "month"
    years: List[int]
    data: Dict[str, List[YoYRow]]

    def to_payload(self) -> Dict[str, List[Dict[str, Any]]]:
        num_key = f"{self.period}_num"
        label_key = f"{self.period}_label"
        out: Dict[str, List[Dict[str, Any]]] = {}
        for metric, rows in self.data.items():
            out[metric] = []
            for row in rows:
                entry: Dict[str, Any] = {num_key: row.period_num, label_key: row.label}
                for year in self.years:
                    entry[f"y{year}"] = row.values.get(year)
                out[metric].append(entry)
        return out


# ─────────────────────────────────────────────
# KPIs
# ─────────────────────────────────────────────


class KPIComparison(_Frozen):
    """A window value against its prior-year equivalent."""

    value: float
    py: float
    change_pct: float  # one decimal; 0 when py is 0
    diff: float


class MetricKPI(_Frozen):
    today: float
    yesterday: KPIComparison
    this_week: KPIComparison
    mtd: KPIComparison
    ytd: KPIComparison


# ─────────────────────────────────────────────
# FULL REPORT
# ─────────────────────────────────────────────


class TrendsReport(_Frozen):
    """Everything the dashboard needs for one metric family."""

    monthly_trends: MonthlyTrends
    weekly_trends: WeeklyTrends
    weekly_yoy: YoYTable
    monthly_yoy: YoYTable
    kpi: Dict[str, MetricKPI]
    current_week: int
    current_month: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "monthly_trends": self.monthly_trends.to_payload(),
            "weekly_trends": self.weekly_trends.to_payload(),
            "weekly_yoy": self.weekly_yoy.to_payload(),
            "monthly_yoy": self.monthly_yoy.to_payload(),
            "kpi": {metric: k.model_dump() for metric, k in self.kpi.items()},
            "current_week": self.current_week,
            "current_month": self.current_month,
        }
