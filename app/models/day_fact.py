"""TRENDLINE — Normalized Daily Fact (Universal Schema).

Every source row normalizes into this format. The rollup engines only ever
see DayFacts, so adding a source requires zero engine changes.
"""

import datetime
from typing import Dict, Mapping

from pydantic import BaseModel

from app.core.calendar import iso_week, iso_year, month_key, week_of_month


class DayFact(BaseModel):
    """One calendar day of raw additive metrics plus calendar fields."""

    model_config = {"frozen": True}

    date: datetime.date
    year: int
    month: int
    month_key: str  # "2026-02"
    day_of_month: int
    week_of_month: int  # 1-5
    iso_year: int
    iso_week: int  # 1-53
    metrics: Dict[str, float] = {}

    @classmethod
    def from_date(cls, d: datetime.date, metrics: Mapping[str, float]) -> "DayFact":
        """Build a fact, deriving every calendar field from ``d``."""
        return cls(
            date=d,
            year=d.year,
            month=d.month,
            month_key=month_key(d),
            day_of_month=d.day,
            week_of_month=week_of_month(d.day),
            iso_year=iso_year(d),
            iso_week=iso_week(d),
            metrics=dict(metrics),
        )

    def get(self, metric: str) -> float:
        return self.metrics.get(metric, 0.0)
