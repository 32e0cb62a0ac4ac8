"""
Pytest configuration and shared fixtures for the TRENDLINE test suite.

Every engine is a pure function of (facts, family, as_of), so fixtures pin
the as-of date instead of reading the clock.
"""

from datetime import date, timedelta
from typing import Dict, List

import pytest

from app.core.metric_registry import ADS_FAMILY, TRAFFIC_FAMILY
from app.models.day_fact import DayFact

# Wednesday; the Sunday-start week begins Sun Oct 11
AS_OF = date(2026, 10, 14)


def fact(d: date, **metrics: float) -> DayFact:
    return DayFact.from_date(d, metrics)


def daily_series(start: date, values: List[Dict[str, float]]) -> List[DayFact]:
    """One fact per consecutive day starting at ``start``."""
    return [fact(start + timedelta(days=i), **v) for i, v in enumerate(values)]


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def ads():
    return ADS_FAMILY


@pytest.fixture
def traffic():
    return TRAFFIC_FAMILY


@pytest.fixture
def make_fact():
    return fact


@pytest.fixture
def ads_history() -> List[DayFact]:
    """Daily ads data from Jan 1, 2024 through the as-of date.

    Volume varies by weekday so ratio metrics differ from their daily mean.
    """
    facts = []
    d = date(2024, 1, 1)
    while d <= AS_OF:
        clicks = 10 + d.weekday() * 5
        facts.append(
            fact(
                d,
                clicks=clicks,
                impressions=clicks * 20,
                spend=clicks * (0.5 + d.weekday() * 0.1),
                conversions=d.weekday() % 3,
            )
        )
        d += timedelta(days=1)
    return facts
