"""Tests for app/analyzer/yoy_engine.py weekly and monthly year-over-year tables."""

from datetime import date

import pytest

from app.analyzer.yoy_engine import (
    aggregate_by_iso_week,
    compute_monthly_yoy,
    compute_weekly_yoy,
    yoy_years,
)

from conftest import fact


def test_yoy_years_window():
    assert yoy_years(date(2026, 10, 14), 2024, 3) == [2024, 2025, 2026]
    assert yoy_years(date(2025, 3, 1), 2024, 3) == [2024, 2025]
    assert yoy_years(date(2030, 1, 1), 2024, 3) == [2028, 2029, 2030]


def test_weekly_table_always_has_52_rows(ads, as_of):
    table = compute_weekly_yoy([fact(date(2026, 1, 7), clicks=5)], ads, as_of, 2024, 3)
    rows = table.data["clicks"]
    assert len(rows) == 52
    assert [r.period_num for r in rows] == list(range(1, 53))
    assert rows[0].label == "W1"
    assert rows[51].label == "W52"
    # W2 of 2026 is the only populated slot
    assert rows[1].values == {2024: None, 2025: None, 2026: 5}
    assert rows[0].values == {2024: None, 2025: None, 2026: None}


def test_weekly_ratio_from_aggregated_sums(ads, as_of):
    # Mon/Tue of 2026-W02 with uneven volume
    facts = [
        fact(date(2026, 1, 5), clicks=10, spend=5, impressions=100),
        fact(date(2026, 1, 6), clicks=20, spend=15, impressions=100),
    ]
    table = compute_weekly_yoy(facts, ads, as_of, 2024, 3)
    assert table.data["avg_cpc"][1].values[2026] == pytest.approx(20 / 30)
    assert table.data["ctr"][1].values[2026] == pytest.approx(30 / 200)


def test_weeks_keyed_by_iso_year(ads):
    # Mon Dec 30, 2024 is 2025-W01
    sums = aggregate_by_iso_week([fact(date(2024, 12, 30), clicks=7)], ads, 2024)
    assert sums[(2025, 1)]["clicks"] == 7
    assert (2024, 1) not in sums


def test_rows_before_cutoff_are_ignored(ads, as_of):
    facts = [fact(date(2023, 6, 1), clicks=100), fact(date(2024, 6, 3), clicks=1)]
    table = compute_monthly_yoy(facts, ads, as_of, 2024, 3)
    june = table.data["clicks"][5]
    assert june.label == "Jun"
    assert june.values == {2024: 1, 2025: None, 2026: None}


def test_monthly_table_sums_and_nulls(ads, ads_history, as_of):
    table = compute_monthly_yoy(ads_history, ads, as_of, 2024, 3)
    rows = table.data["spend"]
    assert len(rows) == 12
    assert [r.label for r in rows][:3] == ["Jan", "Feb", "Mar"]

    expected_jan_2025 = sum(
        f.get("spend") for f in ads_history if f.year == 2025 and f.month == 1
    )
    assert rows[0].values[2025] == pytest.approx(expected_jan_2025)
    # November 2026 has not happened yet
    assert rows[10].values[2026] is None
    assert rows[10].values[2025] is not None


def test_payload_shape(ads, ads_history, as_of):
    weekly = compute_weekly_yoy(ads_history, ads, as_of, 2024, 3).to_payload()
    monthly = compute_monthly_yoy(ads_history, ads, as_of, 2024, 3).to_payload()

    assert set(weekly) == set(ads.metric_names)
    assert list(weekly["clicks"][0]) == ["week_num", "week_label", "y2024", "y2025", "y2026"]
    assert list(monthly["clicks"][0]) == [
        "month_num",
        "month_label",
        "y2024",
        "y2025",
        "y2026",
    ]
