"""Tests for app/connectors/sheets/transformer.py row parsing and normalization."""

from datetime import date

import pytest

from app.connectors.sheets.transformer import (
    normalize_row,
    normalize_rows,
    parse_date,
    parse_number,
)
from app.core.metric_registry import SALES_FAMILY


def ads_sheet_row(day: str, clicks="", impressions="", spend="", conversions=""):
    """A 47-column 'Summary: Day' row with the ads columns filled in."""
    row = [""] * 47
    row[0] = day
    row[41] = clicks
    row[42] = impressions
    row[45] = spend
    row[46] = conversions
    return row


# ── Cell parsing ─────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "cell,expected",
    [
        ("$1,234.50", 1234.5),
        ("12%", 12.0),
        ("  42 ", 42.0),
        ("0", 0.0),
        (7, 7.0),
        (2.5, 2.5),
    ],
)
def test_parse_number(cell, expected):
    assert parse_number(cell) == expected


@pytest.mark.parametrize(
    "cell",
    ["", "   ", "n/a", "—", None, "$", "nan", "NaN", "inf", "Infinity", "-inf",
     "1_000", "1e999", float("nan"), float("inf")],
)
def test_parse_number_absent(cell):
    assert parse_number(cell) is None


def test_parse_date_formats():
    assert parse_date("2/9/2026") == date(2026, 2, 9)
    assert parse_date("12/31/2025") == date(2025, 12, 31)
    assert parse_date("2026-02-09") == date(2026, 2, 9)


@pytest.mark.parametrize("cell", ["2/30/2026", "Total", "", None, "2026/02/09", "13/1/2026"])
def test_parse_date_rejects_garbage(cell):
    assert parse_date(cell) is None


# ── Single rows ──────────────────────────────────────────────────────


def test_normalize_sheet_row(ads):
    fact = normalize_row(
        ads_sheet_row("10/14/2026", "1,200", "30,000", "$612.40", "18"), ads
    )
    assert fact.date == date(2026, 10, 14)
    assert fact.month_key == "2026-10"
    assert fact.week_of_month == 2
    assert fact.metrics == {
        "conversions": 18.0,
        "impressions": 30000.0,
        "clicks": 1200.0,
        "spend": 612.4,
    }


def test_normalize_row_blank_cells_count_as_zero(ads):
    fact = normalize_row(ads_sheet_row("2026-10-14", clicks="5"), ads)
    assert fact.get("clicks") == 5.0
    assert fact.get("spend") == 0.0


def test_normalize_row_without_any_metric_is_dropped(ads):
    assert normalize_row(ads_sheet_row("2026-10-14"), ads) is None


def test_normalize_row_bad_date_is_dropped(ads):
    assert normalize_row(ads_sheet_row("Grand Total", "5", "10", "1", "1"), ads) is None
    assert normalize_row([], ads) is None


def test_normalize_short_row(ads):
    # Sheets trims trailing empty cells
    assert normalize_row(["2026-10-14", "1"], ads) is None


def test_normalize_row_non_finite_cells_are_absent(ads):
    assert normalize_row({"date": "2026-10-01", "clicks": "NaN", "spend": "inf"}, ads) is None
    fact = normalize_row({"date": "2026-10-01", "clicks": "nan", "spend": "$4"}, ads)
    assert fact.metrics["clicks"] == 0.0
    assert fact.metrics["spend"] == 4.0


def test_normalize_mapping_row(ads):
    fact = normalize_row({"date": "10/1/2026", "clicks": "10", "spend": "$5"}, ads)
    assert fact.date == date(2026, 10, 1)
    assert fact.get("clicks") == 10.0
    assert fact.get("spend") == 5.0


def test_traffic_total_is_composite(traffic):
    row = [""] * 64
    row[0] = "2026-10-14"
    row[60], row[61], row[62], row[63] = "100", "50", "", "25"
    fact = normalize_row(row, traffic)
    assert fact.get("referral") == 0.0
    assert fact.get("total") == 175.0


def test_sales_columns():
    row = ["3/2/2026", "4", "1", "0", "2", "1", "$1,000", "3", "$450", "$1,450"]
    fact = normalize_row(row, SALES_FAMILY)
    assert fact.get("direct_qty") == 4.0
    assert fact.get("direct_revenue") == 1000.0
    assert fact.get("total_gross_revenue") == 1450.0


# ── Batches ──────────────────────────────────────────────────────────


def test_normalize_rows_skips_header_and_garbage(ads):
    rows = [
        ["Date"] + ["Clicks"] * 46,
        ads_sheet_row("10/2/2026", clicks="20"),
        ads_sheet_row("not a date", clicks="999"),
        ads_sheet_row("10/1/2026", clicks="10"),
        ads_sheet_row("10/3/2026"),
    ]
    facts = normalize_rows(rows, ads, skip_header=True)
    assert [f.date for f in facts] == [date(2026, 10, 1), date(2026, 10, 2)]


def test_normalize_rows_merges_same_day(ads):
    rows = [
        {"date": "2026-10-01", "clicks": "10", "spend": "4"},
        {"date": "10/1/2026", "clicks": "5", "spend": "1"},
    ]
    facts = normalize_rows(rows, ads)
    assert len(facts) == 1
    assert facts[0].get("clicks") == 15.0
    assert facts[0].get("spend") == 5.0
