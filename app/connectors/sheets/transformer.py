"""TRENDLINE — Sheet Row → DayFact Normalizer.

Converts raw spreadsheet rows into the universal DayFact schema using the
metric family for column lookup. Rows that cannot be read are dropped, never
raised: one garbage row must not sink the whole batch.
"""

import math
import re
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from app.core.metric_registry import MetricFamily
from app.models.day_fact import DayFact
from app.core.logging import get_logger

logger = get_logger("sheets.transformer")

Row = Union[Sequence[Any], Mapping[str, Any]]

_STRIP_CHARS = re.compile(r"[$,%\s]")
_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def parse_number(value: Any) -> Optional[float]:
    """Parse a sheet cell like "$1,234.50" or "12%". Blank or junk → None.

    Only plain decimal text is accepted, so "nan", "inf" and "1_000" are junk
    even though ``float()`` would take them.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        cleaned = _STRIP_CHARS.sub("", str(value))
        if not _NUMBER.match(cleaned):
            return None
        result = float(cleaned)
    return result if math.isfinite(result) else None


def parse_date(value: Any) -> Optional[date]:
    """Parse M/D/YYYY or YYYY-MM-DD. Anything else → None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None
    text = str(value).strip()
    try:
        m = _US_DATE.match(text)
        if m:
            month, day, year = (int(g) for g in m.groups())
            return date(year, month, day)
        m = _ISO_DATE.match(text)
        if m:
            year, month, day = (int(g) for g in m.groups())
            return date(year, month, day)
    except ValueError:
        # e.g. 2/30/2026
        return None
    return None


def _cell(row: Row, family: MetricFamily, metric: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(metric)
    index = family.columns.get(metric)
    if index is None or index >= len(row):
        return None
    return row[index]


def _date_cell(row: Row) -> Any:
    if isinstance(row, Mapping):
        return row.get("date")
    return row[0] if row else None


def normalize_row(row: Row, family: MetricFamily) -> Optional[DayFact]:
    """Turn one raw row into a DayFact, or None if it carries no usable data."""
    d = parse_date(_date_cell(row))
    if d is None:
        return None

    metrics: Dict[str, float] = {}
    has_data = False
    for name in family.raw_names:
        if name in family.composites:
            continue
        value = parse_number(_cell(row, family, name))
        if value is not None:
            has_data = True
        metrics[name] = max(value or 0.0, 0.0)

    if not has_data:
        return None

    for name, parts in family.composites.items():
        metrics[name] = sum(metrics.get(p, 0.0) for p in parts)

    return DayFact.from_date(d, metrics)


def normalize_rows(
    rows: Iterable[Row],
    family: MetricFamily,
    skip_header: bool = False,
) -> List[DayFact]:
    """Normalize a batch of rows into date-sorted DayFacts.

    Several rows for the same date are summed into one fact.
    """
    merged: Dict[date, Dict[str, float]] = {}
    total = 0
    dropped = 0

    for i, row in enumerate(rows):
        if skip_header and i == 0:
            continue
        total += 1
        fact = normalize_row(row, family)
        if fact is None:
            dropped += 1
            continue
        sums = merged.setdefault(fact.date, defaultdict(float))
        for name, value in fact.metrics.items():
            sums[name] += value

    facts = [DayFact.from_date(d, merged[d]) for d in sorted(merged)]

    if dropped:
        logger.debug(f"Dropped {dropped} of {total} {family.name} rows without usable data")
    logger.info(
        f"Normalized {total} {family.name} rows into {len(facts)} day facts",
        extra={"family": family.name, "row_count": total},
    )
    return facts
