"""TRENDLINE — Unified Metric Registry.

Defines the metric families the rollup engines run over. A family is the
raw additive metrics a source exposes, the ratio metrics derived from them,
and where each raw metric lives in the source sheet. When adding a new
source, register a family here; the engines need no changes.
"""

from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple


class MetricType(str, Enum):
    """How a metric is categorised."""

    VOLUME = "volume"  # Raw counts: impressions, clicks, visits
    COST = "cost"  # Monetary: spend
    REVENUE = "revenue"  # Income: revenue
    DERIVED = "derived"  # Ratio of aggregated sums: avg_cpc, ctr


class MetricDefinition:
    """Describes a single raw metric."""

    def __init__(
        self, name: str, metric_type: MetricType, unit: str = "", description: str = ""
    ):
        self.name = name
        self.metric_type = metric_type
        self.unit = unit
        self.description = description

    def __repr__(self) -> str:
        return f"<Metric {self.name} ({self.metric_type.value})>"


class DerivedMetricSpec(MetricDefinition):
    """A ratio metric computed from aggregated raw sums.

    Always evaluated on the sums of a whole window, never per day and then
    averaged.
    """

    def __init__(
        self,
        name: str,
        numerator: str,
        denominator: str,
        scale: float = 1.0,
        unit: str = "ratio",
        description: str = "",
    ):
        super().__init__(name, MetricType.DERIVED, unit, description)
        self.numerator = numerator
        self.denominator = denominator
        self.scale = scale

    def compute(self, sums: Mapping[str, float]) -> float:
        denominator = sums.get(self.denominator, 0.0)
        if denominator == 0:
            return 0.0
        return self.scale * sums.get(self.numerator, 0.0) / denominator


class MetricFamily:
    """A metric vocabulary plus the sheet layout it is read from."""

    def __init__(
        self,
        name: str,
        raw_metrics: List[MetricDefinition],
        derived_metrics: List[DerivedMetricSpec],
        columns: Dict[str, int],
        grand_total_metric: str,
        composites: Optional[Dict[str, Tuple[str, ...]]] = None,
        sheet_range: str = "",
        description: str = "",
    ):
        self.name = name
        self.raw_metrics = raw_metrics
        self.derived_metrics = derived_metrics
        self.columns = columns
        self.grand_total_metric = grand_total_metric
        self.composites = composites or {}
        self.sheet_range = sheet_range
        self.description = description
        self._derived = {d.name: d for d in derived_metrics}

    @property
    def raw_names(self) -> List[str]:
        return [m.name for m in self.raw_metrics]

    @property
    def metric_names(self) -> List[str]:
        """Raw then derived metric names, in output order."""
        return self.raw_names + [d.name for d in self.derived_metrics]

    def empty_sums(self) -> Dict[str, float]:
        return {name: 0.0 for name in self.raw_names}

    def value(self, metric: str, sums: Mapping[str, float]) -> float:
        """Raw sum or derived ratio of ``metric`` over aggregated ``sums``."""
        derived = self._derived.get(metric)
        if derived is not None:
            return derived.compute(sums)
        return sums.get(metric, 0.0)

    def __repr__(self) -> str:
        return f"<MetricFamily {self.name} ({len(self.metric_names)} metrics)>"


# ─────────────────────────────────────────────
# ADVERTISING — Google Ads daily summary sheet
# ─────────────────────────────────────────────

ADS_FAMILY = MetricFamily(
    name="ads",
    raw_metrics=[
        MetricDefinition(
            "conversions", MetricType.VOLUME, "count", "Attributed conversions"
        ),
        MetricDefinition(
            "impressions", MetricType.VOLUME, "count", "Number of times ad was shown"
        ),
        MetricDefinition("clicks", MetricType.VOLUME, "count", "Total clicks"),
        MetricDefinition("spend", MetricType.COST, "currency", "Total amount spent"),
    ],
    derived_metrics=[
        DerivedMetricSpec(
            "avg_cpc", "spend", "clicks", unit="currency", description="Cost per click"
        ),
        DerivedMetricSpec(
            "cost_per_conversion",
            "spend",
            "conversions",
            unit="currency",
            description="Cost per conversion",
        ),
        DerivedMetricSpec(
            "ctr", "clicks", "impressions", description="Clicks / Impressions"
        ),
    ],
    # AP=41 Clicks, AQ=42 Impressions, AT=45 Cost, AU=46 Conversions
    columns={"clicks": 41, "impressions": 42, "spend": 45, "conversions": 46},
    grand_total_metric="conversions",
    sheet_range="Summary: Day!A:AU",
    description="Paid search performance",
)


# ─────────────────────────────────────────────
# TRAFFIC — site sessions by source
# ─────────────────────────────────────────────

TRAFFIC_FAMILY = MetricFamily(
    name="traffic",
    raw_metrics=[
        MetricDefinition("organic", MetricType.VOLUME, "count", "Organic sessions"),
        MetricDefinition("direct", MetricType.VOLUME, "count", "Direct sessions"),
        MetricDefinition("referral", MetricType.VOLUME, "count", "Referral sessions"),
        MetricDefinition("paid", MetricType.VOLUME, "count", "Paid sessions"),
        MetricDefinition("total", MetricType.VOLUME, "count", "All sessions"),
    ],
    derived_metrics=[],
    # BI=60, BJ=61, BK=62, BL=63
    columns={"organic": 60, "direct": 61, "referral": 62, "paid": 63},
    composites={"total": ("organic", "direct", "referral", "paid")},
    grand_total_metric="total",
    sheet_range="Summary: Day!A:BL",
    description="Traffic by acquisition source",
)


# ─────────────────────────────────────────────
# SALES — direct and renewal orders
# ─────────────────────────────────────────────

SALES_FAMILY = MetricFamily(
    name="sales",
    raw_metrics=[
        MetricDefinition("direct_qty", MetricType.VOLUME, "count", "Direct orders"),
        MetricDefinition(
            "direct_revenue", MetricType.REVENUE, "currency", "Direct order revenue"
        ),
        MetricDefinition("renewal_qty", MetricType.VOLUME, "count", "Renewals"),
        MetricDefinition(
            "renewal_revenue", MetricType.REVENUE, "currency", "Renewal revenue"
        ),
        MetricDefinition(
            "total_gross_revenue", MetricType.REVENUE, "currency", "Gross revenue"
        ),
        MetricDefinition("cert", MetricType.VOLUME, "count", "Certification orders"),
        MetricDefinition("duo", MetricType.VOLUME, "count", "Duo orders"),
        MetricDefinition("team", MetricType.VOLUME, "count", "Team orders"),
        MetricDefinition("learner", MetricType.VOLUME, "count", "Learner orders"),
    ],
    derived_metrics=[],
    columns={
        "direct_qty": 1,
        "cert": 2,
        "duo": 3,
        "team": 4,
        "learner": 5,
        "direct_revenue": 6,
        "renewal_qty": 7,
        "renewal_revenue": 8,
        "total_gross_revenue": 9,
    },
    grand_total_metric="total_gross_revenue",
    sheet_range="Summary: Day!A:J",
    description="Orders and revenue",
)


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

FAMILIES: Dict[str, MetricFamily] = {
    f.name: f for f in (ADS_FAMILY, TRAFFIC_FAMILY, SALES_FAMILY)
}


def get_family(name: str) -> MetricFamily | None:
    """Look up a metric family by name."""
    return FAMILIES.get(name)
