"""Pure KPI analytics: derived ratios, period buckets, trends and alerts."""

from .aggregation import (
    BucketAnalytics,
    BucketTrends,
    PeriodBucket,
    PeriodTotals,
    analyze_buckets,
    group_by_period,
    summarize,
)
from .metrics import DerivedMetrics, derive_metrics
from .periods import Granularity, previous_window
from .thresholds import AlertStatus, TargetSet, Thresholds, classify, default_targets
from .trends import trend

__all__ = [
    "AlertStatus",
    "BucketAnalytics",
    "BucketTrends",
    "DerivedMetrics",
    "Granularity",
    "PeriodBucket",
    "PeriodTotals",
    "TargetSet",
    "Thresholds",
    "analyze_buckets",
    "classify",
    "default_targets",
    "derive_metrics",
    "group_by_period",
    "previous_window",
    "summarize",
    "trend",
]
