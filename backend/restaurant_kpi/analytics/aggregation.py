"""Bucket daily KPI entries by day, week or month and derive bucket analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Literal, Protocol, Sequence
from uuid import UUID

from .metrics import ZERO, average_ticket, cost_percent, quantize, to_decimal
from .periods import Granularity, period_start, previous_period_start
from .thresholds import AlertStatus, TargetSet
from .trends import trend

TrendAlignment = Literal["adjacent", "calendar"]


class DailyFigures(Protocol):
    """Anything carrying one restaurant-day of raw figures."""

    entry_date: date
    revenue: Decimal
    labour_cost: Decimal
    food_cost: Decimal
    orders: int


@dataclass
class PeriodTotals:
    """Summed raw figures; ratios are always re-derived from the sums."""

    total_revenue: Decimal = ZERO
    total_labour_cost: Decimal = ZERO
    total_food_cost: Decimal = ZERO
    total_orders: int = 0
    entry_count: int = 0

    def add(self, entry: DailyFigures) -> None:
        self.total_revenue += to_decimal(entry.revenue)
        self.total_labour_cost += to_decimal(entry.labour_cost)
        self.total_food_cost += to_decimal(entry.food_cost)
        self.total_orders += int(entry.orders)
        self.entry_count += 1

    @property
    def avg_ticket(self) -> Decimal:
        return quantize(average_ticket(self.total_revenue, self.total_orders))

    @property
    def labour_cost_percent(self) -> Decimal:
        return quantize(cost_percent(self.total_labour_cost, self.total_revenue))

    @property
    def food_cost_percent(self) -> Decimal:
        return quantize(cost_percent(self.total_food_cost, self.total_revenue))


@dataclass
class PeriodBucket:
    period: date
    restaurant_id: UUID
    restaurant_name: str
    totals: PeriodTotals = field(default_factory=PeriodTotals)


@dataclass(frozen=True)
class BucketTrends:
    revenue: Decimal = ZERO
    orders: Decimal = ZERO
    labour_cost: Decimal = ZERO
    food_cost: Decimal = ZERO


@dataclass(frozen=True)
class BucketAnalytics:
    bucket: PeriodBucket
    labour_cost_status: AlertStatus
    food_cost_status: AlertStatus
    labour_cost_target: Decimal
    food_cost_target: Decimal
    trends: BucketTrends


def summarize(entries: Iterable[DailyFigures]) -> PeriodTotals | None:
    """Sum ``entries``; ``None`` when there is nothing to sum."""

    totals = PeriodTotals()
    for entry in entries:
        totals.add(entry)
    if totals.entry_count == 0:
        return None
    return totals


def group_by_period(
    entries: Iterable[DailyFigures],
    granularity: Granularity,
    *,
    restaurant_id: UUID,
    restaurant_name: str,
) -> list[PeriodBucket]:
    """Group entries by truncated period, most recent period first.

    Periods without entries produce no bucket.
    """

    buckets: dict[date, PeriodBucket] = {}
    for entry in entries:
        key = period_start(entry.entry_date, granularity)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = PeriodBucket(period=key, restaurant_id=restaurant_id, restaurant_name=restaurant_name)
            buckets[key] = bucket
        bucket.totals.add(entry)
    return [buckets[key] for key in sorted(buckets, reverse=True)]


def _compare(current: PeriodTotals, previous: PeriodTotals) -> BucketTrends:
    return BucketTrends(
        revenue=trend(current.total_revenue, previous.total_revenue),
        orders=trend(current.total_orders, previous.total_orders),
        labour_cost=trend(current.labour_cost_percent, previous.labour_cost_percent),
        food_cost=trend(current.food_cost_percent, previous.food_cost_percent),
    )


def _paired_previous(
    buckets: Sequence[PeriodBucket],
    granularity: Granularity,
    alignment: TrendAlignment,
    range_start: date | None,
) -> list[PeriodTotals | None]:
    if alignment == "adjacent":
        # next row in the descending list, whatever calendar period it holds
        return [buckets[i + 1].totals if i + 1 < len(buckets) else None for i in range(len(buckets))]

    by_period = {bucket.period: bucket.totals for bucket in buckets}
    earliest = period_start(range_start, granularity) if range_start else min(by_period, default=None)
    paired: list[PeriodTotals | None] = []
    for bucket in buckets:
        previous_key = previous_period_start(bucket.period, granularity)
        if earliest is None or previous_key < earliest:
            paired.append(None)
        else:
            paired.append(by_period.get(previous_key, PeriodTotals()))
    return paired


def analyze_buckets(
    buckets: Sequence[PeriodBucket],
    targets: TargetSet,
    granularity: Granularity,
    *,
    alignment: TrendAlignment = "adjacent",
    range_start: date | None = None,
) -> list[BucketAnalytics]:
    """Attach alert status, targets and trends to descending buckets.

    With ``adjacent`` alignment each bucket is compared with the next bucket
    that has data, skipping empty periods. With ``calendar`` alignment it is
    compared with the true preceding period, an empty period counting as zero;
    a bucket whose preceding period lies before ``range_start`` is not compared.
    Buckets without a comparison carry zero trends.
    """

    results: list[BucketAnalytics] = []
    previous_totals = _paired_previous(buckets, granularity, alignment, range_start)
    for bucket, previous in zip(buckets, previous_totals):
        totals = bucket.totals
        results.append(
            BucketAnalytics(
                bucket=bucket,
                labour_cost_status=targets.labour_cost.classify(totals.labour_cost_percent),
                food_cost_status=targets.food_cost.classify(totals.food_cost_percent),
                labour_cost_target=targets.labour_cost.target,
                food_cost_target=targets.food_cost.target,
                trends=_compare(totals, previous) if previous is not None else BucketTrends(),
            )
        )
    return results


__all__ = [
    "BucketAnalytics",
    "BucketTrends",
    "DailyFigures",
    "PeriodBucket",
    "PeriodTotals",
    "TrendAlignment",
    "analyze_buckets",
    "group_by_period",
    "summarize",
]
