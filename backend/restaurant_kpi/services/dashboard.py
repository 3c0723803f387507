"""Dashboard summary: current period, previous-period trends, alerts and chart."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from restaurant_kpi.analytics import AlertStatus, PeriodTotals, TargetSet, previous_window, trend
from restaurant_kpi.analytics.metrics import ZERO, quantize
from restaurant_kpi.analytics.periods import ensure_ordered, parse_calendar_date

from .entry_store import EntryStore
from .scope import UserContext, resolve_read_scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentSnapshot:
    total_revenue: Decimal = ZERO
    total_orders: int = 0
    avg_ticket: Decimal = ZERO
    labour_cost_percent: Decimal = ZERO
    food_cost_percent: Decimal = ZERO

    @classmethod
    def from_totals(cls, totals: PeriodTotals) -> "CurrentSnapshot":
        return cls(
            total_revenue=quantize(totals.total_revenue),
            total_orders=totals.total_orders,
            avg_ticket=totals.avg_ticket,
            labour_cost_percent=totals.labour_cost_percent,
            food_cost_percent=totals.food_cost_percent,
        )


@dataclass(frozen=True)
class DashboardTrends:
    revenue: Decimal = ZERO
    orders: Decimal = ZERO
    labour_cost: Decimal = ZERO
    food_cost: Decimal = ZERO


@dataclass(frozen=True)
class DashboardAlerts:
    labour_cost: AlertStatus
    food_cost: AlertStatus


@dataclass(frozen=True)
class ChartPoint:
    date: date
    revenue: Decimal
    labour_cost: Decimal
    food_cost: Decimal
    orders: int
    labour_cost_percent: Decimal
    food_cost_percent: Decimal


@dataclass(frozen=True)
class DashboardSummary:
    restaurant_id: UUID
    restaurant_name: str
    start_date: date
    end_date: date
    previous_start_date: date
    previous_end_date: date
    current: CurrentSnapshot
    trends: DashboardTrends
    alerts: DashboardAlerts
    targets: TargetSet
    chart_data: list[ChartPoint] = field(default_factory=list)


async def build_summary(
    store: EntryStore,
    restaurant_id: UUID | None,
    start_date: str | date,
    end_date: str | date,
    user: UserContext,
) -> DashboardSummary:
    """Compose the dashboard for one restaurant over ``[start_date, end_date]``.

    The previous window has the same length and ends the day before
    ``start_date``. Missing data on either side counts as zero. Nothing is
    written, so callers may retry or cache the result.
    """

    effective_id = resolve_read_scope(user, restaurant_id)
    start = parse_calendar_date(start_date, "start_date")
    end = parse_calendar_date(end_date, "end_date")
    ensure_ordered(start, end)

    name = await store.restaurant_name(effective_id)
    if name is None:
        logger.warning("Dashboard requested for unknown restaurant %s", effective_id)
        name = store.settings.unknown_restaurant_name

    current = await store.period_totals(effective_id, start, end) or PeriodTotals()
    prev_start, prev_end = previous_window(start, end)
    previous = await store.period_totals(effective_id, prev_start, prev_end) or PeriodTotals()
    targets = await store.targets(effective_id)
    series = await store.daily_series(effective_id, start, end)

    logger.debug(
        "Dashboard restaurant=%s window=%s..%s previous=%s..%s entries=%d/%d",
        effective_id,
        start,
        end,
        prev_start,
        prev_end,
        current.entry_count,
        previous.entry_count,
    )

    return DashboardSummary(
        restaurant_id=effective_id,
        restaurant_name=name,
        start_date=start,
        end_date=end,
        previous_start_date=prev_start,
        previous_end_date=prev_end,
        current=CurrentSnapshot.from_totals(current),
        trends=DashboardTrends(
            revenue=trend(current.total_revenue, previous.total_revenue),
            orders=trend(current.total_orders, previous.total_orders),
            labour_cost=trend(current.labour_cost_percent, previous.labour_cost_percent),
            food_cost=trend(current.food_cost_percent, previous.food_cost_percent),
        ),
        alerts=DashboardAlerts(
            labour_cost=targets.labour_cost.classify(current.labour_cost_percent),
            food_cost=targets.food_cost.classify(current.food_cost_percent),
        ),
        targets=targets,
        chart_data=[
            ChartPoint(
                date=entry.entry_date,
                revenue=entry.revenue,
                labour_cost=entry.labour_cost,
                food_cost=entry.food_cost,
                orders=entry.orders,
                labour_cost_percent=entry.labour_cost_percent,
                food_cost_percent=entry.food_cost_percent,
            )
            for entry in series
        ],
    )


__all__ = [
    "ChartPoint",
    "CurrentSnapshot",
    "DashboardAlerts",
    "DashboardSummary",
    "DashboardTrends",
    "build_summary",
]
