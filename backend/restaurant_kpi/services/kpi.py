"""KPI entry management and period aggregation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from restaurant_kpi.analytics import BucketAnalytics, TargetSet, analyze_buckets
from restaurant_kpi.analytics.periods import (
    Granularity,
    ensure_ordered,
    parse_calendar_date,
    parse_granularity,
)
from restaurant_kpi.core.errors import KpiError
from restaurant_kpi.models import KpiEntry

from .entry_store import EntryStore
from .scope import UserContext, resolve_listing_scope, resolve_read_scope, strategy_for

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = ("revenue", "labour_cost", "food_cost", "orders")
# largest amount a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


@dataclass
class EntryFilters:
    restaurant_id: UUID | None = None
    start_date: str | date | None = None
    end_date: str | date | None = None


@dataclass
class EntryCreate:
    restaurant_id: UUID
    entry_date: str | date
    revenue: Decimal
    labour_cost: Decimal
    food_cost: Decimal
    orders: int


@dataclass
class EntryUpdate:
    revenue: Decimal | None = None
    labour_cost: Decimal | None = None
    food_cost: Decimal | None = None
    orders: int | None = None

    def changes(self) -> dict[str, Decimal | int]:
        return {name: getattr(self, name) for name in _NUMERIC_FIELDS if getattr(self, name) is not None}


def _validate_figures(values: dict[str, Decimal | int | None]) -> None:
    for name, value in values.items():
        if value is None:
            continue
        if value < 0:
            raise KpiError.validation(f"{name} must be a non-negative number", {"field": name})
        if name != "orders" and value > MAX_AMOUNT:
            raise KpiError.validation(f"{name} must not exceed {MAX_AMOUNT}", {"field": name})
    orders = values.get("orders")
    if orders is not None and int(orders) != orders:
        raise KpiError.validation("orders must be a non-negative integer", {"field": "orders"})


async def list_entries(store: EntryStore, filters: EntryFilters, user: UserContext) -> list[KpiEntry]:
    restaurant_id = resolve_listing_scope(user, filters.restaurant_id)
    start = parse_calendar_date(filters.start_date, "start_date") if filters.start_date else None
    end = parse_calendar_date(filters.end_date, "end_date") if filters.end_date else None
    logger.debug("Fetching KPI entries restaurant=%s start=%s end=%s user=%s", restaurant_id, start, end, user.user_id)
    return await store.range_query(restaurant_id, start, end)


async def get_entry(store: EntryStore, entry_id: UUID, user: UserContext) -> KpiEntry:
    entry = await store.get_by_id(entry_id)
    if entry is None:
        raise KpiError.not_found("KPI entry not found")
    strategy_for(user).check_entry_access(user, entry.restaurant_id)
    return entry


async def create_entry(
    store: EntryStore,
    payload: EntryCreate,
    user: UserContext,
    *,
    today: date | None = None,
) -> KpiEntry:
    strategy_for(user).check_write(user, payload.restaurant_id)
    _validate_figures({name: getattr(payload, name) for name in _NUMERIC_FIELDS})

    entry_date = parse_calendar_date(payload.entry_date, "entry_date")
    if not store.settings.allow_future_entries and entry_date > (today or date.today()):
        raise KpiError.validation("Entry date cannot be in the future", {"field": "entry_date"})

    if await store.get_restaurant(payload.restaurant_id) is None:
        raise KpiError.not_found("Restaurant not found")

    if await store.point_lookup(payload.restaurant_id, entry_date) is not None:
        raise KpiError.conflict(
            "Entry already exists for this restaurant and date",
            {"restaurant_id": str(payload.restaurant_id), "entry_date": entry_date.isoformat()},
        )

    entry = await store.insert(
        restaurant_id=payload.restaurant_id,
        entry_date=entry_date,
        revenue=payload.revenue,
        labour_cost=payload.labour_cost,
        food_cost=payload.food_cost,
        orders=int(payload.orders),
    )
    logger.info(
        "KPI entry created id=%s restaurant=%s date=%s user=%s",
        entry.id,
        entry.restaurant_id,
        entry.entry_date,
        user.user_id,
    )
    return entry


async def update_entry(store: EntryStore, entry_id: UUID, payload: EntryUpdate, user: UserContext) -> KpiEntry:
    existing = await store.get_by_id(entry_id)
    if existing is None:
        raise KpiError.not_found("KPI entry not found")
    strategy_for(user).check_write(user, existing.restaurant_id)

    changes = payload.changes()
    _validate_figures(dict(changes))
    entry = await store.update_by_id(entry_id, changes)
    logger.info("KPI entry updated id=%s user=%s changes=%s", entry_id, user.user_id, sorted(changes))
    return entry


async def delete_entry(store: EntryStore, entry_id: UUID, user: UserContext) -> None:
    strategy_for(user).check_delete(user)
    existing = await store.get_by_id(entry_id)
    if existing is None:
        raise KpiError.not_found("KPI entry not found")
    await store.delete_by_id(entry_id)
    logger.info("KPI entry deleted id=%s restaurant=%s user=%s", entry_id, existing.restaurant_id, user.user_id)


async def get_aggregated_data(
    store: EntryStore,
    restaurant_id: UUID | None,
    start_date: str | date,
    end_date: str | date,
    granularity: str | Granularity | None,
    user: UserContext,
) -> list[BucketAnalytics]:
    """Period buckets for one restaurant, most recent first, with trends and alerts."""

    effective_id = resolve_read_scope(user, restaurant_id)
    start = parse_calendar_date(start_date, "start_date")
    end = parse_calendar_date(end_date, "end_date")
    ensure_ordered(start, end)
    group = parse_granularity(granularity)

    buckets = await store.aggregate_by_period(effective_id, start, end, group)
    targets = await store.targets(effective_id)
    return analyze_buckets(
        buckets,
        targets,
        group,
        alignment=store.settings.trend_alignment,
        range_start=start,
    )


async def get_targets(store: EntryStore, restaurant_id: UUID, user: UserContext) -> TargetSet:
    effective_id = resolve_read_scope(user, restaurant_id)
    return await store.targets(effective_id)


async def update_targets(store: EntryStore, restaurant_id: UUID, targets: TargetSet, user: UserContext) -> TargetSet:
    strategy_for(user).check_admin(user, "change KPI targets")
    for label, thresholds in (("labour_cost", targets.labour_cost), ("food_cost", targets.food_cost)):
        if not thresholds.target <= thresholds.warning <= thresholds.critical:
            raise KpiError.validation(
                f"{label} thresholds must satisfy target <= warning <= critical", {"field": label}
            )
    if await store.get_restaurant(restaurant_id) is None:
        raise KpiError.not_found("Restaurant not found")
    updated = await store.upsert_targets(restaurant_id, targets)
    logger.info("KPI targets updated restaurant=%s user=%s", restaurant_id, user.user_id)
    return updated


__all__ = [
    "EntryCreate",
    "EntryFilters",
    "EntryUpdate",
    "create_entry",
    "delete_entry",
    "get_aggregated_data",
    "get_entry",
    "get_targets",
    "list_entries",
    "update_entry",
    "update_targets",
]
