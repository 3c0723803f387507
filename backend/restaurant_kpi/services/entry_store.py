"""SQLAlchemy-backed store for KPI entries, targets and restaurant lookups."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_kpi.analytics import (
    Granularity,
    PeriodBucket,
    PeriodTotals,
    TargetSet,
    Thresholds,
    default_targets,
    derive_metrics,
    group_by_period,
    summarize,
)
from restaurant_kpi.analytics.metrics import quantize, to_decimal
from restaurant_kpi.config import AppSettings, get_settings
from restaurant_kpi.core.errors import KpiError
from restaurant_kpi.models import FOOD_COST_METRIC, LABOUR_COST_METRIC, KpiEntry, KpiTarget, Restaurant

logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGE = "Entry already exists for this restaurant and date"
_MUTABLE_FIELDS = ("revenue", "labour_cost", "food_cost", "orders")


def _apply_figures(entry: KpiEntry, revenue: Decimal, labour_cost: Decimal, food_cost: Decimal, orders: int) -> None:
    # ratios are derived from the stored cents, never from the raw input
    entry.revenue = quantize(revenue)
    entry.labour_cost = quantize(labour_cost)
    entry.food_cost = quantize(food_cost)
    entry.orders = orders
    derived = derive_metrics(entry.revenue, entry.labour_cost, entry.food_cost, orders)
    entry.labour_cost_percent = derived.labour_cost_percent
    entry.food_cost_percent = derived.food_cost_percent
    entry.avg_ticket = derived.avg_ticket


class EntryStore:
    """Persistence operations used by the KPI and dashboard services.

    One store wraps one session; reads never write and every write commits or
    rolls back before returning.
    """

    def __init__(self, session: AsyncSession, settings: AppSettings | None = None) -> None:
        self._session = session
        self._settings = settings or get_settings()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def _entries(self) -> Select[tuple[KpiEntry]]:
        return select(KpiEntry).execution_options(populate_existing=True)

    async def range_query(
        self,
        restaurant_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        *,
        ascending: bool = False,
    ) -> list[KpiEntry]:
        stmt = self._entries()
        if restaurant_id is not None:
            stmt = stmt.where(KpiEntry.restaurant_id == restaurant_id)
        if start_date is not None:
            stmt = stmt.where(KpiEntry.entry_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(KpiEntry.entry_date <= end_date)
        order = KpiEntry.entry_date.asc() if ascending else KpiEntry.entry_date.desc()
        stmt = stmt.order_by(order, KpiEntry.restaurant_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, entry_id: UUID) -> KpiEntry | None:
        result = await self._session.execute(self._entries().where(KpiEntry.id == entry_id))
        return result.scalars().first()

    async def point_lookup(self, restaurant_id: UUID, entry_date: date) -> KpiEntry | None:
        result = await self._session.execute(
            self._entries().where(KpiEntry.restaurant_id == restaurant_id, KpiEntry.entry_date == entry_date)
        )
        return result.scalars().first()

    async def insert(
        self,
        *,
        restaurant_id: UUID,
        entry_date: date,
        revenue: Decimal,
        labour_cost: Decimal,
        food_cost: Decimal,
        orders: int,
    ) -> KpiEntry:
        entry = KpiEntry(restaurant_id=restaurant_id, entry_date=entry_date)
        _apply_figures(entry, to_decimal(revenue), to_decimal(labour_cost), to_decimal(food_cost), orders)
        self._session.add(entry)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.info("Duplicate KPI entry for restaurant %s on %s", restaurant_id, entry_date)
            raise KpiError.conflict(
                _DUPLICATE_MESSAGE, {"restaurant_id": str(restaurant_id), "entry_date": entry_date.isoformat()}
            ) from exc
        stored = await self.get_by_id(entry.id)
        assert stored is not None
        return stored

    async def update_by_id(self, entry_id: UUID, changes: Mapping[str, Any]) -> KpiEntry:
        """Merge ``changes`` into the entry and recompute its derived fields."""

        entry = await self.get_by_id(entry_id)
        if entry is None:
            raise KpiError.not_found("KPI entry not found")
        merged = {name: changes[name] if changes.get(name) is not None else getattr(entry, name) for name in _MUTABLE_FIELDS}
        _apply_figures(
            entry,
            to_decimal(merged["revenue"]),
            to_decimal(merged["labour_cost"]),
            to_decimal(merged["food_cost"]),
            int(merged["orders"]),
        )
        try:
            await self._session.commit()
        except SQLAlchemyError:
            await self._session.rollback()
            logger.exception("Failed to update KPI entry %s", entry_id)
            raise
        stored = await self.get_by_id(entry_id)
        assert stored is not None
        return stored

    async def delete_by_id(self, entry_id: UUID) -> None:
        result = await self._session.execute(delete(KpiEntry).where(KpiEntry.id == entry_id))
        if result.rowcount == 0:
            await self._session.rollback()
            raise KpiError.not_found("KPI entry not found")
        await self._session.commit()

    async def aggregate_by_period(
        self,
        restaurant_id: UUID,
        start_date: date,
        end_date: date,
        granularity: Granularity,
    ) -> list[PeriodBucket]:
        entries = await self.range_query(restaurant_id, start_date, end_date)
        name = await self.restaurant_name(restaurant_id) or self._settings.unknown_restaurant_name
        return group_by_period(entries, granularity, restaurant_id=restaurant_id, restaurant_name=name)

    async def period_totals(self, restaurant_id: UUID, start_date: date, end_date: date) -> PeriodTotals | None:
        return summarize(await self.range_query(restaurant_id, start_date, end_date))

    async def daily_series(self, restaurant_id: UUID, start_date: date, end_date: date) -> list[KpiEntry]:
        return await self.range_query(restaurant_id, start_date, end_date, ascending=True)

    async def targets(self, restaurant_id: UUID) -> TargetSet:
        """Configured targets for the restaurant, defaults for unset metrics."""

        defaults = default_targets(self._settings)
        result = await self._session.execute(select(KpiTarget).where(KpiTarget.restaurant_id == restaurant_id))
        labour, food = defaults.labour_cost, defaults.food_cost
        for row in result.scalars().all():
            thresholds = Thresholds(target=row.target, warning=row.warning, critical=row.critical)
            if row.metric == LABOUR_COST_METRIC:
                labour = thresholds
            elif row.metric == FOOD_COST_METRIC:
                food = thresholds
        return TargetSet(labour_cost=labour, food_cost=food)

    async def upsert_targets(self, restaurant_id: UUID, targets: TargetSet) -> TargetSet:
        result = await self._session.execute(select(KpiTarget).where(KpiTarget.restaurant_id == restaurant_id))
        existing = {row.metric: row for row in result.scalars().all()}
        for metric, thresholds in ((LABOUR_COST_METRIC, targets.labour_cost), (FOOD_COST_METRIC, targets.food_cost)):
            row = existing.get(metric)
            if row is None:
                row = KpiTarget(restaurant_id=restaurant_id, metric=metric)
                self._session.add(row)
            row.target = quantize(thresholds.target)
            row.warning = quantize(thresholds.warning)
            row.critical = quantize(thresholds.critical)
        await self._session.commit()
        return await self.targets(restaurant_id)

    async def get_restaurant(self, restaurant_id: UUID) -> Restaurant | None:
        return await self._session.get(Restaurant, restaurant_id)

    async def restaurant_name(self, restaurant_id: UUID) -> str | None:
        result = await self._session.execute(select(Restaurant.name).where(Restaurant.id == restaurant_id))
        return result.scalar_one_or_none()


__all__ = ["EntryStore"]
