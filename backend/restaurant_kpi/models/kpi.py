"""Daily KPI entry and per-restaurant target models."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restaurant_kpi.db.database import Base

from .users import Restaurant

LABOUR_COST_METRIC = "labour_cost_percent"
FOOD_COST_METRIC = "food_cost_percent"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KpiEntry(Base):
    __tablename__ = "kpi_entries"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "entry_date", name="uq_kpi_entry_restaurant_date"),
        Index("ix_kpi_entry_restaurant_date", "restaurant_id", "entry_date"),
    )

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    restaurant_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("restaurants.id", ondelete="CASCADE")
    )
    entry_date: Mapped[date] = mapped_column(Date)
    revenue: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    labour_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    labour_cost_percent: Mapped[Decimal] = mapped_column(Numeric(7, 2))
    food_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    food_cost_percent: Mapped[Decimal] = mapped_column(Numeric(7, 2))
    orders: Mapped[int] = mapped_column(Integer)
    avg_ticket: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    restaurant: Mapped["Restaurant"] = relationship("Restaurant", lazy="joined")


class KpiTarget(Base):
    __tablename__ = "kpi_targets"
    __table_args__ = (UniqueConstraint("restaurant_id", "metric", name="uq_kpi_target_restaurant_metric"),)

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    restaurant_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("restaurants.id", ondelete="CASCADE")
    )
    metric: Mapped[str] = mapped_column(String(64))
    target: Mapped[Decimal] = mapped_column(Numeric(6, 2))
    warning: Mapped[Decimal] = mapped_column(Numeric(6, 2))
    critical: Mapped[Decimal] = mapped_column(Numeric(6, 2))


__all__ = ["KpiEntry", "KpiTarget", "LABOUR_COST_METRIC", "FOOD_COST_METRIC"]
