"""Fixed-point helpers for the derived KPI ratios.

Every ratio in the service is computed here with :class:`~decimal.Decimal` so
day, week and month figures re-derived from exact sums never drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


def to_decimal(value: Number | None) -> Decimal:
    """Coerce ``value`` to Decimal without going through binary floats."""

    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value: Number) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def cost_percent(cost: Number, revenue: Number) -> Decimal:
    """Return ``cost / revenue * 100`` or zero when there is no revenue."""

    revenue_value = to_decimal(revenue)
    if revenue_value <= 0:
        return ZERO
    return to_decimal(cost) / revenue_value * HUNDRED


def average_ticket(revenue: Number, orders: int | None) -> Decimal:
    """Return revenue per order or zero when no orders were taken."""

    if not orders or orders <= 0:
        return ZERO
    return to_decimal(revenue) / Decimal(orders)


@dataclass(frozen=True)
class DerivedMetrics:
    labour_cost_percent: Decimal
    food_cost_percent: Decimal
    avg_ticket: Decimal


def derive_metrics(revenue: Number, labour_cost: Number, food_cost: Number, orders: int) -> DerivedMetrics:
    """Compute the stored derived fields of an entry, rounded to cents."""

    return DerivedMetrics(
        labour_cost_percent=quantize(cost_percent(labour_cost, revenue)),
        food_cost_percent=quantize(cost_percent(food_cost, revenue)),
        avg_ticket=quantize(average_ticket(revenue, orders)),
    )


__all__ = [
    "DerivedMetrics",
    "HUNDRED",
    "ZERO",
    "average_ticket",
    "cost_percent",
    "derive_metrics",
    "quantize",
    "to_decimal",
]
