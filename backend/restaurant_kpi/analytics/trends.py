"""Period-over-period percentage change."""

from __future__ import annotations

from decimal import Decimal

from .metrics import HUNDRED, ZERO, Number, quantize, to_decimal


def trend(current: Number | None, previous: Number | None) -> Decimal:
    """Percentage delta from ``previous`` to ``current``.

    A zero baseline yields 100 when anything was recorded in the current
    period and 0 otherwise, so the result is always finite.
    """

    current_value = to_decimal(current)
    previous_value = to_decimal(previous)
    if previous_value == 0:
        return HUNDRED if current_value > 0 else ZERO
    return quantize((current_value - previous_value) / previous_value * HUNDRED)


__all__ = ["trend"]
