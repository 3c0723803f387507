"""Alert classification of cost ratios against configured targets."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from restaurant_kpi.config import AppSettings, get_settings

from .metrics import Number, to_decimal


class AlertStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


def classify(value: Number, target: Number, warning: Number, critical: Number) -> AlertStatus:
    """Return the band of ``value``; each band includes its lower edge."""

    # target is informational only, bands start at warning and critical
    amount = to_decimal(value)
    if amount >= to_decimal(critical):
        return AlertStatus.CRITICAL
    if amount >= to_decimal(warning):
        return AlertStatus.WARNING
    return AlertStatus.GOOD


@dataclass(frozen=True)
class Thresholds:
    target: Decimal
    warning: Decimal
    critical: Decimal

    def classify(self, value: Number) -> AlertStatus:
        return classify(value, self.target, self.warning, self.critical)


@dataclass(frozen=True)
class TargetSet:
    labour_cost: Thresholds
    food_cost: Thresholds


def default_targets(settings: AppSettings | None = None) -> TargetSet:
    """Targets applied to restaurants that have none configured."""

    settings = settings or get_settings()
    return TargetSet(
        labour_cost=Thresholds(
            target=settings.default_labour_target,
            warning=settings.default_labour_warning,
            critical=settings.default_labour_critical,
        ),
        food_cost=Thresholds(
            target=settings.default_food_target,
            warning=settings.default_food_warning,
            critical=settings.default_food_critical,
        ),
    )


__all__ = ["AlertStatus", "TargetSet", "Thresholds", "classify", "default_targets"]
