"""Database model exports."""

from .kpi import FOOD_COST_METRIC, LABOUR_COST_METRIC, KpiEntry, KpiTarget
from .users import ROLES, AuthToken, Restaurant, User

__all__ = [
    "Restaurant",
    "User",
    "AuthToken",
    "ROLES",
    "KpiEntry",
    "KpiTarget",
    "LABOUR_COST_METRIC",
    "FOOD_COST_METRIC",
]
