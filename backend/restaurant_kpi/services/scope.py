"""Role-based restaurant scoping.

Each role has one strategy object answering the same questions: which
restaurant a read is served from, and whether a write, delete or admin action
on a restaurant is allowed. Services never branch on the role themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from restaurant_kpi.core.errors import KpiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserContext:
    user_id: UUID
    role: str
    restaurant_id: UUID | None = None


class ScopeStrategy:
    """Base strategy: read-only and restricted to the caller's restaurant."""

    role: str = ""

    def read_scope(self, user: UserContext, requested: UUID | None) -> UUID | None:
        """Restaurant served for aggregate and dashboard reads."""

        return self._own_restaurant(user)

    def listing_scope(self, user: UserContext, requested: UUID | None) -> UUID | None:
        """Restaurant filter applied to entry listings and exports."""

        return self.read_scope(user, requested)

    def check_entry_access(self, user: UserContext, restaurant_id: UUID) -> None:
        if self._own_restaurant(user) != restaurant_id:
            raise KpiError.forbidden("You do not have access to this restaurant")

    def check_write(self, user: UserContext, restaurant_id: UUID) -> None:
        self._deny(user, "Your role cannot modify KPI entries")

    def check_delete(self, user: UserContext) -> None:
        self._deny(user, "Only administrators can delete KPI entries")

    def check_admin(self, user: UserContext, action: str) -> None:
        self._deny(user, f"Only administrators can {action}")

    def _own_restaurant(self, user: UserContext) -> UUID:
        if user.restaurant_id is None:
            logger.warning("User %s (%s) has no restaurant assigned", user.user_id, user.role)
            raise KpiError.forbidden("No restaurant assigned to your account")
        return user.restaurant_id

    def _deny(self, user: UserContext, message: str) -> None:
        logger.warning("Denied %s for user %s (%s)", message.lower(), user.user_id, user.role)
        raise KpiError.forbidden(message)


class AdminScope(ScopeStrategy):
    role = "admin"

    def read_scope(self, user: UserContext, requested: UUID | None) -> UUID | None:
        return requested

    def check_entry_access(self, user: UserContext, restaurant_id: UUID) -> None:
        return None

    def check_write(self, user: UserContext, restaurant_id: UUID) -> None:
        return None

    def check_delete(self, user: UserContext) -> None:
        return None

    def check_admin(self, user: UserContext, action: str) -> None:
        return None


class ManagerScope(ScopeStrategy):
    role = "manager"

    def check_write(self, user: UserContext, restaurant_id: UUID) -> None:
        if self._own_restaurant(user) != restaurant_id:
            self._deny(user, "You can only modify entries for your own restaurant")


class ViewerScope(ScopeStrategy):
    """Read-only; an unassigned viewer reads across restaurants."""

    role = "viewer"

    def read_scope(self, user: UserContext, requested: UUID | None) -> UUID | None:
        if user.restaurant_id is None:
            return requested
        return user.restaurant_id

    def check_entry_access(self, user: UserContext, restaurant_id: UUID) -> None:
        if user.restaurant_id is not None and user.restaurant_id != restaurant_id:
            raise KpiError.forbidden("You do not have access to this restaurant")


_STRATEGIES: dict[str, ScopeStrategy] = {
    strategy.role: strategy for strategy in (AdminScope(), ManagerScope(), ViewerScope())
}


def strategy_for(user: UserContext) -> ScopeStrategy:
    strategy = _STRATEGIES.get(user.role)
    if strategy is None:
        raise KpiError.forbidden(f"Unknown role: {user.role}")
    return strategy


def resolve_read_scope(user: UserContext, requested: UUID | None) -> UUID:
    """Restaurant for aggregate/dashboard reads; one must be resolvable."""

    restaurant_id = strategy_for(user).read_scope(user, requested)
    if restaurant_id is None:
        raise KpiError.validation("Restaurant ID is required", {"field": "restaurant_id"})
    return restaurant_id


def resolve_listing_scope(user: UserContext, requested: UUID | None) -> UUID | None:
    return strategy_for(user).listing_scope(user, requested)


__all__ = [
    "AdminScope",
    "ManagerScope",
    "ScopeStrategy",
    "UserContext",
    "ViewerScope",
    "resolve_listing_scope",
    "resolve_read_scope",
    "strategy_for",
]
