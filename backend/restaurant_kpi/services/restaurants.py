"""Restaurant administration over an async session."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_kpi.core.errors import KpiError
from restaurant_kpi.models import KpiEntry, KpiTarget, Restaurant, User

from .scope import UserContext, resolve_listing_scope, strategy_for

logger = logging.getLogger(__name__)

_NAME_TAKEN = "Restaurant name already exists"


async def _name_taken(session: AsyncSession, name: str, exclude: UUID | None = None) -> bool:
    stmt = select(Restaurant.id).where(Restaurant.name == name)
    if exclude is not None:
        stmt = stmt.where(Restaurant.id != exclude)
    result = await session.execute(stmt)
    return result.first() is not None


async def save_restaurant(session: AsyncSession, restaurant: Restaurant) -> Restaurant:
    """Commit ``restaurant``; a unique-name violation becomes a conflict."""

    name = restaurant.name
    session.add(restaurant)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.info("Restaurant name %r taken by a concurrent writer", name)
        raise KpiError.conflict(_NAME_TAKEN, {"name": name}) from exc
    await session.refresh(restaurant)
    return restaurant


async def list_restaurants(session: AsyncSession, user: UserContext) -> list[Restaurant]:
    stmt = select(Restaurant).order_by(Restaurant.name)
    scoped_id = resolve_listing_scope(user, None)
    if scoped_id is not None:
        stmt = stmt.where(Restaurant.id == scoped_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_restaurant(session: AsyncSession, restaurant_id: UUID, user: UserContext) -> Restaurant:
    strategy_for(user).check_entry_access(user, restaurant_id)
    restaurant = await session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise KpiError.not_found("Restaurant not found")
    return restaurant


async def create_restaurant(session: AsyncSession, name: str, city: str, user: UserContext) -> Restaurant:
    strategy_for(user).check_admin(user, "create restaurants")
    name = name.strip()
    if await _name_taken(session, name):
        raise KpiError.conflict(_NAME_TAKEN, {"name": name})
    restaurant = await save_restaurant(session, Restaurant(name=name, city=city.strip()))
    logger.info("Restaurant %s created by %s", restaurant.id, user.user_id)
    return restaurant


async def update_restaurant(
    session: AsyncSession,
    restaurant_id: UUID,
    user: UserContext,
    *,
    name: str | None = None,
    city: str | None = None,
) -> Restaurant:
    strategy_for(user).check_admin(user, "update restaurants")
    restaurant = await session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise KpiError.not_found("Restaurant not found")
    if name is not None:
        name = name.strip()
        if await _name_taken(session, name, exclude=restaurant_id):
            raise KpiError.conflict(_NAME_TAKEN, {"name": name})
        restaurant.name = name
    if city is not None:
        restaurant.city = city.strip()
    restaurant = await save_restaurant(session, restaurant)
    logger.info("Restaurant %s updated by %s", restaurant_id, user.user_id)
    return restaurant


async def delete_restaurant(session: AsyncSession, restaurant_id: UUID, user: UserContext) -> None:
    """Remove the restaurant with its entries and targets; its users lose the assignment."""

    strategy_for(user).check_admin(user, "delete restaurants")
    if await session.get(Restaurant, restaurant_id) is None:
        raise KpiError.not_found("Restaurant not found")
    await session.execute(delete(KpiEntry).where(KpiEntry.restaurant_id == restaurant_id))
    await session.execute(delete(KpiTarget).where(KpiTarget.restaurant_id == restaurant_id))
    await session.execute(update(User).where(User.restaurant_id == restaurant_id).values(restaurant_id=None))
    await session.execute(delete(Restaurant).where(Restaurant.id == restaurant_id))
    await session.commit()
    logger.info("Restaurant %s deleted by %s", restaurant_id, user.user_id)


__all__ = [
    "create_restaurant",
    "delete_restaurant",
    "get_restaurant",
    "list_restaurants",
    "save_restaurant",
    "update_restaurant",
]
