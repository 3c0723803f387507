"""User administration and self-service password changes."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_kpi.core.errors import KpiError
from restaurant_kpi.core.security import hash_password, verify_password
from restaurant_kpi.models import AuthToken, Restaurant, User

from .scope import UserContext, strategy_for

logger = logging.getLogger(__name__)


async def _require_user(session: AsyncSession, user_id: UUID) -> User:
    record = await session.get(User, user_id)
    if record is None:
        raise KpiError.not_found("User not found")
    return record


async def _require_restaurant(session: AsyncSession, restaurant_id: UUID | None) -> None:
    if restaurant_id is not None and await session.get(Restaurant, restaurant_id) is None:
        raise KpiError.not_found("Restaurant not found")


async def list_users(session: AsyncSession, user: UserContext) -> list[User]:
    strategy_for(user).check_admin(user, "list users")
    result = await session.execute(select(User).order_by(User.email))
    return list(result.scalars().all())


async def get_user(session: AsyncSession, user_id: UUID, user: UserContext) -> User:
    strategy_for(user).check_admin(user, "view users")
    return await _require_user(session, user_id)


async def create_user(
    session: AsyncSession,
    user: UserContext,
    *,
    name: str,
    email: str,
    password: str,
    role: str,
    restaurant_id: UUID | None,
) -> User:
    strategy_for(user).check_admin(user, "create users")
    normalized_email = email.strip().lower()
    existing = await session.execute(select(User.id).where(User.email == normalized_email))
    if existing.first() is not None:
        raise KpiError.conflict("Email is already registered", {"email": normalized_email})
    await _require_restaurant(session, restaurant_id)

    record = User(
        name=name.strip(),
        email=normalized_email,
        password_hash=hash_password(password),
        role=role,
        restaurant_id=restaurant_id,
    )
    session.add(record)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise KpiError.conflict("Email is already registered", {"email": normalized_email}) from exc
    await session.refresh(record)
    logger.info("User %s created with role %s by %s", record.id, record.role, user.user_id)
    return record


async def update_user(session: AsyncSession, user_id: UUID, changes: Mapping[str, Any], user: UserContext) -> User:
    """Apply an admin edit; ``restaurant_id: None`` in ``changes`` unassigns."""

    strategy_for(user).check_admin(user, "update users")
    record = await _require_user(session, user_id)
    if changes.get("name") is not None:
        record.name = changes["name"].strip()
    if changes.get("role") is not None:
        record.role = changes["role"]
    if "restaurant_id" in changes:
        await _require_restaurant(session, changes["restaurant_id"])
        record.restaurant_id = changes["restaurant_id"]
    if changes.get("password") is not None:
        record.password_hash = hash_password(changes["password"])
    await session.commit()
    await session.refresh(record)
    logger.info("User %s updated by %s fields=%s", user_id, user.user_id, sorted(changes))
    return record


async def delete_user(session: AsyncSession, user_id: UUID, user: UserContext) -> None:
    strategy_for(user).check_admin(user, "delete users")
    if user_id == user.user_id:
        raise KpiError.forbidden("You cannot delete your own account")
    await _require_user(session, user_id)
    await session.execute(delete(AuthToken).where(AuthToken.user_id == user_id))
    await session.execute(delete(User).where(User.id == user_id))
    await session.commit()
    logger.info("User %s deleted by %s", user_id, user.user_id)


async def change_password(session: AsyncSession, user: UserContext, current_password: str, new_password: str) -> None:
    record = await _require_user(session, user.user_id)
    if not verify_password(current_password, record.password_hash):
        raise KpiError.validation("Current password is incorrect", {"field": "current_password"})
    record.password_hash = hash_password(new_password)
    await session.commit()
    logger.info("User %s changed their password", user.user_id)


__all__ = ["change_password", "create_user", "delete_user", "get_user", "list_users", "update_user"]
