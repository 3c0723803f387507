"""Authentication helpers for API routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Awaitable, Callable

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_kpi.db.database import Database
from restaurant_kpi.models import AuthToken, User
from restaurant_kpi.services.scope import UserContext


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return authorization.split(" ", 1)[1].strip()


def build_current_user(database: Database) -> Callable[..., Awaitable[UserContext]]:
    async def get_current_user(
        authorization: str | None = Header(default=None),
        session: AsyncSession = Depends(database.get_session),
    ) -> UserContext:
        token_value = bearer_token(authorization)
        stmt: Select[AuthToken] = select(AuthToken).where(
            AuthToken.token == token_value,
            AuthToken.is_active.is_(True),
        )
        result = await session.execute(stmt)
        auth_token = result.scalar_one_or_none()
        if auth_token is None or _as_utc(auth_token.expires_at) <= datetime.now(timezone.utc):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
        user = await session.get(User, auth_token.user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
        return UserContext(user_id=user.id, role=user.role, restaurant_id=user.restaurant_id)

    return get_current_user


__all__ = ["bearer_token", "build_current_user"]
