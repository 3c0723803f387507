"""Authentication routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_kpi.config import AppSettings
from restaurant_kpi.core.errors import KpiError
from restaurant_kpi.core.security import token_lifetime, verify_password
from restaurant_kpi.db.database import Database
from restaurant_kpi.models import AuthToken, User
from restaurant_kpi.schemas import AuthResponse, LoginRequest, MessageResponse, UserOut
from restaurant_kpi.services.scope import UserContext

from ..dependencies.auth import bearer_token, build_current_user

logger = logging.getLogger(__name__)


def get_auth_router(database: Database, settings: AppSettings) -> APIRouter:
    router = APIRouter(prefix="/auth", tags=["auth"])
    current_user = build_current_user(database)

    @router.post("/login", response_model=AuthResponse)
    async def login(payload: LoginRequest, session: AsyncSession = Depends(database.get_session)) -> AuthResponse:
        normalized_email = payload.email.strip().lower()
        query = await session.execute(select(User).where(User.email == normalized_email))
        user = query.scalar_one_or_none()
        if user is None or not verify_password(payload.password, user.password_hash):
            logger.info("Failed login for %s", normalized_email)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

        token = AuthToken.for_user(user.id, token_lifetime(settings))
        session.add(token)
        await session.commit()
        await session.refresh(user)

        return AuthResponse(access_token=token.token, user=UserOut.model_validate(user))

    @router.post("/logout", response_model=MessageResponse)
    async def logout(
        authorization: str | None = Header(default=None),
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> MessageResponse:
        await session.execute(
            update(AuthToken).where(AuthToken.token == bearer_token(authorization)).values(is_active=False)
        )
        await session.commit()
        logger.info("User %s logged out", user.user_id)
        return MessageResponse(message="Logged out successfully")

    @router.get("/me", response_model=UserOut)
    async def me(
        user: UserContext = Depends(current_user), session: AsyncSession = Depends(database.get_session)
    ) -> UserOut:
        record = await session.get(User, user.user_id)
        if record is None:
            raise KpiError.not_found("User not found")
        return UserOut.model_validate(record)

    return router
