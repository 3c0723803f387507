"""User administration routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_kpi.db.database import Database
from restaurant_kpi.schemas import (
    ChangePasswordRequest,
    CreateUserRequest,
    MessageResponse,
    UpdateUserRequest,
    UserOut,
)
from restaurant_kpi.services import users as user_service
from restaurant_kpi.services.scope import UserContext

from ..dependencies.auth import build_current_user


def get_users_router(database: Database) -> APIRouter:
    router = APIRouter(prefix="/users", tags=["users"])
    current_user = build_current_user(database)

    @router.get("", response_model=list[UserOut])
    async def list_users(
        user: UserContext = Depends(current_user), session: AsyncSession = Depends(database.get_session)
    ) -> list[UserOut]:
        return [UserOut.model_validate(row) for row in await user_service.list_users(session, user)]

    @router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
    async def create_user(
        payload: CreateUserRequest,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> UserOut:
        record = await user_service.create_user(
            session,
            user,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            role=payload.role,
            restaurant_id=payload.restaurant_id,
        )
        return UserOut.model_validate(record)

    @router.post("/change-password", response_model=MessageResponse)
    async def change_password(
        payload: ChangePasswordRequest,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> MessageResponse:
        await user_service.change_password(session, user, payload.current_password, payload.new_password)
        return MessageResponse(message="Password changed successfully")

    @router.get("/{user_id}", response_model=UserOut)
    async def get_user(
        user_id: UUID,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> UserOut:
        return UserOut.model_validate(await user_service.get_user(session, user_id, user))

    @router.patch("/{user_id}", response_model=UserOut)
    async def update_user(
        user_id: UUID,
        payload: UpdateUserRequest,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> UserOut:
        changes = payload.model_dump(include=payload.model_fields_set)
        return UserOut.model_validate(await user_service.update_user(session, user_id, changes, user))

    @router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_user(
        user_id: UUID,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> Response:
        await user_service.delete_user(session, user_id, user)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
