"""Restaurant routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_kpi.db.database import Database
from restaurant_kpi.schemas import RestaurantCreateRequest, RestaurantOut, RestaurantUpdateRequest
from restaurant_kpi.services import restaurants as restaurant_service
from restaurant_kpi.services.scope import UserContext

from ..dependencies.auth import build_current_user


def get_restaurants_router(database: Database) -> APIRouter:
    router = APIRouter(prefix="/restaurants", tags=["restaurants"])
    current_user = build_current_user(database)

    @router.get("", response_model=list[RestaurantOut])
    async def list_restaurants(
        user: UserContext = Depends(current_user), session: AsyncSession = Depends(database.get_session)
    ) -> list[RestaurantOut]:
        rows = await restaurant_service.list_restaurants(session, user)
        return [RestaurantOut.model_validate(row) for row in rows]

    @router.post("", response_model=RestaurantOut, status_code=status.HTTP_201_CREATED)
    async def create_restaurant(
        payload: RestaurantCreateRequest,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> RestaurantOut:
        restaurant = await restaurant_service.create_restaurant(session, payload.name, payload.city, user)
        return RestaurantOut.model_validate(restaurant)

    @router.get("/{restaurant_id}", response_model=RestaurantOut)
    async def get_restaurant(
        restaurant_id: UUID,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> RestaurantOut:
        restaurant = await restaurant_service.get_restaurant(session, restaurant_id, user)
        return RestaurantOut.model_validate(restaurant)

    @router.patch("/{restaurant_id}", response_model=RestaurantOut)
    async def update_restaurant(
        restaurant_id: UUID,
        payload: RestaurantUpdateRequest,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> RestaurantOut:
        restaurant = await restaurant_service.update_restaurant(
            session, restaurant_id, user, name=payload.name, city=payload.city
        )
        return RestaurantOut.model_validate(restaurant)

    @router.delete("/{restaurant_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_restaurant(
        restaurant_id: UUID,
        user: UserContext = Depends(current_user),
        session: AsyncSession = Depends(database.get_session),
    ) -> Response:
        await restaurant_service.delete_restaurant(session, restaurant_id, user)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
