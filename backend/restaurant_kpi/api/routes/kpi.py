"""KPI entry, aggregation, dashboard and target routes."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from restaurant_kpi.config import AppSettings
from restaurant_kpi.db.database import Database
from restaurant_kpi.schemas import (
    AggregatedBucketOut,
    DashboardOut,
    KpiEntryCreateRequest,
    KpiEntryOut,
    KpiEntryUpdateRequest,
    TargetsSchema,
)
from restaurant_kpi.services import dashboard as dashboard_service
from restaurant_kpi.services import kpi as kpi_service
from restaurant_kpi.services.entry_store import EntryStore
from restaurant_kpi.services.scope import UserContext

from ..dependencies.auth import build_current_user
from ..dependencies.store import build_entry_store


def get_kpi_router(database: Database, settings: AppSettings) -> APIRouter:
    router = APIRouter(prefix="/kpi", tags=["kpi"])
    current_user = build_current_user(database)
    entry_store = build_entry_store(database, settings)

    def _out(entry) -> KpiEntryOut:
        return KpiEntryOut.from_entry(entry, settings.unknown_restaurant_name)

    @router.get("/entries", response_model=list[KpiEntryOut])
    async def list_entries(
        restaurant_id: Optional[UUID] = Query(default=None),
        start_date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
        end_date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
        user: UserContext = Depends(current_user),
        store: EntryStore = Depends(entry_store),
    ) -> list[KpiEntryOut]:
        filters = kpi_service.EntryFilters(restaurant_id=restaurant_id, start_date=start_date, end_date=end_date)
        entries = await kpi_service.list_entries(store, filters, user)
        return [_out(entry) for entry in entries]

    @router.get("/entries/{entry_id}", response_model=KpiEntryOut)
    async def get_entry(
        entry_id: UUID, user: UserContext = Depends(current_user), store: EntryStore = Depends(entry_store)
    ) -> KpiEntryOut:
        return _out(await kpi_service.get_entry(store, entry_id, user))

    @router.post("/entries", response_model=KpiEntryOut, status_code=status.HTTP_201_CREATED)
    async def create_entry(
        payload: KpiEntryCreateRequest,
        user: UserContext = Depends(current_user),
        store: EntryStore = Depends(entry_store),
    ) -> KpiEntryOut:
        entry = await kpi_service.create_entry(store, kpi_service.EntryCreate(**payload.model_dump()), user)
        return _out(entry)

    @router.patch("/entries/{entry_id}", response_model=KpiEntryOut)
    async def update_entry(
        entry_id: UUID,
        payload: KpiEntryUpdateRequest,
        user: UserContext = Depends(current_user),
        store: EntryStore = Depends(entry_store),
    ) -> KpiEntryOut:
        entry = await kpi_service.update_entry(store, entry_id, kpi_service.EntryUpdate(**payload.model_dump()), user)
        return _out(entry)

    @router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entry(
        entry_id: UUID, user: UserContext = Depends(current_user), store: EntryStore = Depends(entry_store)
    ) -> Response:
        await kpi_service.delete_entry(store, entry_id, user)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/aggregated", response_model=list[AggregatedBucketOut])
    async def aggregated(
        start_date: str = Query(..., description="YYYY-MM-DD"),
        end_date: str = Query(..., description="YYYY-MM-DD"),
        restaurant_id: Optional[UUID] = Query(default=None),
        granularity: str = Query(default="day", description="day, week or month"),
        user: UserContext = Depends(current_user),
        store: EntryStore = Depends(entry_store),
    ) -> list[AggregatedBucketOut]:
        rows = await kpi_service.get_aggregated_data(store, restaurant_id, start_date, end_date, granularity, user)
        return [AggregatedBucketOut.from_analytics(row) for row in rows]

    @router.get("/dashboard", response_model=DashboardOut)
    async def dashboard(
        start_date: str = Query(..., description="YYYY-MM-DD"),
        end_date: str = Query(..., description="YYYY-MM-DD"),
        restaurant_id: Optional[UUID] = Query(default=None),
        user: UserContext = Depends(current_user),
        store: EntryStore = Depends(entry_store),
    ) -> DashboardOut:
        summary = await dashboard_service.build_summary(store, restaurant_id, start_date, end_date, user)
        return DashboardOut.from_summary(summary)

    @router.get("/targets/{restaurant_id}", response_model=TargetsSchema)
    async def get_targets(
        restaurant_id: UUID, user: UserContext = Depends(current_user), store: EntryStore = Depends(entry_store)
    ) -> TargetsSchema:
        return TargetsSchema.from_target_set(await kpi_service.get_targets(store, restaurant_id, user))

    @router.put("/targets/{restaurant_id}", response_model=TargetsSchema)
    async def put_targets(
        restaurant_id: UUID,
        payload: TargetsSchema,
        user: UserContext = Depends(current_user),
        store: EntryStore = Depends(entry_store),
    ) -> TargetsSchema:
        updated = await kpi_service.update_targets(store, restaurant_id, payload.to_target_set(), user)
        return TargetsSchema.from_target_set(updated)

    return router
