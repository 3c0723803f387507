"""Report routes: period summary and KPI export."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from restaurant_kpi.config import AppSettings
from restaurant_kpi.db.database import Database
from restaurant_kpi.schemas import SummaryReportOut
from restaurant_kpi.services import reports as reports_service
from restaurant_kpi.services.entry_store import EntryStore
from restaurant_kpi.services.scope import UserContext

from ..dependencies.auth import build_current_user
from ..dependencies.store import build_entry_store


def get_reports_router(database: Database, settings: AppSettings) -> APIRouter:
    router = APIRouter(prefix="/reports", tags=["reports"])
    current_user = build_current_user(database)
    entry_store = build_entry_store(database, settings)

    @router.get("/summary", response_model=SummaryReportOut)
    async def summary(
        start_date: str = Query(..., description="YYYY-MM-DD"),
        end_date: str = Query(..., description="YYYY-MM-DD"),
        restaurant_id: Optional[UUID] = Query(default=None),
        user: UserContext = Depends(current_user),
        store: EntryStore = Depends(entry_store),
    ) -> SummaryReportOut:
        report = await reports_service.summary_report(store, restaurant_id, start_date, end_date, user)
        return SummaryReportOut.from_report(report)

    @router.get("/kpi/export")
    async def export_kpi(
        start_date: str = Query(..., description="YYYY-MM-DD"),
        end_date: str = Query(..., description="YYYY-MM-DD"),
        restaurant_id: Optional[UUID] = Query(default=None),
        format: str = Query(default="csv", description="csv or json"),
        user: UserContext = Depends(current_user),
        store: EntryStore = Depends(entry_store),
    ) -> StreamingResponse:
        """Download the caller's entries for a date range."""

        export = await reports_service.export_entries(store, restaurant_id, start_date, end_date, format, user)
        return StreamingResponse(
            iter([export.payload]),
            media_type=export.media_type,
            headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
        )

    return router
