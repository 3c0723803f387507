"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from restaurant_kpi.config import AppSettings
from restaurant_kpi.db.database import Database

from .auth import get_auth_router
from .kpi import get_kpi_router
from .reports import get_reports_router
from .restaurants import get_restaurants_router
from .users import get_users_router


def build_api_router(database: Database, settings: AppSettings) -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(get_auth_router(database, settings))
    api_router.include_router(get_restaurants_router(database))
    api_router.include_router(get_users_router(database))
    api_router.include_router(get_kpi_router(database, settings))
    api_router.include_router(get_reports_router(database, settings))
    return api_router


__all__ = ["build_api_router"]
