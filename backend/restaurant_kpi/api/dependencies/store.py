"""Entry store dependency bound to a request-scoped session."""

from __future__ import annotations

from typing import AsyncIterator, Callable

from restaurant_kpi.config import AppSettings
from restaurant_kpi.db.database import Database
from restaurant_kpi.services.entry_store import EntryStore


def build_entry_store(database: Database, settings: AppSettings) -> Callable[[], AsyncIterator[EntryStore]]:
    async def get_entry_store() -> AsyncIterator[EntryStore]:
        async with database.session() as session:
            yield EntryStore(session, settings)

    return get_entry_store


__all__ = ["build_entry_store"]
