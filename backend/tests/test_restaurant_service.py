"""Restaurant persistence against sqlite."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

import pytest
from sqlalchemy import select

from restaurant_kpi.core.errors import ErrorKind, KpiError
from restaurant_kpi.db.database import Database
from restaurant_kpi.models import Restaurant
from restaurant_kpi.services.restaurants import create_restaurant, save_restaurant
from restaurant_kpi.services.scope import UserContext

ADMIN = UserContext(user_id=uuid4(), role="admin")


async def test_concurrent_duplicate_name_becomes_conflict(tmp_path: Path):
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'restaurants.db'}")
    await database.create_all()
    try:
        async with database.session() as first, database.session() as second:
            await create_restaurant(first, "Downtown", "Leeds", ADMIN)

            # the second writer already passed its name check
            with pytest.raises(KpiError) as excinfo:
                await save_restaurant(second, Restaurant(name="Downtown", city="York"))
            assert excinfo.value.kind is ErrorKind.CONFLICT
            assert excinfo.value.detail == {"name": "Downtown"}

            rows = (await second.execute(select(Restaurant))).scalars().all()
            assert [(row.name, row.city) for row in rows] == [("Downtown", "Leeds")]
    finally:
        await database.dispose()


async def test_create_checks_admin_and_trims(tmp_path: Path):
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'restaurants.db'}")
    await database.create_all()
    try:
        async with database.session() as session:
            restaurant = await create_restaurant(session, "  Harbour ", " Hull ", ADMIN)
            assert (restaurant.name, restaurant.city) == ("Harbour", "Hull")

            manager = UserContext(user_id=uuid4(), role="manager", restaurant_id=restaurant.id)
            with pytest.raises(KpiError) as excinfo:
                await create_restaurant(session, "Uptown", "Leeds", manager)
            assert excinfo.value.kind is ErrorKind.FORBIDDEN
    finally:
        await database.dispose()
