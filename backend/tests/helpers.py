"""Shared set-up for the HTTP level tests."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import AsyncIterator
from uuid import UUID

from httpx import ASGITransport, AsyncClient

from restaurant_kpi.config import AppSettings
from restaurant_kpi.core.security import hash_password
from restaurant_kpi.db.database import Database
from restaurant_kpi.main import create_app
from restaurant_kpi.models import AuthToken, Restaurant, User


@dataclass
class Api:
    client: AsyncClient
    database: Database

    async def restaurant(self, name: str, city: str = "Leeds") -> UUID:
        async with self.database.session() as session:
            restaurant = Restaurant(name=name, city=city)
            session.add(restaurant)
            await session.commit()
            return restaurant.id

    async def user(
        self,
        role: str,
        restaurant_id: UUID | None = None,
        *,
        email: str | None = None,
        password: str | None = None,
    ) -> dict[str, str]:
        """Create a user with a live token and return its auth headers."""

        async with self.database.session() as session:
            user = User(
                name=f"{role.title()} User",
                email=email or f"{role}-{restaurant_id or 'all'}@example.com",
                role=role,
                restaurant_id=restaurant_id,
                password_hash=hash_password(password) if password else "not-a-hash",
            )
            session.add(user)
            await session.flush()
            token = AuthToken.for_user(user.id, timedelta(days=1))
            session.add(token)
            await session.commit()
            return {"Authorization": f"Bearer {token.token}"}


def entry_payload(restaurant_id: UUID, entry_date: str, **overrides) -> dict:
    payload = {
        "restaurant_id": str(restaurant_id),
        "entry_date": entry_date,
        "revenue": 1000,
        "labour_cost": 300,
        "food_cost": 320,
        "orders": 50,
    }
    payload.update(overrides)
    return payload


@asynccontextmanager
async def api_context(tmp_path: Path, **overrides) -> AsyncIterator[Api]:
    settings = AppSettings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'kpi.db'}", **overrides)
    database = Database(url=settings.database_url)
    app = create_app(database, settings)
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield Api(client=client, database=database)
