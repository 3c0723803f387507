"""Load restaurants, users, targets and KPI entries into the database."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any

from sqlalchemy import select

from restaurant_kpi.analytics import TargetSet, Thresholds
from restaurant_kpi.config import get_settings
from restaurant_kpi.core.errors import ErrorKind, KpiError
from restaurant_kpi.core.logging import setup_logging
from restaurant_kpi.core.security import hash_password
from restaurant_kpi.db.database import Database
from restaurant_kpi.models import Restaurant, User
from restaurant_kpi.services.entry_store import EntryStore

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"


def demo_payload(today: date | None = None, days: int = 7, seed: int = 7) -> dict[str, Any]:
    """Two restaurants with a week of plausible figures each."""

    today = today or date.today()
    rng = random.Random(seed)
    restaurants = [
        {
            "name": "Downtown Delivery Hub",
            "city": "New York",
            "targets": {
                "labour_cost": {"target": 23, "warning": 25, "critical": 28},
                "food_cost": {"target": 32, "warning": 35, "critical": 38},
            },
        },
        {"name": "Westside Kitchen", "city": "Los Angeles"},
    ]
    entries = []
    for restaurant in restaurants:
        for offset in range(days):
            orders = rng.randint(65, 100)
            revenue = Decimal(orders) * Decimal(rng.randint(1800, 2600)) / 100
            entries.append(
                {
                    "restaurant": restaurant["name"],
                    "entry_date": (today - timedelta(days=offset)).isoformat(),
                    "revenue": str(revenue.quantize(Decimal("0.01"))),
                    "labour_cost": str((revenue * Decimal(rng.randint(20, 31)) / 100).quantize(Decimal("0.01"))),
                    "food_cost": str((revenue * Decimal(rng.randint(28, 40)) / 100).quantize(Decimal("0.01"))),
                    "orders": orders,
                }
            )
    users = [
        {"name": "Admin", "email": "admin@kpi.com", "role": "admin"},
        {"name": "Manager One", "email": "manager1@kpi.com", "role": "manager", "restaurant": "Downtown Delivery Hub"},
        {"name": "Manager Two", "email": "manager2@kpi.com", "role": "manager", "restaurant": "Westside Kitchen"},
    ]
    return {"restaurants": restaurants, "users": users, "entries": entries}


def _thresholds(raw: dict[str, Any]) -> Thresholds:
    return Thresholds(
        target=Decimal(str(raw["target"])),
        warning=Decimal(str(raw["warning"])),
        critical=Decimal(str(raw["critical"])),
    )


async def load_seed(database: Database, payload: dict[str, Any]) -> dict[str, int]:
    """Insert ``payload``; rows that already exist are left untouched."""

    counts = {"restaurants": 0, "users": 0, "entries": 0}
    async with database.session() as session:
        store = EntryStore(session)
        ids = {}
        for raw in payload.get("restaurants", []):
            existing = (await session.execute(select(Restaurant).where(Restaurant.name == raw["name"]))).scalar_one_or_none()
            if existing is None:
                existing = Restaurant(name=raw["name"], city=raw.get("city", ""))
                session.add(existing)
                await session.commit()
                counts["restaurants"] += 1
            ids[raw["name"]] = existing.id
            if "targets" in raw:
                targets = raw["targets"]
                await store.upsert_targets(
                    existing.id,
                    TargetSet(labour_cost=_thresholds(targets["labour_cost"]), food_cost=_thresholds(targets["food_cost"])),
                )

        for raw in payload.get("users", []):
            email = raw["email"].strip().lower()
            if (await session.execute(select(User).where(User.email == email))).scalar_one_or_none() is not None:
                continue
            session.add(
                User(
                    name=raw["name"],
                    email=email,
                    role=raw.get("role", "viewer"),
                    restaurant_id=ids.get(raw.get("restaurant")),
                    password_hash=hash_password(raw.get("password", DEMO_PASSWORD)),
                )
            )
            await session.commit()
            counts["users"] += 1

        for raw in payload.get("entries", []):
            try:
                await store.insert(
                    restaurant_id=ids[raw["restaurant"]],
                    entry_date=date.fromisoformat(raw["entry_date"]),
                    revenue=Decimal(str(raw["revenue"])),
                    labour_cost=Decimal(str(raw["labour_cost"])),
                    food_cost=Decimal(str(raw["food_cost"])),
                    orders=int(raw["orders"]),
                )
            except KpiError as exc:
                if exc.kind is not ErrorKind.CONFLICT:
                    raise
                logger.debug("Skipping existing entry %s %s", raw["restaurant"], raw["entry_date"])
                continue
            counts["entries"] += 1
    return counts


async def _run(seed_file: Path | None) -> None:
    settings = get_settings()
    database = Database(settings.database_url)
    try:
        await database.create_all()
        payload = json.loads(seed_file.read_text()) if seed_file else demo_payload()
        counts = await load_seed(database, payload)
        logger.info("Seed loaded: %s", counts)
    finally:
        await database.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Load seed data into the restaurant KPI database")
    parser.add_argument("seed_file", nargs="?", default=None, help="JSON seed file; demo data when omitted")
    args = parser.parse_args()
    seed_path = Path(args.seed_file) if args.seed_file else None
    if seed_path is not None and not seed_path.exists():
        raise SystemExit(f"Seed file not found: {seed_path}")
    setup_logging(get_settings().log_level)
    asyncio.run(_run(seed_path))


if __name__ == "__main__":
    main()
