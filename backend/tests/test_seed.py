import asyncio
from datetime import date
from decimal import Decimal
from pathlib import Path

from scripts.load_seed import demo_payload, load_seed

from restaurant_kpi.config import AppSettings
from restaurant_kpi.db.database import Database
from restaurant_kpi.services.entry_store import EntryStore


def test_demo_seed_is_idempotent(tmp_path: Path):
    async def _scenario():
        database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
        try:
            await database.create_all()
            payload = demo_payload(today=date(2024, 1, 14), days=3)
            # keep the suite fast: one hashed user is enough
            payload["users"] = payload["users"][:1]

            first = await load_seed(database, payload)
            assert first == {"restaurants": 2, "users": 1, "entries": 6}

            second = await load_seed(database, payload)
            assert second == {"restaurants": 0, "users": 0, "entries": 0}

            async with database.session() as session:
                store = EntryStore(session, AppSettings())
                entries = await store.range_query(None, date(2024, 1, 12), date(2024, 1, 14))
                assert len(entries) == 6
                downtown = next(e.restaurant_id for e in entries if e.restaurant.name == "Downtown Delivery Hub")
                targets = await store.targets(downtown)
                assert targets.labour_cost.critical == Decimal("28")
        finally:
            await database.dispose()

    asyncio.run(_scenario())
