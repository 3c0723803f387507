"""Restaurant listing and KPI export tests."""

from __future__ import annotations

import asyncio
import csv
import io
from pathlib import Path
from uuid import UUID

from helpers import api_context, entry_payload


def test_restaurant_listing_follows_scope(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            admin = await api.user("admin")
            created = await api.client.post("/restaurants", json={"name": "Downtown", "city": "Leeds"}, headers=admin)
            assert created.status_code == 201
            own = created.json()["id"]
            await api.client.post("/restaurants", json={"name": "Harbour"}, headers=admin)

            clash = await api.client.post("/restaurants", json={"name": "Downtown"}, headers=admin)
            assert clash.status_code == 409

            everything = await api.client.get("/restaurants", headers=admin)
            assert [row["name"] for row in everything.json()] == ["Downtown", "Harbour"]

            manager = await api.user("manager", UUID(own))
            scoped = await api.client.get("/restaurants", headers=manager)
            assert [row["id"] for row in scoped.json()] == [own]

            denied = await api.client.post("/restaurants", json={"name": "Uptown"}, headers=manager)
            assert denied.status_code == 403

    asyncio.run(_scenario())


def test_csv_export_is_scoped_for_managers(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            own = await api.restaurant("Downtown")
            other = await api.restaurant("Harbour")
            admin = await api.user("admin")
            await api.client.post("/kpi/entries", json=entry_payload(own, "2024-01-02"), headers=admin)
            await api.client.post("/kpi/entries", json=entry_payload(other, "2024-01-02"), headers=admin)
            manager = await api.user("manager", own)

            response = await api.client.get(
                "/reports/kpi/export",
                params={"start_date": "2024-01-01", "end_date": "2024-01-31"},
                headers=manager,
            )
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/csv")
            assert 'filename="kpi-export-2024-01-01-to-2024-01-31.csv"' in response.headers["content-disposition"]

            rows = list(csv.DictReader(io.StringIO(response.text)))
            assert len(rows) == 1
            assert rows[0]["Restaurant"] == "Downtown"
            assert rows[0]["Labour %"] == "30.00"

    asyncio.run(_scenario())


def test_json_export_and_format_validation(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            restaurant_id = await api.restaurant("Downtown")
            admin = await api.user("admin")
            await api.client.post("/kpi/entries", json=entry_payload(restaurant_id, "2024-01-02"), headers=admin)
            params = {"start_date": "2024-01-01", "end_date": "2024-01-31"}

            exported = await api.client.get("/reports/kpi/export", params={**params, "format": "json"}, headers=admin)
            assert exported.status_code == 200
            [row] = exported.json()
            assert row["restaurant"] == "Downtown"
            assert row["avg_ticket"] == "20.00"

            unsupported = await api.client.get("/reports/kpi/export", params={**params, "format": "xml"}, headers=admin)
            assert unsupported.status_code == 400

    asyncio.run(_scenario())


def test_restaurant_detail_update_and_delete(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            own = await api.restaurant("Downtown")
            other = await api.restaurant("Harbour")
            admin = await api.user("admin")
            manager = await api.user("manager", own)
            await api.client.post("/kpi/entries", json=entry_payload(other, "2024-01-02"), headers=admin)

            detail = await api.client.get(f"/restaurants/{own}", headers=manager)
            assert detail.status_code == 200
            assert detail.json()["name"] == "Downtown"

            foreign = await api.client.get(f"/restaurants/{other}", headers=manager)
            assert foreign.status_code == 403

            renamed = await api.client.patch(f"/restaurants/{own}", json={"city": "York"}, headers=admin)
            assert renamed.status_code == 200
            assert renamed.json()["city"] == "York"
            assert renamed.json()["name"] == "Downtown"

            clash = await api.client.patch(f"/restaurants/{own}", json={"name": "Harbour"}, headers=admin)
            assert clash.status_code == 409
            assert clash.json()["error"] == "conflict"

            not_admin = await api.client.patch(f"/restaurants/{own}", json={"city": "Hull"}, headers=manager)
            assert not_admin.status_code == 403
            denied = await api.client.delete(f"/restaurants/{other}", headers=manager)
            assert denied.status_code == 403

            removed = await api.client.delete(f"/restaurants/{other}", headers=admin)
            assert removed.status_code == 204
            gone = await api.client.get(f"/restaurants/{other}", headers=admin)
            assert gone.status_code == 404
            entries = await api.client.get("/kpi/entries", headers=admin)
            assert entries.json() == []

    asyncio.run(_scenario())


def test_summary_report_totals_with_zero_fallback(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            own = await api.restaurant("Downtown")
            other = await api.restaurant("Harbour")
            admin = await api.user("admin")
            await api.client.post("/kpi/entries", json=entry_payload(own, "2024-01-02"), headers=admin)
            await api.client.post(
                "/kpi/entries",
                json=entry_payload(own, "2024-01-03", revenue=3000, labour_cost=900, food_cost=600, orders=100),
                headers=admin,
            )
            await api.client.post("/kpi/entries", json=entry_payload(other, "2024-01-02", revenue=99), headers=admin)
            params = {"start_date": "2024-01-01", "end_date": "2024-01-31"}

            response = await api.client.get(
                "/reports/summary", params={**params, "restaurant_id": str(own)}, headers=admin
            )
            assert response.status_code == 200
            body = response.json()
            assert body["restaurant_id"] == str(own)
            assert body["summary"] == {
                "total_revenue": 4000.0,
                "total_labour_cost": 1200.0,
                "total_food_cost": 920.0,
                "total_orders": 150,
                "avg_ticket": 26.67,
                "labour_cost_percent": 30.0,
                "food_cost_percent": 23.0,
            }

            manager = await api.user("manager", own)
            forced = await api.client.get(
                "/reports/summary", params={**params, "restaurant_id": str(other)}, headers=manager
            )
            assert forced.json()["restaurant_id"] == str(own)
            assert forced.json()["summary"]["total_orders"] == 150

            empty = await api.client.get(
                "/reports/summary",
                params={"start_date": "2023-01-01", "end_date": "2023-01-31", "restaurant_id": str(own)},
                headers=admin,
            )
            assert empty.status_code == 200
            assert set(empty.json()["summary"].values()) == {0}

            missing = await api.client.get("/reports/summary", params=params, headers=admin)
            assert missing.status_code == 400
            reversed_range = await api.client.get(
                "/reports/summary",
                params={"start_date": "2024-02-01", "end_date": "2024-01-01", "restaurant_id": str(own)},
                headers=admin,
            )
            assert reversed_range.status_code == 400

    asyncio.run(_scenario())
