"""KPI entry and aggregation API tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

from helpers import api_context, entry_payload


def test_create_entry_derives_fields_and_rejects_duplicates(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            restaurant_id = await api.restaurant("Downtown")
            admin = await api.user("admin")

            created = await api.client.post("/kpi/entries", json=entry_payload(restaurant_id, "2024-01-02"), headers=admin)
            assert created.status_code == 201
            body = created.json()
            assert body["restaurant_name"] == "Downtown"
            assert body["labour_cost_percent"] == 30.0
            assert body["food_cost_percent"] == 32.0
            assert body["avg_ticket"] == 20.0

            duplicate = await api.client.post(
                "/kpi/entries", json=entry_payload(restaurant_id, "2024-01-02", revenue=500), headers=admin
            )
            assert duplicate.status_code == 409
            assert duplicate.json()["error"] == "conflict"

    asyncio.run(_scenario())


def test_create_entry_validation_errors(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            restaurant_id = await api.restaurant("Downtown")
            admin = await api.user("admin")

            negative = await api.client.post(
                "/kpi/entries", json=entry_payload(restaurant_id, "2024-01-02", revenue=-1), headers=admin
            )
            assert negative.status_code == 400
            assert negative.json()["error"] == "validation"

            bad_date = await api.client.post(
                "/kpi/entries", json=entry_payload(restaurant_id, "02/01/2024"), headers=admin
            )
            assert bad_date.status_code == 400

            future = await api.client.post(
                "/kpi/entries", json=entry_payload(restaurant_id, "2999-01-01"), headers=admin
            )
            assert future.status_code == 400
            assert future.json()["message"] == "Entry date cannot be in the future"

            oversized = await api.client.post(
                "/kpi/entries", json=entry_payload(restaurant_id, "2024-01-03", revenue="1e27"), headers=admin
            )
            assert oversized.status_code == 400
            assert oversized.json()["error"] == "validation"

            sub_cent = await api.client.post(
                "/kpi/entries", json=entry_payload(restaurant_id, "2024-01-03", labour_cost="10.005"), headers=admin
            )
            assert sub_cent.status_code == 400

            timestamp = await api.client.post(
                "/kpi/entries", json=entry_payload(restaurant_id, 1704672000), headers=admin
            )
            assert timestamp.status_code == 400
            assert timestamp.json()["error"] == "validation"

            listed = await api.client.get("/kpi/entries", headers=admin)
            assert listed.json() == []

    asyncio.run(_scenario())


def test_manager_cannot_write_to_another_restaurant(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            own = await api.restaurant("Downtown")
            other = await api.restaurant("Harbour")
            manager = await api.user("manager", own)

            allowed = await api.client.post("/kpi/entries", json=entry_payload(own, "2024-01-02"), headers=manager)
            assert allowed.status_code == 201

            denied = await api.client.post("/kpi/entries", json=entry_payload(other, "2024-01-02"), headers=manager)
            assert denied.status_code == 403
            assert denied.json()["error"] == "forbidden"

            viewer = await api.user("viewer", own)
            read_only = await api.client.post("/kpi/entries", json=entry_payload(own, "2024-01-03"), headers=viewer)
            assert read_only.status_code == 403

    asyncio.run(_scenario())


def test_patch_is_limited_to_writers_of_the_entry_restaurant(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            own = await api.restaurant("Downtown")
            other = await api.restaurant("Harbour")
            admin = await api.user("admin")
            created = await api.client.post("/kpi/entries", json=entry_payload(other, "2024-01-02"), headers=admin)
            entry_id = created.json()["id"]

            manager = await api.user("manager", own)
            cross = await api.client.patch(f"/kpi/entries/{entry_id}", json={"revenue": 1}, headers=manager)
            assert cross.status_code == 403
            assert cross.json()["error"] == "forbidden"

            viewer = await api.user("viewer", other)
            read_only = await api.client.patch(f"/kpi/entries/{entry_id}", json={"orders": 1}, headers=viewer)
            assert read_only.status_code == 403
            assert read_only.json()["error"] == "forbidden"

            unchanged = await api.client.get(f"/kpi/entries/{entry_id}", headers=admin)
            assert unchanged.json()["revenue"] == 1000.0
            assert unchanged.json()["orders"] == 50

            oversized = await api.client.patch(f"/kpi/entries/{entry_id}", json={"food_cost": "1e27"}, headers=admin)
            assert oversized.status_code == 400

    asyncio.run(_scenario())


def test_update_recomputes_and_delete_is_admin_only(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            restaurant_id = await api.restaurant("Downtown")
            admin = await api.user("admin")
            manager = await api.user("manager", restaurant_id)

            created = await api.client.post("/kpi/entries", json=entry_payload(restaurant_id, "2024-01-02"), headers=admin)
            entry_id = created.json()["id"]

            updated = await api.client.patch(f"/kpi/entries/{entry_id}", json={"labour_cost": 250}, headers=manager)
            assert updated.status_code == 200
            assert updated.json()["labour_cost_percent"] == 25.0
            assert updated.json()["revenue"] == 1000.0

            forbidden = await api.client.delete(f"/kpi/entries/{entry_id}", headers=manager)
            assert forbidden.status_code == 403

            deleted = await api.client.delete(f"/kpi/entries/{entry_id}", headers=admin)
            assert deleted.status_code == 204

            missing = await api.client.get(f"/kpi/entries/{entry_id}", headers=admin)
            assert missing.status_code == 404
            assert missing.json()["error"] == "not_found"

    asyncio.run(_scenario())


def test_listing_is_scoped_by_role(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            own = await api.restaurant("Downtown")
            other = await api.restaurant("Harbour")
            admin = await api.user("admin")
            for restaurant_id in (own, other):
                response = await api.client.post(
                    "/kpi/entries", json=entry_payload(restaurant_id, "2024-01-02"), headers=admin
                )
                assert response.status_code == 201

            everything = await api.client.get("/kpi/entries", headers=admin)
            assert len(everything.json()) == 2

            manager = await api.user("manager", own)
            scoped = await api.client.get("/kpi/entries", params={"restaurant_id": str(other)}, headers=manager)
            assert [row["restaurant_id"] for row in scoped.json()] == [str(own)]

            unassigned = await api.user("manager", email="drifter@example.com")
            denied = await api.client.get("/kpi/entries", headers=unassigned)
            assert denied.status_code == 403

            unauthenticated = await api.client.get("/kpi/entries")
            assert unauthenticated.status_code == 401

    asyncio.run(_scenario())


def test_weekly_aggregation_with_alerts(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            restaurant_id = await api.restaurant("Downtown")
            admin = await api.user("admin")
            for day in ("2024-01-01", "2024-01-02", "2024-01-03"):
                await api.client.post("/kpi/entries", json=entry_payload(restaurant_id, day), headers=admin)

            response = await api.client.get(
                "/kpi/aggregated",
                params={
                    "restaurant_id": str(restaurant_id),
                    "start_date": "2024-01-01",
                    "end_date": "2024-01-31",
                    "granularity": "week",
                },
                headers=admin,
            )
            assert response.status_code == 200
            [bucket] = response.json()
            assert bucket["period"] == "2024-01-01"
            assert bucket["restaurant_name"] == "Downtown"
            assert bucket["total_revenue"] == 3000.0
            assert bucket["total_orders"] == 150
            assert bucket["labour_cost_percent"] == 30.0
            assert bucket["labour_cost_status"] == "critical"
            assert bucket["food_cost_status"] == "good"
            assert bucket["revenue_trend"] == 0

    asyncio.run(_scenario())


def test_manager_aggregation_ignores_requested_restaurant(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            own = await api.restaurant("Downtown")
            other = await api.restaurant("Harbour")
            admin = await api.user("admin")
            await api.client.post("/kpi/entries", json=entry_payload(own, "2024-01-02"), headers=admin)
            await api.client.post(
                "/kpi/entries", json=entry_payload(other, "2024-01-02", revenue=5000), headers=admin
            )
            manager = await api.user("manager", own)

            response = await api.client.get(
                "/kpi/aggregated",
                params={"restaurant_id": str(other), "start_date": "2024-01-01", "end_date": "2024-01-07"},
                headers=manager,
            )
            assert response.status_code == 200
            [bucket] = response.json()
            assert bucket["restaurant_id"] == str(own)
            assert bucket["total_revenue"] == 1000.0

    asyncio.run(_scenario())


def test_aggregation_rejects_bad_parameters(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            restaurant_id = await api.restaurant("Downtown")
            admin = await api.user("admin")
            base = {"restaurant_id": str(restaurant_id), "start_date": "2024-01-01", "end_date": "2024-01-31"}

            bad_granularity = await api.client.get(
                "/kpi/aggregated", params={**base, "granularity": "year"}, headers=admin
            )
            assert bad_granularity.status_code == 400

            reversed_range = await api.client.get(
                "/kpi/aggregated", params={**base, "start_date": "2024-02-01"}, headers=admin
            )
            assert reversed_range.status_code == 400

            no_restaurant = await api.client.get(
                "/kpi/aggregated", params={"start_date": "2024-01-01", "end_date": "2024-01-31"}, headers=admin
            )
            assert no_restaurant.status_code == 400
            assert no_restaurant.json()["message"] == "Restaurant ID is required"

    asyncio.run(_scenario())


def test_targets_override_defaults(tmp_path: Path):
    async def _scenario():
        async with api_context(tmp_path) as api:
            restaurant_id = await api.restaurant("Downtown")
            admin = await api.user("admin")
            manager = await api.user("manager", restaurant_id)

            defaults = await api.client.get(f"/kpi/targets/{restaurant_id}", headers=manager)
            assert defaults.json()["labour_cost"] == {"target": 25.0, "warning": 28.0, "critical": 30.0}

            payload = {
                "labour_cost": {"target": 30, "warning": 33, "critical": 36},
                "food_cost": {"target": 32, "warning": 35, "critical": 38},
            }
            denied = await api.client.put(f"/kpi/targets/{restaurant_id}", json=payload, headers=manager)
            assert denied.status_code == 403

            updated = await api.client.put(f"/kpi/targets/{restaurant_id}", json=payload, headers=admin)
            assert updated.status_code == 200
            assert updated.json()["labour_cost"]["critical"] == 36.0

            await api.client.post("/kpi/entries", json=entry_payload(restaurant_id, "2024-01-02"), headers=admin)
            response = await api.client.get(
                "/kpi/aggregated",
                params={"start_date": "2024-01-01", "end_date": "2024-01-07"},
                headers=manager,
            )
            [bucket] = response.json()
            assert bucket["labour_cost_status"] == "good"
            assert bucket["labour_cost_target"] == 30.0

            inverted = {**payload, "labour_cost": {"target": 30, "warning": 40, "critical": 36}}
            rejected = await api.client.put(f"/kpi/targets/{restaurant_id}", json=inverted, headers=admin)
            assert rejected.status_code == 400

    asyncio.run(_scenario())
