"""KPI entry exports (CSV or JSON) over the caller's listing scope."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any
from uuid import UUID

import pandas as pd

from restaurant_kpi.analytics import PeriodTotals
from restaurant_kpi.analytics.periods import ensure_ordered, parse_calendar_date
from restaurant_kpi.core.errors import KpiError
from restaurant_kpi.models import KpiEntry

from .entry_store import EntryStore
from .scope import UserContext, resolve_listing_scope, resolve_read_scope

logger = logging.getLogger(__name__)

CSV_COLUMNS = {
    "entry_date": "Date",
    "restaurant": "Restaurant",
    "revenue": "Revenue",
    "labour_cost": "Labour Cost",
    "labour_cost_percent": "Labour %",
    "food_cost": "Food Cost",
    "food_cost_percent": "Food %",
    "orders": "Orders",
    "avg_ticket": "Avg Ticket",
}


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


@dataclass(frozen=True)
class ExportFile:
    filename: str
    media_type: str
    payload: bytes


@dataclass(frozen=True)
class SummaryReport:
    restaurant_id: UUID
    start_date: date
    end_date: date
    totals: PeriodTotals


def parse_format(value: str | None) -> ExportFormat:
    if not value:
        return ExportFormat.CSV
    try:
        return ExportFormat(value.lower())
    except ValueError as exc:
        raise KpiError.validation("format must be one of: csv, json", {"field": "format", "value": value}) from exc


def _row(entry: KpiEntry, fallback_name: str) -> dict[str, Any]:
    restaurant = entry.__dict__.get("restaurant")
    return {
        "entry_date": entry.entry_date.isoformat(),
        "restaurant_id": str(entry.restaurant_id),
        "restaurant": restaurant.name if restaurant is not None else fallback_name,
        "revenue": f"{entry.revenue:.2f}",
        "labour_cost": f"{entry.labour_cost:.2f}",
        "labour_cost_percent": f"{entry.labour_cost_percent:.2f}",
        "food_cost": f"{entry.food_cost:.2f}",
        "food_cost_percent": f"{entry.food_cost_percent:.2f}",
        "orders": int(entry.orders),
        "avg_ticket": f"{entry.avg_ticket:.2f}",
    }


def render_csv(rows: list[dict[str, Any]]) -> bytes:
    frame = pd.DataFrame(rows, columns=list(CSV_COLUMNS) + ["restaurant_id"])
    frame = frame[list(CSV_COLUMNS)].rename(columns=CSV_COLUMNS)
    return frame.to_csv(index=False).encode("utf-8")


def render_json(rows: list[dict[str, Any]]) -> bytes:
    return json.dumps(rows, indent=2).encode("utf-8")


async def export_entries(
    store: EntryStore,
    restaurant_id: UUID | None,
    start_date: str | date,
    end_date: str | date,
    export_format: str | None,
    user: UserContext,
) -> ExportFile:
    """Build a downloadable file of the entries the caller may list."""

    fmt = parse_format(export_format)
    effective_id = resolve_listing_scope(user, restaurant_id)
    start = parse_calendar_date(start_date, "start_date")
    end = parse_calendar_date(end_date, "end_date")
    ensure_ordered(start, end)

    entries = await store.range_query(effective_id, start, end)
    rows = [_row(entry, store.settings.unknown_restaurant_name) for entry in entries]
    logger.info(
        "Exporting %d KPI entries as %s restaurant=%s user=%s", len(rows), fmt.value, effective_id, user.user_id
    )

    stem = f"kpi-export-{start.isoformat()}-to-{end.isoformat()}"
    if fmt is ExportFormat.JSON:
        return ExportFile(filename=f"{stem}.json", media_type="application/json", payload=render_json(rows))
    return ExportFile(filename=f"{stem}.csv", media_type="text/csv", payload=render_csv(rows))



async def summary_report(
    store: EntryStore,
    restaurant_id: UUID | None,
    start_date: str | date,
    end_date: str | date,
    user: UserContext,
) -> SummaryReport:
    """Totals for one restaurant over the range; all zeros when it has no entries."""

    effective_id = resolve_read_scope(user, restaurant_id)
    start = parse_calendar_date(start_date, "start_date")
    end = parse_calendar_date(end_date, "end_date")
    ensure_ordered(start, end)
    totals = await store.period_totals(effective_id, start, end)
    logger.debug("Summary report restaurant=%s %s..%s user=%s", effective_id, start, end, user.user_id)
    return SummaryReport(effective_id, start, end, totals or PeriodTotals())


__all__ = [
    "CSV_COLUMNS",
    "ExportFile",
    "ExportFormat",
    "SummaryReport",
    "export_entries",
    "parse_format",
    "render_csv",
    "render_json",
    "summary_report",
]
