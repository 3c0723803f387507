"""Calendar helpers: date parsing, period truncation and comparison windows."""

from __future__ import annotations

import re
from datetime import date, timedelta
from enum import Enum

from restaurant_kpi.core.errors import KpiError

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def parse_calendar_date(value: str | date, field: str) -> date:
    """Parse a ``YYYY-MM-DD`` string, raising a validation error otherwise."""

    if isinstance(value, date):
        return value
    text = (value or "").strip()
    if not _DATE_PATTERN.match(text):
        raise KpiError.validation(f"Invalid {field} format. Use YYYY-MM-DD.", {"field": field, "value": value})
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise KpiError.validation(f"Invalid {field} format. Use YYYY-MM-DD.", {"field": field, "value": value}) from exc


def parse_granularity(value: str | Granularity | None) -> Granularity:
    if value is None or value == "":
        return Granularity.DAY
    try:
        return Granularity(value)
    except ValueError as exc:
        raise KpiError.validation(
            "granularity must be one of: day, week, month", {"field": "granularity", "value": value}
        ) from exc


def ensure_ordered(start: date, end: date) -> None:
    if start > end:
        raise KpiError.validation(
            "start_date must be on or before end_date",
            {"start_date": start.isoformat(), "end_date": end.isoformat()},
        )


def period_start(day: date, granularity: Granularity) -> date:
    """Truncate ``day`` to the first day of its bucket (ISO weeks start Monday)."""

    if granularity is Granularity.WEEK:
        return day - timedelta(days=day.weekday())
    if granularity is Granularity.MONTH:
        return day.replace(day=1)
    return day


def previous_period_start(period: date, granularity: Granularity) -> date:
    """Return the start of the calendar period immediately before ``period``."""

    if granularity is Granularity.WEEK:
        return period - timedelta(days=7)
    if granularity is Granularity.MONTH:
        return (period.replace(day=1) - timedelta(days=1)).replace(day=1)
    return period - timedelta(days=1)


def previous_window(start: date, end: date) -> tuple[date, date]:
    """Return the window of identical length that ends the day before ``start``."""

    length = end - start
    prev_end = start - timedelta(days=1)
    prev_start = prev_end - length
    return prev_start, prev_end


__all__ = [
    "Granularity",
    "ensure_ordered",
    "parse_calendar_date",
    "parse_granularity",
    "period_start",
    "previous_period_start",
    "previous_window",
]
