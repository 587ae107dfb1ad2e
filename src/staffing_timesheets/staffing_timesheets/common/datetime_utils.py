from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def to_iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def coerce_date(value) -> date:
    """Accept a date, a datetime or an ISO string (as returned by drivers/JSON)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_iso_date(value.strip()[:10])
    raise TypeError(f"Unsupported date value type: {type(value)!r}")


def format_label_date(value: date) -> str:
    return value.strftime("%b %d, %Y")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()
