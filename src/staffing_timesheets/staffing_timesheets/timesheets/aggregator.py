from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import to_iso_date
from ..common.validators import require_at_most, require_non_negative
from ..core.constants import DAYS_PER_WEEK, MAX_HOURS_PER_DAY
from ..core.exceptions import ValidationError
from ..periods.service import week_dates
from .model import DailyEntry, TimesheetRecord


def build_entries(week_start: date, record: Optional[TimesheetRecord] = None) -> tuple[DailyEntry, ...]:
    """Seven entries in date order, hours pre-filled from ``record`` when given.

    Overtime always starts at 0; it is a property of the whole week and is
    recomputed by the allocator.
    """

    entries = []
    for day in week_dates(week_start):
        hours = record.hours_on(day) if record is not None else None
        entries.append(DailyEntry(date=day, hours=float(hours or 0.0), overtime_hours=0.0))
    return tuple(entries)


def replace_hours(entries: Sequence[DailyEntry], day: date, hours) -> tuple[DailyEntry, ...]:
    """Replace one day's hours; per-day overtime is reset pending recomputation."""
    value = require_at_most(require_non_negative(hours, "Hours"), MAX_HOURS_PER_DAY, "Hours per day")

    if not any(e.date == day for e in entries):
        raise ValidationError(f"{to_iso_date(day)} is not part of this week")

    return tuple(
        DailyEntry(date=e.date, hours=value if e.date == day else e.hours, overtime_hours=0.0)
        for e in entries
    )


def check_week_shape(entries: Sequence[DailyEntry], week_start: date) -> None:
    expected = week_dates(week_start)
    if len(entries) != DAYS_PER_WEEK or [e.date for e in entries] != expected:
        raise ValidationError("A weekly timesheet needs exactly one entry per day of the week, in order")


def reset_overtime(entries: Sequence[DailyEntry]) -> tuple[DailyEntry, ...]:
    return tuple(replace(e, overtime_hours=0.0) for e in entries)
