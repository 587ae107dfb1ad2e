from __future__ import annotations

from datetime import date, timedelta

from ..common.datetime_utils import format_label_date, to_iso_date
from ..core.constants import DAYS_PER_WEEK, DEFAULT_WEEK_WINDOW, MAX_WEEK_WINDOW
from ..core.exceptions import ValidationError
from .model import WeekOption, WeekRange


def week_bounds(day: date) -> WeekRange:
    """Week (Sunday start) containing ``day``."""
    # date.weekday() is Monday=0..Sunday=6; shift so Sunday=0.
    day_of_week = (day.weekday() + 1) % 7
    start = day - timedelta(days=day_of_week)
    return WeekRange(start=start, end=start + timedelta(days=DAYS_PER_WEEK - 1))


def week_for_start(week_start: date) -> WeekRange:
    """Week anchored at an already-selected start date."""
    bounds = week_bounds(week_start)
    if bounds.start != week_start:
        raise ValidationError(f"Week must start on a Sunday (got {to_iso_date(week_start)})")
    return bounds


def week_dates(week_start: date) -> list[date]:
    return [week_start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def generate_week_options(today: date, *, count: int = DEFAULT_WEEK_WINDOW) -> list[WeekOption]:
    """Descending week options, current week first."""
    if int(count) <= 0:
        raise ValidationError("Week window must be at least 1 week")
    if int(count) > MAX_WEEK_WINDOW:
        raise ValidationError(f"Week window cannot exceed {MAX_WEEK_WINDOW} weeks")

    options: list[WeekOption] = []
    for i in range(int(count)):
        week = week_bounds(today - timedelta(days=DAYS_PER_WEEK * i))
        options.append(
            WeekOption(
                value=to_iso_date(week.start),
                label=f"{format_label_date(week.start)} - {format_label_date(week.end)}",
                week=week,
            )
        )
    return options
