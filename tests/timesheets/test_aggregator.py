from dataclasses import replace
from datetime import date

import pytest

from src.staffing_timesheets.staffing_timesheets.core.exceptions import ValidationError
from src.staffing_timesheets.staffing_timesheets.timesheets.aggregator import (
    build_entries,
    check_week_shape,
    replace_hours,
)


def test_empty_week_has_seven_zero_entries(week_start):
    entries = build_entries(week_start)

    assert [e.date for e in entries][0] == week_start
    assert len(entries) == 7
    assert all(e.hours == 0 and e.overtime_hours == 0 for e in entries)


def test_seeds_hours_from_record_and_fills_missing_days(week_start, make_record):
    record = make_record(hours=(8, 7.5, 0, 6, 0, 0, 4))
    sparse = replace(record, daily_hours=record.daily_hours[:2])

    entries = build_entries(week_start, sparse)

    assert [e.hours for e in entries] == [8, 7.5, 0, 0, 0, 0, 0]


def test_replace_hours_only_touches_one_day(week_start):
    entries = replace_hours(build_entries(week_start), date(2024, 6, 4), "7.25")

    assert [e.hours for e in entries] == [0, 0, 7.25, 0, 0, 0, 0]


@pytest.mark.parametrize("bad", [-1, "x", float("inf"), 24.5, "100"])
def test_replace_hours_rejects_invalid_values(week_start, bad):
    with pytest.raises(ValidationError):
        replace_hours(build_entries(week_start), week_start, bad)


def test_replace_hours_accepts_a_full_day(week_start):
    entries = replace_hours(build_entries(week_start), week_start, 24)

    assert entries[0].hours == 24


def test_check_week_shape(week_start):
    entries = build_entries(week_start)
    check_week_shape(entries, week_start)

    with pytest.raises(ValidationError):
        check_week_shape(tuple(reversed(entries)), week_start)
