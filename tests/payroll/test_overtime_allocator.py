from dataclasses import replace
from datetime import timedelta

import pytest

from src.staffing_timesheets.staffing_timesheets.payroll.allocation.proportional import ProportionalOvertimeAllocator
from src.staffing_timesheets.staffing_timesheets.timesheets.model import DailyEntry


def _entries(week_start, hours):
    return tuple(DailyEntry(date=week_start + timedelta(days=i), hours=float(h)) for i, h in enumerate(hours))


def test_threshold_split_spreads_overtime_by_share(week_start, overtime_profile):
    entries = _entries(week_start, [8, 8, 8, 8, 8, 8, 0])

    result = ProportionalOvertimeAllocator().allocate(entries, overtime_profile)

    assert result.regular_hours == 40
    assert result.overtime_hours == 8
    for e in result.entries[:6]:
        assert e.overtime_hours == pytest.approx(8 * (8 / 48))
    assert result.entries[6].overtime_hours == 0
    assert sum(e.overtime_hours for e in result.entries) == pytest.approx(8, abs=1e-6)


def test_overtime_disabled_keeps_everything_regular(week_start, flat_profile):
    entries = _entries(week_start, [10, 10, 10, 10, 10, 0, 0])

    result = ProportionalOvertimeAllocator().allocate(entries, flat_profile)

    assert result.regular_hours == 50
    assert result.overtime_hours == 0
    assert all(e.overtime_hours == 0 for e in result.entries)


def test_zero_hours_week_has_no_overtime(week_start, overtime_profile):
    result = ProportionalOvertimeAllocator().allocate(_entries(week_start, [0] * 7), overtime_profile)

    assert result.regular_hours == 0
    assert result.overtime_hours == 0
    assert all(e.overtime_hours == 0 for e in result.entries)


def test_under_threshold_clears_stale_per_day_overtime(week_start, overtime_profile):
    entries = tuple(DailyEntry(date=e.date, hours=e.hours, overtime_hours=3.0) for e in _entries(week_start, [5] * 7))

    result = ProportionalOvertimeAllocator().allocate(entries, overtime_profile)

    assert result.regular_hours == 35
    assert result.overtime_hours == 0
    assert all(e.overtime_hours == 0 for e in result.entries)


def test_custom_threshold(week_start, overtime_profile):
    profile = replace(overtime_profile, overtime_threshold_hours=30)
    entries = _entries(week_start, [6, 6, 6, 6, 6, 6, 1.5])

    result = ProportionalOvertimeAllocator().allocate(entries, profile)

    assert result.regular_hours == 30
    assert result.overtime_hours == pytest.approx(7.5)
    assert result.regular_hours + result.overtime_hours == pytest.approx(sum(e.hours for e in entries))


@pytest.mark.parametrize(
    "hours",
    [
        [0, 0, 0, 0, 0, 0, 0],
        [12.5, 0, 9.25, 11, 0, 14, 3.3],
        [40, 0, 0, 0, 0, 0, 0],
        [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7],
        [24, 24, 24, 24, 24, 24, 24],
    ],
)
def test_conservation(week_start, overtime_profile, flat_profile, hours):
    entries = _entries(week_start, hours)
    total = sum(hours)

    for profile in (overtime_profile, flat_profile):
        result = ProportionalOvertimeAllocator().allocate(entries, profile)
        assert result.regular_hours + result.overtime_hours == pytest.approx(total)
        if total > 0:
            assert abs(sum(e.overtime_hours for e in result.entries) - result.overtime_hours) < 1e-6
