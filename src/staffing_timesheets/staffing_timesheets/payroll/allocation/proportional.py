from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ...positions.model import PositionRateProfile
from ...timesheets.aggregator import reset_overtime
from ...timesheets.model import DailyEntry
from .base import OvertimeAllocation, OvertimeAllocator


class ProportionalOvertimeAllocator(OvertimeAllocator):
    """Weekly threshold rule; overtime spread over days by their share of the week.

    The per-day figures only exist for display. The weekly regular/overtime
    totals are what pay and billing use.
    """

    def allocate(self, entries: Sequence[DailyEntry], profile: PositionRateProfile) -> OvertimeAllocation:
        weekly_total = sum(e.hours for e in entries)

        if not profile.overtime_enabled:
            return OvertimeAllocation(
                regular_hours=weekly_total,
                overtime_hours=0.0,
                entries=reset_overtime(entries),
            )

        threshold = profile.threshold_hours
        regular = min(weekly_total, threshold)
        overtime = max(0.0, weekly_total - threshold)

        if overtime <= 0 or weekly_total <= 0:
            return OvertimeAllocation(regular_hours=regular, overtime_hours=0.0, entries=reset_overtime(entries))

        distributed = tuple(
            replace(e, overtime_hours=overtime * (e.hours / weekly_total) if e.hours else 0.0)
            for e in entries
        )
        return OvertimeAllocation(regular_hours=regular, overtime_hours=overtime, entries=distributed)
