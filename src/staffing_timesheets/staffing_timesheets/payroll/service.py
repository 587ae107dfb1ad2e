from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional

from ..common.logging_config import get_logger
from ..common.validators import clamp_non_negative
from ..positions.model import PositionRateProfile
from ..timesheets.aggregator import check_week_shape, replace_hours
from ..timesheets.model import WeeklyTimesheet
from .allocation.base import OvertimeAllocator
from .allocation.proportional import ProportionalOvertimeAllocator
from .calculator.base import PayCalculator
from .calculator.standard_calculator import StandardPayCalculator

logger = get_logger(__name__)


class TimesheetCalculationService:
    """Recomputes derived figures of a weekly timesheet.

    Every change (one day's hours, bonus, deduction) recomputes the whole
    week synchronously; nothing derived is cached between calls.
    """

    def __init__(
        self,
        *,
        allocator: Optional[OvertimeAllocator] = None,
        calculator: Optional[PayCalculator] = None,
    ):
        self._allocator = allocator or ProportionalOvertimeAllocator()
        self._calculator = calculator or StandardPayCalculator()

    def recalculate(self, timesheet: WeeklyTimesheet, profile: PositionRateProfile) -> WeeklyTimesheet:
        check_week_shape(timesheet.entries, timesheet.week_start)

        allocation = self._allocator.allocate(timesheet.entries, profile)
        pay = self._calculator.calculate(
            regular_hours=allocation.regular_hours,
            overtime_hours=allocation.overtime_hours,
            profile=profile,
            bonus_amount=timesheet.bonus_amount,
            deduction_amount=timesheet.deduction_amount,
        )

        if pay.has_non_positive_pay and allocation.regular_hours + allocation.overtime_hours > 0:
            logger.warning(
                "Net pay is %.2f for position %s week %s",
                pay.jobseeker_pay,
                timesheet.position_id,
                timesheet.week_start.isoformat(),
            )

        return replace(
            timesheet,
            entries=allocation.entries,
            total_regular_hours=allocation.regular_hours,
            total_overtime_hours=allocation.overtime_hours,
            bonus_amount=pay.bonus_amount,
            deduction_amount=pay.deduction_amount,
            jobseeker_pay=pay.jobseeker_pay,
            client_bill=pay.client_bill,
        )

    def edit_hours(
        self,
        timesheet: WeeklyTimesheet,
        profile: PositionRateProfile,
        *,
        day: date,
        hours,
    ) -> WeeklyTimesheet:
        entries = replace_hours(timesheet.entries, day, hours)
        return self.recalculate(replace(timesheet, entries=entries), profile)

    def set_bonus(self, timesheet: WeeklyTimesheet, profile: PositionRateProfile, amount) -> WeeklyTimesheet:
        return self.recalculate(replace(timesheet, bonus_amount=clamp_non_negative(amount)), profile)

    def set_deduction(self, timesheet: WeeklyTimesheet, profile: PositionRateProfile, amount) -> WeeklyTimesheet:
        return self.recalculate(replace(timesheet, deduction_amount=clamp_non_negative(amount)), profile)
