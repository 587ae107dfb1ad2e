from __future__ import annotations

from ...common.validators import clamp_non_negative
from ...positions.model import PositionRateProfile
from .base import PayBreakdown, PayCalculator


class StandardPayCalculator(PayCalculator):
    """Standard rule: hours x rate, bonus added and deduction removed from pay only.

    Net pay is not floored at 0. Client billing never sees bonus/deduction.
    """

    def calculate(
        self,
        *,
        regular_hours: float,
        overtime_hours: float,
        profile: PositionRateProfile,
        bonus_amount: float = 0.0,
        deduction_amount: float = 0.0,
    ) -> PayBreakdown:
        bonus = clamp_non_negative(bonus_amount)
        deduction = clamp_non_negative(deduction_amount)

        regular_pay_rate = float(profile.regular_pay_rate)
        regular_bill_rate = float(profile.regular_bill_rate)
        overtime_pay_rate = profile.effective_overtime_pay_rate
        overtime_bill_rate = profile.effective_overtime_bill_rate

        base_pay = regular_hours * regular_pay_rate + overtime_hours * overtime_pay_rate
        client_bill = regular_hours * regular_bill_rate + overtime_hours * overtime_bill_rate

        return PayBreakdown(
            regular_pay_rate=regular_pay_rate,
            overtime_pay_rate=overtime_pay_rate,
            regular_bill_rate=regular_bill_rate,
            overtime_bill_rate=overtime_bill_rate,
            base_pay=base_pay,
            bonus_amount=bonus,
            deduction_amount=deduction,
            jobseeker_pay=base_pay + bonus - deduction,
            client_bill=client_bill,
        )
