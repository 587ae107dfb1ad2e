from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...positions.model import PositionRateProfile


@dataclass(frozen=True)
class PayBreakdown:
    regular_pay_rate: float
    overtime_pay_rate: float
    regular_bill_rate: float
    overtime_bill_rate: float
    base_pay: float
    bonus_amount: float
    deduction_amount: float
    jobseeker_pay: float
    client_bill: float

    @property
    def has_non_positive_pay(self) -> bool:
        """Large deductions can legitimately zero out or overdraw net pay."""
        return self.jobseeker_pay <= 0


class PayCalculator(ABC):
    """Calculator interface (Strategy Pattern for pay and billing)."""

    @abstractmethod
    def calculate(
        self,
        *,
        regular_hours: float,
        overtime_hours: float,
        profile: PositionRateProfile,
        bonus_amount: float = 0.0,
        deduction_amount: float = 0.0,
    ) -> PayBreakdown:
        raise NotImplementedError
