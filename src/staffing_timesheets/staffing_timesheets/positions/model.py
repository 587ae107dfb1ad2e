from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.validators import optional_rate, require_non_empty, require_non_negative
from ..core.constants import DEFAULT_OVERTIME_THRESHOLD_HOURS


@dataclass(frozen=True)
class PositionRateProfile:
    """Rates of a position, as owned by Position management (read-only here)."""

    position_id: str
    regular_pay_rate: float
    regular_bill_rate: float
    overtime_enabled: bool = False
    overtime_threshold_hours: Optional[float] = None
    overtime_pay_rate: Optional[float] = None
    overtime_bill_rate: Optional[float] = None
    markup: Optional[float] = None
    title: Optional[str] = None

    @property
    def threshold_hours(self) -> float:
        if self.overtime_threshold_hours is None:
            return DEFAULT_OVERTIME_THRESHOLD_HOURS
        return float(self.overtime_threshold_hours)

    @property
    def effective_overtime_pay_rate(self) -> float:
        if self.overtime_enabled and self.overtime_pay_rate:
            return float(self.overtime_pay_rate)
        return float(self.regular_pay_rate)

    @property
    def effective_overtime_bill_rate(self) -> float:
        if self.overtime_enabled and self.overtime_bill_rate:
            return float(self.overtime_bill_rate)
        return float(self.regular_bill_rate)

    @classmethod
    def from_mapping(cls, data: dict) -> "PositionRateProfile":
        """Build from a DB row or JSON body, validating rates once on ingress."""
        return cls(
            position_id=require_non_empty(data.get("position_id") or data.get("id"), "Position"),
            regular_pay_rate=require_non_negative(data.get("regular_pay_rate") or 0, "Regular pay rate"),
            regular_bill_rate=require_non_negative(data.get("regular_bill_rate") or 0, "Regular bill rate"),
            overtime_enabled=bool(data.get("overtime_enabled") or False),
            overtime_threshold_hours=optional_rate(data.get("overtime_threshold_hours"), "Overtime threshold"),
            overtime_pay_rate=optional_rate(data.get("overtime_pay_rate"), "Overtime pay rate"),
            overtime_bill_rate=optional_rate(data.get("overtime_bill_rate"), "Overtime bill rate"),
            markup=optional_rate(data.get("markup"), "Markup"),
            title=data.get("title"),
        )
