from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import to_iso_date
from ..core.enums import VersionAction


@dataclass(frozen=True)
class AssignmentKey:
    """A jobseeker placed on a position. Used as a lookup key, never parsed."""

    position_id: str
    jobseeker_profile_id: str


@dataclass(frozen=True)
class TimesheetKey:
    """Reconciliation key within one jobseeker's timesheets."""

    position_id: str
    week_start: date


@dataclass(frozen=True)
class Selection:
    """Jobseeker + position + week currently picked by the user."""

    jobseeker_profile_id: str
    jobseeker_user_id: str
    position_id: str
    week_start: date

    @property
    def assignment(self) -> AssignmentKey:
        return AssignmentKey(position_id=self.position_id, jobseeker_profile_id=self.jobseeker_profile_id)

    @property
    def key(self) -> TimesheetKey:
        return TimesheetKey(position_id=self.position_id, week_start=self.week_start)


@dataclass(frozen=True)
class DailyHours:
    """Persisted per-day hours (overtime is never stored per day)."""

    date: date
    hours: float

    def to_dict(self) -> dict:
        return {"date": to_iso_date(self.date), "hours": self.hours}


@dataclass(frozen=True)
class DailyEntry:
    date: date
    hours: float = 0.0
    overtime_hours: float = 0.0

    def to_dict(self) -> dict:
        return {"date": to_iso_date(self.date), "hours": self.hours, "overtime_hours": self.overtime_hours}


@dataclass(frozen=True)
class WeeklyTimesheet:
    """Working timesheet for one assignment and one week.

    Totals, pay and bill are derived: build new instances through
    ``TimesheetCalculationService`` rather than setting them directly.
    """

    assignment: AssignmentKey
    jobseeker_user_id: str
    week_start: date
    week_end: date
    entries: tuple[DailyEntry, ...]
    invoice_number: str
    total_regular_hours: float = 0.0
    total_overtime_hours: float = 0.0
    bonus_amount: float = 0.0
    deduction_amount: float = 0.0
    jobseeker_pay: float = 0.0
    client_bill: float = 0.0
    existing_timesheet_id: Optional[str] = None

    @property
    def position_id(self) -> str:
        return self.assignment.position_id

    @property
    def jobseeker_profile_id(self) -> str:
        return self.assignment.jobseeker_profile_id

    @property
    def key(self) -> TimesheetKey:
        return TimesheetKey(position_id=self.position_id, week_start=self.week_start)

    @property
    def is_existing(self) -> bool:
        return self.existing_timesheet_id is not None

    @property
    def weekly_total(self) -> float:
        return sum(e.hours for e in self.entries)

    def to_dict(self) -> dict:
        return {
            "position_id": self.position_id,
            "jobseeker_profile_id": self.jobseeker_profile_id,
            "jobseeker_user_id": self.jobseeker_user_id,
            "week_start_date": to_iso_date(self.week_start),
            "week_end_date": to_iso_date(self.week_end),
            "entries": [e.to_dict() for e in self.entries],
            "total_regular_hours": self.total_regular_hours,
            "total_overtime_hours": self.total_overtime_hours,
            "bonus_amount": self.bonus_amount,
            "deduction_amount": self.deduction_amount,
            "jobseeker_pay": self.jobseeker_pay,
            "client_bill": self.client_bill,
            "invoice_number": self.invoice_number,
            "existing_timesheet_id": self.existing_timesheet_id,
        }


@dataclass(frozen=True)
class VersionEntry:
    """One audit entry; a timesheet's history grows by one entry per write."""

    version: int
    action: VersionAction
    created_at: datetime
    created_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "action": self.action.value,
            "created_at": self.created_at.isoformat(),
            "created_by": self.created_by,
        }


@dataclass(frozen=True)
class TimesheetPayload:
    """Full write shape sent to the gateway on create and on update (full replace)."""

    jobseeker_profile_id: str
    jobseeker_user_id: str
    position_id: str
    week_start: date
    week_end: date
    daily_hours: tuple[DailyHours, ...]
    total_regular_hours: float
    total_overtime_hours: float
    regular_pay_rate: float
    overtime_pay_rate: float
    regular_bill_rate: float
    overtime_bill_rate: float
    total_jobseeker_pay: float
    total_client_bill: float
    bonus_amount: float
    deduction_amount: float
    overtime_enabled: bool
    email_sent: bool
    invoice_number: Optional[str] = None
    markup: Optional[float] = None
    submitted_by: Optional[str] = None


@dataclass(frozen=True)
class TimesheetRecord:
    """Persisted timesheet as returned by the gateway."""

    id: str
    jobseeker_profile_id: str
    jobseeker_user_id: str
    position_id: Optional[str]
    week_start: date
    week_end: date
    daily_hours: tuple[DailyHours, ...] = field(default_factory=tuple)
    total_regular_hours: float = 0.0
    total_overtime_hours: float = 0.0
    regular_pay_rate: float = 0.0
    overtime_pay_rate: float = 0.0
    regular_bill_rate: float = 0.0
    overtime_bill_rate: float = 0.0
    total_jobseeker_pay: float = 0.0
    total_client_bill: float = 0.0
    bonus_amount: float = 0.0
    deduction_amount: float = 0.0
    overtime_enabled: bool = False
    markup: Optional[float] = None
    email_sent: bool = False
    invoice_number: Optional[str] = None
    version: int = 1
    version_history: tuple[VersionEntry, ...] = field(default_factory=tuple)

    @property
    def key(self) -> Optional[TimesheetKey]:
        if not self.position_id:
            return None
        return TimesheetKey(position_id=self.position_id, week_start=self.week_start)

    def hours_on(self, day: date) -> Optional[float]:
        for d in self.daily_hours:
            if d.date == day:
                return d.hours
        return None
