from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.staffing_timesheets.staffing_timesheets.core.exceptions import GatewayError
from src.staffing_timesheets.staffing_timesheets.positions.model import PositionRateProfile
from src.staffing_timesheets.staffing_timesheets.timesheets.history import append_version, initial_history
from src.staffing_timesheets.staffing_timesheets.timesheets.invoice import next_invoice_number
from src.staffing_timesheets.staffing_timesheets.timesheets.model import (
    DailyHours,
    Selection,
    TimesheetPayload,
    TimesheetRecord,
)

WEEK_START = date(2024, 6, 2)
STORE_NOW = datetime(2024, 6, 5, 9, 0, 0)


def record_from_payload(
    timesheet_id: str,
    payload: TimesheetPayload,
    *,
    invoice_number: str,
    version: int = 1,
    version_history=(),
) -> TimesheetRecord:
    return TimesheetRecord(
        id=timesheet_id,
        jobseeker_profile_id=payload.jobseeker_profile_id,
        jobseeker_user_id=payload.jobseeker_user_id,
        position_id=payload.position_id,
        week_start=payload.week_start,
        week_end=payload.week_end,
        daily_hours=payload.daily_hours,
        total_regular_hours=payload.total_regular_hours,
        total_overtime_hours=payload.total_overtime_hours,
        regular_pay_rate=payload.regular_pay_rate,
        overtime_pay_rate=payload.overtime_pay_rate,
        regular_bill_rate=payload.regular_bill_rate,
        overtime_bill_rate=payload.overtime_bill_rate,
        total_jobseeker_pay=payload.total_jobseeker_pay,
        total_client_bill=payload.total_client_bill,
        bonus_amount=payload.bonus_amount,
        deduction_amount=payload.deduction_amount,
        overtime_enabled=payload.overtime_enabled,
        markup=payload.markup,
        email_sent=payload.email_sent,
        invoice_number=invoice_number,
        version=version,
        version_history=tuple(version_history),
    )


class InMemoryTimesheetGateway:
    def __init__(self, records=()):
        self.records: dict[str, TimesheetRecord] = {r.id: r for r in records}
        self.calls: list[tuple] = []
        self.lookup_error: Exception | None = None
        self.invoice_error: Exception | None = None
        self.create_error: Exception | None = None
        self.failing_update_ids: set[str] = set()
        self._seq = 0

    def lookup_by_jobseeker_and_week(self, jobseeker_user_id, week_start, week_end, *, limit=100):
        self.calls.append(("lookup", jobseeker_user_id, week_start, week_end, limit))
        if self.lookup_error is not None:
            raise self.lookup_error
        found = [
            r
            for r in self.records.values()
            if r.jobseeker_user_id == jobseeker_user_id and r.week_start >= week_start and r.week_end <= week_end
        ]
        return found[:limit]

    def _next_invoice(self) -> str:
        numbers = [r.invoice_number for r in self.records.values() if r.invoice_number and r.invoice_number.isdigit()]
        taken = set(numbers)
        return next_invoice_number(max(numbers) if numbers else None, exists=lambda n: n in taken)

    def generate_invoice_number(self):
        self.calls.append(("generate_invoice_number",))
        if self.invoice_error is not None:
            raise self.invoice_error
        return self._next_invoice()

    def create(self, payload):
        self.calls.append(("create", payload))
        if self.create_error is not None:
            raise self.create_error
        for r in self.records.values():
            if (r.jobseeker_user_id, r.position_id, r.week_start) == (
                payload.jobseeker_user_id,
                payload.position_id,
                payload.week_start,
            ):
                raise GatewayError("Failed to create timesheet: duplicate entry")

        invoice = payload.invoice_number
        if not invoice or invoice == "TBD":
            invoice = self._next_invoice()
        self._seq += 1
        record = record_from_payload(
            f"ts-{self._seq}",
            payload,
            invoice_number=invoice,
            version_history=initial_history(payload.submitted_by, STORE_NOW),
        )
        self.records[record.id] = record
        return record

    def update(self, timesheet_id, payload):
        self.calls.append(("update", timesheet_id, payload))
        if timesheet_id in self.failing_update_ids:
            raise GatewayError(f"Failed to update timesheet: {timesheet_id} locked")
        current = self.records.get(timesheet_id)
        if current is None:
            raise GatewayError(f"Timesheet {timesheet_id} not found")
        version = current.version + 1
        record = record_from_payload(
            timesheet_id,
            payload,
            invoice_number=current.invoice_number,
            version=version,
            version_history=append_version(
                current.version_history, version=version, created_by=payload.submitted_by, now=STORE_NOW
            ),
        )
        self.records[timesheet_id] = record
        return record

    def get_by_id(self, timesheet_id):
        self.calls.append(("get_by_id", timesheet_id))
        return self.records.get(timesheet_id)

    def delete(self, timesheet_id):
        self.calls.append(("delete", timesheet_id))
        return self.records.pop(timesheet_id, None) is not None

    def count(self, kind: str) -> int:
        return sum(1 for c in self.calls if c[0] == kind)


class InMemoryPositionRepository:
    def __init__(self, profiles=()):
        self.profiles = {p.position_id: p for p in profiles}

    def get_rate_profile(self, position_id):
        return self.profiles.get(position_id)


def stored_record(
    *,
    id="ts-existing",
    position_id="P1",
    week_start=WEEK_START,
    hours=(8, 8, 8, 8, 8, 0, 0),
    bonus=25.0,
    invoice_number="000041",
    user_id="U1",
    profile_id="JP1",
) -> TimesheetRecord:
    return TimesheetRecord(
        id=id,
        jobseeker_profile_id=profile_id,
        jobseeker_user_id=user_id,
        position_id=position_id,
        week_start=week_start,
        week_end=week_start + timedelta(days=6),
        daily_hours=tuple(DailyHours(date=week_start + timedelta(days=i), hours=float(h)) for i, h in enumerate(hours)),
        total_regular_hours=float(sum(hours)),
        bonus_amount=bonus,
        invoice_number=invoice_number,
    )


@pytest.fixture
def week_start() -> date:
    return WEEK_START


@pytest.fixture
def selection() -> Selection:
    return Selection(jobseeker_profile_id="JP1", jobseeker_user_id="U1", position_id="P1", week_start=WEEK_START)


@pytest.fixture
def overtime_profile() -> PositionRateProfile:
    return PositionRateProfile(
        position_id="P1",
        regular_pay_rate=20.0,
        regular_bill_rate=35.0,
        overtime_enabled=True,
        overtime_threshold_hours=40.0,
        overtime_pay_rate=30.0,
        overtime_bill_rate=50.0,
    )


@pytest.fixture
def flat_profile() -> PositionRateProfile:
    return PositionRateProfile(position_id="P1", regular_pay_rate=20.0, regular_bill_rate=35.0)


@pytest.fixture
def gateway() -> InMemoryTimesheetGateway:
    return InMemoryTimesheetGateway()


@pytest.fixture
def existing_record() -> TimesheetRecord:
    return stored_record()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 6, 5, 9, 0, 0)


@pytest.fixture
def make_record():
    return stored_record


@pytest.fixture
def position_repo(overtime_profile) -> InMemoryPositionRepository:
    return InMemoryPositionRepository([overtime_profile])

