"""Field mapping at the persistence / HTTP boundary.

Persisted rows and JSON bodies may spell the same field in snake_case or
camelCase. Keys are normalized once here, on ingress; the rest of the code
only ever sees the domain dataclasses.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import coerce_date, to_iso_date
from ..common.validators import require_non_empty, require_non_negative
from ..core.enums import VersionAction
from ..core.exceptions import ValidationError
from ..positions.model import PositionRateProfile
from .model import DailyHours, Selection, TimesheetPayload, TimesheetRecord, VersionEntry, WeeklyTimesheet

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")

# Legacy spellings that are not a plain camelCase conversion.
_ALIASES = {
    "week_start": "week_start_date",
    "week_end": "week_end_date",
    "jobseeker_pay": "total_jobseeker_pay",
    "client_bill": "total_client_bill",
}


def to_snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in data.items():
        snake = to_snake_case(str(key))
        out[_ALIASES.get(snake, snake)] = value
    return out


def _float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _load_json(value: Any) -> Any:
    """MySQL JSON columns come back as str or bytes depending on the driver."""
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value)
    return value


def parse_daily_hours(value: Any) -> tuple[DailyHours, ...]:
    """Daily hours arrive as a JSON string (MySQL JSON column) or a list of dicts."""
    if value is None or value == "":
        return ()

    items: list[DailyHours] = []
    for raw in _load_json(value):
        if isinstance(raw, DailyHours):
            items.append(raw)
            continue
        item = normalize_keys(raw)
        items.append(
            DailyHours(
                date=coerce_date(item["date"]),
                hours=require_non_negative(item.get("hours") or 0, "Hours"),
            )
        )
    items.sort(key=lambda d: d.date)
    return tuple(items)


def parse_version_history(value: Any) -> tuple[VersionEntry, ...]:
    if value is None or value == "":
        return ()

    entries: list[VersionEntry] = []
    for raw in _load_json(value):
        item = normalize_keys(raw)
        created_at = item["created_at"]
        entries.append(
            VersionEntry(
                version=int(item["version"]),
                action=VersionAction(item["action"]),
                created_at=created_at if isinstance(created_at, datetime) else datetime.fromisoformat(str(created_at)),
                created_by=item.get("created_by"),
            )
        )
    entries.sort(key=lambda e: e.version)
    return tuple(entries)


def history_to_json(history: Sequence[VersionEntry]) -> str:
    return json.dumps([e.to_dict() for e in history])


def record_from_row(row: Mapping[str, Any]) -> TimesheetRecord:
    r = normalize_keys(row)
    try:
        return TimesheetRecord(
            id=str(r["id"]),
            jobseeker_profile_id=str(r["jobseeker_profile_id"]),
            jobseeker_user_id=str(r["jobseeker_user_id"]),
            position_id=str(r["position_id"]) if r.get("position_id") else None,
            week_start=coerce_date(r["week_start_date"]),
            week_end=coerce_date(r["week_end_date"]),
            daily_hours=parse_daily_hours(r.get("daily_hours")),
            total_regular_hours=_float(r.get("total_regular_hours")),
            total_overtime_hours=_float(r.get("total_overtime_hours")),
            regular_pay_rate=_float(r.get("regular_pay_rate")),
            overtime_pay_rate=_float(r.get("overtime_pay_rate")),
            regular_bill_rate=_float(r.get("regular_bill_rate")),
            overtime_bill_rate=_float(r.get("overtime_bill_rate")),
            total_jobseeker_pay=_float(r.get("total_jobseeker_pay")),
            total_client_bill=_float(r.get("total_client_bill")),
            bonus_amount=_float(r.get("bonus_amount")),
            deduction_amount=_float(r.get("deduction_amount")),
            overtime_enabled=bool(r.get("overtime_enabled") or False),
            markup=_optional_float(r.get("markup")),
            email_sent=bool(r.get("email_sent") or False),
            invoice_number=str(r["invoice_number"]) if r.get("invoice_number") else None,
            version=int(r.get("version") or 1),
            version_history=parse_version_history(r.get("version_history")),
        )
    except KeyError as e:
        raise ValidationError(f"Timesheet record is missing field {e.args[0]}")


def selection_from_body(body: Mapping[str, Any]) -> Selection:
    b = normalize_keys(body)
    week_start = b.get("week_start_date")
    if not week_start:
        raise ValidationError("Week is required")
    try:
        week_start_date = coerce_date(week_start)
    except (TypeError, ValueError):
        raise ValidationError("Week start must be YYYY-MM-DD")
    return Selection(
        jobseeker_profile_id=require_non_empty(b.get("jobseeker_profile_id"), "Jobseeker"),
        jobseeker_user_id=require_non_empty(b.get("jobseeker_user_id"), "Jobseeker user"),
        position_id=require_non_empty(b.get("position_id"), "Position"),
        week_start=week_start_date,
    )


def build_payload(
    timesheet: WeeklyTimesheet,
    profile: PositionRateProfile,
    *,
    email_sent: bool,
    submitted_by: Optional[str] = None,
) -> TimesheetPayload:
    """Snapshot rates and derived totals at submission time."""
    return TimesheetPayload(
        jobseeker_profile_id=timesheet.jobseeker_profile_id,
        jobseeker_user_id=timesheet.jobseeker_user_id,
        position_id=timesheet.position_id,
        week_start=timesheet.week_start,
        week_end=timesheet.week_end,
        daily_hours=tuple(DailyHours(date=e.date, hours=e.hours) for e in timesheet.entries),
        total_regular_hours=timesheet.total_regular_hours,
        total_overtime_hours=timesheet.total_overtime_hours,
        regular_pay_rate=float(profile.regular_pay_rate),
        overtime_pay_rate=profile.effective_overtime_pay_rate,
        regular_bill_rate=float(profile.regular_bill_rate),
        overtime_bill_rate=profile.effective_overtime_bill_rate,
        total_jobseeker_pay=timesheet.jobseeker_pay,
        total_client_bill=timesheet.client_bill,
        bonus_amount=timesheet.bonus_amount,
        deduction_amount=timesheet.deduction_amount,
        overtime_enabled=bool(profile.overtime_enabled),
        email_sent=bool(email_sent),
        invoice_number=timesheet.invoice_number,
        markup=profile.markup,
        submitted_by=submitted_by,
    )


def payload_to_row(payload: TimesheetPayload) -> dict[str, Any]:
    return {
        "jobseeker_profile_id": payload.jobseeker_profile_id,
        "jobseeker_user_id": payload.jobseeker_user_id,
        "position_id": payload.position_id,
        "week_start_date": payload.week_start,
        "week_end_date": payload.week_end,
        "daily_hours": json.dumps([d.to_dict() for d in payload.daily_hours]),
        "total_regular_hours": payload.total_regular_hours,
        "total_overtime_hours": payload.total_overtime_hours,
        "regular_pay_rate": payload.regular_pay_rate,
        "overtime_pay_rate": payload.overtime_pay_rate,
        "regular_bill_rate": payload.regular_bill_rate,
        "overtime_bill_rate": payload.overtime_bill_rate,
        "total_jobseeker_pay": payload.total_jobseeker_pay,
        "total_client_bill": payload.total_client_bill,
        "bonus_amount": payload.bonus_amount,
        "deduction_amount": payload.deduction_amount,
        "overtime_enabled": payload.overtime_enabled,
        "markup": payload.markup,
        "email_sent": payload.email_sent,
        "invoice_number": payload.invoice_number,
    }


def record_to_dict(record: TimesheetRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "jobseeker_profile_id": record.jobseeker_profile_id,
        "jobseeker_user_id": record.jobseeker_user_id,
        "position_id": record.position_id,
        "week_start_date": to_iso_date(record.week_start),
        "week_end_date": to_iso_date(record.week_end),
        "daily_hours": [d.to_dict() for d in record.daily_hours],
        "total_regular_hours": record.total_regular_hours,
        "total_overtime_hours": record.total_overtime_hours,
        "regular_pay_rate": record.regular_pay_rate,
        "overtime_pay_rate": record.overtime_pay_rate,
        "regular_bill_rate": record.regular_bill_rate,
        "overtime_bill_rate": record.overtime_bill_rate,
        "total_jobseeker_pay": record.total_jobseeker_pay,
        "total_client_bill": record.total_client_bill,
        "bonus_amount": record.bonus_amount,
        "deduction_amount": record.deduction_amount,
        "overtime_enabled": record.overtime_enabled,
        "markup": record.markup,
        "email_sent": record.email_sent,
        "invoice_number": record.invoice_number,
        "version": record.version,
        "version_history": [e.to_dict() for e in record.version_history],
    }
