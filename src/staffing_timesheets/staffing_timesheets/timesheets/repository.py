from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import to_iso_date
from ..core.constants import DAYS_PER_WEEK, DEFAULT_LOOKUP_LIMIT
from .model import TimesheetPayload, TimesheetRecord


@dataclass(frozen=True)
class TimesheetQuery:
    """Explicit lookup parameters, built once when a search is triggered."""

    jobseeker_user_id: str
    week_start: date
    week_end: date
    limit: int = DEFAULT_LOOKUP_LIMIT

    @classmethod
    def for_week(cls, jobseeker_user_id: str, week_start: date, *, limit: int = DEFAULT_LOOKUP_LIMIT) -> "TimesheetQuery":
        return cls(
            jobseeker_user_id=jobseeker_user_id,
            week_start=week_start,
            week_end=week_start + timedelta(days=DAYS_PER_WEEK - 1),
            limit=int(limit),
        )

    def to_params(self) -> dict:
        return {
            "week_start_filter": to_iso_date(self.week_start),
            "week_end_filter": to_iso_date(self.week_end),
            "limit": self.limit,
        }


class TimesheetGateway(Protocol):
    def lookup_by_jobseeker_and_week(
        self,
        jobseeker_user_id: str,
        week_start: date,
        week_end: date,
        *,
        limit: int = DEFAULT_LOOKUP_LIMIT,
    ) -> Sequence[TimesheetRecord]:
        raise NotImplementedError

    def generate_invoice_number(self) -> str:
        raise NotImplementedError

    def create(self, payload: TimesheetPayload) -> TimesheetRecord:
        raise NotImplementedError

    def update(self, timesheet_id: str, payload: TimesheetPayload) -> TimesheetRecord:
        """Full replace of the stored timesheet (not a patch)."""

        raise NotImplementedError

    def get_by_id(self, timesheet_id: str) -> Optional[TimesheetRecord]:
        raise NotImplementedError

    def delete(self, timesheet_id: str) -> bool:
        """True when a stored timesheet was removed."""

        raise NotImplementedError
