from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.logging_config import get_logger
from ..common.notifications import Notification, active_or_none
from ..core.constants import DEFAULT_NOTIFICATION_TTL_SECONDS
from ..core.enums import NotificationLevel, TimesheetState
from ..core.exceptions import PreconditionError, SubmissionInProgressError
from ..positions.model import PositionRateProfile
from .model import Selection, TimesheetRecord, WeeklyTimesheet
from .reconciler import LookupResult, SubmissionReport, TimesheetReconciler

logger = get_logger(__name__)


class TimesheetWorkspace:
    """Working state for one jobseeker + position + week selection.

    UNINITIALIZED -> SEEDED_NEW | SEEDED_EXISTING (select)
    -> EDITED (hours/bonus/deduction) -> SUBMITTING (submit)
    -> SEEDED_EXISTING on success, EDITED on failure (values kept for retry).

    Changing the selection discards the working timesheet. Lookup results that
    arrive for a selection that is no longer current are ignored.
    """

    def __init__(
        self,
        reconciler: TimesheetReconciler,
        *,
        notification_ttl_seconds: float = DEFAULT_NOTIFICATION_TTL_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._reconciler = reconciler
        self._calculation = reconciler.calculation
        self._ttl = float(notification_ttl_seconds)
        self._clock = clock
        self._submit_lock = threading.Lock()

        self._selection: Optional[Selection] = None
        self._profile: Optional[PositionRateProfile] = None
        self._timesheet: Optional[WeeklyTimesheet] = None
        self._records: tuple[TimesheetRecord, ...] = ()
        self._send_email = False
        self._state = TimesheetState.UNINITIALIZED
        self._lookup_error: Optional[str] = None
        self._notification: Optional[Notification] = None

    # ---- read side -------------------------------------------------------

    @property
    def state(self) -> TimesheetState:
        return self._state

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    @property
    def timesheet(self) -> Optional[WeeklyTimesheet]:
        return self._timesheet

    @property
    def records(self) -> tuple[TimesheetRecord, ...]:
        return self._records

    @property
    def send_email(self) -> bool:
        return self._send_email

    @property
    def lookup_error(self) -> Optional[str]:
        return self._lookup_error

    @property
    def is_submitting(self) -> bool:
        return self._submit_lock.locked()

    def active_notification(self, now: Optional[datetime] = None) -> Optional[Notification]:
        return active_or_none(self._notification, now or self._clock())

    # ---- selection -------------------------------------------------------

    def clear(self) -> None:
        self._selection = None
        self._profile = None
        self._timesheet = None
        self._records = ()
        self._send_email = False
        self._lookup_error = None
        self._state = TimesheetState.UNINITIALIZED

    def begin_selection(self, selection: Selection, profile: PositionRateProfile) -> None:
        """Make ``selection`` current and drop whatever was being edited."""
        self._ensure_not_submitting()
        self.clear()
        self._selection = selection
        self._profile = profile

    def apply_lookup(self, selection: Selection, result: LookupResult) -> bool:
        if selection != self._selection or self._profile is None:
            logger.info("Ignoring timesheet lookup for superseded selection %s", selection)
            return False

        self._lookup_error = result.error
        if not result.ok:
            self._notify(f"Could not load existing timesheets: {result.error}", NotificationLevel.WARNING)

        self._records = result.records
        self._timesheet = self._reconciler.seed(selection, self._profile, result.records)
        self._state = TimesheetState.SEEDED_EXISTING if self._timesheet.is_existing else TimesheetState.SEEDED_NEW
        return True

    def select(self, selection: Selection, profile: PositionRateProfile) -> WeeklyTimesheet:
        self.begin_selection(selection, profile)
        result = self._reconciler.fetch_existing(
            jobseeker_user_id=selection.jobseeker_user_id,
            week_start=selection.week_start,
        )
        self.apply_lookup(selection, result)
        return self._timesheet

    def retry_lookup(self) -> bool:
        if self._selection is None:
            raise PreconditionError("Select a jobseeker, position and week first")
        selection = self._selection
        return self.apply_lookup(
            selection,
            self._reconciler.fetch_existing(jobseeker_user_id=selection.jobseeker_user_id, week_start=selection.week_start),
        )

    # ---- edits -----------------------------------------------------------

    def _require_timesheet(self) -> WeeklyTimesheet:
        if self._timesheet is None or self._profile is None:
            raise PreconditionError("Select a jobseeker, position and week first")
        return self._timesheet

    def _ensure_not_submitting(self) -> None:
        if self._submit_lock.locked():
            raise SubmissionInProgressError("A submission is already in progress")

    def _edited(self, timesheet: WeeklyTimesheet) -> WeeklyTimesheet:
        self._timesheet = timesheet
        self._state = TimesheetState.EDITED
        return timesheet

    def edit_hours(self, day: date, hours) -> WeeklyTimesheet:
        self._ensure_not_submitting()
        ts = self._require_timesheet()
        return self._edited(self._calculation.edit_hours(ts, self._profile, day=day, hours=hours))

    def set_bonus(self, amount) -> WeeklyTimesheet:
        self._ensure_not_submitting()
        ts = self._require_timesheet()
        return self._edited(self._calculation.set_bonus(ts, self._profile, amount))

    def set_deduction(self, amount) -> WeeklyTimesheet:
        self._ensure_not_submitting()
        ts = self._require_timesheet()
        return self._edited(self._calculation.set_deduction(ts, self._profile, amount))

    def set_send_email(self, send_email: bool) -> None:
        self._send_email = bool(send_email)

    # ---- submission ------------------------------------------------------

    def submit(self, *, submitted_by: Optional[str] = None) -> SubmissionReport:
        if self._selection is None or self._timesheet is None:
            message = "Cannot generate timesheet data: missing jobseeker, position or week"
            self._notify(message, NotificationLevel.ERROR)
            raise PreconditionError(message)

        if not self._submit_lock.acquire(blocking=False):
            raise SubmissionInProgressError("A submission is already in progress")

        previous_state = self._state
        self._state = TimesheetState.SUBMITTING
        try:
            timesheet = self._timesheet
            try:
                report = self._reconciler.submit(
                    self._selection,
                    self._profile,
                    [timesheet],
                    email_preferences={timesheet.assignment: self._send_email},
                    submitted_by=submitted_by,
                )
            except PreconditionError as e:
                self._state = previous_state
                self._notify(str(e), NotificationLevel.ERROR)
                raise

            outcome = report.outcome_for(timesheet.assignment)
            if outcome is not None and outcome.succeeded and outcome.record is not None:
                self._timesheet = replace(
                    timesheet,
                    existing_timesheet_id=outcome.record.id,
                    invoice_number=outcome.record.invoice_number or timesheet.invoice_number,
                )
                self._state = TimesheetState.SEEDED_EXISTING
                if report.refreshed is not None and report.refreshed.ok:
                    self._records = report.refreshed.records
                self._notify(report.summary_message(), NotificationLevel.SUCCESS)
            else:
                self._state = TimesheetState.EDITED
                self._notify(report.summary_message(), NotificationLevel.ERROR)
            return report
        finally:
            self._submit_lock.release()

    def _notify(self, message: str, level: NotificationLevel) -> None:
        self._notification = Notification.create(message, level, now=self._clock(), ttl_seconds=self._ttl)
