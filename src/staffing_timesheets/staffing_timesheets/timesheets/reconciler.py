from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping, Optional, Sequence

from ..common.logging_config import get_logger
from ..core.constants import DAYS_PER_WEEK, DEFAULT_LOOKUP_LIMIT, INVOICE_NUMBER_PLACEHOLDER
from ..core.enums import SubmissionAction
from ..core.exceptions import PreconditionError, ReconciliationError
from ..payroll.service import TimesheetCalculationService
from ..positions.model import PositionRateProfile
from .aggregator import build_entries
from .mapper import build_payload
from .model import AssignmentKey, Selection, TimesheetKey, TimesheetRecord, WeeklyTimesheet
from .repository import TimesheetGateway, TimesheetQuery

logger = get_logger(__name__)


@dataclass(frozen=True)
class LookupResult:
    query: TimesheetQuery
    records: tuple[TimesheetRecord, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SubmissionOutcome:
    assignment: AssignmentKey
    action: SubmissionAction
    record: Optional[TimesheetRecord] = None
    error: Optional[str] = None
    email_requested: bool = False

    @property
    def succeeded(self) -> bool:
        return self.action in (SubmissionAction.CREATED, SubmissionAction.UPDATED)


@dataclass(frozen=True)
class SubmissionReport:
    outcomes: tuple[SubmissionOutcome, ...]
    refreshed: Optional[LookupResult] = None

    @property
    def ok(self) -> bool:
        return all(o.succeeded for o in self.outcomes)

    @property
    def created_count(self) -> int:
        return sum(1 for o in self.outcomes if o.action == SubmissionAction.CREATED)

    @property
    def updated_count(self) -> int:
        return sum(1 for o in self.outcomes if o.action == SubmissionAction.UPDATED)

    @property
    def email_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded and o.email_requested)

    @property
    def failure(self) -> Optional[SubmissionOutcome]:
        for o in self.outcomes:
            if o.action == SubmissionAction.FAILED:
                return o
        return None

    def outcome_for(self, assignment: AssignmentKey) -> Optional[SubmissionOutcome]:
        for o in self.outcomes:
            if o.assignment == assignment:
                return o
        return None

    def summary_message(self) -> str:
        failure = self.failure
        if failure is not None:
            done = self.created_count + self.updated_count
            prefix = f"Saved {done} timesheet(s) before the failure. " if done else ""
            return f"{prefix}Failed to save timesheet for position {failure.assignment.position_id}: {failure.error}"

        if self.updated_count and self.created_count:
            message = f"Successfully updated {self.updated_count} and created {self.created_count} timesheet(s)"
        elif self.updated_count:
            message = f"Successfully updated {self.updated_count} timesheet(s)"
        else:
            message = f"Successfully created {self.created_count} timesheet(s)"

        if self.email_count:
            message += f" ({self.email_count} sent via email)"
        return message


class TimesheetReconciler:
    """Matches working timesheets with persisted ones and persists them.

    One persisted timesheet per (position, week start) and jobseeker. A match
    means the update path (same id, same invoice number); no match means the
    create path with a freshly issued invoice number.
    """

    def __init__(
        self,
        gateway: TimesheetGateway,
        *,
        calculation: Optional[TimesheetCalculationService] = None,
        lookup_limit: int = DEFAULT_LOOKUP_LIMIT,
    ):
        self._gateway = gateway
        self._calculation = calculation or TimesheetCalculationService()
        self._lookup_limit = int(lookup_limit)

    @property
    def calculation(self) -> TimesheetCalculationService:
        return self._calculation

    def fetch_existing(self, *, jobseeker_user_id: str, week_start: date) -> LookupResult:
        query = TimesheetQuery.for_week(jobseeker_user_id, week_start, limit=self._lookup_limit)
        try:
            records = self._gateway.lookup_by_jobseeker_and_week(
                query.jobseeker_user_id,
                query.week_start,
                query.week_end,
                limit=query.limit,
            )
        except Exception as e:
            logger.warning("Timesheet lookup failed for %s (%s): %s", jobseeker_user_id, query.to_params(), e)
            return LookupResult(query=query, error=str(e) or "Failed to load existing timesheets")
        return LookupResult(query=query, records=tuple(records))

    @staticmethod
    def match(records: Sequence[TimesheetRecord], key: TimesheetKey) -> Optional[TimesheetRecord]:
        matches = [r for r in records if r.key == key]
        if len(matches) > 1:
            raise ReconciliationError(
                f"{len(matches)} timesheets found for position {key.position_id} week {key.week_start.isoformat()}"
            )
        return matches[0] if matches else None

    def issue_invoice_number(self) -> str:
        """Never fatal: a placeholder is used when the generator fails."""
        try:
            number = self._gateway.generate_invoice_number()
        except Exception as e:
            logger.warning("Invoice number generation failed, using placeholder: %s", e)
            return INVOICE_NUMBER_PLACEHOLDER
        return number or INVOICE_NUMBER_PLACEHOLDER

    def seed(
        self,
        selection: Selection,
        profile: PositionRateProfile,
        records: Sequence[TimesheetRecord] = (),
    ) -> WeeklyTimesheet:
        existing = self.match(records, selection.key)
        week_end = selection.week_start + timedelta(days=DAYS_PER_WEEK - 1)

        if existing is not None:
            timesheet = WeeklyTimesheet(
                assignment=selection.assignment,
                jobseeker_user_id=selection.jobseeker_user_id,
                week_start=selection.week_start,
                week_end=week_end,
                entries=build_entries(selection.week_start, existing),
                invoice_number=existing.invoice_number or INVOICE_NUMBER_PLACEHOLDER,
                total_regular_hours=existing.total_regular_hours,
                total_overtime_hours=existing.total_overtime_hours,
                bonus_amount=existing.bonus_amount,
                deduction_amount=existing.deduction_amount,
                jobseeker_pay=existing.total_jobseeker_pay,
                client_bill=existing.total_client_bill,
                existing_timesheet_id=existing.id,
            )
        else:
            timesheet = WeeklyTimesheet(
                assignment=selection.assignment,
                jobseeker_user_id=selection.jobseeker_user_id,
                week_start=selection.week_start,
                week_end=week_end,
                entries=build_entries(selection.week_start),
                invoice_number=self.issue_invoice_number(),
            )

        return self._calculation.recalculate(timesheet, profile)

    @staticmethod
    def _check_preconditions(
        selection: Optional[Selection],
        profile: Optional[PositionRateProfile],
        timesheets: Sequence[WeeklyTimesheet],
    ) -> None:
        if selection is None or profile is None or not timesheets:
            raise PreconditionError("Cannot generate timesheet data: missing jobseeker, position or week")
        if profile.position_id != selection.position_id:
            raise PreconditionError("Position rates do not belong to the selected position")
        for ts in timesheets:
            if ts.key != selection.key or ts.jobseeker_profile_id != selection.jobseeker_profile_id:
                raise PreconditionError("Timesheet does not belong to the current selection")

    def submit(
        self,
        selection: Optional[Selection],
        profile: Optional[PositionRateProfile],
        timesheets: Sequence[WeeklyTimesheet],
        *,
        email_preferences: Optional[Mapping[AssignmentKey, bool]] = None,
        submitted_by: Optional[str] = None,
    ) -> SubmissionReport:
        """Create or update each timesheet in order.

        Stops at the first failing unit. Units already written stay written;
        the remaining ones are reported as skipped.
        """

        self._check_preconditions(selection, profile, timesheets)
        email_preferences = email_preferences or {}

        outcomes: list[SubmissionOutcome] = []
        failed = False
        for ts in timesheets:
            send_email = bool(email_preferences.get(ts.assignment, False))
            if failed:
                outcomes.append(
                    SubmissionOutcome(assignment=ts.assignment, action=SubmissionAction.SKIPPED, email_requested=send_email)
                )
                continue

            try:
                payload = build_payload(
                    self._calculation.recalculate(ts, profile),
                    profile,
                    email_sent=send_email,
                    submitted_by=submitted_by,
                )
                if ts.existing_timesheet_id:
                    logger.info("Updating timesheet %s for position %s", ts.existing_timesheet_id, ts.position_id)
                    record = self._gateway.update(ts.existing_timesheet_id, payload)
                    action = SubmissionAction.UPDATED
                else:
                    logger.info("Creating timesheet for position %s week %s", ts.position_id, ts.week_start.isoformat())
                    record = self._gateway.create(payload)
                    action = SubmissionAction.CREATED
            except Exception as e:
                logger.exception("Timesheet submission failed for position %s", ts.position_id)
                failed = True
                outcomes.append(
                    SubmissionOutcome(
                        assignment=ts.assignment,
                        action=SubmissionAction.FAILED,
                        error=str(e) or "Failed to process timesheets",
                        email_requested=send_email,
                    )
                )
                continue

            outcomes.append(SubmissionOutcome(assignment=ts.assignment, action=action, record=record, email_requested=send_email))

        refreshed = None
        if any(o.succeeded for o in outcomes):
            refreshed = self.refresh(selection)
        return SubmissionReport(outcomes=tuple(outcomes), refreshed=refreshed)

    def refresh(self, selection: Selection) -> LookupResult:
        return self.fetch_existing(jobseeker_user_id=selection.jobseeker_user_id, week_start=selection.week_start)

    def get_timesheet(self, timesheet_id: str) -> Optional[TimesheetRecord]:
        return self._gateway.get_by_id(timesheet_id)

    def delete_timesheet(self, timesheet_id: str) -> bool:
        deleted = self._gateway.delete(timesheet_id)
        if deleted:
            logger.info("Deleted timesheet %s", timesheet_id)
        else:
            logger.warning("Delete requested for unknown timesheet %s", timesheet_id)
        return deleted
