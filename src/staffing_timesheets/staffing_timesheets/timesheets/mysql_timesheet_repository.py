from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_LOOKUP_LIMIT, INVOICE_NUMBER_PLACEHOLDER
from ..core.exceptions import GatewayError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, gateway_errors
from .history import append_version, initial_history
from .invoice import next_invoice_number
from .mapper import history_to_json, parse_version_history, payload_to_row, record_from_row
from .model import TimesheetPayload, TimesheetRecord
from .repository import TimesheetGateway

_COLUMNS = """
    id, jobseeker_profile_id, jobseeker_user_id, position_id, week_start_date, week_end_date,
    daily_hours, total_regular_hours, total_overtime_hours, regular_pay_rate, overtime_pay_rate,
    regular_bill_rate, overtime_bill_rate, total_jobseeker_pay, total_client_bill, bonus_amount,
    deduction_amount, overtime_enabled, markup, email_sent, invoice_number, version, version_history
"""


class MySQLTimesheetRepository(TimesheetGateway):
    def __init__(self, conn_factory: DatabaseConnection, *, clock: Callable[[], datetime] = now_local):
        self._conn_factory = conn_factory
        self._clock = clock

    def lookup_by_jobseeker_and_week(
        self,
        jobseeker_user_id: str,
        week_start: date,
        week_end: date,
        *,
        limit: int = DEFAULT_LOOKUP_LIMIT,
    ) -> Sequence[TimesheetRecord]:
        with gateway_errors("load timesheets"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM timesheets
                WHERE jobseeker_user_id=%s AND week_start_date>=%s AND week_end_date<=%s
                ORDER BY week_start_date DESC, created_at DESC
                LIMIT %s
                """,
                (jobseeker_user_id, week_start, week_end, int(limit)),
            )
            return [record_from_row(r) for r in fetchall(cur)]

    def get_by_id(self, timesheet_id: str) -> Optional[TimesheetRecord]:
        with gateway_errors("load timesheet"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timesheets WHERE id=%s", (timesheet_id,))
            r = fetchone(cur)
            return record_from_row(r) if r else None

    def _next_invoice_number(self, cur) -> str:
        cur.execute(
            """
            SELECT MAX(invoice_number) AS max_invoice
            FROM timesheets
            WHERE invoice_number REGEXP '^[0-9]+$'
            """
        )
        row = fetchone(cur)
        current_max = row.get("max_invoice") if row else None

        def exists(candidate: str) -> bool:
            cur.execute("SELECT id FROM timesheets WHERE invoice_number=%s", (candidate,))
            return fetchone(cur) is not None

        return next_invoice_number(current_max, exists=exists)

    def generate_invoice_number(self) -> str:
        with gateway_errors("generate invoice number"), db_cursor(self._conn_factory) as (_, cur):
            return self._next_invoice_number(cur)

    def create(self, payload: TimesheetPayload) -> TimesheetRecord:
        timesheet_id = str(uuid.uuid4())
        row = payload_to_row(payload)

        with gateway_errors("create timesheet"), db_cursor(self._conn_factory) as (_, cur):
            if not row["invoice_number"] or row["invoice_number"] == INVOICE_NUMBER_PLACEHOLDER:
                row["invoice_number"] = self._next_invoice_number(cur)

            cur.execute(
                """
                INSERT INTO timesheets(
                    id, jobseeker_profile_id, jobseeker_user_id, position_id, week_start_date, week_end_date,
                    daily_hours, total_regular_hours, total_overtime_hours, regular_pay_rate, overtime_pay_rate,
                    regular_bill_rate, overtime_bill_rate, total_jobseeker_pay, total_client_bill, bonus_amount,
                    deduction_amount, overtime_enabled, markup, email_sent, invoice_number, version, version_history
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (
                    timesheet_id,
                    row["jobseeker_profile_id"],
                    row["jobseeker_user_id"],
                    row["position_id"],
                    row["week_start_date"],
                    row["week_end_date"],
                    row["daily_hours"],
                    row["total_regular_hours"],
                    row["total_overtime_hours"],
                    row["regular_pay_rate"],
                    row["overtime_pay_rate"],
                    row["regular_bill_rate"],
                    row["overtime_bill_rate"],
                    row["total_jobseeker_pay"],
                    row["total_client_bill"],
                    row["bonus_amount"],
                    row["deduction_amount"],
                    row["overtime_enabled"],
                    row["markup"],
                    row["email_sent"],
                    row["invoice_number"],
                    history_to_json(initial_history(payload.submitted_by, self._clock())),
                ),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM timesheets WHERE id=%s", (timesheet_id,))
            created = fetchone(cur)

        if not created:
            raise GatewayError("Timesheet was not readable after create")
        return record_from_row(created)

    def update(self, timesheet_id: str, payload: TimesheetPayload) -> TimesheetRecord:
        row = payload_to_row(payload)

        # invoice_number is fixed at create and never rewritten.
        with gateway_errors("update timesheet"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT version, version_history FROM timesheets WHERE id=%s FOR UPDATE", (timesheet_id,))
            current = fetchone(cur)
            if not current:
                raise GatewayError(f"Timesheet {timesheet_id} not found")

            version = int(current.get("version") or 1) + 1
            history = append_version(
                parse_version_history(current.get("version_history")),
                version=version,
                created_by=payload.submitted_by,
                now=self._clock(),
            )
            cur.execute(
                """
                UPDATE timesheets
                SET jobseeker_profile_id=%s, jobseeker_user_id=%s, position_id=%s,
                    week_start_date=%s, week_end_date=%s, daily_hours=%s,
                    total_regular_hours=%s, total_overtime_hours=%s,
                    regular_pay_rate=%s, overtime_pay_rate=%s, regular_bill_rate=%s, overtime_bill_rate=%s,
                    total_jobseeker_pay=%s, total_client_bill=%s, bonus_amount=%s, deduction_amount=%s,
                    overtime_enabled=%s, markup=%s, email_sent=%s, version=%s, version_history=%s
                WHERE id=%s
                """,
                (
                    row["jobseeker_profile_id"],
                    row["jobseeker_user_id"],
                    row["position_id"],
                    row["week_start_date"],
                    row["week_end_date"],
                    row["daily_hours"],
                    row["total_regular_hours"],
                    row["total_overtime_hours"],
                    row["regular_pay_rate"],
                    row["overtime_pay_rate"],
                    row["regular_bill_rate"],
                    row["overtime_bill_rate"],
                    row["total_jobseeker_pay"],
                    row["total_client_bill"],
                    row["bonus_amount"],
                    row["deduction_amount"],
                    row["overtime_enabled"],
                    row["markup"],
                    row["email_sent"],
                    version,
                    history_to_json(history),
                    timesheet_id,
                ),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM timesheets WHERE id=%s", (timesheet_id,))
            updated = fetchone(cur)

        if not updated:
            raise GatewayError(f"Timesheet {timesheet_id} not found")
        return record_from_row(updated)

    def delete(self, timesheet_id: str) -> bool:
        with gateway_errors("delete timesheet"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timesheets WHERE id=%s", (timesheet_id,))
            return cur.rowcount > 0
