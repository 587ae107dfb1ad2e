from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import coerce_date, today_local
from ..common.logging_config import get_logger
from ..common.validators import parse_flag, require_non_empty
from ..core.exceptions import (
    GatewayError,
    PreconditionError,
    ReconciliationError,
    SubmissionInProgressError,
    ValidationError,
)
from ..container import Container
from ..periods.service import generate_week_options, week_for_start
from .mapper import normalize_keys, record_to_dict, selection_from_body
from .reconciler import SubmissionReport
from .workspace import TimesheetWorkspace

logger = get_logger(__name__)


def _report_to_dict(report: SubmissionReport) -> dict:
    return {
        "success": report.ok,
        "message": report.summary_message(),
        "created": report.created_count,
        "updated": report.updated_count,
        "outcomes": [
            {
                "position_id": o.assignment.position_id,
                "jobseeker_profile_id": o.assignment.jobseeker_profile_id,
                "action": o.action.value,
                "error": o.error,
                "timesheet": record_to_dict(o.record) if o.record else None,
            }
            for o in report.outcomes
        ],
        "existing_timesheets": (
            [record_to_dict(r) for r in report.refreshed.records] if report.refreshed is not None else None
        ),
    }


def register(app: Flask, container: Container) -> None:
    def _parse_date(value: str, field_name: str):
        try:
            return coerce_date(require_non_empty(value, field_name))
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name} must be YYYY-MM-DD")

    def _prepare_workspace(body: dict) -> TimesheetWorkspace:
        """Seed from the store, then apply the hours/adjustments sent by the client."""
        selection = selection_from_body(body)
        week_for_start(selection.week_start)

        profile = container.positions_repo.get_rate_profile(selection.position_id)
        if profile is None:
            raise LookupError(f"Position {selection.position_id} not found")

        workspace = TimesheetWorkspace(
            container.reconciler,
            notification_ttl_seconds=container.notification_ttl_seconds,
        )
        workspace.select(selection, profile)

        b = normalize_keys(body)
        for item in b.get("daily_hours") or []:
            entry = normalize_keys(item)
            workspace.edit_hours(_parse_date(entry.get("date"), "Date"), entry.get("hours", 0))
        if "bonus_amount" in b:
            workspace.set_bonus(b.get("bonus_amount"))
        if "deduction_amount" in b:
            workspace.set_deduction(b.get("deduction_amount"))
        flag_key = "send_email" if "send_email" in b else "email_sent"
        workspace.set_send_email(parse_flag(b.get(flag_key), "Send email"))
        return workspace

    def _workspace_to_dict(workspace: TimesheetWorkspace) -> dict:
        notification = workspace.active_notification()
        timesheet = workspace.timesheet
        return {
            "success": True,
            "state": workspace.state.value,
            "timesheet": timesheet.to_dict() if timesheet else None,
            "net_pay_warning": bool(timesheet and timesheet.jobseeker_pay <= 0 and timesheet.weekly_total > 0),
            "lookup_error": workspace.lookup_error,
            "notification": notification.to_dict() if notification else None,
        }

    @app.route("/api/timesheets/weeks", methods=["GET"], endpoint="timesheet_weeks")
    def timesheet_weeks():
        try:
            count = int(request.args.get("count") or container.week_window)
            options = generate_week_options(today_local(), count=count)
        except ValueError:
            return jsonify({"success": False, "message": "count must be a whole number"}), 400
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        return jsonify({"success": True, "weeks": [o.to_dict() for o in options]}), 200

    @app.route("/api/timesheets/generate-invoice-number", methods=["GET"], endpoint="generate_invoice_number")
    def generate_invoice_number():
        invoice_number = container.reconciler.issue_invoice_number()
        return jsonify({"success": True, "invoice_number": invoice_number}), 200

    @app.route("/api/timesheets/jobseeker/<jobseeker_user_id>", methods=["GET"], endpoint="jobseeker_timesheets")
    def jobseeker_timesheets(jobseeker_user_id: str):
        try:
            week = week_for_start(_parse_date(request.args.get("week_start"), "Week start"))
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400

        result = container.reconciler.fetch_existing(jobseeker_user_id=jobseeker_user_id, week_start=week.start)
        if not result.ok:
            return jsonify({"success": False, "retryable": True, "message": result.error, "timesheets": []}), 503
        return (
            jsonify(
                {
                    "success": True,
                    "filters": result.query.to_params(),
                    "timesheets": [record_to_dict(r) for r in result.records],
                }
            ),
            200,
        )

    @app.route("/api/timesheets/preview", methods=["POST"], endpoint="preview_timesheet")
    def preview_timesheet():
        try:
            workspace = _prepare_workspace(request.get_json(silent=True) or {})
            return jsonify(_workspace_to_dict(workspace)), 200
        except (ValidationError, PreconditionError) as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except LookupError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except ReconciliationError as e:
            return jsonify({"success": False, "message": str(e)}), 409
        except GatewayError as e:
            return jsonify({"success": False, "message": str(e)}), 502
        except Exception:
            logger.exception("Unexpected error while previewing timesheet")
            return jsonify({"success": False, "message": "Unexpected error while computing timesheet"}), 500

    @app.route("/api/timesheets/submit", methods=["POST"], endpoint="submit_timesheet")
    def submit_timesheet():
        try:
            body = request.get_json(silent=True) or {}
            workspace = _prepare_workspace(body)
            report = workspace.submit(submitted_by=normalize_keys(body).get("submitted_by") or None)
        except (ValidationError, PreconditionError) as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except LookupError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except (ReconciliationError, SubmissionInProgressError) as e:
            return jsonify({"success": False, "message": str(e)}), 409
        except GatewayError as e:
            return jsonify({"success": False, "message": str(e)}), 502
        except Exception:
            logger.exception("Unexpected error while submitting timesheet")
            return jsonify({"success": False, "message": "Failed to process timesheets"}), 500

        data = _report_to_dict(report)
        data["state"] = workspace.state.value
        data["timesheet"] = workspace.timesheet.to_dict() if workspace.timesheet else None
        return jsonify(data), (200 if report.ok else 502)

    @app.route("/api/timesheets/<timesheet_id>", methods=["GET"], endpoint="timesheet_detail")
    def timesheet_detail(timesheet_id: str):
        try:
            record = container.reconciler.get_timesheet(timesheet_id)
        except GatewayError as e:
            return jsonify({"success": False, "message": str(e)}), 502
        if record is None:
            return jsonify({"success": False, "message": "Timesheet not found"}), 404
        return jsonify({"success": True, "timesheet": record_to_dict(record)}), 200

    @app.route("/api/timesheets/<timesheet_id>", methods=["DELETE"], endpoint="delete_timesheet")
    def delete_timesheet(timesheet_id: str):
        try:
            deleted = container.reconciler.delete_timesheet(timesheet_id)
        except GatewayError as e:
            return jsonify({"success": False, "message": str(e)}), 502
        if not deleted:
            return jsonify({"success": False, "message": "Timesheet not found"}), 404
        return jsonify({"success": True, "message": "Timesheet deleted successfully"}), 200
