import pytest
from flask import Flask

from src.staffing_timesheets.staffing_timesheets.common.logging_config import reset_logging
from src.staffing_timesheets.staffing_timesheets.container import build_services
from src.staffing_timesheets.staffing_timesheets.core.exceptions import GatewayError
from src.staffing_timesheets.staffing_timesheets.main import create_app
from src.staffing_timesheets.staffing_timesheets.timesheets.controller import register


@pytest.fixture
def container(gateway, position_repo):
    return build_services(positions_repo=position_repo, timesheets_repo=gateway, week_window=4)


@pytest.fixture
def client(container):
    app = Flask(__name__)
    register(app, container)
    return app.test_client()


def _body(**extra):
    body = {
        "jobseekerProfileId": "JP1",
        "jobseekerUserId": "U1",
        "positionId": "P1",
        "weekStartDate": "2024-06-02",
    }
    body.update(extra)
    return body


def _full_week(hours):
    return [{"date": f"2024-06-0{2 + i}", "hours": h} for i, h in enumerate(hours)]


def test_weeks_uses_configured_window(client):
    res = client.get("/api/timesheets/weeks")

    assert res.status_code == 200
    weeks = res.get_json()["weeks"]
    assert len(weeks) == 4
    assert weeks[0]["value"] > weeks[1]["value"]


def test_weeks_rejects_bad_count(client):
    assert client.get("/api/timesheets/weeks?count=abc").status_code == 400
    assert client.get("/api/timesheets/weeks?count=-1").status_code == 400


def test_weeks_rejects_oversized_count(client):
    res = client.get("/api/timesheets/weeks?count=200000")

    assert res.status_code == 400
    assert "cannot exceed" in res.get_json()["message"]


def test_generate_invoice_number(client, gateway):
    res = client.get("/api/timesheets/generate-invoice-number")
    assert res.get_json()["invoice_number"] == "000001"

    gateway.invoice_error = RuntimeError("down")
    res = client.get("/api/timesheets/generate-invoice-number")
    assert res.status_code == 200
    assert res.get_json()["invoice_number"] == "TBD"


def test_preview_computes_week(client):
    res = client.post(
        "/api/timesheets/preview",
        json=_body(dailyHours=_full_week([8, 8, 8, 8, 8, 8, 0]), bonusAmount=50, deductionAmount=20),
    )

    assert res.status_code == 200
    data = res.get_json()
    ts = data["timesheet"]
    assert data["state"] == "EDITED"
    assert ts["total_regular_hours"] == 40
    assert ts["total_overtime_hours"] == 8
    assert ts["jobseeker_pay"] == pytest.approx(1070)
    assert ts["existing_timesheet_id"] is None
    assert data["net_pay_warning"] is False


def test_preview_unknown_position(client):
    res = client.post("/api/timesheets/preview", json=_body(positionId="P404"))

    assert res.status_code == 404


def test_preview_rejects_negative_hours(client):
    res = client.post("/api/timesheets/preview", json=_body(dailyHours=[{"date": "2024-06-02", "hours": -3}]))

    assert res.status_code == 400
    assert res.get_json()["success"] is False


def test_preview_rejects_non_sunday_week(client):
    res = client.post("/api/timesheets/preview", json=_body(weekStartDate="2024-06-03"))

    assert res.status_code == 400


def test_submit_creates_then_updates(client, gateway):
    first = client.post("/api/timesheets/submit", json=_body(dailyHours=_full_week([8, 8, 8, 8, 8, 0, 0]), sendEmail=True))

    assert first.status_code == 200
    data = first.get_json()
    assert data["created"] == 1
    assert data["message"] == "Successfully created 1 timesheet(s) (1 sent via email)"
    assert data["outcomes"][0]["action"] == "CREATED"
    invoice = data["outcomes"][0]["timesheet"]["invoice_number"]

    second = client.post("/api/timesheets/submit", json=_body(dailyHours=_full_week([8, 8, 8, 8, 8, 2, 0])))

    data = second.get_json()
    assert data["updated"] == 1
    assert data["outcomes"][0]["timesheet"]["invoice_number"] == invoice
    assert data["timesheet"]["total_overtime_hours"] == 2
    assert gateway.count("create") == 1


def test_submit_failure_reports_unit(client, gateway):
    gateway.create_error = GatewayError("Failed to create timesheet: server down")

    res = client.post("/api/timesheets/submit", json=_body())

    assert res.status_code == 502
    data = res.get_json()
    assert data["success"] is False
    assert data["outcomes"][0]["action"] == "FAILED"
    assert "server down" in data["message"]


def test_existing_lookup(client, gateway, existing_record):
    gateway.records[existing_record.id] = existing_record

    res = client.get("/api/timesheets/jobseeker/U1?week_start=2024-06-02")

    data = res.get_json()
    assert res.status_code == 200
    assert data["filters"] == {"week_start_filter": "2024-06-02", "week_end_filter": "2024-06-08", "limit": 100}
    assert [t["id"] for t in data["timesheets"]] == ["ts-existing"]


def test_existing_lookup_failure_is_retryable(client, gateway):
    gateway.lookup_error = GatewayError("Failed to load timesheets: timeout")

    res = client.get("/api/timesheets/jobseeker/U1?week_start=2024-06-02")

    assert res.status_code == 503
    assert res.get_json()["retryable"] is True


def test_existing_lookup_requires_week(client):
    assert client.get("/api/timesheets/jobseeker/U1").status_code == 400


def test_create_app_with_injected_container(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    try:
        app = create_app(container)
        res = app.test_client().get("/api/timesheets/weeks?count=2")
    finally:
        reset_logging()

    assert app.config["TESTING"] is True
    assert len(res.get_json()["weeks"]) == 2


@pytest.mark.parametrize("flag,expected", [("false", False), ("0", False), (False, False), ("true", True), (True, True)])
def test_submit_parses_send_email_strictly(client, gateway, flag, expected):
    res = client.post("/api/timesheets/submit", json=_body(sendEmail=flag))

    assert res.status_code == 200
    payload = next(c[1] for c in gateway.calls if c[0] == "create")
    assert payload.email_sent is expected


def test_submit_rejects_unknown_send_email_value(client, gateway):
    res = client.post("/api/timesheets/submit", json=_body(sendEmail="maybe"))

    assert res.status_code == 400
    assert res.get_json()["message"] == "Send email must be true or false"
    assert gateway.count("create") == 0


def test_preview_rejects_more_than_a_day_of_hours(client):
    res = client.post("/api/timesheets/preview", json=_body(dailyHours=[{"date": "2024-06-02", "hours": 25}]))

    assert res.status_code == 400
    assert "cannot exceed 24" in res.get_json()["message"]


def test_position_store_failure_is_bad_gateway(gateway):
    class FailingPositions:
        def get_rate_profile(self, position_id):
            raise GatewayError("Failed to load position: Lost connection")

    app = Flask(__name__)
    register(app, build_services(positions_repo=FailingPositions(), timesheets_repo=gateway))

    res = app.test_client().post("/api/timesheets/preview", json=_body())

    assert res.status_code == 502
    assert "Lost connection" in res.get_json()["message"]


def test_submit_records_version_history(client):
    first = client.post("/api/timesheets/submit", json=_body(submittedBy="recruiter-1"))
    timesheet_id = first.get_json()["outcomes"][0]["timesheet"]["id"]
    client.post("/api/timesheets/submit", json=_body(dailyHours=_full_week([8, 0, 0, 0, 0, 0, 0]), submittedBy="recruiter-2"))

    res = client.get(f"/api/timesheets/{timesheet_id}")

    assert res.status_code == 200
    ts = res.get_json()["timesheet"]
    assert ts["version"] == 2
    assert [(e["version"], e["action"], e["created_by"]) for e in ts["version_history"]] == [
        (1, "created", "recruiter-1"),
        (2, "updated", "recruiter-2"),
    ]


def test_timesheet_detail(client, gateway, existing_record):
    gateway.records[existing_record.id] = existing_record

    res = client.get("/api/timesheets/ts-existing")

    assert res.status_code == 200
    assert res.get_json()["timesheet"]["invoice_number"] == "000041"
    assert client.get("/api/timesheets/ts-missing").status_code == 404


def test_delete_timesheet(client, gateway, existing_record):
    gateway.records[existing_record.id] = existing_record

    res = client.delete("/api/timesheets/ts-existing")

    assert res.status_code == 200
    assert res.get_json() == {"success": True, "message": "Timesheet deleted successfully"}
    assert "ts-existing" not in gateway.records
    assert client.delete("/api/timesheets/ts-existing").status_code == 404


def test_static_routes_win_over_timesheet_id(client, gateway):
    assert client.get("/api/timesheets/weeks").status_code == 200
    assert client.get("/api/timesheets/generate-invoice-number").status_code == 200
    assert gateway.count("get_by_id") == 0
