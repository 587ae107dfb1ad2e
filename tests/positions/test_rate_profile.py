import pytest

from src.staffing_timesheets.staffing_timesheets.core.exceptions import ValidationError
from src.staffing_timesheets.staffing_timesheets.positions.model import PositionRateProfile


def test_overtime_rates_ignored_when_overtime_disabled():
    profile = PositionRateProfile.from_mapping(
        {"id": "P1", "regular_pay_rate": "20", "regular_bill_rate": "35", "overtime_pay_rate": "30"}
    )

    assert profile.position_id == "P1"
    assert profile.effective_overtime_pay_rate == 20
    assert profile.threshold_hours == 40


def test_zero_overtime_rate_falls_back_to_regular():
    profile = PositionRateProfile(
        position_id="P1", regular_pay_rate=20, regular_bill_rate=35, overtime_enabled=True, overtime_pay_rate=0
    )

    assert profile.effective_overtime_pay_rate == 20


def test_negative_rates_rejected():
    with pytest.raises(ValidationError):
        PositionRateProfile.from_mapping({"position_id": "P1", "regular_pay_rate": -1, "regular_bill_rate": 10})
    with pytest.raises(ValidationError):
        PositionRateProfile.from_mapping(
            {"position_id": "P1", "regular_pay_rate": 1, "regular_bill_rate": 10, "overtime_threshold_hours": -5}
        )
