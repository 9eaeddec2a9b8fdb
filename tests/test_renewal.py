"""

회원권 갱신 날짜 계산 단위 테스트.
- 기준일(FROM_END / FROM_TODAY / CUSTOM) 별 새 만료일,
  말일 보정, 개월 수 범위 검증, 재활성화 신호, 알림 예약일을 확인한다.

"""

from datetime import date, datetime

import pytest

from app.models.membership import MembershipStatus
from app.services.renewal import (
    InvalidPeriod,
    InvalidRequest,
    MembershipPeriod,
    RenewalAnchor,
    RenewalRequest,
    add_months,
    compute_renewal,
    membership_status,
)


TODAY = date(2025, 11, 20)


def _period(end, status=MembershipStatus.ACTIVE, start=date(2025, 1, 1)):
    return MembershipPeriod(current_end_date=end, current_start_date=start, status=status)


def test_from_end_extends_existing_end_date():
    result, reactivated = compute_renewal(
        _period(date(2025, 12, 10)),
        RenewalRequest(anchor=RenewalAnchor.FROM_END, months_paid=1),
        TODAY,
    )
    assert result.effective_start_date == date(2025, 12, 10)
    assert result.new_end_date == date(2026, 1, 10)
    assert result.notification_date == date(2026, 1, 7)
    assert reactivated is False


def test_from_end_uses_past_end_date_and_reactivates_expired():
    result, reactivated = compute_renewal(
        _period(date(2025, 10, 15), status=MembershipStatus.EXPIRED),
        RenewalRequest(anchor=RenewalAnchor.FROM_END, months_paid=1),
        TODAY,
    )
    assert result.new_end_date == date(2025, 11, 15)
    assert result.notification_date == date(2025, 11, 12)
    assert reactivated is True


def test_from_today_ignores_current_end_date():
    for end in (date(2025, 1, 1), date(2027, 6, 30), None):
        result, _ = compute_renewal(
            _period(end),
            RenewalRequest(anchor=RenewalAnchor.FROM_TODAY, months_paid=2),
            TODAY,
        )
        assert result.effective_start_date == TODAY
        assert result.new_end_date == date(2026, 1, 20)


def test_custom_anchor_accepts_date_datetime_and_iso_string():
    for custom in (date(2025, 1, 1), "2025-01-01", datetime(2025, 1, 1, 15, 30)):
        result, _ = compute_renewal(
            _period(date(2025, 12, 10)),
            RenewalRequest(anchor=RenewalAnchor.CUSTOM, months_paid=3, custom_date=custom),
            TODAY,
        )
        assert result.effective_start_date == date(2025, 1, 1)
        assert result.new_end_date == date(2025, 4, 1)
        assert type(result.notification_date) is date
        assert type(result.new_end_date) is date


@pytest.mark.parametrize("custom", [None, "", "2025-13-01", "not-a-date"])
def test_custom_anchor_requires_valid_date(custom):
    with pytest.raises(InvalidRequest):
        compute_renewal(
            _period(date(2025, 12, 10)),
            RenewalRequest(anchor=RenewalAnchor.CUSTOM, months_paid=1, custom_date=custom),
            TODAY,
        )


def test_month_end_is_clamped():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2025, 3, 31), 1) == date(2025, 4, 30)
    assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)

    result, _ = compute_renewal(
        _period(date(2025, 1, 31)),
        RenewalRequest(anchor=RenewalAnchor.FROM_END, months_paid=1),
        TODAY,
    )
    assert result.new_end_date == date(2025, 2, 28)


@pytest.mark.parametrize("months", [1, 24])
def test_months_paid_bounds_accepted(months):
    result, _ = compute_renewal(
        _period(date(2025, 12, 10)),
        RenewalRequest(anchor=RenewalAnchor.FROM_END, months_paid=months),
        TODAY,
    )
    assert result.new_end_date == add_months(date(2025, 12, 10), months)


@pytest.mark.parametrize("months", [0, 25, -1, True, 1.5, "3"])
def test_months_paid_out_of_range_rejected(months):
    with pytest.raises(InvalidRequest):
        compute_renewal(
            _period(date(2025, 12, 10)),
            RenewalRequest(anchor=RenewalAnchor.FROM_END, months_paid=months),
            TODAY,
        )


def test_unknown_anchor_rejected():
    with pytest.raises(InvalidRequest):
        compute_renewal(
            _period(date(2025, 12, 10)),
            RenewalRequest(anchor="FROM_NOWHERE", months_paid=1),
            TODAY,
        )


def test_from_end_without_end_date_is_invalid_period():
    with pytest.raises(InvalidPeriod):
        compute_renewal(
            _period(None),
            RenewalRequest(anchor=RenewalAnchor.FROM_END, months_paid=1),
            TODAY,
        )


def test_lead_time_is_configurable():
    request = RenewalRequest(anchor=RenewalAnchor.FROM_END, months_paid=1)

    result, _ = compute_renewal(_period(date(2025, 12, 10)), request, TODAY, lead_time_days=0)
    assert result.notification_date == result.new_end_date

    result, _ = compute_renewal(_period(date(2025, 12, 10)), request, TODAY, lead_time_days=7)
    assert result.notification_date == date(2026, 1, 3)

    with pytest.raises(InvalidRequest):
        compute_renewal(_period(date(2025, 12, 10)), request, TODAY, lead_time_days=-1)


def test_compute_renewal_is_deterministic_and_does_not_mutate_input():
    period = _period(date(2025, 12, 10), status=MembershipStatus.EXPIRED)
    request = RenewalRequest(anchor=RenewalAnchor.FROM_END, months_paid=6)

    first = compute_renewal(period, request, TODAY)
    second = compute_renewal(period, request, TODAY)

    assert first == second
    assert period.current_end_date == date(2025, 12, 10)
    assert period.status == MembershipStatus.EXPIRED


def test_membership_status_classification():
    assert membership_status(None, TODAY) == "expired"
    assert membership_status(date(2025, 11, 19), TODAY) == "expired"
    assert membership_status(TODAY, TODAY) == "expiring"
    assert membership_status(date(2025, 11, 23), TODAY) == "expiring"
    assert membership_status(date(2025, 11, 24), TODAY) == "active"
    assert membership_status(date(2025, 11, 24), TODAY, expiring_days=7) == "expiring"
