"""
services/renewal.py

회원권 갱신(Renewal) 날짜 계산 모듈.

결제 시 회원권의 새 만료일과 만료 알림 예약일을 계산하는
순수 함수(pure function) 모음이다.

주요 기능:
- 기준일(anchor) 결정: 기존 만료일 / 오늘 / 지정일
- 월 단위 연장 (말일 보정: 1월 31일 + 1개월 → 2월 28/29일)
- 만료 알림 예약일 계산 (만료일 - lead time)
- 만료(EXPIRED) 회원권의 재활성화 여부 신호 반환
- 만료일 기준 회원 상태 분류 (active / expiring / expired)

설계 원칙:
- DB / HTTP / 현재 시각에 의존하지 않음 (today 는 항상 인자로 받음)
- 입력 값은 변경하지 않고 새 값을 반환
- 검증 실패는 ValueError 하위 예외로 알림 → 라우터에서 400 처리

관련 파일:
- app.services.payments  : 계산 결과를 DB에 반영
- app.services.members   : 신규 회원 만료일 계산 / 상태 분류
- app.core.config        : RENEWAL_NOTICE_LEAD_DAYS 기본값

"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

from app.models.membership import MembershipStatus


MIN_MONTHS_PAID = 1
MAX_MONTHS_PAID = 24
DEFAULT_LEAD_TIME_DAYS = 3


class InvalidRequest(ValueError):
    """갱신 요청 파라미터가 잘못된 경우."""


class InvalidPeriod(ValueError):
    """회원권 상태가 갱신 계산에 필요한 정보를 갖고 있지 않은 경우."""


class RenewalAnchor(str, Enum):
    FROM_END = "FROM_END"
    FROM_TODAY = "FROM_TODAY"
    CUSTOM = "CUSTOM"


@dataclass(frozen=True)
class MembershipPeriod:
    """갱신 적용 전 회원권 스냅샷."""
    current_end_date: date | None
    current_start_date: date
    status: MembershipStatus


@dataclass(frozen=True)
class RenewalRequest:
    anchor: RenewalAnchor
    months_paid: int
    custom_date: date | str | None = None


@dataclass(frozen=True)
class RenewalResult:
    new_end_date: date
    effective_start_date: date
    notification_date: date


def add_months(start: date, months: int) -> date:
    """월 단위 더하기. 일(day)은 유지하되 대상 월의 말일을 넘지 않는다."""
    return start + relativedelta(months=months)


def _parse_custom_date(value: date | str | None) -> date:
    if value is None or value == "":
        raise InvalidRequest("custom_date is required when anchor is CUSTOM")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidRequest(f"custom_date is not a valid date: {value!r}")


"""
갱신 요청 검증

- months_paid 는 1 ~ 24 범위의 정수만 허용
- anchor 는 RenewalAnchor 값만 허용

"""

def validate_request(request: RenewalRequest) -> None:
    months = request.months_paid
    if isinstance(months, bool) or not isinstance(months, int):
        raise InvalidRequest("months_paid must be an integer")
    if months < MIN_MONTHS_PAID or months > MAX_MONTHS_PAID:
        raise InvalidRequest(f"months_paid must be between {MIN_MONTHS_PAID} and {MAX_MONTHS_PAID}")
    try:
        RenewalAnchor(request.anchor)
    except ValueError:
        raise InvalidRequest(f"unknown anchor: {request.anchor!r}")


def resolve_anchor_date(period: MembershipPeriod, request: RenewalRequest, today: date) -> date:
    anchor = RenewalAnchor(request.anchor)
    if anchor == RenewalAnchor.FROM_END:
        # 이미 지난 만료일이어도 그대로 기존 만료일에서 연장
        if period.current_end_date is None:
            raise InvalidPeriod("current_end_date is required to renew from the end date")
        return period.current_end_date
    if anchor == RenewalAnchor.FROM_TODAY:
        return today
    return _parse_custom_date(request.custom_date)


def compute_renewal(
    period: MembershipPeriod,
    request: RenewalRequest,
    today: date,
    lead_time_days: int = DEFAULT_LEAD_TIME_DAYS,
) -> tuple[RenewalResult, bool]:
    """회원권 갱신 결과를 계산한다.

    Args:
        period: 갱신 전 회원권 스냅샷
        request: 기준일 전략 / 결제 개월 수
        today: 오늘 날짜 (FROM_TODAY 기준일)
        lead_time_days: 만료일 며칠 전에 알림을 예약할지

    Returns:
        (RenewalResult, reactivated) 튜플.
        reactivated 는 period.status 가 EXPIRED 였을 때 True 이며,
        호출 측이 상태를 ACTIVE 로 저장할지 결정한다.

    Raises:
        InvalidRequest: months_paid 범위 오류, CUSTOM 인데 날짜가 없거나 잘못된 경우,
            lead_time_days 가 음수인 경우
        InvalidPeriod: FROM_END 인데 current_end_date 가 없는 경우
    """
    validate_request(request)
    if isinstance(lead_time_days, bool) or not isinstance(lead_time_days, int) or lead_time_days < 0:
        raise InvalidRequest("lead_time_days must be a non-negative integer")

    effective_start = resolve_anchor_date(period, request, today)
    new_end = add_months(effective_start, request.months_paid)
    notification_date = new_end - timedelta(days=lead_time_days)

    result = RenewalResult(
        new_end_date=new_end,
        effective_start_date=effective_start,
        notification_date=notification_date,
    )
    reactivated = MembershipStatus(period.status) == MembershipStatus.EXPIRED
    return result, reactivated


def membership_status(end_date: date | None, today: date, expiring_days: int = 3) -> str:
    """만료일 기준 회원 상태: 'active' / 'expiring' / 'expired'."""
    if end_date is None:
        return "expired"
    days_left = (end_date - today).days
    if days_left < 0:
        return "expired"
    if days_left <= expiring_days:
        return "expiring"
    return "active"
