"""
services/payments.py

회원권 결제(Payment) 처리 로직.

결제 한 건을 기록하고, app.services.renewal 의 계산 결과를
회원권에 반영한다 (만료일 연장 / 재활성화 / 알림 재예약).

주요 기능:
- 갱신 대상 회원권 조회 (가장 최근 ACTIVE 또는 EXPIRED 회원권)
- 갱신 미리보기 (DB 변경 없음)
- 결제 처리

설계 원칙:
- 날짜 계산은 renewal.compute_renewal 에만 위임
- 결제 / 회원권 갱신 / 알림 교체는 같은 트랜잭션 안에서 수행
- commit / rollback 은 라우터에서 수행
- 갱신할 회원권이 없으면 LookupError, 잘못된 요청은 ValueError

관련 파일:
- app.services.renewal        : 만료일 / 알림일 계산
- app.services.notifications  : 만료 임박 알림 교체
- app.routers.members         : 결제 / 미리보기 API

"""

import logging
import uuid
from datetime import date

from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from app.models.membership import Membership, MembershipStatus, Payment, PaymentStatus
from app.models.user import User
from app.services.notifications import replace_expiry_notification
from app.services.plans import get_plan
from app.services.renewal import (
    MembershipPeriod,
    RenewalAnchor,
    RenewalRequest,
    RenewalResult,
    compute_renewal,
)

logger = logging.getLogger(__name__)


def find_renewable_membership(db: Session, user_id: uuid.UUID) -> Membership | None:
    return db.scalar(
        select(Membership)
        .where(Membership.user_id == user_id)
        .where(Membership.status.in_([MembershipStatus.ACTIVE, MembershipStatus.EXPIRED]))
        .order_by(desc(Membership.created_at))
        .limit(1)
    )


def period_of(membership: Membership) -> MembershipPeriod:
    return MembershipPeriod(
        current_end_date=membership.end_date,
        current_start_date=membership.start_date,
        status=membership.status,
    )


def preview_renewal(
    db: Session,
    *,
    user_id: uuid.UUID,
    months_paid: int,
    anchor: RenewalAnchor,
    custom_date: date | None,
    today: date,
    lead_time_days: int,
) -> tuple[Membership, RenewalResult, bool]:
    membership = find_renewable_membership(db, user_id)
    if not membership:
        raise LookupError("member has no membership to renew")

    request = RenewalRequest(anchor=anchor, months_paid=months_paid, custom_date=custom_date)
    result, reactivated = compute_renewal(period_of(membership), request, today, lead_time_days)
    return membership, result, reactivated


"""
결제 처리

1) 결제 기록 생성
2) 회원권 end_date / next_payment_due 갱신, PAID / ACTIVE 로 변경
3) 미발송 만료 임박 알림 삭제 후 새 만료일 기준으로 재예약

"""

def process_payment(
    db: Session,
    *,
    user: User,
    amount: int,
    payment_method: str,
    months_paid: int,
    anchor: RenewalAnchor,
    custom_date: date | None,
    notes: str | None,
    processed_by: str,
    today: date,
    lead_time_days: int,
) -> dict:
    membership, result, reactivated = preview_renewal(
        db,
        user_id=user.id,
        months_paid=months_paid,
        anchor=anchor,
        custom_date=custom_date,
        today=today,
        lead_time_days=lead_time_days,
    )

    payment = Payment(
        membership_id=membership.id,
        user_id=user.id,
        amount=amount,
        payment_date=today,
        payment_method=payment_method,
        months_paid=months_paid,
        notes=notes,
        processed_by=processed_by,
    )
    db.add(payment)

    membership.end_date = result.new_end_date
    membership.next_payment_due = result.new_end_date
    membership.payment_status = PaymentStatus.PAID
    membership.last_payment_date = today
    membership.status = MembershipStatus.ACTIVE
    db.flush()

    plan = get_plan(db, membership.plan_id)
    replace_expiry_notification(
        db,
        user=user,
        plan_name=plan.name if plan else "gym",
        end_date=result.new_end_date,
        notify_on=result.notification_date,
    )

    logger.info(
        "Payment recorded user=%s months=%d anchor=%s new_end=%s reactivated=%s",
        user.id, months_paid, RenewalAnchor(anchor).value, result.new_end_date.isoformat(), reactivated,
    )
    return {
        "payment": payment,
        "membership": membership,
        "plan": plan,
        "result": result,
        "reactivated": reactivated,
    }
