"""
services/notifications.py

회원 개별 알림(Notification) 예약 및 발송 로직.

주요 기능:
- 회원권 만료 임박 알림 예약 / 교체 (결제 시 기존 미발송 알림 삭제 후 재예약)
- 만료일이 지난 ACTIVE 회원권을 EXPIRED 로 전환하고 만료 알림 생성
- 발송 예정일이 된 알림을 메일로 발송

설계 원칙:
- 발송은 best-effort: 알림 한 건당 한 번만 시도하고 is_sent=True 로 표시
- 실제 전달된 경우에만 sent_at 기록
- 알림 수신에 동의하지 않은 회원은 발송하지 않음
- commit 은 호출 측(라우터 / 스크립트)에서 수행

관련 파일:
- app.services.payments  : 결제 시 알림 재예약
- app.services.members   : 신규 회원 알림 예약
- app.services.mailer    : 메일 발송
- scripts/run_daily_jobs.py : 일일 배치 실행

"""

import logging
import uuid
from datetime import date, datetime
from typing import Callable

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from app.models.membership import Membership, MembershipPlan, MembershipStatus, PaymentStatus
from app.models.notification import Notification, NotificationType
from app.models.user import User
from app.services.mailer import send_email

logger = logging.getLogger(__name__)

SendFn = Callable[..., bool]


def format_date(d: date) -> str:
    return d.strftime("%d.%m.%Y")


def schedule_expiry_notification(
    db: Session,
    *,
    user: User,
    plan_name: str,
    end_date: date,
    notify_on: date,
) -> Notification:
    notification = Notification(
        user_id=user.id,
        title="Membership expiring soon",
        message=f"Dear {user.first_name}, your {plan_name} membership expires on {format_date(end_date)}.",
        type=NotificationType.MEMBERSHIP_EXPIRING,
        scheduled_for=notify_on,
        is_sent=False,
    )
    db.add(notification)
    db.flush()
    return notification


"""
만료 임박 알림 교체

- 해당 회원의 미발송 MEMBERSHIP_EXPIRING 알림을 모두 삭제
- 새 만료일 기준으로 한 건 재예약

"""

def replace_expiry_notification(
    db: Session,
    *,
    user: User,
    plan_name: str,
    end_date: date,
    notify_on: date,
) -> Notification:
    db.execute(
        delete(Notification)
        .where(Notification.user_id == user.id)
        .where(Notification.type == NotificationType.MEMBERSHIP_EXPIRING)
        .where(Notification.is_sent.is_(False))
    )
    return schedule_expiry_notification(db, user=user, plan_name=plan_name, end_date=end_date, notify_on=notify_on)


def list_for_user(db: Session, user_id: uuid.UUID) -> list[Notification]:
    return list(
        db.scalars(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.scheduled_for.desc(), Notification.created_at.desc())
        ).all()
    )


"""
만료 회원권 처리

- end_date < today 인 ACTIVE 회원권 → EXPIRED / OVERDUE
- 회원별 MEMBERSHIP_EXPIRED 알림을 오늘 날짜로 예약
- 처리한 회원권 수 반환

"""

def expire_memberships(db: Session, today: date) -> int:
    rows = db.execute(
        select(Membership, User, MembershipPlan)
        .join(User, User.id == Membership.user_id)
        .join(MembershipPlan, MembershipPlan.id == Membership.plan_id)
        .where(Membership.status == MembershipStatus.ACTIVE)
        .where(Membership.end_date < today)
    ).all()

    for membership, user, plan in rows:
        membership.status = MembershipStatus.EXPIRED
        membership.payment_status = PaymentStatus.OVERDUE
        db.add(Notification(
            user_id=user.id,
            title="Membership expired",
            message=(
                f"Dear {user.first_name}, your {plan.name} membership expired on "
                f"{format_date(membership.end_date)}. Please renew to continue access."
            ),
            type=NotificationType.MEMBERSHIP_EXPIRED,
            scheduled_for=today,
            is_sent=False,
        ))

    db.flush()
    if rows:
        logger.info("Expired %d membership(s) as of %s", len(rows), today.isoformat())
    return len(rows)


"""
예약 알림 발송

- scheduled_for <= today 이고 아직 시도하지 않은 알림 대상
- 수신 동의 + 활성 회원에게만 메일 발송
- 반환값: 실제 전달된 건수

"""

def dispatch_due_notifications(db: Session, today: date, send: SendFn = send_email) -> int:
    rows = db.execute(
        select(Notification, User)
        .join(User, User.id == Notification.user_id)
        .where(Notification.is_sent.is_(False))
        .where(Notification.scheduled_for <= today)
        .order_by(Notification.scheduled_for)
    ).all()

    delivered = 0
    for notification, user in rows:
        ok = False
        if user.is_active and user.subscribe_to_notifications and user.email:
            ok = send(to=user.email, subject=notification.title, text=notification.message)
        notification.is_sent = True
        if ok:
            notification.sent_at = datetime.utcnow()
            delivered += 1

    db.flush()
    logger.info("Dispatched %d of %d due notification(s)", delivered, len(rows))
    return delivered
