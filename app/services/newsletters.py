"""
services/newsletters.py

뉴스레터(전체 공지) 작성 및 발송 로직.

주요 기능:
- 뉴스레터 생성 (임시 저장 / 즉시 발송 / 예약 발송)
- 수신 대상: 활성 회원 중 뉴스레터 수신에 동의한 회원
- 예약 시각이 지난 뉴스레터 일괄 발송
- 목록 및 통계 (전체 회원 수 / 이번 달 발송 수 / 예약 수)

설계 원칙:
- 발송은 best-effort (개별 메일 실패는 로그만 남김)
- commit 은 호출 측에서 수행

"""

import logging
from datetime import date, datetime
from typing import Callable

from sqlalchemy import select, func, desc
from sqlalchemy.orm import Session

from app.models.notification import Newsletter, NewsletterPriority, NewsletterStatus, NewsletterType
from app.models.user import User, Role
from app.services.mailer import send_email

logger = logging.getLogger(__name__)

SendFn = Callable[..., bool]


def _recipients_stmt():
    return (
        select(User)
        .where(User.role == Role.MEMBER)
        .where(User.is_active.is_(True))
        .where(User.subscribe_to_newsletter.is_(True))
    )


def count_recipients(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(_recipients_stmt().subquery())) or 0


def _body(newsletter: Newsletter) -> str:
    lines = [newsletter.message]
    if newsletter.start_date and newsletter.end_date:
        lines.append(f"\nPeriod: {newsletter.start_date.strftime('%d.%m.%Y')} - {newsletter.end_date.strftime('%d.%m.%Y')}")
    elif newsletter.start_date:
        lines.append(f"\nFrom: {newsletter.start_date.strftime('%d.%m.%Y')}")
    return "\n".join(lines)


"""
뉴스레터 발송

- 수신 대상 전원에게 메일 발송 시도
- status=SENT, sent_at, recipient_count 갱신
- 반환값: 실제 전달된 건수

"""

def send_newsletter(db: Session, newsletter: Newsletter, now: datetime, send: SendFn = send_email) -> int:
    recipients = db.scalars(_recipients_stmt()).all()
    text = _body(newsletter)

    delivered = 0
    for user in recipients:
        if send(to=user.email, subject=newsletter.title, text=text):
            delivered += 1

    newsletter.status = NewsletterStatus.SENT
    newsletter.sent_at = now
    newsletter.recipient_count = len(recipients)
    db.flush()
    logger.info("Newsletter %s sent: %d/%d delivered", newsletter.id, delivered, len(recipients))
    return delivered


def create_newsletter(
    db: Session,
    *,
    title: str,
    message: str,
    type: str,
    priority: str,
    start_date: date | None,
    end_date: date | None,
    schedule_for: str,
    scheduled_for: datetime | None,
    now: datetime,
    send: SendFn = send_email,
) -> tuple[Newsletter, int]:
    newsletter = Newsletter(
        title=title,
        message=message,
        type=NewsletterType(type.upper()),
        priority=NewsletterPriority(priority.upper()),
        status=NewsletterStatus.DRAFT,
        start_date=start_date,
        end_date=end_date,
        recipient_count=0,
    )

    if schedule_for == "later":
        if scheduled_for is None:
            raise ValueError("scheduled_for is required when schedule_for is 'later'")
        newsletter.status = NewsletterStatus.SCHEDULED
        newsletter.scheduled_for = scheduled_for
        newsletter.recipient_count = count_recipients(db)

    db.add(newsletter)
    db.flush()

    delivered = 0
    if schedule_for == "now":
        delivered = send_newsletter(db, newsletter, now, send)
    return newsletter, delivered


def dispatch_scheduled_newsletters(db: Session, now: datetime, send: SendFn = send_email) -> int:
    due = db.scalars(
        select(Newsletter)
        .where(Newsletter.status == NewsletterStatus.SCHEDULED)
        .where(Newsletter.scheduled_for <= now)
        .order_by(Newsletter.scheduled_for)
    ).all()
    for newsletter in due:
        send_newsletter(db, newsletter, now, send)
    return len(due)


def list_newsletters(db: Session, now: datetime) -> dict:
    newsletters = db.scalars(select(Newsletter).order_by(desc(Newsletter.created_at))).all()

    month_start = datetime(now.year, now.month, 1)
    stats = {
        "total_members": db.scalar(
            select(func.count()).select_from(User).where(User.role == Role.MEMBER)
        ) or 0,
        "sent_this_month": db.scalar(
            select(func.count()).select_from(Newsletter)
            .where(Newsletter.status == NewsletterStatus.SENT)
            .where(Newsletter.sent_at >= month_start)
        ) or 0,
        "scheduled": db.scalar(
            select(func.count()).select_from(Newsletter)
            .where(Newsletter.status == NewsletterStatus.SCHEDULED)
        ) or 0,
    }
    return {"newsletters": newsletters, "stats": stats}
