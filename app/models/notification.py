"""

notification.py

회원 개별 알림(Notification) 및 전체 공지(Newsletter) 모델 정의 파일.

Notification 은 특정 회원에게 예약된 날짜에 발송되는 알림
(회원권 만료 임박 / 만료 / 결제 안내)이고,
Newsletter 는 뉴스레터 수신에 동의한 모든 회원에게 보내는 공지이다.

설계 원칙:
- 발송은 best-effort (재시도 큐 없음)
- is_sent 는 발송 "시도" 완료 여부, sent_at 은 실제 전달 시각

"""

import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class NotificationType(str, Enum):
    MEMBERSHIP_EXPIRING = "MEMBERSHIP_EXPIRING"
    MEMBERSHIP_EXPIRED = "MEMBERSHIP_EXPIRED"
    PAYMENT_REMINDER = "PAYMENT_REMINDER"
    GENERAL = "GENERAL"


class NewsletterType(str, Enum):
    CLOSURE = "CLOSURE"
    MAINTENANCE = "MAINTENANCE"
    EVENT = "EVENT"
    GENERAL = "GENERAL"


class NewsletterPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class NewsletterStatus(str, Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    SENT = "SENT"


"""
회원 개별 알림 모델

- user_id       : 수신 회원
- type          : 알림 유형
- scheduled_for : 발송 예정일
- is_sent       : 발송 시도 완료 여부
- sent_at       : 실제 전달 시각 (전달 실패 / 수신 거부 시 None)

"""

class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_id", "user_id"),
        Index("ix_notifications_scheduled_for", "scheduled_for"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(SAEnum(NotificationType, name="notification_type"), nullable=False)

    scheduled_for: Mapped[date] = mapped_column(Date, nullable=False)
    is_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class Newsletter(Base):
    __tablename__ = "newsletters"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NewsletterType] = mapped_column(SAEnum(NewsletterType, name="newsletter_type"), nullable=False)
    priority: Mapped[NewsletterPriority] = mapped_column(
        SAEnum(NewsletterPriority, name="newsletter_priority"), nullable=False, default=NewsletterPriority.MEDIUM
    )
    status: Mapped[NewsletterStatus] = mapped_column(
        SAEnum(NewsletterStatus, name="newsletter_status"), nullable=False, default=NewsletterStatus.DRAFT
    )

    # 공지 대상 기간 (예: 휴관 시작일 ~ 종료일)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    scheduled_for: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    recipient_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
