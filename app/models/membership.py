"""
membership.py

회원권 플랜 / 회원권 / 결제 모델 정의 파일.

- MembershipPlan : 판매 중인 회원권 상품 (가격, 기간)
- Membership     : 회원 한 명의 회원권 기간 및 상태
- Payment        : 회원권에 대한 결제(납부) 기록

회원권 만료일 계산은 app.services.renewal 에서 수행하고,
이 파일은 저장 구조만 정의한다.

"""

import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class MembershipStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PAID = "PAID"
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"


class MembershipPlan(Base):
    """판매 중인 회원권 상품.

    price: 원 단위 정수 (소수점 없는 통화 기준)
    is_active=False 이면 목록에서 숨김 (soft delete)
    """

    __tablename__ = "membership_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class Membership(Base):
    """회원 한 명의 회원권 기간.

    - 결제 시 end_date 가 연장되고 EXPIRED 였다면 ACTIVE 로 재활성화
    - next_payment_due: 다음 납부 예정일 (= 현재 end_date)
    """

    __tablename__ = "memberships"
    __table_args__ = (
        Index("ix_memberships_user_id", "user_id"),
        Index("ix_memberships_end_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    plan_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("membership_plans.id"), nullable=False)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[MembershipStatus] = mapped_column(
        SAEnum(MembershipStatus, name="membership_status"), nullable=False, default=MembershipStatus.ACTIVE
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(PaymentStatus, name="payment_status"), nullable=False, default=PaymentStatus.PENDING
    )

    last_payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    next_payment_due: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class Payment(Base):
    """회원권 결제 기록.

    - months_paid: 이번 결제로 연장된 개월 수 (1 ~ 24)
    - processed_by: 결제를 처리한 직원 이메일
    """

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_user_id", "user_id"),
        Index("ix_payments_membership_id", "membership_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    membership_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("memberships.id"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False, default="cash")  # cash/card/bank_transfer
    months_paid: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(255), nullable=True)
    processed_by: Mapped[str] = mapped_column(String(255), nullable=False, default="admin")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
