"""
me.py

회원(Member) 본인 전용 조회 API 모음.

관리자/직원용 회원 관리 기능(members.py)과 분리하여,
로그인한 회원이 자신의 정보만 조회할 수 있도록 하기 위한 구조이다.

주요 기능:
- 본인 프로필 + 현재 회원권 상태 조회
- 본인 결제 내역 조회
- 본인 알림 내역 조회

설계 원칙:
- 로그인한 사용자 본인 데이터만 반환
- 다른 회원 정보는 노출하지 않음

관련 파일:
- app.services.members        : 회원 응답 payload 생성
- app.services.notifications  : 알림 조회
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from app.core.deps import get_current_member, get_db
from app.models.membership import Payment
from app.models.user import User
from app.schemas.member import MemberResponse
from app.schemas.notification import NotificationResponse
from app.schemas.payment import PaymentResponse
from app.services.members import member_payload
from app.services.notifications import list_for_user

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=MemberResponse)
def profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_member),
):
    return member_payload(db, current_user, date.today())


# 최신 결제 순
@router.get("/payments", response_model=list[PaymentResponse])
def my_payments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_member),
):
    return db.scalars(
        select(Payment)
        .where(Payment.user_id == current_user.id)
        .order_by(desc(Payment.payment_date), desc(Payment.created_at))
    ).all()


@router.get("/notifications", response_model=list[NotificationResponse])
def my_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_member),
):
    return list_for_user(db, current_user.id)
