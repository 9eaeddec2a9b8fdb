"""
members.py

직원(STAFF) / 관리자(ADMIN)용 회원 관리 API 모음.

주요 기능:
- 회원 목록 (검색 / 상태 필터 / 페이지네이션 / 통계)
- 신규 회원 등록 (첫 결제 포함, 초기 비밀번호 발급, 환영 메일)
- 회원 상세 / 수정 / 삭제
- 회원권 결제 및 갱신 미리보기

설계 원칙:
- 조회 / 등록 / 결제는 STAFF 이상, 삭제는 ADMIN 전용
- 비즈니스 로직은 service 계층에 위임하고 라우터는 트랜잭션과 응답만 처리
- ValueError → 400, 대상 없음(LookupError) → 404

관련 파일:
- app.services.members   : 회원 등록 / 조회 / 수정 / 삭제
- app.services.payments  : 결제 / 갱신 미리보기
- app.schemas.member     : 요청/응답 스키마

"""

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_db, get_current_staff, get_current_admin
from app.models.user import User
from app.schemas.member import (
    MemberCreateRequest,
    MemberUpdateRequest,
    MemberResponse,
    MemberListResponse,
    MemberDetailResponse,
    MemberCreatedResponse,
    MembershipStatusFilter,
    PaymentResultResponse,
)
from app.schemas.payment import PaymentCreateRequest, RenewalPreviewRequest, RenewalPreviewResponse
from app.services import members as member_service
from app.services.payments import preview_renewal, process_payment
from app.services.renewal import RenewalAnchor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["members"])


def _get_member_or_404(db: Session, member_id: uuid.UUID) -> User:
    user = member_service.get_member(db, member_id)
    if not user:
        raise HTTPException(status_code=404, detail="Member not found")
    return user


@router.get("", response_model=MemberListResponse)
def list_members(
    search: str = Query(default="", description="이름 / 성 / 이메일 부분 검색"),
    status_filter: MembershipStatusFilter = Query(default="all", alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    return member_service.list_members(
        db, today=date.today(), search=search, status=status_filter, page=page, limit=limit
    )


"""
신규 회원 등록 API

- 계정 / 회원권 / 첫 결제 / 만료 알림을 한 트랜잭션으로 생성
- 응답에 초기 로그인 정보(평문 비밀번호)를 한 번만 포함
- 환영 메일은 commit 이후 best-effort 로 발송

"""

@router.post("", response_model=MemberCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_member(
    body: MemberCreateRequest,
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    try:
        created = member_service.create_member(
            db,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            phone=body.phone,
            subscribe_to_newsletter=body.subscribe_to_newsletter,
            subscribe_to_notifications=body.subscribe_to_notifications,
            membership_start=body.membership_start,
            plan_id=body.plan_id,
            amount=body.payment.amount,
            payment_method=body.payment.payment_method,
            months_paid=body.payment.months_paid,
            payment_date=body.payment.payment_date,
            notes=body.payment.notes,
            processed_by=staff.email,
            lead_time_days=settings.RENEWAL_NOTICE_LEAD_DAYS,
        )
        db.commit()
    except LookupError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise

    user, membership, plan = created["user"], created["membership"], created["plan"]
    db.refresh(user)
    db.refresh(membership)
    db.refresh(created["payment"])

    # 메일 실패는 등록 결과에 영향을 주지 않음
    if not member_service.send_welcome_email(user, plan, membership, created["password"]):
        logger.warning("Welcome email not delivered to %s", user.email)

    return {
        "member": member_service.member_payload(db, user, date.today()),
        "membership": member_service.membership_payload(membership, plan),
        "payment": created["payment"],
        "login_credentials": {"email": user.email, "password": created["password"]},
    }


@router.get("/{member_id}", response_model=MemberDetailResponse)
def get_member(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    user = _get_member_or_404(db, member_id)
    return member_service.member_detail(db, user, date.today())


@router.put("/{member_id}", response_model=MemberResponse)
def update_member(
    member_id: uuid.UUID,
    body: MemberUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    user = _get_member_or_404(db, member_id)
    try:
        member_service.update_member(db, user, body.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(user)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise
    return member_service.member_payload(db, user, date.today())


@router.delete("/{member_id}")
def delete_member(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    user = _get_member_or_404(db, member_id)
    try:
        member_service.delete_member(db, user)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"data": {"id": str(member_id), "status": "deleted"}}


"""
회원권 결제 API

- 가장 최근 ACTIVE / EXPIRED 회원권을 갱신
- renewal.anchor: FROM_END(기본) / FROM_TODAY / CUSTOM(custom_date 필수)
- EXPIRED 회원권은 결제 시 ACTIVE 로 재활성화

"""

@router.post("/{member_id}/pay", response_model=PaymentResultResponse)
def pay(
    member_id: uuid.UUID,
    body: PaymentCreateRequest,
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    user = _get_member_or_404(db, member_id)
    try:
        out = process_payment(
            db,
            user=user,
            amount=body.amount,
            payment_method=body.payment_method,
            months_paid=body.months_paid,
            anchor=RenewalAnchor(body.renewal.anchor),
            custom_date=getattr(body.renewal, "custom_date", None),
            notes=body.notes,
            processed_by=staff.email,
            today=date.today(),
            lead_time_days=settings.RENEWAL_NOTICE_LEAD_DAYS,
        )
        db.commit()
    except LookupError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise

    db.refresh(out["payment"])
    db.refresh(out["membership"])
    result = out["result"]
    months = body.months_paid
    return {
        "message": f"Membership extended by {months} month{'s' if months > 1 else ''}",
        "payment": out["payment"],
        "membership": member_service.membership_payload(out["membership"], out["plan"]),
        "effective_start_date": result.effective_start_date,
        "new_end_date": result.new_end_date,
        "notification_date": result.notification_date,
        "months_added": months,
        "reactivated": out["reactivated"],
    }


@router.post("/{member_id}/renewal-preview", response_model=RenewalPreviewResponse)
def renewal_preview(
    member_id: uuid.UUID,
    body: RenewalPreviewRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    user = _get_member_or_404(db, member_id)
    try:
        membership, result, reactivated = preview_renewal(
            db,
            user_id=user.id,
            months_paid=body.months_paid,
            anchor=RenewalAnchor(body.renewal.anchor),
            custom_date=getattr(body.renewal, "custom_date", None),
            today=date.today(),
            lead_time_days=settings.RENEWAL_NOTICE_LEAD_DAYS,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return RenewalPreviewResponse(
        current_end_date=membership.end_date,
        effective_start_date=result.effective_start_date,
        new_end_date=result.new_end_date,
        notification_date=result.notification_date,
        reactivated=reactivated,
    )
