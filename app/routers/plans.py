"""
plans.py

회원권 플랜(MembershipPlan) API 모음.

주요 기능:
- 활성 플랜 목록 조회 (로그인 사용자 누구나)
- 플랜 상세 조회 (최근 회원권 5건 포함)
- 플랜 생성 / 수정 / 비활성화 (ADMIN 전용)

설계 원칙:
- 삭제는 soft delete(is_active=False)
- ACTIVE 회원권이 사용 중인 플랜은 비활성화 불가 (400)

관련 파일:
- app.services.plans     : 플랜 비즈니스 로직
- app.schemas.plan       : 요청/응답 스키마

"""

import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_member, get_current_staff, get_current_admin
from app.models.membership import MembershipPlan
from app.models.user import User
from app.schemas.plan import PlanCreateRequest, PlanUpdateRequest, PlanResponse, PlanDetailResponse
from app.services import plans as plan_service

router = APIRouter(prefix="/membership-plans", tags=["membership-plans"])


def _plan_payload(plan: MembershipPlan, member_count: int) -> dict:
    return {
        "id": plan.id,
        "name": plan.name,
        "price": plan.price,
        "duration_months": plan.duration_months,
        "features": plan.features or [],
        "is_active": plan.is_active,
        "created_at": plan.created_at,
        "member_count": member_count,
    }


def _get_plan_or_404(db: Session, plan_id: uuid.UUID) -> MembershipPlan:
    plan = plan_service.get_plan(db, plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Membership plan not found")
    return plan


@router.get("", response_model=list[PlanResponse])
def list_plans(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_member),
):
    return [_plan_payload(p, count) for p, count in plan_service.list_active_plans(db)]


@router.get("/{plan_id}", response_model=PlanDetailResponse)
def get_plan(
    plan_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    plan = _get_plan_or_404(db, plan_id)
    data = _plan_payload(plan, plan_service.count_memberships(db, plan.id))
    data["recent_members"] = [
        {
            "membership_id": m.id,
            "user_id": u.id,
            "name": u.full_name,
            "email": u.email,
            "start_date": m.start_date,
            "end_date": m.end_date,
            "status": m.status.value,
        }
        for m, u in plan_service.recent_memberships(db, plan.id)
    ]
    return data


@router.post("", response_model=PlanResponse, status_code=201)
def create_plan(
    body: PlanCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        plan = plan_service.create_plan(
            db,
            name=body.name,
            price=body.price,
            duration_months=body.duration_months,
            features=body.features,
        )
        db.commit()
        db.refresh(plan)
    except Exception:
        db.rollback()
        raise
    return _plan_payload(plan, 0)


@router.put("/{plan_id}", response_model=PlanResponse)
def update_plan(
    plan_id: uuid.UUID,
    body: PlanUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    plan = _get_plan_or_404(db, plan_id)
    try:
        plan_service.update_plan(
            db,
            plan,
            name=body.name,
            price=body.price,
            duration_months=body.duration_months,
            features=body.features,
            is_active=body.is_active,
        )
        db.commit()
        db.refresh(plan)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise
    return _plan_payload(plan, plan_service.count_memberships(db, plan.id))


@router.delete("/{plan_id}")
def delete_plan(
    plan_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    plan = _get_plan_or_404(db, plan_id)
    try:
        plan_service.deactivate_plan(db, plan)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise
    return {"data": {"id": str(plan_id), "is_active": False}}
