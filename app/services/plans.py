"""
services/plans.py

회원권 플랜(MembershipPlan) 비즈니스 로직.

주요 기능:
- 활성 플랜 목록 (가격 오름차순, 플랜별 회원권 수 포함)
- 플랜 상세 (최근 회원권 5건 포함)
- 플랜 생성 / 수정
- 플랜 비활성화 (사용 중인 ACTIVE 회원권이 있으면 거부)

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어(commit/rollback)는 라우터에서 수행
- 규칙 위반은 ValueError, 대상 없음은 None 반환

"""

import uuid
from sqlalchemy import select, func, desc
from sqlalchemy.orm import Session

from app.models.membership import MembershipPlan, Membership, MembershipStatus
from app.models.user import User


def get_plan(db: Session, plan_id: uuid.UUID) -> MembershipPlan | None:
    return db.scalar(select(MembershipPlan).where(MembershipPlan.id == plan_id))


def count_memberships(db: Session, plan_id: uuid.UUID, *, status: MembershipStatus | None = None) -> int:
    stmt = select(func.count()).select_from(Membership).where(Membership.plan_id == plan_id)
    if status is not None:
        stmt = stmt.where(Membership.status == status)
    return db.scalar(stmt) or 0


def list_active_plans(db: Session) -> list[tuple[MembershipPlan, int]]:
    plans = db.scalars(
        select(MembershipPlan)
        .where(MembershipPlan.is_active.is_(True))
        .order_by(MembershipPlan.price)
    ).all()
    return [(p, count_memberships(db, p.id)) for p in plans]


def recent_memberships(db: Session, plan_id: uuid.UUID, limit: int = 5) -> list[tuple[Membership, User]]:
    rows = db.execute(
        select(Membership, User)
        .join(User, User.id == Membership.user_id)
        .where(Membership.plan_id == plan_id)
        .order_by(desc(Membership.created_at))
        .limit(limit)
    ).all()
    return [(m, u) for m, u in rows]


def create_plan(db: Session, *, name: str, price: int, duration_months: int, features: list[str]) -> MembershipPlan:
    plan = MembershipPlan(
        name=name,
        price=price,
        duration_months=duration_months,
        features=list(features or []),
        is_active=True,
    )
    db.add(plan)
    db.flush()
    return plan


def update_plan(
    db: Session,
    plan: MembershipPlan,
    *,
    name: str,
    price: int,
    duration_months: int,
    features: list[str],
    is_active: bool | None,
) -> MembershipPlan:
    if is_active is False and plan.is_active:
        in_use = count_memberships(db, plan.id, status=MembershipStatus.ACTIVE)
        if in_use > 0:
            raise ValueError(f"cannot deactivate a plan used by {in_use} active memberships")
    plan.name = name
    plan.price = price
    plan.duration_months = duration_months
    plan.features = list(features or [])
    if is_active is not None:
        plan.is_active = is_active
    db.flush()
    return plan


"""
플랜 비활성화 (soft delete)

- ACTIVE 회원권이 하나라도 있으면 ValueError
- 실제 삭제하지 않고 is_active=False 로 표시

"""

def deactivate_plan(db: Session, plan: MembershipPlan) -> MembershipPlan:
    in_use = count_memberships(db, plan.id, status=MembershipStatus.ACTIVE)
    if in_use > 0:
        raise ValueError(f"cannot delete a plan used by {in_use} active memberships")
    plan.is_active = False
    db.flush()
    return plan
