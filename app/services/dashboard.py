"""
services/dashboard.py

관리자 대시보드 데이터 계산.

- 회원 상태 통계 (active / expiring / expired)
- 최근 활동 (최근 7일 결제, 최근 7일 신규 회원, 7일 내 만료 예정)
- 30일 내 만료 예정 회원권 / 최근 30일 내 만료된 회원권

"""

from datetime import date, datetime, timedelta

from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.membership import Membership, MembershipPlan, MembershipStatus, Payment
from app.models.user import User, Role
from app.services.renewal import membership_status

ACTIVITY_LIMIT = 10
ACTIVITY_ORDER = {"payment": 0, "new_member": 1, "expiring": 2}


def _stats(db: Session, today: date) -> dict:
    members = db.scalars(select(User).where(User.role == Role.MEMBER)).all()
    stats = {"total_members": len(members), "active_members": 0, "expiring_members": 0, "expired_members": 0}
    for u in members:
        active = db.scalar(
            select(Membership)
            .where(Membership.user_id == u.id, Membership.status == MembershipStatus.ACTIVE)
            .order_by(desc(Membership.created_at))
            .limit(1)
        )
        status = membership_status(active.end_date if active else None, today, settings.EXPIRING_WINDOW_DAYS)
        stats[f"{status}_members"] += 1
    return stats


def _ending_between(db: Session, start: date, end: date, *, newest_first: bool, limit: int):
    order = desc(Membership.end_date) if newest_first else Membership.end_date
    return db.execute(
        select(Membership, User, MembershipPlan)
        .join(User, User.id == Membership.user_id)
        .join(MembershipPlan, MembershipPlan.id == Membership.plan_id)
        .where(Membership.status == MembershipStatus.ACTIVE)
        .where(Membership.end_date >= start, Membership.end_date <= end)
        .order_by(order)
        .limit(limit)
    ).all()


def _activities(db: Session, today: date, now: datetime) -> list[dict]:
    week_ago = now - timedelta(days=7)
    items = []

    recent_payments = db.execute(
        select(Payment, User, MembershipPlan)
        .join(User, User.id == Payment.user_id)
        .join(Membership, Membership.id == Payment.membership_id)
        .join(MembershipPlan, MembershipPlan.id == Membership.plan_id)
        .where(Payment.created_at >= week_ago)
        .order_by(desc(Payment.created_at))
        .limit(5)
    ).all()
    for p, u, plan in recent_payments:
        items.append({
            "id": f"payment-{p.id}",
            "type": "payment",
            "member_name": u.full_name,
            "description": f"Paid {plan.name} - {p.amount}",
            "occurred_at": p.created_at,
        })

    new_members = db.scalars(
        select(User)
        .where(User.role == Role.MEMBER, User.created_at >= week_ago)
        .order_by(desc(User.created_at))
        .limit(5)
    ).all()
    for u in new_members:
        items.append({
            "id": f"member-{u.id}",
            "type": "new_member",
            "member_name": u.full_name,
            "description": "New member",
            "occurred_at": u.created_at,
        })

    for m, u, plan in _ending_between(db, today, today + timedelta(days=7), newest_first=False, limit=3):
        days = (m.end_date - today).days
        items.append({
            "id": f"expiring-{m.id}",
            "type": "expiring",
            "member_name": u.full_name,
            "description": f"{plan.name} expires in {days} day{'s' if days != 1 else ''}",
            "days_until_expiry": days,
        })

    items.sort(key=lambda a: ACTIVITY_ORDER[a["type"]])
    return items[:ACTIVITY_LIMIT]


def _digest(m: Membership, u: User, plan: MembershipPlan | None, kind: str) -> dict:
    return {
        "id": str(m.id),
        "user_id": u.id,
        "member_name": u.full_name,
        "email": u.email,
        "plan_name": plan.name if plan else None,
        "end_date": m.end_date,
        "type": kind,
    }


def dashboard(db: Session, today: date, now: datetime) -> dict:
    expiring = [
        _digest(m, u, plan, "expiring")
        for m, u, plan in _ending_between(db, today, today + timedelta(days=30), newest_first=False, limit=5)
    ]

    # 만료일이 지났지만 아직 배치가 EXPIRED 로 바꾸지 않은 회원권 + 배치로 만료 처리된 회원권
    expired_rows = db.execute(
        select(Membership, User, MembershipPlan)
        .join(User, User.id == Membership.user_id)
        .join(MembershipPlan, MembershipPlan.id == Membership.plan_id)
        .where(Membership.status.in_([MembershipStatus.ACTIVE, MembershipStatus.EXPIRED]))
        .where(Membership.end_date < today, Membership.end_date >= today - timedelta(days=30))
        .order_by(desc(Membership.end_date))
        .limit(5)
    ).all()
    expired = [
        _digest(m, u, plan, "expired_membership" if m.status == MembershipStatus.ACTIVE else "no_active_membership")
        for m, u, plan in expired_rows
    ]

    return {
        "stats": _stats(db, today),
        "activities": _activities(db, today, now),
        "expiring_memberships": expiring,
        "expired_memberships": expired,
    }
