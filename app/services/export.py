"""
services/export.py

회원 / 결제 데이터 내보내기(Export) 로직.

주요 기능:
- 회원별 요약 행 생성 (플랜, 상태, 기간, 누적 결제액, 결제 횟수, 최근 결제일)
- XLSX 워크북 생성 (members / payments 시트)

설계 원칙:
- 행(row) 생성과 파일 포맷 생성을 분리 → CSV / XLSX 에서 같은 행 사용
- 날짜는 ISO 문자열로 통일

관련 파일:
- app.routers.members    : /admin/members/export, /admin/members/export.xlsx

"""

import io
from datetime import date

from openpyxl import Workbook
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from app.models.membership import Membership, MembershipPlan, MembershipStatus, Payment
from app.models.user import User, Role


MEMBER_COLUMNS = [
    "id", "first_name", "last_name", "email", "phone",
    "plan", "membership_status", "start_date", "end_date",
    "total_paid", "payment_count", "last_payment_date", "created_at",
]

PAYMENT_COLUMNS = [
    "payment_id", "member_id", "member_name", "plan", "amount",
    "payment_date", "payment_method", "months_paid", "notes", "processed_by",
]


def _iso(value) -> str:
    return value.isoformat() if value else ""


def member_rows(db: Session, today: date) -> list[list]:
    users = db.scalars(select(User).where(User.role == Role.MEMBER).order_by(desc(User.created_at))).all()
    plans = {p.id: p for p in db.scalars(select(MembershipPlan)).all()}

    rows = []
    for u in users:
        membership = db.scalar(
            select(Membership)
            .where(Membership.user_id == u.id, Membership.status == MembershipStatus.ACTIVE)
            .order_by(desc(Membership.created_at))
            .limit(1)
        )
        payments = db.scalars(
            select(Payment).where(Payment.user_id == u.id).order_by(desc(Payment.payment_date))
        ).all()

        if membership:
            status = "ACTIVE" if membership.end_date >= today else "EXPIRED"
            plan = plans.get(membership.plan_id)
        else:
            status = "NO_MEMBERSHIP"
            plan = None

        rows.append([
            str(u.id),
            u.first_name,
            u.last_name,
            u.email,
            u.phone or "",
            plan.name if plan else "",
            status,
            _iso(membership.start_date) if membership else "",
            _iso(membership.end_date) if membership else "",
            sum(p.amount for p in payments),
            len(payments),
            _iso(payments[0].payment_date) if payments else "",
            _iso(u.created_at),
        ])
    return rows


def payment_rows(db: Session) -> list[list]:
    rows = db.execute(
        select(Payment, User, MembershipPlan)
        .join(User, User.id == Payment.user_id)
        .join(Membership, Membership.id == Payment.membership_id)
        .join(MembershipPlan, MembershipPlan.id == Membership.plan_id)
        .order_by(desc(Payment.payment_date), desc(Payment.created_at))
    ).all()
    return [
        [
            str(p.id),
            str(u.id),
            u.full_name,
            plan.name,
            p.amount,
            _iso(p.payment_date),
            p.payment_method,
            p.months_paid,
            p.notes or "",
            p.processed_by,
        ]
        for p, u, plan in rows
    ]


def build_members_workbook(db: Session, today: date) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "members"
    ws.append(MEMBER_COLUMNS)
    for row in member_rows(db, today):
        ws.append(row)

    ws_pay = wb.create_sheet("payments")
    ws_pay.append(PAYMENT_COLUMNS)
    for row in payment_rows(db):
        ws_pay.append(row)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
