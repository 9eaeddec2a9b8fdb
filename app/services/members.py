"""
services/members.py

헬스장 회원(Member) 관리 비즈니스 로직.

이 파일은 회원 등록, 조회, 수정, 삭제와
회원 목록의 검색 / 상태 필터 / 페이지네이션 / 통계 계산을 담당한다.

주요 기능:
- 신규 회원 등록 (계정 + 첫 회원권 + 첫 결제 + 만료 알림을 한 트랜잭션으로)
- 회원 상태 계산 (active / expiring / expired)
- 회원 목록 검색 및 통계
- 회원 상세 (회원권 / 결제 / 알림 이력)
- 회원 정보 수정 / 삭제

설계 원칙:
- HTTP / FastAPI 의존성 없음
- commit / rollback 은 라우터에서 수행
- 규칙 위반은 ValueError, 대상 없음은 None 반환
- 오늘 날짜(today)는 인자로 받아 계산 결과를 결정적으로 유지

관련 파일:
- app.services.renewal        : add_months / membership_status
- app.services.notifications  : 만료 알림 예약
- app.services.mailer         : 환영 메일
- app.routers.members         : 회원 관리 API

"""

import logging
import math
import uuid
from datetime import date, timedelta

from sqlalchemy import select, delete, or_, desc
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import get_password_hash, generate_member_password
from app.models.membership import Membership, MembershipPlan, MembershipStatus, Payment, PaymentStatus
from app.models.notification import Notification
from app.models.user import User, Role
from app.services.mailer import send_email
from app.services.notifications import schedule_expiry_notification, list_for_user
from app.services.plans import get_plan
from app.services.renewal import add_months, membership_status

logger = logging.getLogger(__name__)

# PUT 에서 null 로 비울 수 있는 필드
NULLABLE_FIELDS = {"phone"}


def build_qr_code(user_id: uuid.UUID) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/member/{user_id}"


def get_member(db: Session, user_id: uuid.UUID) -> User | None:
    return db.scalar(select(User).where(User.id == user_id, User.role == Role.MEMBER))


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email))


def latest_active_membership(db: Session, user_id: uuid.UUID) -> Membership | None:
    return db.scalar(
        select(Membership)
        .where(Membership.user_id == user_id, Membership.status == MembershipStatus.ACTIVE)
        .order_by(desc(Membership.created_at))
        .limit(1)
    )


def membership_payload(membership: Membership, plan: MembershipPlan | None) -> dict:
    return {
        "id": membership.id,
        "user_id": membership.user_id,
        "plan_id": membership.plan_id,
        "start_date": membership.start_date,
        "end_date": membership.end_date,
        "status": membership.status.value,
        "payment_status": membership.payment_status.value,
        "last_payment_date": membership.last_payment_date,
        "next_payment_due": membership.next_payment_due,
        "notes": membership.notes,
        "created_at": membership.created_at,
        "plan": plan,
    }


"""
회원 응답용 dict 생성

- 가장 최근 ACTIVE 회원권 기준으로 상태 계산
- ACTIVE 회원권이 없으면 expired

"""

def member_payload(db: Session, user: User, today: date) -> dict:
    active = latest_active_membership(db, user.id)
    if active:
        status = membership_status(active.end_date, today, settings.EXPIRING_WINDOW_DAYS)
        active_data = membership_payload(active, get_plan(db, active.plan_id))
    else:
        status = "expired"
        active_data = None

    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role.value,
        "is_active": user.is_active,
        "qr_code": user.qr_code,
        "subscribe_to_newsletter": user.subscribe_to_newsletter,
        "subscribe_to_notifications": user.subscribe_to_notifications,
        "created_at": user.created_at,
        "membership_status": status,
        "active_membership": active_data,
    }


def list_members(
    db: Session,
    *,
    today: date,
    search: str = "",
    status: str = "all",
    page: int = 1,
    limit: int = 20,
) -> dict:
    stmt = select(User).where(User.role == Role.MEMBER)
    search = (search or "").strip()
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
            User.email.ilike(pattern),
        ))
    users = db.scalars(stmt.order_by(desc(User.created_at))).all()

    rows = [member_payload(db, u, today) for u in users]
    if status != "all":
        rows = [r for r in rows if r["membership_status"] == status]

    total = len(rows)
    total_pages = math.ceil(total / limit) if limit else 0
    start = (page - 1) * limit

    stats = {"total": total, "active": 0, "expiring": 0, "expired": 0}
    for r in rows:
        stats[r["membership_status"]] += 1

    return {
        "members": rows[start:start + limit],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_previous": page > 1,
        },
        "stats": stats,
    }


def member_detail(db: Session, user: User, today: date) -> dict:
    data = member_payload(db, user, today)

    memberships = db.scalars(
        select(Membership).where(Membership.user_id == user.id).order_by(desc(Membership.created_at))
    ).all()
    data["memberships"] = [membership_payload(m, get_plan(db, m.plan_id)) for m in memberships]

    data["payments"] = db.scalars(
        select(Payment).where(Payment.user_id == user.id).order_by(desc(Payment.created_at))
    ).all()
    data["notifications"] = list_for_user(db, user.id)
    return data


"""
신규 회원 등록

- 이메일 중복 / 비활성 플랜은 ValueError, 플랜 미존재는 LookupError
- 6자리 숫자 초기 비밀번호 생성 (응답에서 한 번만 평문 반환)
- membership_start 부터 결제 개월 수만큼 회원권 생성
- 첫 결제 기록 및 만료 임박 알림 예약

"""

def create_member(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    phone: str | None,
    subscribe_to_newsletter: bool,
    subscribe_to_notifications: bool,
    membership_start: date,
    plan_id: uuid.UUID,
    amount: int,
    payment_method: str,
    months_paid: int,
    payment_date: date | None,
    notes: str | None,
    processed_by: str,
    lead_time_days: int,
) -> dict:
    if get_user_by_email(db, email):
        raise ValueError("a user with this email already exists")

    plan = get_plan(db, plan_id)
    if not plan:
        raise LookupError("membership plan not found")
    if not plan.is_active:
        raise ValueError("membership plan is not active")

    password = generate_member_password()
    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        email=email,
        password_hash=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        phone=phone or None,
        role=Role.MEMBER,
        is_active=True,
        qr_code=build_qr_code(user_id),
        subscribe_to_newsletter=subscribe_to_newsletter,
        subscribe_to_notifications=subscribe_to_notifications,
    )
    db.add(user)
    db.flush()

    end_date = add_months(membership_start, months_paid)
    paid_on = payment_date or membership_start
    membership = Membership(
        user_id=user.id,
        plan_id=plan.id,
        start_date=membership_start,
        end_date=end_date,
        status=MembershipStatus.ACTIVE,
        payment_status=PaymentStatus.PAID,
        last_payment_date=paid_on,
        next_payment_due=end_date,
    )
    db.add(membership)
    db.flush()

    payment = Payment(
        membership_id=membership.id,
        user_id=user.id,
        amount=amount,
        payment_date=paid_on,
        payment_method=payment_method,
        months_paid=months_paid,
        notes=notes,
        processed_by=processed_by,
    )
    db.add(payment)
    db.flush()

    schedule_expiry_notification(
        db,
        user=user,
        plan_name=plan.name,
        end_date=end_date,
        notify_on=end_date - timedelta(days=lead_time_days),
    )

    logger.info("Member created id=%s plan=%s end_date=%s", user.id, plan.name, end_date.isoformat())
    return {"user": user, "membership": membership, "plan": plan, "payment": payment, "password": password}


def send_welcome_email(user: User, plan: MembershipPlan, membership: Membership, password: str) -> bool:
    text = (
        f"Welcome, {user.first_name}!\n\n"
        f"Your {plan.name} membership is active from {membership.start_date.strftime('%d.%m.%Y')} "
        f"to {membership.end_date.strftime('%d.%m.%Y')}.\n\n"
        f"Login email: {user.email}\n"
        f"Password: {password}\n\n"
        f"Your member card: {user.qr_code}\n"
    )
    return send_email(to=user.email, subject="Welcome to the gym", text=text)


def update_member(db: Session, user: User, changes: dict) -> User:
    new_email = changes.get("email")
    if new_email and new_email != user.email:
        existing = get_user_by_email(db, new_email)
        if existing and existing.id != user.id:
            raise ValueError("a user with this email already exists")

    for field in (
        "first_name",
        "last_name",
        "email",
        "phone",
        "subscribe_to_newsletter",
        "subscribe_to_notifications",
        "is_active",
    ):
        if field not in changes:
            continue
        if changes[field] is not None or field in NULLABLE_FIELDS:
            setattr(user, field, changes[field])
    db.flush()
    return user


"""
회원 삭제

- 알림 / 결제 / 회원권을 먼저 삭제한 뒤 사용자 삭제 (FK 순서)

"""

def delete_member(db: Session, user: User) -> None:
    db.execute(delete(Notification).where(Notification.user_id == user.id))
    db.execute(delete(Payment).where(Payment.user_id == user.id))
    db.execute(delete(Membership).where(Membership.user_id == user.id))
    db.delete(user)
    db.flush()
    logger.info("Member deleted id=%s", user.id)
