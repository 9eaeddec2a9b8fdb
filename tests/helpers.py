# tests/helpers.py
import uuid
from datetime import date

from sqlalchemy.orm import Session
from sqlalchemy import select

from app.models.membership import Membership, MembershipPlan
from app.models.notification import Notification
from app.models.user import User, Role
from app.core.security import get_password_hash


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_user_in_db(db: Session, *, email: str, password: str, role: Role = Role.ADMIN) -> User:
    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        email=email,
        password_hash=get_password_hash(password),
        first_name=role.value.title(),
        last_name="Tester",
        phone="+100000000",
        role=role,
        is_active=True,
        qr_code=f"http://localhost:3000/member/{user_id}",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login(client, email: str, password: str) -> str:
    res = client.post("/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return res.json()["data"]["access_token"]


def setup_staff_and_admin(client, db: Session) -> dict:
    """
    ADMIN / STAFF 계정 생성 + 토큰 발급
    """
    admin_email = f"admin_{uuid.uuid4().hex[:6]}@test.com"
    staff_email = f"staff_{uuid.uuid4().hex[:6]}@test.com"
    password = "Passw0rd!"

    admin = create_user_in_db(db, email=admin_email, password=password, role=Role.ADMIN)
    staff = create_user_in_db(db, email=staff_email, password=password, role=Role.STAFF)

    return {
        "admin_id": str(admin.id),
        "admin_email": admin_email,
        "admin_token": login(client, admin_email, password),
        "staff_id": str(staff.id),
        "staff_email": staff_email,
        "staff_token": login(client, staff_email, password),
        "password": password,
    }


def create_plan_in_db(db: Session, *, name: str = "Basic Monthly", price: int = 30, duration_months: int = 1) -> MembershipPlan:
    plan = MembershipPlan(name=name, price=price, duration_months=duration_months, features=["Gym floor access"], is_active=True)
    db.add(plan)
    db.commit()
    db.refresh(plan)
    return plan


def create_member_via_api(
    client,
    token: str,
    *,
    plan_id,
    membership_start: date,
    months_paid: int = 1,
    amount: int = 30,
    email: str | None = None,
    first_name: str = "John",
    last_name: str = "Doe",
) -> dict:
    res = client.post(
        "/members",
        headers=auth_header(token),
        json={
            "first_name": first_name,
            "last_name": last_name,
            "email": email or f"member_{uuid.uuid4().hex[:6]}@test.com",
            "phone": "+1234567890",
            "subscribe_to_newsletter": True,
            "subscribe_to_notifications": True,
            "membership_start": membership_start.isoformat(),
            "plan_id": str(plan_id),
            "payment": {"amount": amount, "payment_method": "cash", "months_paid": months_paid},
        },
    )
    assert res.status_code == 201, res.text
    return res.json()


def get_membership(db: Session, membership_id: str) -> Membership:
    db.expire_all()
    return db.scalar(select(Membership).where(Membership.id == uuid.UUID(membership_id)))


def pending_notifications(db: Session, user_id: str) -> list[Notification]:
    db.expire_all()
    return list(
        db.scalars(
            select(Notification)
            .where(Notification.user_id == uuid.UUID(user_id), Notification.is_sent.is_(False))
            .order_by(Notification.scheduled_for)
        ).all()
    )
