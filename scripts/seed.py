"""

개발용 샘플 데이터 생성 스크립트.

- 기본 회원권 플랜 5종 생성
- 샘플 회원 5명 생성 (활성 / 만료 임박 / 만료 상태가 섞이도록 시작일 조정)
- 이미 플랜이 있으면 아무것도 하지 않음

사용 방법
- (.venv) ~\backend~$ python -m scripts.seed

"""

from datetime import date, timedelta

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.core.config import settings
from app.db.session import SessionLocal
from app.models.membership import MembershipPlan
from app.services.members import create_member
from app.services.notifications import expire_memberships
from app.services.plans import create_plan

PLANS = [
    ("Basic Monthly", 30, 1, ["Gym floor access"]),
    ("Premium Monthly", 50, 1, ["Gym floor access", "Group classes", "Sauna"]),
    ("Basic Annual", 300, 12, ["Gym floor access"]),
    ("Premium Annual", 500, 12, ["Gym floor access", "Group classes", "Sauna"]),
    ("Student Plan", 20, 1, ["Gym floor access", "Student ID required"]),
]

# (first_name, last_name, email, phone, plan index, 시작일 오프셋(일))
MEMBERS = [
    ("John", "Doe", "john.doe@email.com", "+1234567890", 1, -15),
    ("Jane", "Smith", "jane.smith@email.com", "+1234567891", 2, -60),
    ("Mike", "Johnson", "mike.johnson@email.com", "+1234567892", 0, -29),
    ("Sarah", "Wilson", "sarah.wilson@email.com", "+1234567893", 4, -45),
    ("Alex", "Brown", "alex.brown@email.com", "+1234567894", 3, -200),
]


def main():
    db = SessionLocal()
    try:
        if db.scalar(select(MembershipPlan).limit(1)):
            print("✅ Plans already exist. Skip seeding.")
            return

        plans = [
            create_plan(db, name=name, price=price, duration_months=months, features=features)
            for name, price, months, features in PLANS
        ]

        today = date.today()
        for first_name, last_name, email, phone, plan_idx, offset in MEMBERS:
            plan = plans[plan_idx]
            created = create_member(
                db,
                first_name=first_name,
                last_name=last_name,
                email=email,
                phone=phone,
                subscribe_to_newsletter=True,
                subscribe_to_notifications=True,
                membership_start=today + timedelta(days=offset),
                plan_id=plan.id,
                amount=plan.price,
                payment_method="cash",
                months_paid=plan.duration_months,
                payment_date=None,
                notes="seed",
                processed_by="seed",
                lead_time_days=settings.RENEWAL_NOTICE_LEAD_DAYS,
            )
            print(f"👤 {email} / password {created['password']}")

        expire_memberships(db, today)
        db.commit()
        print(f"🌱 Seeded {len(plans)} plans and {len(MEMBERS)} members")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
