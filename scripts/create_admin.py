"""

ADMIN 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 ADMIN_* 환경 변수를 읽어 ADMIN 계정을 생성한다.
- 같은 이메일의 계정이 이미 있으면 ADMIN 으로 승격만 한다.

사용 목적:
- 플랜 / 뉴스레터 / 권한 관리 API에 접근할 수 있는
  첫 관리자 계정을 안전하게 초기화하기 위함

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_admin

"""

import os
import uuid
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.db.session import SessionLocal
from app.models.user import User, Role
from app.core.security import get_password_hash
from app.services.members import build_qr_code


def main():
    email = os.environ["ADMIN_EMAIL"]
    password = os.environ["ADMIN_PASSWORD"]
    first_name = os.environ.get("ADMIN_FIRST_NAME", "Gym")
    last_name = os.environ.get("ADMIN_LAST_NAME", "Admin")

    db = SessionLocal()
    try:
        user = db.scalar(select(User).where(User.email == email))
        if user:
            if user.role == Role.ADMIN:
                print("✅ ADMIN already exists. Skip creation.")
                return
            user.role = Role.ADMIN
            db.commit()
            print(f"⬆️  {email} promoted to ADMIN")
            return

        user_id = uuid.uuid4()
        db.add(User(
            id=user_id,
            email=email,
            password_hash=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=Role.ADMIN,
            qr_code=build_qr_code(user_id),
            subscribe_to_newsletter=False,
        ))
        db.commit()

        print(f"🚀 ADMIN created: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
