"""
user.py

사용자(User) 및 권한(Role) 모델 정의 파일.

이 파일은 헬스장 회원과 직원/관리자 계정의 기본 정보,
권한(Role), 활성 상태, 알림 수신 동의 여부, 인증 관련 정보를 관리한다.

모든 인증, 권한, 회원권, 결제, 알림 기능의 기준이 되는 핵심 모델이다.

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import String, Integer, Boolean, DateTime, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


"""
사용자 권한(Role) 정의

- MEMBER : 헬스장 회원 (본인 정보만 조회)
- STAFF  : 데스크 직원 (회원 등록 / 결제 처리)
- ADMIN  : 관리자 (플랜 / 뉴스레터 / 내보내기 / 삭제)

"""

class Role(str, Enum):
    MEMBER = "MEMBER"
    STAFF = "STAFF"
    ADMIN = "ADMIN"


"""
사용자(User) 모델

- email 은 고유 식별자
- password_hash 는 비밀번호 없이 등록된 회원을 위해 nullable
- qr_code 는 회원 카드용 URL ({APP_BASE_URL}/member/{id})
- subscribe_* 로 뉴스레터 / 만료 알림 수신 동의 관리
- refresh_token_version 으로 강제 로그아웃 및 토큰 무효화 지원

"""

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    role: Mapped[Role] = mapped_column(SAEnum(Role, name="user_role"), nullable=False, default=Role.MEMBER)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    qr_code: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    subscribe_to_newsletter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    subscribe_to_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    refresh_token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=datetime.datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow, nullable=False
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
