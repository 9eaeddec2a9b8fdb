"""
services/admin.py

관리자 관련 비즈니스 로직(Service) 모음.

주요 기능:
- 현재 ADMIN 계정 수 계산
- 사용자 권한 변경 (마지막 ADMIN 보호)

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 정책 위반은 ValueError 로 알리고 라우터에서 400 으로 변환
- 트랜잭션 제어는 라우터에서 수행

관련 파일:
- app.models.user        : User / Role 모델
- app.routers.admin      : 관리자 API

"""

import logging

from sqlalchemy.orm import Session
from sqlalchemy import select, func
from app.models.user import User, Role

logger = logging.getLogger(__name__)


def count_admins(db: Session) -> int:
    return db.scalar(
        select(func.count()).select_from(User).where(User.role == Role.ADMIN, User.is_active.is_(True))
    ) or 0


"""
사용자 권한 변경

- 자기 자신 권한 변경 금지
- 이미 같은 권한이면 변경 불가
- 마지막 ADMIN 강등 금지

"""

def set_role(db: Session, *, actor: User, user: User, role: Role) -> User:
    if user.id == actor.id:
        raise ValueError("Cannot change your own role")

    if user.role == role:
        raise ValueError(f"User already {user.role.value}")

    if user.role == Role.ADMIN and count_admins(db) <= 1:
        raise ValueError("Cannot demote the last ADMIN")

    before = user.role
    user.role = role
    # 권한 변경 시 기존 refresh token 무효화
    user.refresh_token_version += 1
    db.flush()

    logger.info("Role of %s changed %s -> %s by %s", user.email, before.value, role.value, actor.email)
    return user
