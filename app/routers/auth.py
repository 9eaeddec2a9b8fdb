"""
auth.py

인증(Authentication) API 모음.

이 파일은 회원 자가 가입, 로그인, 토큰 재발급, 로그아웃과 같이
사용자 인증 흐름 전반을 담당한다.
JWT 기반 인증 방식을 사용하며, Access Token + Refresh Token 구조를 따른다.

주요 기능:
- 회원 자가 가입 (MEMBER 권한, QR 코드 발급)
- 로그인 및 토큰 발급 (비활성 계정 차단)
- Refresh Token 기반 Access Token 재발급
- 로그아웃 (Refresh Token 무효화)

설계 원칙:
- Access Token은 Authorization Header로 전달
- Refresh Token은 HttpOnly Cookie로 관리
- Refresh Token Version을 이용해 강제 로그아웃 / 토큰 무효화 처리

관련 파일:
- app.core.security        : 비밀번호 해시 / JWT 생성·검증
- app.core.deps            : 인증 의존성(get_current_member)
- app.models.user          : User / Role 모델
- app.schemas.auth         : 인증 관련 요청/응답

"""

import uuid
from jose import JWTError
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.deps import get_db, get_current_member
from app.core.config import settings
from app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)

from app.models.user import User, Role
from app.schemas.auth import RegisterRequest, LoginRequest
from app.services.members import build_qr_code

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_NAME = "refresh_token"


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,        # 로컬 False / HTTPS 운영 True
        samesite=settings.COOKIE_SAMESITE,    # "lax" 추천
        domain=settings.COOKIE_DOMAIN,        # 보통 None
        path="/",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path="/", domain=settings.COOKIE_DOMAIN)


"""
회원 자가 가입 API

- 이메일 중복 시 가입 불가
- 가입 시 권한은 MEMBER, 회원권은 데스크에서 결제 후 생성

"""

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    existing = db.scalar(select(User).where(User.email == data.email))
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        email=data.email,
        password_hash=get_password_hash(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role=Role.MEMBER,
        is_active=True,
        qr_code=build_qr_code(user_id),
    )

    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    except Exception:
        db.rollback()
        raise

    return {
        "data": {
            "id": str(user.id),
            "email": user.email,
            "qr_code": user.qr_code,
        }
    }


"""
로그인 API

- 이메일 / 비밀번호 인증
- 비활성화된 계정은 로그인 불가 (403)
- Access Token은 응답 바디로, Refresh Token은 HttpOnly Cookie로 전달

"""

@router.post("/login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = db.scalar(select(User).where(User.email == data.email))

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

    access = create_access_token(subject=str(user.id), role=user.role.value)
    refresh = create_refresh_token(subject=str(user.id), refresh_token_version=user.refresh_token_version)
    _set_refresh_cookie(response, refresh)

    return {
        "data": {
            "access_token": access,
            "token_type": "bearer",
            "role": user.role.value,
        }
    }


"""
Access Token 재발급 API

- Refresh Token 쿠키로 새 Access Token 발급
- Refresh Token Version 불일치 시 거부
- 재발급 시 Refresh Token 회전(rotation)

"""

@router.post("/refresh")
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing refresh token")

    try:
        user_id, token_rtv = decode_refresh_token(token)
        user_uuid = uuid.UUID(user_id)
    except (JWTError, KeyError, ValueError):
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = db.scalar(select(User).where(User.id == user_uuid, User.is_active.is_(True)))
    if not user:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="User not found")

    if token_rtv != user.refresh_token_version:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="Refresh token revoked")

    try:
        user.refresh_token_version += 1
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    _set_refresh_cookie(
        response,
        create_refresh_token(subject=str(user.id), refresh_token_version=user.refresh_token_version),
    )
    return {
        "data": {
            "access_token": create_access_token(subject=str(user.id), role=user.role.value),
            "token_type": "bearer",
            "role": user.role.value,
        }
    }


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    response: Response,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_member),
):
    try:
        user.refresh_token_version += 1
        db.commit()
    except Exception:
        db.rollback()
        raise

    _clear_refresh_cookie(response)
    return None
