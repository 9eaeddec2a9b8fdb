# tests/test_refresh_flow.py
import uuid

from app.models.user import Role
from tests.helpers import auth_header, create_user_in_db


def test_refresh_token_rotation_and_revocation(client, db_session):
    email = f"user_{uuid.uuid4().hex[:6]}@test.com"
    password = "secret123"
    create_user_in_db(db_session, email=email, password=password, role=Role.MEMBER)

    login = client.post("/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    access1 = login.json()["data"]["access_token"]
    assert access1
    assert "refresh_token" in client.cookies
    refresh1 = client.cookies.get("refresh_token")
    assert refresh1

    r1 = client.post("/auth/refresh")
    assert r1.status_code == 200, r1.text
    access2 = r1.json()["data"]["access_token"]
    assert access2

    refresh2 = client.cookies.get("refresh_token")
    assert refresh2 and refresh2 != refresh1

    # 회전 전 refresh token 재사용 → 거부
    client.cookies.clear()
    r_old = client.post("/auth/refresh", headers={"Cookie": f"refresh_token={refresh1}"})
    assert r_old.status_code == 401
    assert r_old.json()["detail"] == "Refresh token revoked"

    logout = client.post("/auth/logout", headers=auth_header(access2))
    assert logout.status_code == 204

    # 로그아웃 후 마지막 refresh token 도 무효
    client.cookies.clear()
    r_after = client.post("/auth/refresh", headers={"Cookie": f"refresh_token={refresh2}"})
    assert r_after.status_code == 401


def test_refresh_without_cookie_401(client):
    res = client.post("/auth/refresh")
    assert res.status_code == 401
    assert res.json()["detail"] == "Missing refresh token"
