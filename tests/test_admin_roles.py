"""

관리자 권한 변경 테스트.
- MEMBER → STAFF 승격 후 직원 API 접근 가능
- 자기 자신 / 동일 권한 변경 거부, 마지막 ADMIN 강등 거부

"""

import uuid

import pytest

from app.models.user import Role
from app.services.admin import set_role
from tests.helpers import auth_header, create_user_in_db, login, setup_staff_and_admin


def test_promote_member_to_staff(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    email = f"member_{uuid.uuid4().hex[:6]}@test.com"
    member = create_user_in_db(db_session, email=email, password="secret123", role=Role.MEMBER)

    res = client.patch(
        f"/admin/users/{member.id}/role",
        headers=auth_header(ctx["admin_token"]),
        json={"role": "STAFF"},
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["role"] == "STAFF"

    token = login(client, email, "secret123")
    assert client.get("/members", headers=auth_header(token)).status_code == 200


def test_role_change_rules(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)

    own = client.patch(
        f"/admin/users/{ctx['admin_id']}/role",
        headers=auth_header(ctx["admin_token"]),
        json={"role": "STAFF"},
    )
    assert own.status_code == 400
    assert own.json()["detail"] == "Cannot change your own role"

    same = client.patch(
        f"/admin/users/{ctx['staff_id']}/role",
        headers=auth_header(ctx["admin_token"]),
        json={"role": "STAFF"},
    )
    assert same.status_code == 400
    assert same.json()["detail"] == "User already STAFF"

    forbidden = client.patch(
        f"/admin/users/{ctx['admin_id']}/role",
        headers=auth_header(ctx["staff_token"]),
        json={"role": "MEMBER"},
    )
    assert forbidden.status_code == 403

    missing = client.patch(
        f"/admin/users/{uuid.uuid4()}/role",
        headers=auth_header(ctx["admin_token"]),
        json={"role": "STAFF"},
    )
    assert missing.status_code == 404


def test_last_admin_cannot_be_demoted(db_session):
    admin = create_user_in_db(db_session, email="only_admin@test.com", password="secret123", role=Role.ADMIN)
    staff = create_user_in_db(db_session, email="desk@test.com", password="secret123", role=Role.STAFF)

    with pytest.raises(ValueError, match="last ADMIN"):
        set_role(db_session, actor=staff, user=admin, role=Role.STAFF)


def test_demote_one_of_two_admins(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    other = create_user_in_db(db_session, email="second_admin@test.com", password="secret123", role=Role.ADMIN)

    res = client.patch(
        f"/admin/users/{other.id}/role",
        headers=auth_header(ctx["admin_token"]),
        json={"role": "STAFF"},
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["role"] == "STAFF"
