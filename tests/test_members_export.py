"""

관리자 회원 현황 export 테스트.
- XLSX: content-type, attachment 헤더, 파일 시그니처(PK), 시트 구성
- CSV: UTF-8 BOM, 헤더 행, 회원 요약 값
- ADMIN 전용 접근

"""

import csv
import io
from datetime import date

from openpyxl import load_workbook

from tests.helpers import auth_header, create_member_via_api, create_plan_in_db, setup_staff_and_admin


def _setup(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    plan = create_plan_in_db(db_session, name="Premium Monthly", price=50)
    created = create_member_via_api(
        client, ctx["staff_token"], plan_id=plan.id, membership_start=date.today(), amount=50,
        email="sarah.wilson@email.com", first_name="Sarah", last_name="Wilson",
    )
    pay = client.post(
        f"/members/{created['member']['id']}/pay",
        headers=auth_header(ctx["staff_token"]),
        json={"amount": 50, "months_paid": 1},
    )
    assert pay.status_code == 200, pay.text
    return ctx, created


def test_admin_members_export_xlsx_ok(client, db_session):
    ctx, created = _setup(client, db_session)

    res = client.get("/admin/members/export.xlsx", headers=auth_header(ctx["admin_token"]))
    assert res.status_code == 200

    ct = res.headers.get("content-type", "")
    assert ct.startswith("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")

    cd = res.headers.get("content-disposition", "")
    assert "attachment" in cd
    assert ".xlsx" in cd

    # XLSX는 ZIP 기반 포맷이라 앞부분이 PK로 시작
    assert res.content[:2] == b"PK"

    wb = load_workbook(io.BytesIO(res.content))
    assert wb.sheetnames == ["members", "payments"]

    members = list(wb["members"].iter_rows(values_only=True))
    assert members[0][0] == "id"
    assert len(members) == 2
    row = dict(zip(members[0], members[1]))
    assert row["email"] == "sarah.wilson@email.com"
    assert row["plan"] == "Premium Monthly"
    assert row["membership_status"] == "ACTIVE"
    assert row["total_paid"] == 100
    assert row["payment_count"] == 2

    payments = list(wb["payments"].iter_rows(values_only=True))
    assert len(payments) == 3


def test_admin_members_export_csv_ok(client, db_session):
    ctx, created = _setup(client, db_session)

    res = client.get("/admin/members/export", headers=auth_header(ctx["admin_token"]))
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "attachment" in res.headers.get("content-disposition", "")

    text = res.content.decode("utf-8")
    assert text.startswith("\ufeff")

    rows = list(csv.reader(io.StringIO(text.lstrip("\ufeff"))))
    assert rows[0][:4] == ["id", "first_name", "last_name", "email"]
    assert len(rows) == 2
    assert rows[1][0] == created["member"]["id"]
    assert rows[1][3] == "sarah.wilson@email.com"


def test_export_requires_admin(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    assert client.get("/admin/members/export.xlsx", headers=auth_header(ctx["staff_token"])).status_code == 403
    assert client.get("/admin/members/export", headers=auth_header(ctx["staff_token"])).status_code == 403
