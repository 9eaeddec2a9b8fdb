"""

뉴스레터 통합 테스트.
- draft / now / later 생성, 수신 대상(활성 + 수신 동의 MEMBER) 집계,
  예약 발송 배치, 목록 통계, ADMIN 전용 접근을 검증한다.

"""

from datetime import date, datetime, timedelta

from sqlalchemy import select

from app.models.notification import Newsletter, NewsletterStatus
from app.services.newsletters import dispatch_scheduled_newsletters
from tests.helpers import auth_header, create_member_via_api, create_plan_in_db, setup_staff_and_admin


class FakeMailer:
    def __init__(self):
        self.sent = []

    def __call__(self, *, to, subject, text, html=None):
        self.sent.append(to)
        return True


def _seed_members(client, db_session, ctx):
    plan = create_plan_in_db(db_session)
    token = ctx["staff_token"]
    subscribed = create_member_via_api(client, token, plan_id=plan.id, membership_start=date.today())
    unsubscribed = create_member_via_api(client, token, plan_id=plan.id, membership_start=date.today())
    inactive = create_member_via_api(client, token, plan_id=plan.id, membership_start=date.today())

    client.put(f"/members/{unsubscribed['member']['id']}", headers=auth_header(token), json={"subscribe_to_newsletter": False})
    client.put(f"/members/{inactive['member']['id']}", headers=auth_header(token), json={"is_active": False})
    return subscribed


def test_send_now_counts_only_subscribed_active_members(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    _seed_members(client, db_session, ctx)

    res = client.post(
        "/newsletters",
        headers=auth_header(ctx["admin_token"]),
        json={
            "type": "CLOSURE",
            "title": "Holiday closure",
            "message": "The gym is closed over the holidays.",
            "priority": "HIGH",
            "start_date": "2025-12-24",
            "end_date": "2025-12-26",
            "schedule_for": "now",
        },
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["message"] == "Newsletter sent to 1 recipients"
    assert body["newsletter"]["status"] == "SENT"
    assert body["newsletter"]["recipient_count"] == 1
    assert body["newsletter"]["sent_at"] is not None
    # 테스트 환경은 SMTP 미설정 → 실제 전달 0건
    assert body["delivered"] == 0


def test_draft_and_list_stats(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    _seed_members(client, db_session, ctx)

    draft = client.post(
        "/newsletters",
        headers=auth_header(ctx["admin_token"]),
        json={"title": "Draft", "message": "Not yet"},
    )
    assert draft.status_code == 201, draft.text
    assert draft.json()["message"] == "Newsletter saved as draft"
    assert draft.json()["newsletter"]["status"] == "DRAFT"
    assert draft.json()["newsletter"]["type"] == "GENERAL"

    later = client.post(
        "/newsletters",
        headers=auth_header(ctx["admin_token"]),
        json={
            "title": "New classes",
            "message": "Yoga starts next week.",
            "type": "EVENT",
            "schedule_for": "later",
            "scheduled_for": (datetime.utcnow() + timedelta(days=1)).replace(microsecond=0).isoformat(),
        },
    )
    assert later.status_code == 201, later.text
    assert later.json()["newsletter"]["status"] == "SCHEDULED"

    listing = client.get("/newsletters", headers=auth_header(ctx["admin_token"]))
    assert listing.status_code == 200, listing.text
    stats = listing.json()["stats"]
    assert stats["total_members"] == 3
    assert stats["scheduled"] == 1
    assert stats["sent_this_month"] == 0
    assert len(listing.json()["newsletters"]) == 2


def test_later_requires_scheduled_for_422(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    res = client.post(
        "/newsletters",
        headers=auth_header(ctx["admin_token"]),
        json={"title": "Oops", "message": "No time", "schedule_for": "later"},
    )
    assert res.status_code == 422


def test_end_before_start_422(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    res = client.post(
        "/newsletters",
        headers=auth_header(ctx["admin_token"]),
        json={"title": "Maintenance", "message": "Pool", "start_date": "2025-12-10", "end_date": "2025-12-01"},
    )
    assert res.status_code == 422


def test_staff_cannot_send_newsletter(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    res = client.post("/newsletters", headers=auth_header(ctx["staff_token"]), json={"title": "x", "message": "y"})
    assert res.status_code == 403


def test_dispatch_scheduled_newsletters(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    subscribed = _seed_members(client, db_session, ctx)

    res = client.post(
        "/newsletters",
        headers=auth_header(ctx["admin_token"]),
        json={
            "title": "Maintenance",
            "message": "Sauna closed",
            "type": "MAINTENANCE",
            "schedule_for": "later",
            "scheduled_for": "2025-01-01T09:00:00",
        },
    )
    assert res.status_code == 201, res.text

    mailer = FakeMailer()
    assert dispatch_scheduled_newsletters(db_session, datetime.utcnow(), send=mailer) == 1
    db_session.commit()
    assert mailer.sent == [subscribed["member"]["email"]]

    newsletter = db_session.scalar(select(Newsletter))
    assert newsletter.status == NewsletterStatus.SENT
    assert newsletter.recipient_count == 1

    # 이미 발송된 뉴스레터는 다시 보내지 않음
    assert dispatch_scheduled_newsletters(db_session, datetime.utcnow(), send=mailer) == 0
