"""

만료 처리 / 예약 알림 발송 테스트.
- expire_memberships: 지난 ACTIVE 회원권만 EXPIRED 처리 + 만료 알림 예약
- dispatch_due_notifications: 수신 동의 + 활성 회원에게만 발송,
  발송 시도한 알림은 다시 보내지 않음

"""

from datetime import date

from sqlalchemy import select

from app.models.membership import MembershipStatus
from app.models.notification import Notification, NotificationType
from app.services.notifications import expire_memberships, dispatch_due_notifications
from app.services.renewal import add_months
from tests.helpers import (
    create_member_via_api,
    create_plan_in_db,
    get_membership,
    pending_notifications,
    setup_staff_and_admin,
)


class FakeMailer:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent = []

    def __call__(self, *, to, subject, text, html=None):
        self.sent.append((to, subject))
        return self.ok


def test_expire_memberships_only_past_end_dates(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    plan = create_plan_in_db(db_session)
    today = date.today()

    old = create_member_via_api(client, ctx["staff_token"], plan_id=plan.id, membership_start=add_months(today, -2))
    current = create_member_via_api(client, ctx["staff_token"], plan_id=plan.id, membership_start=today)

    # end_date == today 는 아직 만료 아님
    ending_today = get_membership(db_session, current["membership"]["id"])
    ending_today.end_date = today
    db_session.commit()

    assert expire_memberships(db_session, today) == 1
    db_session.commit()

    assert get_membership(db_session, old["membership"]["id"]).status == MembershipStatus.EXPIRED
    assert get_membership(db_session, current["membership"]["id"]).status == MembershipStatus.ACTIVE

    expired_notes = db_session.scalars(
        select(Notification).where(Notification.type == NotificationType.MEMBERSHIP_EXPIRED)
    ).all()
    assert len(expired_notes) == 1
    assert str(expired_notes[0].user_id) == old["member"]["id"]
    assert expired_notes[0].scheduled_for == today

    # 두 번째 실행은 아무것도 하지 않음
    assert expire_memberships(db_session, today) == 0


def test_dispatch_due_notifications(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    plan = create_plan_in_db(db_session)
    today = date.today()

    due = create_member_via_api(client, ctx["staff_token"], plan_id=plan.id, membership_start=today)
    later = create_member_via_api(client, ctx["staff_token"], plan_id=plan.id, membership_start=today)

    # due 회원의 만료 임박 알림을 오늘로 당김
    note = pending_notifications(db_session, due["member"]["id"])[0]
    note.scheduled_for = today
    db_session.commit()

    mailer = FakeMailer()
    delivered = dispatch_due_notifications(db_session, today, send=mailer)
    db_session.commit()

    # 예약일이 지난 알림만 대상 (later 회원은 한 달 뒤)
    assert delivered == 1
    assert mailer.sent == [(due["member"]["email"], "Membership expiring soon")]

    sent = db_session.scalars(select(Notification).where(Notification.is_sent.is_(True))).all()
    assert len(sent) == 1
    assert sent[0].sent_at is not None

    # 재실행 시 다시 보내지 않음
    assert dispatch_due_notifications(db_session, today, send=mailer) == 0
    assert len(mailer.sent) == 1

    pending = db_session.scalars(select(Notification).where(Notification.is_sent.is_(False))).all()
    assert [str(n.user_id) for n in pending] == [later["member"]["id"]]


def test_dispatch_skips_unsubscribed_members(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    plan = create_plan_in_db(db_session)
    today = date.today()

    created = create_member_via_api(client, ctx["staff_token"], plan_id=plan.id, membership_start=add_months(today, -2))
    res = client.put(
        f"/members/{created['member']['id']}",
        headers={"Authorization": f"Bearer {ctx['staff_token']}"},
        json={"subscribe_to_notifications": False},
    )
    assert res.status_code == 200, res.text

    mailer = FakeMailer()
    assert dispatch_due_notifications(db_session, today, send=mailer) == 0
    db_session.commit()
    assert mailer.sent == []

    # 발송하지 않았더라도 처리 완료로 표시, sent_at 은 비어 있음
    note = db_session.scalar(select(Notification))
    assert note.is_sent is True
    assert note.sent_at is None


def test_failed_delivery_is_not_counted(client, db_session):
    ctx = setup_staff_and_admin(client, db_session)
    plan = create_plan_in_db(db_session)
    today = date.today()
    create_member_via_api(client, ctx["staff_token"], plan_id=plan.id, membership_start=add_months(today, -2))

    mailer = FakeMailer(ok=False)
    assert dispatch_due_notifications(db_session, today, send=mailer) == 0
    assert len(mailer.sent) == 1
