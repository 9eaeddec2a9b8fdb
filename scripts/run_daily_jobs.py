"""

일일 배치 스크립트 (cron 으로 하루 한 번 실행).

1. 만료일이 지난 ACTIVE 회원권 → EXPIRED 처리 + 만료 알림 예약
2. 오늘까지 예약된 알림 메일 발송
3. 예약 시각이 지난 뉴스레터 발송

- 단계별로 commit 하여 뒤 단계 실패가 앞 단계 결과를 되돌리지 않도록 함
- 사용 방법: (.venv) ~\backend~$ python -m scripts.run_daily_jobs

"""

import logging
from datetime import date, datetime

from dotenv import load_dotenv
load_dotenv()

from app.core.config import settings
from app.db.session import SessionLocal
from app.services.newsletters import dispatch_scheduled_newsletters
from app.services.notifications import expire_memberships, dispatch_due_notifications

logger = logging.getLogger("daily_jobs")


def main():
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    today = date.today()

    db = SessionLocal()
    try:
        expired = expire_memberships(db, today)
        db.commit()

        delivered = dispatch_due_notifications(db, today)
        db.commit()

        newsletters = dispatch_scheduled_newsletters(db, datetime.utcnow())
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Daily jobs failed")
        raise
    finally:
        db.close()

    logger.info(
        "Daily jobs done: expired=%d notifications_delivered=%d newsletters_sent=%d",
        expired, delivered, newsletters,
    )


if __name__ == "__main__":
    main()
