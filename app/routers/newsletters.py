"""
newsletters.py

관리자 전용 뉴스레터(전체 공지) API.

- 목록 + 통계 조회
- 생성: draft(임시 저장) / now(즉시 발송) / later(예약 발송)

예약 발송은 scripts/run_daily_jobs.py 배치에서 처리한다.

"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_admin
from app.models.user import User
from app.schemas.notification import NewsletterCreateRequest, NewsletterListResponse, NewsletterCreatedResponse
from app.services import newsletters as newsletter_service

router = APIRouter(prefix="/newsletters", tags=["newsletters"])


@router.get("", response_model=NewsletterListResponse)
def list_newsletters(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    return newsletter_service.list_newsletters(db, datetime.utcnow())


@router.post("", response_model=NewsletterCreatedResponse, status_code=201)
def create_newsletter(
    body: NewsletterCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        newsletter, delivered = newsletter_service.create_newsletter(
            db,
            title=body.title,
            message=body.message,
            type=body.type,
            priority=body.priority,
            start_date=body.start_date,
            end_date=body.end_date,
            schedule_for=body.schedule_for,
            scheduled_for=body.scheduled_for,
            now=datetime.utcnow(),
        )
        db.commit()
        db.refresh(newsletter)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise

    if body.schedule_for == "now":
        message = f"Newsletter sent to {newsletter.recipient_count} recipients"
    elif body.schedule_for == "later":
        message = f"Newsletter scheduled for {newsletter.scheduled_for.isoformat()}"
    else:
        message = "Newsletter saved as draft"

    return {"message": message, "newsletter": newsletter, "delivered": delivered}
