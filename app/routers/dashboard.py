from datetime import date, datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_staff
from app.models.user import User
from app.schemas.dashboard import DashboardResponse
from app.services.dashboard import dashboard

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


# 데스크 첫 화면: 통계 / 최근 활동 / 만료 예정 / 최근 만료
@router.get("", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    return dashboard(db, date.today(), datetime.utcnow())
