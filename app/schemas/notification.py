import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ConfigDict, model_validator


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    message: str
    type: str
    scheduled_for: date
    is_sent: bool
    sent_at: Optional[datetime]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


NewsletterTypeStr = Literal["CLOSURE", "MAINTENANCE", "EVENT", "GENERAL"]
PriorityStr = Literal["LOW", "MEDIUM", "HIGH"]


class NewsletterCreateRequest(BaseModel):
    type: NewsletterTypeStr = "GENERAL"
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    priority: PriorityStr = "MEDIUM"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    # now: 즉시 발송 / later: 예약 발송 / draft: 임시 저장
    schedule_for: Literal["now", "later", "draft"] = "draft"
    scheduled_for: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_schedule(self):
        if self.schedule_for == "later" and self.scheduled_for is None:
            raise ValueError("scheduled_for is required when schedule_for is 'later'")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class NewsletterResponse(BaseModel):
    id: uuid.UUID
    title: str
    message: str
    type: str
    priority: str
    status: str
    start_date: Optional[date]
    end_date: Optional[date]
    scheduled_for: Optional[datetime]
    sent_at: Optional[datetime]
    recipient_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NewsletterStats(BaseModel):
    total_members: int
    sent_this_month: int
    scheduled: int


class NewsletterListResponse(BaseModel):
    newsletters: List[NewsletterResponse]
    stats: NewsletterStats


class NewsletterCreatedResponse(BaseModel):
    message: str
    newsletter: NewsletterResponse
    delivered: int = 0
