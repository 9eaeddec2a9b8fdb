import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class PlanCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100, examples=["Premium Monthly"])
    price: int = Field(..., gt=0, examples=[4999])
    duration_months: int = Field(..., ge=1, le=24, examples=[1])
    features: List[str] = Field(default_factory=list)


class PlanUpdateRequest(PlanCreateRequest):
    is_active: Optional[bool] = None


class PlanResponse(BaseModel):
    id: uuid.UUID
    name: str
    price: int
    duration_months: int
    features: List[str]
    is_active: bool
    created_at: datetime
    member_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class PlanRecentMember(BaseModel):
    membership_id: uuid.UUID
    user_id: uuid.UUID
    name: str
    email: str
    start_date: date
    end_date: date
    status: str


class PlanDetailResponse(PlanResponse):
    recent_members: List[PlanRecentMember] = Field(default_factory=list)
