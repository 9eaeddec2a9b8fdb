import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from app.schemas.payment import InitialPaymentRequest, PaymentResponse
from app.schemas.notification import NotificationResponse


MembershipStatusFilter = Literal["all", "active", "expiring", "expired"]


class MemberCreateRequest(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: Optional[str] = None
    subscribe_to_newsletter: bool = True
    subscribe_to_notifications: bool = False
    membership_start: date
    plan_id: uuid.UUID
    payment: InitialPaymentRequest


class MemberUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    subscribe_to_newsletter: Optional[bool] = None
    subscribe_to_notifications: Optional[bool] = None
    is_active: Optional[bool] = None


class PlanSummary(BaseModel):
    id: uuid.UUID
    name: str
    price: int
    duration_months: int

    model_config = ConfigDict(from_attributes=True)


class MembershipResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    plan_id: uuid.UUID
    start_date: date
    end_date: date
    status: str
    payment_status: str
    last_payment_date: Optional[date]
    next_payment_due: Optional[date]
    notes: Optional[str]
    created_at: datetime
    plan: Optional[PlanSummary] = None

    model_config = ConfigDict(from_attributes=True)


class MemberResponse(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str]
    role: str
    is_active: bool
    qr_code: str
    subscribe_to_newsletter: bool
    subscribe_to_notifications: bool
    created_at: datetime
    membership_status: Literal["active", "expiring", "expired"] = "expired"
    active_membership: Optional[MembershipResponse] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool


class MemberStats(BaseModel):
    total: int = 0
    active: int = 0
    expiring: int = 0
    expired: int = 0


class MemberListResponse(BaseModel):
    members: List[MemberResponse]
    pagination: Pagination
    stats: MemberStats


class MemberDetailResponse(MemberResponse):
    memberships: List[MembershipResponse] = Field(default_factory=list)
    payments: List[PaymentResponse] = Field(default_factory=list)
    notifications: List[NotificationResponse] = Field(default_factory=list)


class LoginCredentials(BaseModel):
    email: str
    password: str


class MemberCreatedResponse(BaseModel):
    member: MemberResponse
    membership: MembershipResponse
    payment: PaymentResponse
    login_credentials: LoginCredentials


class PaymentResultResponse(BaseModel):
    message: str
    payment: PaymentResponse
    membership: MembershipResponse
    effective_start_date: date
    new_end_date: date
    notification_date: date
    months_added: int
    reactivated: bool
