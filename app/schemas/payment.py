import uuid
from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, ConfigDict


PaymentMethod = Literal["cash", "card", "bank_transfer"]


# 갱신 기준일(anchor) 요청: anchor 값으로 구분되는 tagged union
class FromEndRenewal(BaseModel):
    anchor: Literal["FROM_END"] = "FROM_END"


class FromTodayRenewal(BaseModel):
    anchor: Literal["FROM_TODAY"]


class CustomRenewal(BaseModel):
    anchor: Literal["CUSTOM"]
    custom_date: date


RenewalAnchorRequest = Annotated[
    Union[FromEndRenewal, FromTodayRenewal, CustomRenewal],
    Field(discriminator="anchor"),
]


class RenewalPreviewRequest(BaseModel):
    months_paid: int = Field(..., ge=1, le=24, examples=[1])
    renewal: RenewalAnchorRequest = Field(default_factory=FromEndRenewal)


class PaymentCreateRequest(RenewalPreviewRequest):
    amount: int = Field(..., gt=0, examples=[4999])
    payment_method: PaymentMethod = "cash"
    notes: Optional[str] = Field(default=None, max_length=255)


class InitialPaymentRequest(BaseModel):
    """신규 회원 등록 시 함께 받는 첫 결제."""
    amount: int = Field(..., gt=0)
    payment_method: PaymentMethod = "cash"
    months_paid: int = Field(..., ge=1, le=24)
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=255)


class PaymentResponse(BaseModel):
    id: uuid.UUID
    membership_id: uuid.UUID
    user_id: uuid.UUID
    amount: int
    payment_date: date
    payment_method: str
    months_paid: int
    notes: Optional[str]
    processed_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RenewalPreviewResponse(BaseModel):
    current_end_date: date
    effective_start_date: date
    new_end_date: date
    notification_date: date
    reactivated: bool
