import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_members: int
    active_members: int
    expiring_members: int
    expired_members: int


class ActivityItem(BaseModel):
    id: str
    type: Literal["payment", "new_member", "expiring"]
    member_name: str
    description: str
    occurred_at: Optional[datetime] = None
    days_until_expiry: Optional[int] = None


class MembershipDigest(BaseModel):
    id: str
    user_id: uuid.UUID
    member_name: str
    email: str
    plan_name: Optional[str]
    end_date: Optional[date]
    type: Literal["expiring", "expired_membership", "no_active_membership"]


class DashboardResponse(BaseModel):
    stats: DashboardStats
    activities: List[ActivityItem]
    expiring_memberships: List[MembershipDigest]
    expired_memberships: List[MembershipDigest]
