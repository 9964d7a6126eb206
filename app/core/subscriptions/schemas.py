from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, StrictInt
from pydantic.config import ConfigDict


EffectiveStatus = Literal["active", "inactive"]


class PaymentHistoryItem(BaseModel):
    payment_id: str
    amount: float
    days: int
    status: str
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionStatusResponse(BaseModel):
    user_id: int
    status: EffectiveStatus
    stored_status: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    days_remaining: int = 0
    payment_id: Optional[str] = None
    history: list[PaymentHistoryItem] = []


class CancelSubscriptionRequest(BaseModel):
    user_id: int


class CancelSubscriptionResponse(BaseModel):
    success: bool = True
    cancelled: bool
    message: str


class ReadingRoomAccessResponse(BaseModel):
    has_access: bool
    channel_link: Optional[str] = None
    message: Optional[str] = None


class AddDaysRequest(BaseModel):
    user_id: int
    days: StrictInt


class AddDaysResponse(BaseModel):
    success: bool = True
    user_id: int
    status: str
    new_end_date: datetime


class SetSubscriptionRequest(BaseModel):
    user_id: int
    status: str
    end_date: Optional[datetime] = None


class SetSubscriptionResponse(BaseModel):
    success: bool = True
    user_id: int
    status: str
    end: Optional[datetime] = None


class AdminUserItem(BaseModel):
    user_id: int
    status: EffectiveStatus
    stored_status: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    days_remaining: int = 0
    has_access: bool = False
    created_at: Optional[datetime] = None


class AdminUsersResponse(BaseModel):
    users: list[AdminUserItem]
    total: int
