from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, StrictInt


class CreatePaymentRequest(BaseModel):
    user_id: int
    days: StrictInt
    amount: float = Field(..., gt=0, allow_inf_nan=False)


class CreatePaymentResponse(BaseModel):
    payment_id: str
    payment_url: str
    amount: float
    days: int
    status: str


class ConfirmPaymentRequest(BaseModel):
    payment_id: str = Field(..., min_length=1)
    user_id: int


class ConfirmPaymentResponse(BaseModel):
    status: Literal["success", "failed"]
    activated: bool
    message: str
    subscription_end: Optional[datetime] = None
