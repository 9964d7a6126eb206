from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.billing.schemas import (
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    CreatePaymentRequest,
    CreatePaymentResponse,
)
from app.core.billing.services import confirm_payment, create_payment
from app.core.config import Settings
from app.core.dependencies import get_db, get_settings


router = APIRouter(tags=["billing"])


@router.post(
    "/create-payment",
    response_model=CreatePaymentResponse,
    summary="Create a pending payment for a subscription period",
)
def create_payment_route(
    payload: CreatePaymentRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CreatePaymentResponse:
    intent = create_payment(
        db,
        user_id=payload.user_id,
        amount=payload.amount,
        days=payload.days,
        webapp_url=settings.webapp_url,
        max_days=settings.max_grant_days,
    )
    db.commit()
    return CreatePaymentResponse(
        payment_id=intent.record.payment_id,
        payment_url=intent.payment_url,
        amount=intent.record.amount,
        days=intent.record.days,
        status=intent.record.status,
    )


@router.post(
    "/confirm-payment",
    response_model=ConfirmPaymentResponse,
    summary="Confirm a payment and activate the subscription once",
)
def confirm_payment_route(
    payload: ConfirmPaymentRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ConfirmPaymentResponse:
    result = confirm_payment(
        db,
        payment_id=payload.payment_id,
        user_id=payload.user_id,
        max_days=settings.max_grant_days,
    )
    db.commit()
    return ConfirmPaymentResponse(
        status=result.status,
        activated=result.activated,
        message=result.message,
        subscription_end=result.subscription_end,
    )


__all__ = ["router"]
