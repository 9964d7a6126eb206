from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.channel.telegram import TelegramBotClient
from app.core.dependencies import get_db, get_telegram
from app.core.subscriptions import services as ledger
from app.core.subscriptions.schemas import (
    CancelSubscriptionRequest,
    CancelSubscriptionResponse,
    ReadingRoomAccessResponse,
    SubscriptionStatusResponse,
)


router = APIRouter(tags=["subscriptions"])

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@router.get(
    "/subscription-status",
    response_model=SubscriptionStatusResponse,
    summary="Current subscription state of a user",
)
def subscription_status(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
) -> SubscriptionStatusResponse:
    return ledger.get_status(db, user_id)


@router.get(
    "/reading-room-access",
    response_model=ReadingRoomAccessResponse,
    summary="Reading room link for users with an active subscription",
)
def reading_room_access(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    bot: TelegramBotClient = Depends(get_telegram),
) -> ReadingRoomAccessResponse:
    if not ledger.has_active_access(db, user_id):
        return ReadingRoomAccessResponse(
            has_access=False,
            message="Subscription expired",
        )

    channel_link = bot.get_channel_link() or "#"
    logger.info("reading room link issued (user_id=%s)", user_id)
    return ReadingRoomAccessResponse(has_access=True, channel_link=channel_link)


@router.post(
    "/cancel-subscription",
    response_model=CancelSubscriptionResponse,
    summary="Cancel a user's subscription",
)
def cancel_subscription(
    payload: CancelSubscriptionRequest,
    db: Session = Depends(get_db),
) -> CancelSubscriptionResponse:
    cancelled = ledger.cancel(db, user_id=payload.user_id)
    db.commit()
    return CancelSubscriptionResponse(
        cancelled=cancelled,
        message="Subscription cancelled" if cancelled else "No subscription to cancel",
    )


__all__ = ["router"]
