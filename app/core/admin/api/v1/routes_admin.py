from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.billing.models import PaymentRecord
from app.core.config import Settings
from app.core.dependencies import get_db, get_settings, require_admin_token
from app.core.subscriptions import services as ledger
from app.core.subscriptions.models import Subscription
from app.core.subscriptions.schemas import (
    AddDaysRequest,
    AddDaysResponse,
    AdminUsersResponse,
    SetSubscriptionRequest,
    SetSubscriptionResponse,
)


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_token)],
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@router.get(
    "/users",
    response_model=AdminUsersResponse,
)
def list_users(db: Session = Depends(get_db)) -> AdminUsersResponse:
    users = ledger.list_users(db)
    return AdminUsersResponse(users=users, total=len(users))


@router.get("/stats")
def get_admin_stats(db: Session = Depends(get_db)) -> dict:
    now = ledger.utc_now()
    total_users = len(ledger.list_known_user_ids(db))
    total_active_subscriptions = (
        db.query(func.count(Subscription.id))
        .filter(
            Subscription.status == "active",
            Subscription.end.isnot(None),
            Subscription.end > now,
        )
        .scalar()
        or 0
    )
    total_completed_payments = (
        db.query(func.count(PaymentRecord.id))
        .filter(PaymentRecord.status == "completed")
        .scalar()
        or 0
    )
    total_revenue = (
        db.query(func.coalesce(func.sum(PaymentRecord.amount), 0))
        .filter(PaymentRecord.status == "completed")
        .scalar()
        or 0
    )

    return {
        "total_users": total_users,
        "total_active_subscriptions": total_active_subscriptions,
        "total_completed_payments": total_completed_payments,
        "total_revenue": round(float(total_revenue), 2),
    }


@router.post(
    "/add-days",
    response_model=AddDaysResponse,
)
def add_days(
    payload: AddDaysRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AddDaysResponse:
    subscription = ledger.add_days(
        db,
        user_id=payload.user_id,
        days=payload.days,
        max_days=settings.max_grant_days,
    )
    db.commit()
    logger.info("admin add-days (user_id=%s, days=%s)", payload.user_id, payload.days)
    return AddDaysResponse(
        user_id=subscription.user_id,
        status=subscription.status,
        new_end_date=ledger.as_utc(subscription.end),
    )


@router.post(
    "/set-subscription",
    response_model=SetSubscriptionResponse,
)
def set_subscription(
    payload: SetSubscriptionRequest,
    db: Session = Depends(get_db),
) -> SetSubscriptionResponse:
    subscription = ledger.set_subscription(
        db,
        user_id=payload.user_id,
        status=payload.status,
        end_date=payload.end_date,
    )
    db.commit()
    logger.info(
        "admin set-subscription (user_id=%s, status=%s)",
        payload.user_id,
        payload.status,
    )
    return SetSubscriptionResponse(
        user_id=subscription.user_id,
        status=subscription.status,
        end=ledger.as_utc(subscription.end),
    )


__all__ = ["router"]
