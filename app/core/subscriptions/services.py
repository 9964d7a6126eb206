"""
Subscription ledger and access gate.

Stored ``status`` is never rewritten on expiry: a row stays ``active`` after
its ``end`` has passed and is treated as inactive at read time. Anything that
needs the current entitlement goes through ``has_active_access`` or
``effective_status``.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.billing.models import PaymentRecord
from app.core.config import settings
from app.core.messages.models import Message
from app.core.subscriptions.models import SUBSCRIPTION_STATUSES, Subscription
from app.core.subscriptions.schemas import (
    AdminUserItem,
    PaymentHistoryItem,
    SubscriptionStatusResponse,
)
from app.response.response import InvalidArgument, NotFound


SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is written in UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_days(days: int, *, max_days: Optional[int] = None) -> int:
    limit = max_days if max_days is not None else settings.max_grant_days
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise InvalidArgument(
            "days must be a positive integer",
            code="SUBSCRIPTION_INVALID_DAYS",
            details={"days": days},
        )
    if days > limit:
        raise InvalidArgument(
            f"days must not exceed {limit}",
            code="SUBSCRIPTION_DAYS_TOO_LARGE",
            details={"days": days, "max_days": limit},
        )
    return days


def _shift(base: datetime, days: int) -> datetime:
    try:
        return base + timedelta(days=days)
    except OverflowError:
        raise InvalidArgument(
            "Resulting subscription end date is out of range",
            code="SUBSCRIPTION_DATE_OVERFLOW",
            details={"days": days},
        )


def is_active(subscription: Optional[Subscription], now: datetime) -> bool:
    if subscription is None or subscription.status != "active":
        return False
    end = as_utc(subscription.end)
    return end is not None and end > now


def compute_days_remaining(
    status: Optional[str],
    end: Optional[datetime],
    now: datetime,
) -> int:
    """Calendar-day ceiling of the time left; 0 unless stored active and unexpired."""
    end = as_utc(end)
    if status != "active" or end is None or end <= now:
        return 0
    return max(0, math.ceil((end - now).total_seconds() / SECONDS_PER_DAY))


def effective_status(subscription: Optional[Subscription], now: datetime) -> str:
    return "active" if is_active(subscription, now) else "inactive"


def get_subscription(db: Session, user_id: int) -> Optional[Subscription]:
    return db.query(Subscription).filter(Subscription.user_id == user_id).first()


def has_active_access(
    db: Session,
    user_id: int,
    *,
    now: Optional[datetime] = None,
) -> bool:
    now = as_utc(now) or utc_now()
    stmt = select(Subscription.id).where(
        Subscription.user_id == user_id,
        Subscription.status == "active",
        Subscription.end.isnot(None),
        Subscription.end > now,
    )
    return db.execute(stmt).first() is not None


def get_payment_history(db: Session, user_id: int) -> List[PaymentHistoryItem]:
    records = (
        db.query(PaymentRecord)
        .filter(PaymentRecord.user_id == user_id)
        .order_by(PaymentRecord.created_at.desc(), PaymentRecord.id.desc())
        .all()
    )
    return [
        PaymentHistoryItem(
            payment_id=record.payment_id,
            amount=record.amount,
            days=record.days,
            status=record.status,
            created_at=as_utc(record.created_at),
            completed_at=as_utc(record.completed_at),
        )
        for record in records
    ]


def get_status(
    db: Session,
    user_id: int,
    *,
    now: Optional[datetime] = None,
) -> SubscriptionStatusResponse:
    now = as_utc(now) or utc_now()
    subscription = get_subscription(db, user_id)

    if subscription is None:
        return SubscriptionStatusResponse(
            user_id=user_id,
            status="inactive",
            stored_status="inactive",
            days_remaining=0,
            history=[],
        )

    return SubscriptionStatusResponse(
        user_id=user_id,
        status=effective_status(subscription, now),
        stored_status=subscription.status,
        start=as_utc(subscription.start),
        end=as_utc(subscription.end),
        days_remaining=compute_days_remaining(
            subscription.status, subscription.end, now
        ),
        payment_id=subscription.payment_id,
        history=get_payment_history(db, user_id),
    )


def _record_completed_payment(
    db: Session,
    *,
    user_id: int,
    payment_id: str,
    days: int,
    amount: float,
    now: datetime,
) -> PaymentRecord:
    record = (
        db.query(PaymentRecord)
        .filter(PaymentRecord.payment_id == payment_id)
        .first()
    )
    if record is None:
        record = PaymentRecord(
            payment_id=payment_id,
            user_id=user_id,
            amount=amount,
            days=days,
            status="completed",
            created_at=now,
            completed_at=now,
        )
    elif record.status != "completed":
        record.status = "completed"
        record.completed_at = now
    db.add(record)
    return record


def activate(
    db: Session,
    *,
    user_id: int,
    days: int,
    payment_id: str,
    amount: float = 0.0,
    now: Optional[datetime] = None,
    max_days: Optional[int] = None,
) -> Subscription:
    days = validate_days(days, max_days=max_days)
    if not payment_id:
        raise InvalidArgument(
            "payment_id is required",
            code="SUBSCRIPTION_PAYMENT_ID_REQUIRED",
        )
    now = as_utc(now) or utc_now()

    existing = (
        db.query(PaymentRecord.user_id)
        .filter(PaymentRecord.payment_id == payment_id)
        .first()
    )
    if existing is not None and existing[0] != user_id:
        raise InvalidArgument(
            "Payment belongs to another user",
            code="SUBSCRIPTION_PAYMENT_USER_MISMATCH",
            details={"payment_id": payment_id},
        )

    subscription = get_subscription(db, user_id)
    if is_active(subscription, now):
        subscription.end = _shift(as_utc(subscription.end), days)
        subscription.payment_id = payment_id
        mode = "extend"
    else:
        if subscription is None:
            subscription = Subscription(user_id=user_id)
        subscription.start = now
        subscription.end = _shift(now, days)
        subscription.status = "active"
        subscription.payment_id = payment_id
        mode = "replace"

    subscription.updated_at = now
    db.add(subscription)
    _record_completed_payment(
        db,
        user_id=user_id,
        payment_id=payment_id,
        days=days,
        amount=amount,
        now=now,
    )
    db.flush()

    logger.info(
        "Subscription activated",
        user_id=user_id,
        payment_id=payment_id,
        days=days,
        mode=mode,
    )
    return subscription


def cancel(
    db: Session,
    *,
    user_id: int,
    now: Optional[datetime] = None,
) -> bool:
    subscription = get_subscription(db, user_id)
    if subscription is None:
        logger.info("Cancel requested for user without subscription", user_id=user_id)
        return False

    subscription.status = "cancelled"
    subscription.updated_at = as_utc(now) or utc_now()
    db.add(subscription)
    db.flush()
    logger.info("Subscription cancelled", user_id=user_id)
    return True


def add_days(
    db: Session,
    *,
    user_id: int,
    days: int,
    now: Optional[datetime] = None,
    max_days: Optional[int] = None,
) -> Subscription:
    days = validate_days(days, max_days=max_days)
    now = as_utc(now) or utc_now()

    subscription = get_subscription(db, user_id)
    if subscription is None:
        raise NotFound(
            "Subscription not found",
            code="SUBSCRIPTION_NOT_FOUND",
            details={"user_id": user_id},
        )

    current_end = as_utc(subscription.end)
    base = current_end if current_end is not None and current_end > now else now
    subscription.end = _shift(base, days)
    subscription.status = "active"
    if subscription.start is None:
        subscription.start = now
    subscription.updated_at = now
    db.add(subscription)
    db.flush()

    logger.info(
        "Admin added subscription days",
        user_id=user_id,
        days=days,
        new_end=subscription.end,
    )
    return subscription


def set_subscription(
    db: Session,
    *,
    user_id: int,
    status: str,
    end_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Subscription:
    """
    Admin escape hatch: write status and end as given.

    No extend/replace logic and no check that ``end_date`` agrees with
    ``status``; only the status value itself is validated.
    """
    if status not in SUBSCRIPTION_STATUSES:
        raise InvalidArgument(
            "Unknown subscription status",
            code="SUBSCRIPTION_INVALID_STATUS",
            details={"status": status, "allowed": list(SUBSCRIPTION_STATUSES)},
        )

    subscription = get_subscription(db, user_id)
    if subscription is None:
        subscription = Subscription(user_id=user_id)

    subscription.status = status
    subscription.end = as_utc(end_date)
    subscription.updated_at = as_utc(now) or utc_now()
    db.add(subscription)
    db.flush()

    logger.info(
        "Admin set subscription",
        user_id=user_id,
        status=status,
        end=subscription.end,
    )
    return subscription


def list_known_user_ids(db: Session) -> List[int]:
    """Every user that has a subscription row or has written at least one message."""
    subscription_ids = {
        row[0] for row in db.query(Subscription.user_id).all()
    }
    message_ids = {
        row[0] for row in db.query(Message.user_id).distinct().all()
    }
    return sorted(subscription_ids | message_ids)


def list_users(
    db: Session,
    *,
    now: Optional[datetime] = None,
) -> List[AdminUserItem]:
    now = as_utc(now) or utc_now()

    subscriptions = (
        db.query(Subscription)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .all()
    )
    items = [
        AdminUserItem(
            user_id=subscription.user_id,
            status=effective_status(subscription, now),
            stored_status=subscription.status,
            start=as_utc(subscription.start),
            end=as_utc(subscription.end),
            days_remaining=compute_days_remaining(
                subscription.status, subscription.end, now
            ),
            has_access=is_active(subscription, now),
            created_at=as_utc(subscription.created_at),
        )
        for subscription in subscriptions
    ]

    message_only_ids = (
        db.query(Message.user_id)
        .filter(~Message.user_id.in_(select(Subscription.user_id)))
        .distinct()
        .order_by(Message.user_id)
        .all()
    )
    items.extend(
        AdminUserItem(user_id=row[0], status="inactive", stored_status="inactive")
        for row in message_only_ids
    )
    return items


__all__ = [
    "utc_now",
    "as_utc",
    "validate_days",
    "is_active",
    "compute_days_remaining",
    "effective_status",
    "get_subscription",
    "has_active_access",
    "get_payment_history",
    "get_status",
    "activate",
    "cancel",
    "add_days",
    "set_subscription",
    "list_known_user_ids",
    "list_users",
]
