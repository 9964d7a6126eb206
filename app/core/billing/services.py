"""
Payment bridge: payment intents and their one-time confirmation.

There is no settlement provider behind this module; a payment is confirmed
when the client calls ``confirm_payment``. The pending -> completed switch is
claimed with a conditional UPDATE so that concurrent confirmations of the
same payment activate the subscription exactly once.
"""

from __future__ import annotations

import math
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.core.billing.models import PaymentRecord
from app.core.subscriptions import services as ledger
from app.response.response import InvalidArgument, NotFound


@dataclass(frozen=True)
class PaymentIntent:
    record: PaymentRecord
    payment_url: str


@dataclass(frozen=True)
class ConfirmResult:
    status: str  # success|failed
    activated: bool
    message: str
    subscription_end: Optional[datetime] = None


def _generate_payment_id(user_id: int) -> str:
    return f"payment_{user_id}_{secrets.token_hex(8)}"


def get_payment(db: Session, payment_id: str) -> Optional[PaymentRecord]:
    return (
        db.query(PaymentRecord)
        .filter(PaymentRecord.payment_id == payment_id)
        .first()
    )


def create_payment(
    db: Session,
    *,
    user_id: int,
    amount: float,
    days: int,
    webapp_url: str,
    now: Optional[datetime] = None,
    max_days: Optional[int] = None,
) -> PaymentIntent:
    days = ledger.validate_days(days, max_days=max_days)
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise InvalidArgument(
            "amount must be a positive finite number",
            code="BILLING_INVALID_AMOUNT",
            details={"amount": amount},
        )

    payment_id = _generate_payment_id(user_id)
    while get_payment(db, payment_id) is not None:
        payment_id = _generate_payment_id(user_id)

    record = PaymentRecord(
        payment_id=payment_id,
        user_id=user_id,
        amount=amount,
        days=days,
        status="pending",
        created_at=ledger.as_utc(now) or ledger.utc_now(),
    )
    db.add(record)
    db.flush()

    logger.info(
        "Payment created",
        payment_id=payment_id,
        user_id=user_id,
        amount=amount,
        days=days,
    )
    payment_url = f"{webapp_url.rstrip('/')}/payment?payment_id={payment_id}"
    return PaymentIntent(record=record, payment_url=payment_url)


def _claim_pending(db: Session, payment_id: str, now: datetime) -> bool:
    updated = (
        db.query(PaymentRecord)
        .filter(
            PaymentRecord.payment_id == payment_id,
            PaymentRecord.status == "pending",
        )
        .update(
            {
                PaymentRecord.status: "completed",
                PaymentRecord.completed_at: now,
            },
            synchronize_session="fetch",
        )
    )
    return updated == 1


def confirm_payment(
    db: Session,
    *,
    payment_id: str,
    user_id: int,
    now: Optional[datetime] = None,
    max_days: Optional[int] = None,
) -> ConfirmResult:
    """
    Resolve a payment for ``user_id``.

    The caller owns the transaction: activation and the status switch are
    only durable once it commits, and a rollback returns the payment to
    ``pending``.
    """
    record = get_payment(db, payment_id)
    if record is None:
        raise NotFound(
            "Payment not found",
            code="BILLING_PAYMENT_NOT_FOUND",
            details={"payment_id": payment_id},
        )

    if record.user_id != user_id:
        raise InvalidArgument(
            "Payment does not belong to this user",
            code="BILLING_PAYMENT_USER_MISMATCH",
            details={"payment_id": payment_id},
        )

    now = ledger.as_utc(now) or ledger.utc_now()

    if record.status == "pending" and _claim_pending(db, payment_id, now):
        subscription = ledger.activate(
            db,
            user_id=record.user_id,
            days=record.days,
            payment_id=payment_id,
            amount=record.amount,
            now=now,
            max_days=max_days,
        )
        logger.info("Payment confirmed", payment_id=payment_id, user_id=user_id)
        return ConfirmResult(
            status="success",
            activated=True,
            message="Payment confirmed and subscription activated",
            subscription_end=ledger.as_utc(subscription.end),
        )

    db.refresh(record)
    subscription = ledger.get_subscription(db, record.user_id)
    subscription_end = ledger.as_utc(subscription.end) if subscription else None

    if record.status == "completed":
        logger.info("Payment already confirmed", payment_id=payment_id)
        return ConfirmResult(
            status="success",
            activated=False,
            message="Payment already confirmed",
            subscription_end=subscription_end,
        )

    logger.warning(
        "Confirmation requested for failed payment",
        payment_id=payment_id,
        status=record.status,
    )
    return ConfirmResult(
        status="failed",
        activated=False,
        message="Payment failed",
        subscription_end=subscription_end,
    )


__all__ = [
    "PaymentIntent",
    "ConfirmResult",
    "get_payment",
    "create_payment",
    "confirm_payment",
]
