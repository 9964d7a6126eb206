from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, func

from app.database.base import Base


SUBSCRIPTION_STATUSES = ("inactive", "active", "cancelled")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, unique=True, nullable=False, index=True)

    status = Column(
        "subscription_status",
        String,
        nullable=False,
        default="inactive",
    )
    # Stored "active" with an end in the past is a valid, expired row.
    start = Column("subscription_start", DateTime(timezone=True), nullable=True)
    end = Column("subscription_end", DateTime(timezone=True), nullable=True)
    payment_id = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


__all__ = ["Subscription", "SUBSCRIPTION_STATUSES"]
