from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Float, Integer, String, func

from app.database.base import Base


PAYMENT_STATUSES = ("pending", "completed", "failed")


class PaymentRecord(Base):
    __tablename__ = "payment_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_id = Column(String, nullable=False, unique=True, index=True)
    user_id = Column(BigInteger, nullable=False, index=True)

    amount = Column(Float, nullable=False, default=0)
    days = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default="pending")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)


__all__ = ["PaymentRecord", "PAYMENT_STATUSES"]
