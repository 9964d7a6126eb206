from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text, func

from app.database.base import Base


MESSAGE_DIRECTIONS = ("from_user", "from_admin")


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, nullable=False, index=True)
    text = Column(Text, nullable=False)
    direction = Column(String, nullable=False)  # from_user|from_admin

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


__all__ = ["Message", "MESSAGE_DIRECTIONS"]
