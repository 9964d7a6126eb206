from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint, func

from app.database.base import Base


class BookOfMonth(Base):
    __tablename__ = "books_of_month"
    __table_args__ = (
        UniqueConstraint("month", "year", name="uq_books_of_month_period"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    title = Column(String, nullable=False)
    author = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    image_url = Column(String, nullable=True)

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


class Magazine(Base):
    __tablename__ = "magazines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_number = Column(Integer, nullable=False, unique=True, index=True)

    title = Column(String, nullable=False)
    short_description = Column(Text, nullable=False, default="")
    full_description = Column(Text, nullable=False, default="")
    image_url = Column(String, nullable=True)

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


__all__ = ["BookOfMonth", "Magazine"]
