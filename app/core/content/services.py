from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.content.models import BookOfMonth, Magazine
from app.core.content.schemas import BookOfMonthUpsert, MagazineUpsert
from app.core.subscriptions.services import as_utc, utc_now
from app.response.response import NotFound


def get_book_of_month(
    db: Session,
    *,
    month: Optional[int] = None,
    year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Optional[BookOfMonth]:
    if month is not None and year is not None:
        return (
            db.query(BookOfMonth)
            .filter(BookOfMonth.month == month, BookOfMonth.year == year)
            .first()
        )

    now = as_utc(now) or utc_now()
    current = (
        db.query(BookOfMonth)
        .filter(BookOfMonth.month == now.month, BookOfMonth.year == now.year)
        .first()
    )
    if current is not None:
        return current

    return (
        db.query(BookOfMonth)
        .order_by(BookOfMonth.year.desc(), BookOfMonth.month.desc())
        .first()
    )


def upsert_book_of_month(db: Session, data: BookOfMonthUpsert) -> BookOfMonth:
    book = (
        db.query(BookOfMonth)
        .filter(BookOfMonth.month == data.month, BookOfMonth.year == data.year)
        .first()
    )
    if book is None:
        book = BookOfMonth(month=data.month, year=data.year)

    book.title = data.title
    book.author = data.author
    book.description = data.description
    book.image_url = data.image_url or None
    db.add(book)
    db.flush()
    db.refresh(book)
    return book


def get_latest_magazine(db: Session) -> Optional[Magazine]:
    return db.query(Magazine).order_by(Magazine.issue_number.desc()).first()


def get_magazine(db: Session, issue_number: int) -> Magazine:
    magazine = (
        db.query(Magazine)
        .filter(Magazine.issue_number == issue_number)
        .first()
    )
    if magazine is None:
        raise NotFound(
            "Magazine issue not found",
            code="CONTENT_MAGAZINE_NOT_FOUND",
            details={"issue_number": issue_number},
        )
    return magazine


def upsert_magazine(db: Session, data: MagazineUpsert) -> Magazine:
    magazine = (
        db.query(Magazine)
        .filter(Magazine.issue_number == data.issue_number)
        .first()
    )
    if magazine is None:
        magazine = Magazine(issue_number=data.issue_number)

    magazine.title = data.title
    magazine.short_description = data.short_description
    magazine.full_description = data.full_description
    magazine.image_url = data.image_url or None
    db.add(magazine)
    db.flush()
    db.refresh(magazine)
    return magazine


__all__ = [
    "get_book_of_month",
    "upsert_book_of_month",
    "get_latest_magazine",
    "get_magazine",
    "upsert_magazine",
]
