from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.content import services
from app.core.content.schemas import (
    BookOfMonthPublic,
    BookOfMonthUpsert,
    MagazinePublic,
    MagazineUpsert,
)
from app.core.dependencies import get_db, require_admin_token


router = APIRouter(tags=["content"])
admin_router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_token)],
)


@router.get(
    "/book-of-month",
    response_model=Optional[BookOfMonthPublic],
)
def book_of_month(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
) -> Optional[BookOfMonthPublic]:
    book = services.get_book_of_month(db, month=month, year=year)
    if book is None:
        return None
    return BookOfMonthPublic.model_validate(book)


@router.get(
    "/magazine/latest",
    response_model=Optional[MagazinePublic],
)
def latest_magazine(db: Session = Depends(get_db)) -> Optional[MagazinePublic]:
    magazine = services.get_latest_magazine(db)
    if magazine is None:
        return None
    return MagazinePublic.model_validate(magazine)


@router.get(
    "/magazine/{issue_number}",
    response_model=MagazinePublic,
)
def magazine_issue(
    issue_number: int,
    db: Session = Depends(get_db),
) -> MagazinePublic:
    return MagazinePublic.model_validate(services.get_magazine(db, issue_number))


@admin_router.post(
    "/book-of-month",
    response_model=BookOfMonthPublic,
)
def save_book_of_month(
    payload: BookOfMonthUpsert,
    db: Session = Depends(get_db),
) -> BookOfMonthPublic:
    book = services.upsert_book_of_month(db, payload)
    db.commit()
    return BookOfMonthPublic.model_validate(book)


@admin_router.post(
    "/magazine",
    response_model=MagazinePublic,
)
def save_magazine(
    payload: MagazineUpsert,
    db: Session = Depends(get_db),
) -> MagazinePublic:
    magazine = services.upsert_magazine(db, payload)
    db.commit()
    return MagazinePublic.model_validate(magazine)


__all__ = ["router", "admin_router"]
