from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.channel.telegram import TelegramBotClient
from app.core.dependencies import get_db, get_telegram, require_admin_token
from app.core.messages import services
from app.core.messages.schemas import (
    MessageCreate,
    MessagePublic,
    MessagesResponse,
    UserPhotoResponse,
)


router = APIRouter(tags=["messages"])
admin_router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_token)],
)


def _conversation(db: Session, user_id: int) -> MessagesResponse:
    messages = services.list_conversation(db, user_id)
    return MessagesResponse(
        user_id=user_id,
        messages=[MessagePublic.model_validate(m) for m in messages],
    )


@router.post(
    "/messages",
    response_model=MessagePublic,
    summary="Store a message written by a user",
)
def post_user_message(
    payload: MessageCreate,
    db: Session = Depends(get_db),
) -> MessagePublic:
    message = services.append_message(
        db,
        user_id=payload.user_id,
        text=payload.text,
        direction="from_user",
    )
    db.commit()
    return MessagePublic.model_validate(message)


@router.get(
    "/messages",
    response_model=MessagesResponse,
    summary="Conversation between a user and the admins",
)
def get_user_messages(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
) -> MessagesResponse:
    return _conversation(db, user_id)


@admin_router.get(
    "/messages",
    response_model=MessagesResponse,
)
def admin_get_messages(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
) -> MessagesResponse:
    return _conversation(db, user_id)


@admin_router.post(
    "/messages",
    response_model=MessagePublic,
)
def admin_send_message(
    payload: MessageCreate,
    db: Session = Depends(get_db),
    bot: TelegramBotClient = Depends(get_telegram),
) -> MessagePublic:
    message = services.send_admin_message(
        db,
        bot,
        user_id=payload.user_id,
        text=payload.text,
    )
    db.commit()
    return MessagePublic.model_validate(message)


@admin_router.get(
    "/user-photo",
    response_model=UserPhotoResponse,
)
def admin_user_photo(
    user_id: int = Query(...),
    bot: TelegramBotClient = Depends(get_telegram),
) -> UserPhotoResponse:
    return UserPhotoResponse(
        user_id=user_id,
        photo_url=services.get_user_photo_url(bot, user_id),
    )


__all__ = ["router", "admin_router"]
