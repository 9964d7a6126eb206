from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.core.channel.telegram import TelegramBotClient, TelegramError
from app.core.messages.models import MESSAGE_DIRECTIONS, Message
from app.core.subscriptions.services import as_utc, utc_now
from app.response.response import Internal, InvalidArgument


def _clean_text(text: Optional[str]) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise InvalidArgument(
            "Message text must not be empty",
            code="MESSAGE_EMPTY_TEXT",
        )
    return cleaned


def append_message(
    db: Session,
    *,
    user_id: int,
    text: str,
    direction: str,
    now: Optional[datetime] = None,
) -> Message:
    if direction not in MESSAGE_DIRECTIONS:
        raise InvalidArgument(
            "Unknown message direction",
            code="MESSAGE_INVALID_DIRECTION",
            details={"direction": direction},
        )
    message = Message(
        user_id=user_id,
        text=_clean_text(text),
        direction=direction,
        created_at=as_utc(now) or utc_now(),
    )
    db.add(message)
    db.flush()
    db.refresh(message)
    return message


def list_conversation(db: Session, user_id: int) -> List[Message]:
    return (
        db.query(Message)
        .filter(Message.user_id == user_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )


def send_admin_message(
    db: Session,
    bot: TelegramBotClient,
    *,
    user_id: int,
    text: str,
    now: Optional[datetime] = None,
) -> Message:
    """Deliver ``text`` through the bot first; only a delivered message is logged."""
    cleaned = _clean_text(text)
    try:
        bot.send_message(user_id, cleaned)
    except TelegramError as exc:
        logger.opt(exception=exc).error("Failed to deliver admin message", user_id=user_id)
        raise Internal(
            str(exc),
            code="MESSAGE_DELIVERY_FAILED",
            details={"user_id": user_id},
        )

    return append_message(
        db,
        user_id=user_id,
        text=cleaned,
        direction="from_admin",
        now=now,
    )


def get_user_photo_url(bot: TelegramBotClient, user_id: int) -> Optional[str]:
    try:
        return bot.get_profile_photo_url(user_id)
    except TelegramError as exc:
        raise Internal(
            str(exc),
            code="TELEGRAM_PHOTO_FAILED",
            details={"user_id": user_id},
        )


__all__ = [
    "append_message",
    "list_conversation",
    "send_admin_message",
    "get_user_photo_url",
]
