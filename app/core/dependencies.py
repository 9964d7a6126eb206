from __future__ import annotations

from typing import Generator

from fastapi import Depends, Header, Query, Request
from sqlalchemy.orm import Session

from app.core.channel.telegram import ChannelMembership, TelegramBotClient
from app.core.config import Settings
from app.response.response import Unauthorized


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_telegram(request: Request) -> TelegramBotClient:
    return request.app.state.telegram


def get_channel(request: Request) -> ChannelMembership:
    return request.app.state.channel


def require_admin_token(
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
    admin_token: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    token = x_admin_token or admin_token
    if not settings.admin_secret_token or token != settings.admin_secret_token:
        raise Unauthorized(code="ADMIN_UNAUTHORIZED")


def require_cron_secret(
    authorization: str | None = Header(default=None, alias="Authorization"),
    settings: Settings = Depends(get_settings),
) -> None:
    if not settings.cron_secret or authorization != f"Bearer {settings.cron_secret}":
        raise Unauthorized(code="CRON_UNAUTHORIZED")


__all__ = [
    "get_settings",
    "get_db",
    "get_telegram",
    "get_channel",
    "require_admin_token",
    "require_cron_secret",
]
