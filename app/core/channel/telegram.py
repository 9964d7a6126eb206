from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

import httpx
from loguru import logger

from app.core.config import Settings


class TelegramError(Exception):
    pass


class ChannelMembership(Protocol):
    def grant(self, user_id: int) -> None: ...

    def revoke(self, user_id: int) -> None: ...


class TelegramBotClient:
    """
    Thin synchronous wrapper over the Bot API methods the backend uses.

    Every call raises ``TelegramError`` on transport errors, non-``ok``
    responses and when the bot or channel is not configured.
    """

    def __init__(
        self,
        *,
        token: str,
        channel_id: str = "",
        api_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
        invite_link: str = "",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.token = token
        self.channel_id = channel_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.invite_link = invite_link
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "TelegramBotClient":
        return cls(
            token=settings.telegram_bot_token,
            channel_id=settings.telegram_channel_id,
            api_url=settings.telegram_api_url,
            timeout=settings.telegram_timeout_seconds,
            invite_link=settings.channel_invite_link,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        if not self.token:
            raise TelegramError("Bot not configured")

        url = f"{self.api_url}/bot{self.token}/{method}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, json=payload)
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.opt(exception=exc).error("Telegram API request failed", method=method)
            raise TelegramError(f"Telegram API request failed: {exc}") from exc

        if not data.get("ok"):
            description = data.get("description") or f"HTTP {response.status_code}"
            logger.warning("Telegram API error", method=method, description=description)
            raise TelegramError(description)
        return data.get("result")

    def _require_channel(self) -> str:
        if not self.channel_id:
            raise TelegramError("Channel not configured")
        return self.channel_id

    def grant(self, user_id: int) -> None:
        # only_if_banned keeps current members from being kicked by unban.
        self._call(
            "unbanChatMember",
            {
                "chat_id": self._require_channel(),
                "user_id": user_id,
                "only_if_banned": True,
            },
        )

    def revoke(self, user_id: int) -> None:
        self._call(
            "banChatMember",
            {"chat_id": self._require_channel(), "user_id": user_id},
        )

    def send_message(self, user_id: int, text: str) -> Dict[str, Any]:
        return self._call("sendMessage", {"chat_id": user_id, "text": text})

    def get_channel_link(self) -> Optional[str]:
        if self.invite_link:
            return self.invite_link
        if not self.token or not self.channel_id:
            return None
        try:
            chat = self._call("getChat", {"chat_id": self.channel_id})
        except TelegramError:
            return None
        username = (chat or {}).get("username")
        return f"https://t.me/{username or self.channel_id}"

    def get_profile_photo_url(self, user_id: int) -> Optional[str]:
        photos = self._call(
            "getUserProfilePhotos",
            {"user_id": user_id, "limit": 1},
        )
        if not photos or not photos.get("photos"):
            return None

        # Sizes come smallest first.
        file_id = photos["photos"][0][-1]["file_id"]
        file_info = self._call("getFile", {"file_id": file_id})
        file_path = (file_info or {}).get("file_path")
        if not file_path:
            return None
        return f"{self.api_url}/file/bot{self.token}/{file_path}"


__all__ = ["TelegramError", "ChannelMembership", "TelegramBotClient"]
