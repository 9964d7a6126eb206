from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict


class MessageCreate(BaseModel):
    user_id: int
    text: str


class MessagePublic(BaseModel):
    id: int
    user_id: int
    text: str
    direction: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MessagesResponse(BaseModel):
    user_id: int
    messages: list[MessagePublic]


class UserPhotoResponse(BaseModel):
    user_id: int
    photo_url: Optional[str] = None
