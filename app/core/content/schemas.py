from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class BookOfMonthUpsert(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=9999)
    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    description: str = ""
    image_url: Optional[str] = None


class BookOfMonthPublic(BaseModel):
    id: int
    month: int
    year: int
    title: str
    author: str
    description: str
    image_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MagazineUpsert(BaseModel):
    issue_number: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    short_description: str = ""
    full_description: str = ""
    image_url: Optional[str] = None


class MagazinePublic(BaseModel):
    id: int
    issue_number: int
    title: str
    short_description: str
    full_description: str
    image_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
