from __future__ import annotations

import re
from datetime import date, datetime

from pydantic import BaseModel, field_validator


BIRTH_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_birth_date(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not BIRTH_DATE_PATTERN.match(value):
        raise ValueError("birth_date must use the YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError("birth_date is not a valid calendar date") from exc


class ProfileFields(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    birth_date: date | None = None
    bio: str | None = None
    location: str | None = None
    profile_picture: str | None = None

    @field_validator("birth_date", mode="before")
    @classmethod
    def validate_birth_date(cls, value):
        return parse_birth_date(value)

    @field_validator("phone", mode="before")
    @classmethod
    def stringify_phone(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)


class ProfileOut(BaseModel):
    id: int
    user_id: int
    full_name: str | None = None
    phone: str | None = None
    birth_date: date | None = None
    bio: str | None = None
    location: str | None = None
    profile_picture: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class PublicProfile(ProfileOut):
    email: str
    role: str
