from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SkillCreate(BaseModel):
    skill_name: str = Field(min_length=1, max_length=255)
    level: str = Field(min_length=1)


class SkillUpdate(BaseModel):
    skill_name: str | None = Field(default=None, min_length=1, max_length=255)
    level: str | None = None


class SkillOut(BaseModel):
    id: int
    user_id: int
    skill_name: str
    level: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class SkillWithEmail(SkillOut):
    email: str


class InterestCreate(BaseModel):
    interest_area: str = Field(min_length=1, max_length=255)


class InterestOut(BaseModel):
    id: int
    user_id: int
    interest_area: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class InterestWithEmail(InterestOut):
    email: str
