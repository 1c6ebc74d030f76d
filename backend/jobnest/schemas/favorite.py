from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class FavoriteCreate(BaseModel):
    job_id: int


class FavoriteOut(BaseModel):
    id: int
    user_id: int
    job_id: int
    saved_at: datetime | None = None

    class Config:
        from_attributes = True


class FavoriteDetail(BaseModel):
    id: int
    saved_at: datetime | None = None
    job_id: int
    title: str
    location: str | None = None
    job_type: str | None = None
    work_mode: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    company_name: str | None = None
