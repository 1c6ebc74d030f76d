from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class JobCreate(BaseModel):
    company_id: int | None = None
    title: str | None = None
    description: str | None = None
    job_type: str | None = None
    work_mode: str | None = None
    location: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    requirements: str | None = None
    benefits: str | None = None
    deadline: date | None = None
    status: str | None = None


class JobUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    job_type: str | None = None
    work_mode: str | None = None
    location: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    requirements: str | None = None
    benefits: str | None = None
    deadline: date | None = None
    status: str | None = None


class JobOut(BaseModel):
    id: int
    company_id: int
    company_name: str | None = None
    title: str
    job_type: str
    work_mode: str
    location: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    description: str
    requirements: str | None = None
    benefits: str | None = None
    deadline: date | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
