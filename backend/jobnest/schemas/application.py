from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ApplicationStatusUpdate(BaseModel):
    status: str = Field(min_length=1)


class ApplicationOut(BaseModel):
    id: int
    user_id: int
    job_id: int
    cv_url: str
    status: str
    applied_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ApplicationDetail(ApplicationOut):
    job_title: str | None = None
    company_name: str | None = None
    applicant_email: str | None = None
    applicant_name: str | None = None
