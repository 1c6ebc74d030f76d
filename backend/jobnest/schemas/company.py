from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class CompanyFields(BaseModel):
    name: str | None = None
    industry: str | None = None
    size: str | None = None
    location: str | None = None
    founded: str | None = None
    website: str | None = None
    description: str | None = None
    vision: str | None = None
    mission: str | None = None
    logo: str | None = None

    @field_validator("founded", "size", mode="before")
    @classmethod
    def stringify(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)


class CompanyCreate(CompanyFields):
    user_id: int | None = None


class CompanyUpdate(CompanyFields):
    pass


class CompanyOut(BaseModel):
    id: int
    user_id: int
    name: str
    industry: str | None = None
    size: str | None = None
    location: str | None = None
    founded: str | None = None
    website: str | None = None
    description: str | None = None
    vision: str | None = None
    mission: str | None = None
    logo: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class CompanyAdminCreate(BaseModel):
    company_id: int
    user_id: int
    role_in_company: str = Field(min_length=1, max_length=100)


class CompanyAdminOut(BaseModel):
    id: int
    company_id: int
    user_id: int
    role_in_company: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class StaffCreate(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    role_in_company: str = Field(min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class StaffMember(BaseModel):
    id: int
    email: str
    role: str
    role_in_company: str


class DashboardSummary(BaseModel):
    company_id: int
    totalJobs: int = 0
    activeJobs: int = 0
    totalApplicants: int = 0
    pendingApplicants: int = 0
    unreadNotifications: int = 0
