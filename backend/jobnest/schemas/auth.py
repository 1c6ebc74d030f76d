from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=256)
    role: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("email must be a valid email address")
        return value


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserOut(BaseModel):
    id: int
    email: str
    role: str
    created_at: datetime | None = None
    last_login: datetime | None = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class CompanyAdminRegisterRequest(BaseModel):
    company_name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=256)

    @field_validator("company_name")
    @classmethod
    def strip_company_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("company_name must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("email must be a valid email address")
        return value


class AdminOut(BaseModel):
    id: int
    email: str
    role: str
    company_id: int | None = None


class AdminAuthResponse(BaseModel):
    message: str
    token: str
    admin: AdminOut
