from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, func

from jobnest.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(512), nullable=False)
    role = Column(String(50), nullable=False, default="user")
    created_at = Column(DateTime, server_default=func.now())
    last_login = Column(DateTime)
