from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func

from jobnest.database import Base


class CompanyAdmin(Base):
    __tablename__ = "company_admin"
    __table_args__ = (UniqueConstraint("company_id", "user_id", name="uq_company_admin_user"),)

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role_in_company = Column(String(100), nullable=False, default="admin")
    created_at = Column(DateTime, server_default=func.now())
