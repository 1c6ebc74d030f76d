from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func

from jobnest.database import Base


SKILL_LEVELS = ("beginner", "intermediate", "advanced", "expert")


class Skill(Base):
    __tablename__ = "skills"
    __table_args__ = (UniqueConstraint("user_id", "skill_name", name="uq_skill_user_name"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_name = Column(String(255), nullable=False)
    level = Column(String(50), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
