from __future__ import annotations

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func

from jobnest.database import Base


JOB_STATUSES = ("active", "draft", "closed", "paused")


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_company", "company_id"),
        Index("idx_jobs_created", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(500), nullable=False)
    job_type = Column(String(50), nullable=False, default="full_time")
    work_mode = Column(String(50), nullable=False, default="onsite")
    location = Column(String(255))
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    description = Column(Text, nullable=False)
    requirements = Column(Text)
    benefits = Column(Text)
    deadline = Column(Date)
    status = Column(String(50), nullable=False, default="active")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
