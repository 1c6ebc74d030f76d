from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from jobnest.api.common import apply_partial_update
from jobnest.auth import authorize_company, find_owned_company, require_role
from jobnest.database import get_db
from jobnest.models.application import Application
from jobnest.models.company import Company
from jobnest.models.favorite import Favorite
from jobnest.models.job import JOB_STATUSES, Job
from jobnest.models.user import User
from jobnest.schemas.job import JobCreate, JobOut, JobUpdate


logger = logging.getLogger(__name__)

router = APIRouter()

COMPANY_ROLES = ("company", "company_admin")


def _jobs_with_company(db: Session):
    return db.query(Job, Company.name).join(Company, Company.id == Job.company_id)


def job_out(job: Job, company_name: str | None = None) -> JobOut:
    out = JobOut.model_validate(job)
    out.company_name = company_name
    return out


def _validate_status(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in JOB_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid job status. Must be one of: {', '.join(JOB_STATUSES)}",
        )
    return normalized


def _validate_salary(salary_min: int | None, salary_max: int | None) -> None:
    if (salary_min is not None and salary_min < 0) or (salary_max is not None and salary_max < 0):
        raise HTTPException(status_code=400, detail="Salary values cannot be negative.")
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise HTTPException(status_code=400, detail="salary_min cannot be greater than salary_max.")


def load_job(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found.")
    return job


def authorize_job(db: Session, user: User, job: Job) -> Company:
    return authorize_company(db, user, job.company_id)


@router.get("", response_model=list[JobOut])
def list_jobs(
    location: str | None = Query(default=None),
    job_type: str | None = Query(default=None),
    work_mode: str | None = Query(default=None),
    search: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    company_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[JobOut]:
    query = _jobs_with_company(db)
    if location and location.strip():
        query = query.filter(Job.location.ilike(f"%{location.strip()}%"))
    if job_type:
        query = query.filter(Job.job_type == job_type)
    if work_mode:
        query = query.filter(Job.work_mode == work_mode)
    if status_filter:
        query = query.filter(Job.status == status_filter)
    if company_id is not None:
        query = query.filter(Job.company_id == company_id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Job.title.ilike(pattern), Job.description.ilike(pattern)))

    rows = query.order_by(Job.created_at.desc(), Job.id.desc()).all()
    return [job_out(job, company_name) for job, company_name in rows]


@router.get("/{job_id}", response_model=JobOut)
def get_job(job_id: int, db: Session = Depends(get_db)) -> JobOut:
    row = _jobs_with_company(db).filter(Job.id == job_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Job not found.")
    job, company_name = row
    return job_out(job, company_name)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(*COMPANY_ROLES)),
) -> dict:
    company_id = payload.company_id
    if company_id is None:
        owned = find_owned_company(db, current_user.id)
        company_id = owned.id if owned else None

    title = (payload.title or "").strip()
    description = (payload.description or "").strip()
    if not title or not description or company_id is None:
        raise HTTPException(status_code=400, detail="Title, description, and company_id are required.")

    company = authorize_company(db, current_user, company_id)
    _validate_salary(payload.salary_min, payload.salary_max)

    job = Job(
        company_id=company.id,
        title=title,
        description=description,
        job_type=payload.job_type or "full_time",
        work_mode=payload.work_mode or "onsite",
        location=payload.location,
        salary_min=payload.salary_min,
        salary_max=payload.salary_max,
        requirements=payload.requirements,
        benefits=payload.benefits,
        deadline=payload.deadline,
        status=_validate_status(payload.status or "active"),
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("Company %s posted job %s", company.id, job.id)
    return {"message": "Job created successfully", "job": job_out(job, company.name)}


@router.put("/{job_id}")
def update_job(
    job_id: int,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(*COMPANY_ROLES)),
) -> dict:
    job = load_job(db, job_id)
    company = authorize_job(db, current_user, job)

    if payload.status is not None:
        payload.status = _validate_status(payload.status)
    if payload.title is not None and not payload.title.strip():
        raise HTTPException(status_code=400, detail="Title cannot be empty.")
    if payload.description is not None and not payload.description.strip():
        raise HTTPException(status_code=400, detail="Description cannot be empty.")

    apply_partial_update(job, payload, keep_existing_on_none=True)
    _validate_salary(job.salary_min, job.salary_max)
    db.add(job)
    db.commit()
    db.refresh(job)
    return {"message": "Job updated successfully", "job": job_out(job, company.name)}


@router.delete("/{job_id}")
def delete_job(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(*COMPANY_ROLES)),
) -> dict:
    job = load_job(db, job_id)
    authorize_job(db, current_user, job)

    try:
        db.query(Application).filter(Application.job_id == job.id).delete(synchronize_session=False)
        db.query(Favorite).filter(Favorite.job_id == job.id).delete(synchronize_session=False)
        db.delete(job)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted job %s", job_id)
    return {"message": "Job deleted successfully"}
