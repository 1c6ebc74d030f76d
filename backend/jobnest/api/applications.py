from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from jobnest.api.common import paginate, read_upload
from jobnest.api.jobs import COMPANY_ROLES, authorize_job, load_job
from jobnest.auth import get_current_user, require_role
from jobnest.database import get_db
from jobnest.errors import UploadError
from jobnest.models.application import APPLICATION_STATUSES, Application
from jobnest.models.company import Company
from jobnest.models.job import Job
from jobnest.models.profile import Profile
from jobnest.models.user import User
from jobnest.schemas.application import ApplicationDetail, ApplicationOut, ApplicationStatusUpdate
from jobnest.schemas.notification import NotificationOut
from jobnest.services.media import MediaUploader, get_media_uploader
from jobnest.services.notifications import notification_service, status_message


logger = logging.getLogger(__name__)

router = APIRouter()

CV_FOLDER = "cvs"


def _detail(application: Application, **extra) -> ApplicationDetail:
    return ApplicationDetail(**ApplicationOut.model_validate(application).model_dump(), **extra)


def _load_application(db: Session, application_id: int) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found.")
    return application


def _parse_job_id(raw: str | None) -> int:
    try:
        job_id = int(raw) if raw is not None else 0
    except (TypeError, ValueError):
        job_id = 0
    if job_id <= 0:
        raise HTTPException(status_code=400, detail="Job ID is required or invalid.")
    return job_id


@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/create", status_code=status.HTTP_201_CREATED)
def submit_application(
    job_id: str | None = Form(default=None),
    cv: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role("user")),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    job = load_job(db, _parse_job_id(job_id))
    if job.status != "active":
        raise HTTPException(status_code=400, detail="This job is not accepting applications.")

    incoming = read_upload(cv)

    existing = (
        db.query(Application)
        .filter(Application.user_id == current_user.id, Application.job_id == job.id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail="You have already applied for this job.")

    try:
        cv_url = uploader.upload(incoming.data, incoming.filename, incoming.content_type, folder=CV_FOLDER)
    except UploadError:
        logger.exception("CV upload failed for user %s on job %s", current_user.id, job.id)
        raise HTTPException(status_code=502, detail="Error uploading CV")

    # the remote file is orphaned if this insert fails
    application = Application(user_id=current_user.id, job_id=job.id, cv_url=cv_url, status="pending")
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info("User %s applied to job %s (application %s)", current_user.id, job.id, application.id)
    return {"message": "Application submitted successfully.", "application": ApplicationOut.model_validate(application)}


@router.get("/user", response_model=list[ApplicationDetail])
def list_my_applications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[ApplicationDetail]:
    rows = (
        db.query(Application, Job.title, Company.name)
        .join(Job, Job.id == Application.job_id)
        .join(Company, Company.id == Job.company_id)
        .filter(Application.user_id == current_user.id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .all()
    )
    return [_detail(app, job_title=title, company_name=company_name) for app, title, company_name in rows]


@router.get("/job/{job_id}")
def list_job_applications(
    job_id: int,
    page: int = Query(default=1),
    limit: int = Query(default=10),
    status_filter: str | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(*COMPANY_ROLES)),
) -> dict:
    job = load_job(db, job_id)
    company = authorize_job(db, current_user, job)

    query = (
        db.query(Application, User.email, Profile.full_name)
        .join(User, User.id == Application.user_id)
        .outerjoin(Profile, Profile.user_id == Application.user_id)
        .filter(Application.job_id == job.id)
    )
    if status_filter:
        query = query.filter(Application.status == status_filter)
    rows, pagination = paginate(query.order_by(Application.applied_at.desc(), Application.id.desc()), page, limit)

    applications = [
        _detail(
            app,
            job_title=job.title,
            company_name=company.name,
            applicant_email=email,
            applicant_name=full_name,
        )
        for app, email, full_name in rows
    ]
    return {"applications": applications, "pagination": pagination}


@router.get("/{application_id}", response_model=ApplicationDetail)
def get_application(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(*COMPANY_ROLES)),
) -> ApplicationDetail:
    application = _load_application(db, application_id)
    job = load_job(db, application.job_id)
    company = authorize_job(db, current_user, job)

    applicant = db.query(User).filter(User.id == application.user_id).first()
    profile = db.query(Profile).filter(Profile.user_id == application.user_id).first()
    return _detail(
        application,
        job_title=job.title,
        company_name=company.name,
        applicant_email=applicant.email if applicant else None,
        applicant_name=profile.full_name if profile else None,
    )


@router.put("/{application_id}/status")
def update_application_status(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(*COMPANY_ROLES)),
) -> dict:
    new_status = payload.status.strip().lower()
    if new_status not in APPLICATION_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of: {', '.join(APPLICATION_STATUSES)}",
        )

    application = _load_application(db, application_id)
    authorize_job(db, current_user, load_job(db, application.job_id))

    try:
        application.status = new_status
        db.add(application)
        notification = notification_service.record(db, application.user_id, status_message(new_status))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Status update for application %s rolled back", application_id)
        raise

    db.refresh(application)
    db.refresh(notification)
    notification_service.push(notification)
    logger.info("Application %s moved to %s by user %s", application.id, new_status, current_user.id)
    return {
        "message": "Application status updated successfully",
        "application": ApplicationOut.model_validate(application),
        "notification": NotificationOut.model_validate(notification),
    }


@router.delete("/{application_id}")
def delete_application(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    application = _load_application(db, application_id)
    if application.user_id != current_user.id:
        if current_user.role not in COMPANY_ROLES:
            raise HTTPException(status_code=403, detail="You don't have permission to delete this application.")
        authorize_job(db, current_user, load_job(db, application.job_id))

    db.delete(application)
    db.commit()
    return {"message": "Application deleted successfully", "application_id": application_id}
