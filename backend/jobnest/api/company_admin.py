from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from jobnest.api.common import RequestPayload, apply_partial_update, check_file, parse_model, read_payload, without_blanks
from jobnest.auth import (
    authorize_company,
    create_access_token,
    find_admin_link,
    find_owned_company,
    get_current_user,
    get_token_claims,
    hash_password,
    verify_password,
)
from jobnest.config import settings
from jobnest.database import get_db
from jobnest.errors import UploadError
from jobnest.models.application import Application
from jobnest.models.company import Company
from jobnest.models.company_admin import CompanyAdmin
from jobnest.models.job import Job
from jobnest.models.notification import Notification
from jobnest.models.user import User
from jobnest.schemas.auth import AdminAuthResponse, AdminOut, CompanyAdminRegisterRequest, LoginRequest
from jobnest.schemas.company import CompanyOut, CompanyUpdate, DashboardSummary, StaffCreate, StaffMember
from jobnest.services.media import MediaUploader, get_media_uploader


logger = logging.getLogger(__name__)

router = APIRouter()


def _admin_company(db: Session, user: User) -> Company:
    link = db.query(CompanyAdmin).filter(CompanyAdmin.user_id == user.id).order_by(CompanyAdmin.id).first()
    if not link:
        raise HTTPException(status_code=403, detail="Access denied. User is not a company admin.")
    company = db.query(Company).filter(Company.id == link.company_id).first()
    if not company:
        raise HTTPException(status_code=404, detail="Company not found.")
    return company


def _require_admin_link(db: Session, company_id: int, user: User) -> CompanyAdmin:
    link = find_admin_link(db, company_id, user.id)
    if not link:
        raise HTTPException(status_code=403, detail="Access denied. Not an admin for this company.")
    return link


def _admin_response(message: str, user: User, company_id: int | None) -> AdminAuthResponse:
    return AdminAuthResponse(
        message=message,
        token=create_access_token(user, company_id=company_id, ttl_minutes=settings.admin_token_ttl_minutes),
        admin=AdminOut(id=user.id, email=user.email, role=user.role, company_id=company_id),
    )


@router.post("/register", response_model=AdminAuthResponse, status_code=status.HTTP_201_CREATED)
def register_company_admin(payload: CompanyAdminRegisterRequest, db: Session = Depends(get_db)) -> AdminAuthResponse:
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=409, detail="Email already registered.")

    try:
        now = datetime.now(timezone.utc)
        user = User(
            email=payload.email,
            password_hash=hash_password(payload.password),
            role="company_admin",
            last_login=now,
        )
        db.add(user)
        db.flush()

        company = Company(user_id=user.id, name=payload.company_name)
        db.add(company)
        db.flush()

        db.add(CompanyAdmin(company_id=company.id, user_id=user.id, role_in_company="admin"))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Company admin registration for %s rolled back", payload.email)
        raise

    db.refresh(user)
    logger.info("Registered company admin %s for company %s", user.id, company.id)
    return _admin_response("Company admin registered successfully", user, company.id)


@router.post("/login", response_model=AdminAuthResponse)
def login_company_admin(payload: LoginRequest, db: Session = Depends(get_db)) -> AdminAuthResponse:
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials.")
    if user.role != "company_admin":
        raise HTTPException(status_code=403, detail="Access denied. Not a company admin account.")

    link = db.query(CompanyAdmin).filter(CompanyAdmin.user_id == user.id).order_by(CompanyAdmin.id).first()
    user.last_login = datetime.now(timezone.utc)
    db.add(user)
    db.commit()
    db.refresh(user)
    return _admin_response("Login successful", user, link.company_id if link else None)


@router.get("/profile", response_model=CompanyOut)
def get_company_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Company:
    return _admin_company(db, current_user)


def _save_company_profile(
    body: RequestPayload,
    db: Session,
    current_user: User,
    uploader: MediaUploader,
) -> dict:
    company = _admin_company(db, current_user)
    payload = parse_model(CompanyUpdate, without_blanks(body.fields))

    logo_file = body.files.get("logo")
    if logo_file:
        check_file(logo_file, images_only=True)
        try:
            payload.logo = uploader.upload(logo_file.data, logo_file.filename, logo_file.content_type, folder="company_logos")
        except UploadError:
            logger.exception("Logo upload failed for company %s", company.id)
            raise HTTPException(status_code=400, detail="Error uploading company logo")

    apply_partial_update(company, payload, keep_existing_on_none=True)
    db.add(company)
    db.commit()
    db.refresh(company)
    return {"message": "Company profile updated successfully", "company": CompanyOut.model_validate(company)}


@router.post("/profile")
def create_company_profile(
    body: RequestPayload = Depends(read_payload),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    return _save_company_profile(body, db, current_user, uploader)


@router.put("/profile")
def update_company_profile(
    body: RequestPayload = Depends(read_payload),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    return _save_company_profile(body, db, current_user, uploader)


@router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard_summary(
    claims: dict[str, Any] = Depends(get_token_claims),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DashboardSummary:
    company_id = claims.get("company_id")
    if company_id is None:
        owned = find_owned_company(db, current_user.id)
        if owned:
            company_id = owned.id
        else:
            link = db.query(CompanyAdmin).filter(CompanyAdmin.user_id == current_user.id).first()
            company_id = link.company_id if link else None
    if company_id is None:
        raise HTTPException(status_code=404, detail="Company profile not found for this user")
    authorize_company(db, current_user, company_id)

    total_jobs = db.query(func.count(Job.id)).filter(Job.company_id == company_id).scalar() or 0
    active_jobs = (
        db.query(func.count(Job.id)).filter(Job.company_id == company_id, Job.status == "active").scalar() or 0
    )
    applicants = db.query(func.count(Application.id)).join(Job, Job.id == Application.job_id).filter(
        Job.company_id == company_id
    )
    total_applicants = applicants.scalar() or 0
    pending_applicants = applicants.filter(Application.status == "pending").scalar() or 0
    unread = (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .scalar()
        or 0
    )
    return DashboardSummary(
        company_id=company_id,
        totalJobs=total_jobs,
        activeJobs=active_jobs,
        totalApplicants=total_applicants,
        pendingApplicants=pending_applicants,
        unreadNotifications=unread,
    )


@router.get("/{company_id}/staff")
def get_company_staff(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    _require_admin_link(db, company_id, current_user)
    rows = (
        db.query(User.id, User.email, User.role, CompanyAdmin.role_in_company)
        .join(CompanyAdmin, CompanyAdmin.user_id == User.id)
        .filter(CompanyAdmin.company_id == company_id)
        .order_by(CompanyAdmin.id)
        .all()
    )
    staff = [
        StaffMember(id=row.id, email=row.email, role=row.role, role_in_company=row.role_in_company) for row in rows
    ]
    return {"company_id": company_id, "staff": staff}


@router.post("/{company_id}/staff", status_code=status.HTTP_201_CREATED)
def add_staff_member(
    company_id: int,
    payload: StaffCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    _require_admin_link(db, company_id, current_user)

    try:
        user = db.query(User).filter(User.email == payload.email).first()
        if user is None:
            user = User(
                email=payload.email,
                password_hash=hash_password(secrets.token_urlsafe(12)),
                role="company_staff",
            )
            db.add(user)
            db.flush()
            logger.info("Created staff account %s for company %s", user.id, company_id)

        if find_admin_link(db, company_id, user.id):
            db.rollback()
            raise HTTPException(status_code=409, detail="This user is already a staff member.")

        db.add(CompanyAdmin(company_id=company_id, user_id=user.id, role_in_company=payload.role_in_company))
        db.commit()
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Adding staff to company %s rolled back", company_id)
        raise

    db.refresh(user)
    return {
        "message": "Staff member added successfully",
        "user": StaffMember(id=user.id, email=user.email, role=user.role, role_in_company=payload.role_in_company),
    }


@router.delete("/{company_id}/staff/{user_id}")
def remove_staff_member(
    company_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    _require_admin_link(db, company_id, current_user)
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot remove yourself from the company.")

    link = find_admin_link(db, company_id, user_id)
    if not link:
        raise HTTPException(status_code=404, detail="Staff member not found.")
    db.delete(link)
    db.commit()
    return {"message": "Staff member removed successfully", "removed": {"company_id": company_id, "user_id": user_id}}
