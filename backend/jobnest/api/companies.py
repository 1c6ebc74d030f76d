from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from jobnest.api.common import (
    RequestPayload,
    apply_partial_update,
    check_file,
    paginate,
    parse_model,
    read_payload,
    without_blanks,
)
from jobnest.api.jobs import job_out
from jobnest.auth import (
    authorize_company,
    find_admin_link,
    find_owned_company,
    get_current_user,
    get_owned_company,
    require_role,
)
from jobnest.database import get_db
from jobnest.errors import UploadError
from jobnest.models.application import Application
from jobnest.models.company import Company
from jobnest.models.company_admin import CompanyAdmin
from jobnest.models.favorite import Favorite
from jobnest.models.job import Job
from jobnest.models.user import User
from jobnest.schemas.company import CompanyAdminCreate, CompanyAdminOut, CompanyCreate, CompanyOut, CompanyUpdate
from jobnest.services.media import MediaUploader, get_media_uploader


logger = logging.getLogger(__name__)

router = APIRouter()

LOGO_FOLDER = "company_logos"


def _load_company(db: Session, company_id: int) -> Company:
    company = db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise HTTPException(status_code=404, detail="Company not found.")
    return company


def _delete_jobs(db: Session, company_id: int) -> None:
    db.query(Job).filter(Job.company_id == company_id).delete(synchronize_session=False)


def purge_company(db: Session, company_id: int) -> None:
    """Delete a company and everything hanging off it, in dependency order.

    The caller owns the transaction.
    """
    job_ids = select(Job.id).where(Job.company_id == company_id)
    db.query(CompanyAdmin).filter(CompanyAdmin.company_id == company_id).delete(synchronize_session=False)
    db.query(Application).filter(Application.job_id.in_(job_ids)).delete(synchronize_session=False)
    db.query(Favorite).filter(Favorite.job_id.in_(job_ids)).delete(synchronize_session=False)
    _delete_jobs(db, company_id)
    db.query(Company).filter(Company.id == company_id).delete(synchronize_session=False)


@router.get("")
def list_companies(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    industry: str | None = Query(default=None),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(Company)
    if industry:
        query = query.filter(Company.industry == industry)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Company.name.ilike(pattern), Company.location.ilike(pattern)))
    companies, pagination = paginate(query.order_by(Company.name.asc(), Company.id.asc()), page, limit)
    return {
        "companies": [CompanyOut.model_validate(company) for company in companies],
        "pagination": pagination,
    }


@router.get("/admins/all")
def list_all_admins(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    rows = (
        db.query(CompanyAdmin, User.email, Company.name)
        .join(User, User.id == CompanyAdmin.user_id)
        .join(Company, Company.id == CompanyAdmin.company_id)
        .order_by(CompanyAdmin.company_id, CompanyAdmin.user_id)
        .all()
    )
    admins = []
    for link, email, company_name in rows:
        item = CompanyAdminOut.model_validate(link).model_dump()
        item.update(email=email, company_name=company_name)
        admins.append(item)
    return {"count": len(admins), "admins": admins}


@router.get("/profile/me", response_model=CompanyOut)
def get_my_company(
    current_user: User = Depends(require_role("company")),
    company: Company = Depends(get_owned_company),
) -> Company:
    return company


@router.get("/user/{user_id}", response_model=CompanyOut)
def get_company_by_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Company:
    company = find_owned_company(db, user_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found for this user.")
    return company


@router.post("/admin", status_code=status.HTTP_201_CREATED)
def add_company_admin(
    payload: CompanyAdminCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    authorize_company(db, current_user, payload.company_id)
    if not db.query(User).filter(User.id == payload.user_id).first():
        raise HTTPException(status_code=404, detail="User not found.")
    if find_admin_link(db, payload.company_id, payload.user_id):
        raise HTTPException(status_code=409, detail="This user is already an admin for this company.")

    link = CompanyAdmin(
        company_id=payload.company_id,
        user_id=payload.user_id,
        role_in_company=payload.role_in_company,
    )
    db.add(link)
    db.commit()
    db.refresh(link)
    return {"message": "Company admin added successfully", "admin": CompanyAdminOut.model_validate(link)}


@router.get("/{company_id}", response_model=CompanyOut)
def get_company(company_id: int, db: Session = Depends(get_db)) -> Company:
    return _load_company(db, company_id)


@router.get("/{company_id}/jobs")
def get_company_jobs(company_id: int, db: Session = Depends(get_db)) -> dict:
    company = _load_company(db, company_id)
    jobs = (
        db.query(Job)
        .filter(Job.company_id == company.id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )
    return {"jobs": [job_out(job, company.name) for job in jobs]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_company(
    body: RequestPayload = Depends(read_payload),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role("company")),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    payload = parse_model(CompanyCreate, without_blanks(body.fields))
    if payload.user_id is not None and payload.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only register a company for your own account.")

    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Company name is required.")
    if find_owned_company(db, current_user.id):
        raise HTTPException(status_code=409, detail="User already has a company registered.")

    logo_url = payload.logo
    logo_file = body.files.get("logo")
    if logo_file:
        check_file(logo_file, images_only=True)
        try:
            logo_url = uploader.upload(logo_file.data, logo_file.filename, logo_file.content_type, folder=LOGO_FOLDER)
        except UploadError:
            logger.exception("Logo upload failed while creating company for user %s", current_user.id)
            raise HTTPException(status_code=502, detail="Error uploading company logo")

    fields = payload.model_dump(exclude={"user_id", "name", "logo"})
    company = Company(user_id=current_user.id, name=name, logo=logo_url, **fields)
    db.add(company)
    db.commit()
    db.refresh(company)
    logger.info("User %s created company %s", current_user.id, company.id)
    return {"message": "Company created successfully", "company": CompanyOut.model_validate(company)}


@router.put("/{company_id}")
def update_company(
    company_id: int,
    body: RequestPayload = Depends(read_payload),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    company = authorize_company(db, current_user, company_id)
    payload = parse_model(CompanyUpdate, without_blanks(body.fields))

    warning = None
    logo_file = body.files.get("logo")
    if logo_file:
        check_file(logo_file, images_only=True)
        try:
            payload.logo = uploader.upload(
                logo_file.data, logo_file.filename, logo_file.content_type, folder=LOGO_FOLDER
            )
        except UploadError as exc:
            logger.warning("Logo upload failed for company %s, saving other fields: %s", company.id, exc)
            warning = "Logo upload failed; the previous logo was kept."

    apply_partial_update(company, payload, keep_existing_on_none=True)
    db.add(company)
    db.commit()
    db.refresh(company)

    message = "Company updated successfully"
    if warning:
        message = f"{message}, but the logo could not be uploaded"
    response = {"message": message, "company": CompanyOut.model_validate(company)}
    if warning:
        response["warning"] = warning
    return response


@router.delete("/{company_id}")
def delete_company(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    company = authorize_company(db, current_user, company_id, owner_only=True)
    try:
        purge_company(db, company.id)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Deleting company %s failed, rolled back", company_id)
        raise
    logger.info("User %s deleted company %s", current_user.id, company_id)
    return {"message": "Company deleted successfully."}


@router.delete("/{company_id}/admin/{user_id}")
def remove_company_admin(
    company_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    authorize_company(db, current_user, company_id)
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot remove yourself from the company.")
    link = find_admin_link(db, company_id, user_id)
    if not link:
        raise HTTPException(status_code=404, detail="Admin not found for this company.")
    db.delete(link)
    db.commit()
    return {"message": "Company admin removed successfully"}
