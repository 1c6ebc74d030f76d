from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from jobnest.api.jobs import load_job
from jobnest.auth import get_current_user
from jobnest.database import get_db
from jobnest.models.company import Company
from jobnest.models.favorite import Favorite
from jobnest.models.job import Job
from jobnest.models.user import User
from jobnest.schemas.favorite import FavoriteCreate, FavoriteDetail, FavoriteOut


router = APIRouter()


def _find_favorite(db: Session, user_id: int, job_id: int) -> Favorite | None:
    return db.query(Favorite).filter(Favorite.user_id == user_id, Favorite.job_id == job_id).first()


@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_favorite(
    payload: FavoriteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    job = load_job(db, payload.job_id)
    if _find_favorite(db, current_user.id, job.id):
        raise HTTPException(status_code=409, detail="Job already saved to favorites")

    favorite = Favorite(user_id=current_user.id, job_id=job.id)
    db.add(favorite)
    db.commit()
    db.refresh(favorite)
    return {"message": "Job favorited successfully", "favorite": FavoriteOut.model_validate(favorite)}


@router.get("/user")
def list_favorites(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    rows = (
        db.query(Favorite, Job, Company.name)
        .join(Job, Job.id == Favorite.job_id)
        .join(Company, Company.id == Job.company_id)
        .filter(Favorite.user_id == current_user.id)
        .order_by(Favorite.saved_at.desc(), Favorite.id.desc())
        .all()
    )
    favorites = [
        FavoriteDetail(
            id=favorite.id,
            saved_at=favorite.saved_at,
            job_id=job.id,
            title=job.title,
            location=job.location,
            job_type=job.job_type,
            work_mode=job.work_mode,
            salary_min=job.salary_min,
            salary_max=job.salary_max,
            company_name=company_name,
        )
        for favorite, job, company_name in rows
    ]
    return {"count": len(favorites), "favorites": favorites}


@router.get("/check/{job_id}")
def check_favorite(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    favorite = _find_favorite(db, current_user.id, job_id)
    return {
        "isFavorited": favorite is not None,
        "favorite": FavoriteOut.model_validate(favorite) if favorite else None,
    }


@router.delete("/delete/{favorite_id}")
def delete_favorite(
    favorite_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    favorite = db.query(Favorite).filter(Favorite.id == favorite_id, Favorite.user_id == current_user.id).first()
    if not favorite:
        raise HTTPException(status_code=404, detail="Favorite not found or you don't have permission to delete it")
    db.delete(favorite)
    db.commit()
    return {"message": "Job removed from favorites successfully"}


@router.delete("/job/{job_id}")
def delete_favorite_by_job(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    favorite = _find_favorite(db, current_user.id, job_id)
    if not favorite:
        raise HTTPException(status_code=404, detail="Job not found in your favorites")
    db.delete(favorite)
    db.commit()
    return {"message": "Job removed from favorites successfully"}
