from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from jobnest.api.common import paginate
from jobnest.auth import get_current_user
from jobnest.database import get_db
from jobnest.models.interest import Interest
from jobnest.models.user import User
from jobnest.schemas.skill import InterestCreate, InterestOut, InterestWithEmail


router = APIRouter()

DUPLICATE_INTEREST = "You already have this interest."


def _owned_interest(db: Session, interest_id: int, user_id: int) -> Interest:
    interest = db.query(Interest).filter(Interest.id == interest_id, Interest.user_id == user_id).first()
    if not interest:
        raise HTTPException(status_code=404, detail="Interest not found or you don't have permission to change it.")
    return interest


def _area_taken(db: Session, user_id: int, area: str, exclude_id: int | None = None) -> bool:
    query = db.query(Interest).filter(Interest.user_id == user_id, Interest.interest_area == area)
    if exclude_id is not None:
        query = query.filter(Interest.id != exclude_id)
    return query.first() is not None


@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_interest(
    payload: InterestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    area = payload.interest_area.strip()
    if _area_taken(db, current_user.id, area):
        raise HTTPException(status_code=409, detail=DUPLICATE_INTEREST)

    interest = Interest(user_id=current_user.id, interest_area=area)
    db.add(interest)
    db.commit()
    db.refresh(interest)
    return {"message": "Interest added successfully.", "interest": InterestOut.model_validate(interest)}


@router.get("/all")
def list_interests(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(Interest, User.email).join(User, User.id == Interest.user_id).order_by(Interest.id)
    rows, pagination = paginate(query, page, limit)
    interests = [
        InterestWithEmail(**InterestOut.model_validate(interest).model_dump(), email=email)
        for interest, email in rows
    ]
    return {"interests": interests, "pagination": pagination}


@router.get("/me", response_model=list[InterestOut])
def list_my_interests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[Interest]:
    return db.query(Interest).filter(Interest.user_id == current_user.id).order_by(Interest.id).all()


@router.get("/user/{user_id}", response_model=list[InterestOut])
def list_user_interests(user_id: int, db: Session = Depends(get_db)) -> list[Interest]:
    return db.query(Interest).filter(Interest.user_id == user_id).order_by(Interest.id).all()


@router.put("/{interest_id}")
def update_interest(
    interest_id: int,
    payload: InterestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    interest = _owned_interest(db, interest_id, current_user.id)
    area = payload.interest_area.strip()
    if _area_taken(db, current_user.id, area, exclude_id=interest.id):
        raise HTTPException(status_code=409, detail=DUPLICATE_INTEREST)

    interest.interest_area = area
    db.add(interest)
    db.commit()
    db.refresh(interest)
    return {"message": "Interest updated successfully.", "interest": InterestOut.model_validate(interest)}


@router.delete("/{interest_id}")
def delete_interest(
    interest_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    interest = _owned_interest(db, interest_id, current_user.id)
    db.delete(interest)
    db.commit()
    return {"message": "Interest deleted successfully."}
