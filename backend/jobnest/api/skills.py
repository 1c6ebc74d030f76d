from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from jobnest.api.common import apply_partial_update, paginate
from jobnest.auth import get_current_user
from jobnest.database import get_db
from jobnest.models.skill import SKILL_LEVELS, Skill
from jobnest.models.user import User
from jobnest.schemas.skill import SkillCreate, SkillOut, SkillUpdate, SkillWithEmail


router = APIRouter()


def _normalize_level(level: str) -> str:
    normalized = level.strip().lower()
    if normalized not in SKILL_LEVELS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid level. Must be one of: {', '.join(SKILL_LEVELS)}",
        )
    return normalized


def _owned_skill(db: Session, skill_id: int, user_id: int) -> Skill:
    skill = db.query(Skill).filter(Skill.id == skill_id, Skill.user_id == user_id).first()
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found or you don't have permission to change it.")
    return skill


def _name_taken(db: Session, user_id: int, skill_name: str, exclude_id: int | None = None) -> bool:
    query = db.query(Skill).filter(Skill.user_id == user_id, Skill.skill_name == skill_name)
    if exclude_id is not None:
        query = query.filter(Skill.id != exclude_id)
    return query.first() is not None


@router.post("", status_code=status.HTTP_201_CREATED)
def create_skill(
    payload: SkillCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    level = _normalize_level(payload.level)
    skill_name = payload.skill_name.strip()
    if _name_taken(db, current_user.id, skill_name):
        raise HTTPException(status_code=409, detail="You already have this skill.")

    skill = Skill(user_id=current_user.id, skill_name=skill_name, level=level)
    db.add(skill)
    db.commit()
    db.refresh(skill)
    return {"message": "Skill added successfully.", "skill": SkillOut.model_validate(skill)}


@router.get("")
def list_skills(
    page: int = Query(default=1),
    limit: int = Query(default=20),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(Skill, User.email).join(User, User.id == Skill.user_id).order_by(Skill.id)
    rows, pagination = paginate(query, page, limit)
    skills = [SkillWithEmail(**SkillOut.model_validate(skill).model_dump(), email=email) for skill, email in rows]
    return {"skills": skills, "pagination": pagination}


@router.get("/me", response_model=list[SkillOut])
def list_my_skills(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[Skill]:
    return db.query(Skill).filter(Skill.user_id == current_user.id).order_by(Skill.id).all()


@router.get("/user/{user_id}", response_model=list[SkillOut])
def list_user_skills(user_id: int, db: Session = Depends(get_db)) -> list[Skill]:
    return db.query(Skill).filter(Skill.user_id == user_id).order_by(Skill.id).all()


@router.put("/{skill_id}")
def update_skill(
    skill_id: int,
    payload: SkillUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    skill = _owned_skill(db, skill_id, current_user.id)
    if payload.level is not None:
        payload.level = _normalize_level(payload.level)
    if payload.skill_name is not None:
        payload.skill_name = payload.skill_name.strip()
        if _name_taken(db, current_user.id, payload.skill_name, exclude_id=skill.id):
            raise HTTPException(status_code=409, detail="You already have this skill.")

    apply_partial_update(skill, payload, keep_existing_on_none=True)
    db.add(skill)
    db.commit()
    db.refresh(skill)
    return {"message": "Skill updated successfully.", "skill": SkillOut.model_validate(skill)}


@router.delete("/{skill_id}")
def delete_skill(
    skill_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    skill = _owned_skill(db, skill_id, current_user.id)
    db.delete(skill)
    db.commit()
    return {"message": "Skill deleted successfully."}
