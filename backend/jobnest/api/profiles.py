from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from jobnest.api.common import IncomingFile, RequestPayload, apply_partial_update, check_file, paginate, parse_model, read_payload
from jobnest.auth import get_current_user
from jobnest.database import get_db
from jobnest.errors import UploadError
from jobnest.models.profile import Profile
from jobnest.models.user import User
from jobnest.schemas.profile import ProfileFields, ProfileOut, PublicProfile
from jobnest.services.media import MediaUploader, get_media_uploader


logger = logging.getLogger(__name__)

router = APIRouter()

PICTURE_FOLDER = "profile_pictures"


def _public_profile(profile: Profile, user: User) -> PublicProfile:
    return PublicProfile(**ProfileOut.model_validate(profile).model_dump(), email=user.email, role=user.role)


def _upload_picture(uploader: MediaUploader, picture: IncomingFile, user_id: int) -> str:
    check_file(picture, images_only=True)
    try:
        return uploader.upload(picture.data, picture.filename, picture.content_type, folder=PICTURE_FOLDER)
    except UploadError:
        logger.exception("Profile picture upload failed for user %s", user_id)
        raise HTTPException(status_code=502, detail="Error uploading profile picture")


def _find_profile(db: Session, user_id: int) -> Profile | None:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_profile(
    body: RequestPayload = Depends(read_payload),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    payload = parse_model(ProfileFields, body.fields)
    if _find_profile(db, current_user.id):
        raise HTTPException(status_code=409, detail="Profile already exists. Use update endpoint instead.")

    picture = body.files.get("profile_picture")
    if picture:
        payload.profile_picture = _upload_picture(uploader, picture, current_user.id)

    profile = Profile(user_id=current_user.id, **payload.model_dump())
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return {"message": "Profile created successfully.", "profile": ProfileOut.model_validate(profile)}


@router.put("")
def update_profile(
    body: RequestPayload = Depends(read_payload),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    picture = body.files.get("profile_picture")
    payload = parse_model(ProfileFields, body.fields)
    if not payload.model_dump(exclude_unset=True) and not picture:
        raise HTTPException(status_code=400, detail="No fields provided for update")

    profile = _find_profile(db, current_user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found. Create a profile first.")

    if picture:
        payload.profile_picture = _upload_picture(uploader, picture, current_user.id)

    apply_partial_update(profile, payload)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return {"message": "Profile updated successfully.", "profile": ProfileOut.model_validate(profile)}


@router.delete("")
def delete_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    profile = _find_profile(db, current_user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    db.delete(profile)
    db.commit()
    return {"message": "Profile deleted successfully"}


@router.get("/me")
def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    user = {
        "id": current_user.id,
        "email": current_user.email,
        "role": current_user.role,
        "created_at": current_user.created_at,
    }
    profile = _find_profile(db, current_user.id)
    if not profile:
        return {"user": user, "profile": None, "message": "Profile not created yet."}
    return {"user": user, "profile": ProfileOut.model_validate(profile)}


@router.get("/all")
def list_profiles(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(Profile, User).join(User, User.id == Profile.user_id).order_by(Profile.id)
    rows, pagination = paginate(query, page, limit)
    return {
        "message": "Profiles retrieved successfully.",
        "profiles": [_public_profile(profile, user) for profile, user in rows],
        "pagination": pagination,
    }


@router.get("/user/{user_id}", response_model=PublicProfile)
def get_profile_by_user(user_id: int, db: Session = Depends(get_db)) -> PublicProfile:
    row = db.query(Profile, User).join(User, User.id == Profile.user_id).filter(Profile.user_id == user_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Profile not found")
    profile, user = row
    return _public_profile(profile, user)
