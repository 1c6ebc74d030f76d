from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from jobnest.api.common import read_upload
from jobnest.auth import get_current_user
from jobnest.database import get_db
from jobnest.errors import UploadError
from jobnest.models.profile import Profile
from jobnest.models.user import User
from jobnest.services.media import MediaUploader, get_media_uploader
from jobnest.services.rate_limit import enforce_upload_limit


logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(enforce_upload_limit)])


@router.post("/cv")
def upload_cv(
    cv: UploadFile | None = File(default=None),
    current_user: User = Depends(get_current_user),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    incoming = read_upload(cv)
    try:
        url = uploader.upload(incoming.data, incoming.filename, incoming.content_type, folder="cvs")
    except UploadError:
        logger.exception("CV upload failed for user %s", current_user.id)
        raise HTTPException(status_code=502, detail="Error uploading CV")
    return {"message": "CV uploaded successfully", "url": url}


@router.post("/profile")
def upload_profile_picture(
    profile_picture: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> dict:
    incoming = read_upload(profile_picture, images_only=True)
    try:
        url = uploader.upload(incoming.data, incoming.filename, incoming.content_type, folder="profile_pictures")
    except UploadError:
        logger.exception("Profile picture upload failed for user %s", current_user.id)
        raise HTTPException(status_code=502, detail="Error uploading profile picture")

    profile = db.query(Profile).filter(Profile.user_id == current_user.id).first()
    if profile:
        profile.profile_picture = url
        db.add(profile)
        db.commit()
    return {"message": "Profile picture uploaded successfully", "url": url}
