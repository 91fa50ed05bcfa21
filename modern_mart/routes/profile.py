import os
import re
import time
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from .. import config
from ..auth import get_current_user
from ..core import ProfileIn, _make_user_dict
from ..database import get_db
from ..models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])

ALLOWED_IMAGE_TYPES = re.compile(r"jpeg|jpg|png|gif")


@router.put("")
def update_profile(payload: ProfileIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not all([payload.first_name, payload.last_name, payload.email, payload.phone]):
        raise HTTPException(status_code=400, detail="All fields are required")

    taken = db.query(User).filter(User.email == payload.email, User.id != user.id).first()
    if taken:
        raise HTTPException(status_code=409, detail="Email is already in use by another user")

    user.first_name = payload.first_name
    user.last_name = payload.last_name
    user.email = payload.email
    user.phone = payload.phone
    db.commit()
    db.refresh(user)
    return {"user": _make_user_dict(user)}


@router.post("/avatar")
def upload_avatar(
    avatar: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if avatar is None or not avatar.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    ext = os.path.splitext(avatar.filename)[1].lower()
    if not (ALLOWED_IMAGE_TYPES.search(ext) and ALLOWED_IMAGE_TYPES.search(avatar.content_type or "")):
        raise HTTPException(status_code=400, detail="Only image files (JPEG, PNG, GIF) are allowed!")

    data = avatar.file.read(config.MAX_AVATAR_BYTES + 1)
    if len(data) > config.MAX_AVATAR_BYTES:
        raise HTTPException(status_code=413, detail="File too large")

    os.makedirs(config.AVATARS_DIR, exist_ok=True)
    filename = f"avatar_{user.id}_{int(time.time() * 1000)}{ext}"
    with open(os.path.join(config.AVATARS_DIR, filename), "wb") as f:
        f.write(data)

    user.avatar_url = f"/avatars/{filename}"
    db.commit()
    db.refresh(user)
    logger.info(f"Avatar stored for user {user.id}: {filename}")
    return {"user": _make_user_dict(user), "message": "Avatar uploaded successfully"}


@router.delete("")
def delete_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} deleted their profile")
    return {"message": "User profile deleted successfully"}
