from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core import LoginIn, VerifyOtpIn
from ..database import get_db
from .auth import start_login, finish_login

# Older storefront builds post to /api/login; it shares the /api/auth flow.

router = APIRouter(prefix="/api/login", tags=["auth"])


@router.post("")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    return start_login(payload, db)


@router.post("/verify-otp")
def verify_otp(payload: VerifyOtpIn, db: Session = Depends(get_db)):
    return finish_login(payload, db)
