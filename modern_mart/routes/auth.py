import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import MAX_PASSWORD_BYTES, hash_password, verify_password, issue_token, issue_otp, consume_otp, get_current_user
from ..core import RegisterIn, LoginIn, VerifyOtpIn, _make_user_dict
from ..database import get_db
from ..models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _find_user(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def start_login(payload: LoginIn, db: Session):
    """Check the password and issue a one-time code."""
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    user = _find_user(db, payload.email)
    if not verify_password(payload.password, user.password):
        logger.warning(f"Invalid password for {payload.email}")
        raise HTTPException(status_code=401, detail="Invalid password")
    issue_otp(db, user)
    return {"message": "OTP sent to email (check server console)"}


def finish_login(payload: VerifyOtpIn, db: Session):
    """Trade a valid one-time code for a bearer token."""
    if not payload.email or not payload.otp:
        raise HTTPException(status_code=400, detail="Email and OTP are required")
    user = _find_user(db, payload.email)
    consume_otp(db, user, payload.otp)
    return {"token": issue_token(db, user)}


@router.post("/register", status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    if not all([payload.first_name, payload.last_name, payload.email, payload.phone, payload.password]):
        raise HTTPException(status_code=400, detail="All fields are required")
    if len(payload.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise HTTPException(status_code=400, detail=f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    if db.query(User).filter(User.email == payload.email).first():
        logger.warning(f"Registration rejected, {payload.email} already exists")
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        phone=payload.phone,
        password=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"New user registered: {user.email}")

    return {"message": "User registered successfully", "token": issue_token(db, user)}


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    return start_login(payload, db)


@router.post("/verify-otp")
def verify_otp(payload: VerifyOtpIn, db: Session = Depends(get_db)):
    return finish_login(payload, db)


@router.get("/profile")
def profile(user: User = Depends(get_current_user)):
    return {"user": _make_user_dict(user)}
