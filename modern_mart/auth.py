"""
Password hashing, bearer tokens and one-time codes
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional

import bcrypt
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from . import config
from .database import get_db
from .models import User, Token, Otp, utcnow

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # not a bcrypt hash, or a password over MAX_PASSWORD_BYTES
        return False


def issue_token(db: Session, user: User) -> str:
    token = secrets.token_hex(32)
    expires_at = utcnow() + timedelta(hours=config.TOKEN_TTL_HOURS)
    db.add(Token(user_id=user.id, token=token, expires_at=expires_at))
    db.commit()
    return token


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def issue_otp(db: Session, user: User) -> str:
    code = generate_otp()
    expires_at = utcnow() + timedelta(minutes=config.OTP_TTL_MINUTES)
    db.add(Otp(user_id=user.id, otp_code=code, expires_at=expires_at))
    db.commit()
    # no mail delivery; the code is only written to the server log
    logger.info(f"OTP for {user.email}: {code}")
    return code


def consume_otp(db: Session, user: User, code: str):
    """Check ``code`` against the user's latest OTP and delete it on success."""
    record = (
        db.query(Otp)
        .filter(Otp.user_id == user.id)
        .order_by(Otp.created_at.desc(), Otp.id.desc())
        .first()
    )
    if record is None:
        raise HTTPException(status_code=400, detail="OTP not found. Please request a new one.")
    if record.expires_at < utcnow():
        raise HTTPException(status_code=400, detail="OTP expired. Please request a new one.")
    if not secrets.compare_digest(record.otp_code.encode("utf-8"), code.encode("utf-8")):
        raise HTTPException(status_code=400, detail="Invalid OTP")
    db.delete(record)
    db.commit()


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    token = None
    if authorization:
        parts = authorization.split(" ")
        token = parts[1] if len(parts) > 1 else None
    if not token:
        raise HTTPException(status_code=401, detail="Access token required")

    record = db.query(Token).filter(Token.token == token).first()
    if record is None or record.user is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")
    if record.expires_at < utcnow():
        raise HTTPException(status_code=403, detail="Token expired")
    return record.user
