import logging
import smtplib
from email.mime.text import MIMEText

from fastapi import APIRouter, HTTPException

from .. import config
from ..core import ContactIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["contact"])


def send_contact_email(name: str, email: str, message: str):
    if not config.SMTP_HOST:
        logger.info(f"SMTP not configured, contact message from {name} <{email}>: {message}")
        return

    m = MIMEText(f"{message}\n\nFrom: {name} ({email})")
    m["Subject"] = f"Contact Form Submission from {name}"
    m["From"] = config.SMTP_USER or email
    m["Reply-To"] = f"{name} <{email}>"
    m["To"] = config.SUPPORT_EMAIL
    with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=10) as s:
        s.starttls()
        if config.SMTP_USER and config.SMTP_PASS:
            s.login(config.SMTP_USER, config.SMTP_PASS)
        s.send_message(m)


@router.post("")
def contact(payload: ContactIn):
    if not payload.name or not payload.email or not payload.message:
        raise HTTPException(status_code=400, detail="Please provide name, email, and message.")
    try:
        send_contact_email(payload.name, payload.email, payload.message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Error sending email: {e}")
        raise HTTPException(status_code=500, detail="Failed to send message.")
    return {"message": "Message sent successfully."}
