"""
Runtime configuration, read from the environment (and a local .env file)
"""
import os
from dotenv import load_dotenv

load_dotenv()

APP_NAME = os.getenv("APP_NAME", "Modern Mart API")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", FRONTEND_URL).split(",") if o.strip()]

DATABASE_PATH = os.getenv("DATABASE_PATH", os.path.join("database", "modern_mart.db"))
IMAGES_DIR = os.getenv("IMAGES_DIR", os.path.join("database", "images"))
AVATARS_DIR = os.getenv("AVATARS_DIR", os.path.join("images", "avatars"))
MAX_AVATAR_BYTES = int(os.getenv("MAX_AVATAR_BYTES", str(5 * 1024 * 1024)))

# 0 disables the limiter
RATE_LIMIT_WINDOW_SEC = int(os.getenv("RATE_LIMIT_WINDOW_SEC", str(15 * 60)))
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "200"))

FREE_SHIPPING_THRESHOLD = float(os.getenv("FREE_SHIPPING_THRESHOLD", "1000"))
SHIPPING_FEE = float(os.getenv("SHIPPING_FEE", "50"))
FLAT_TAX = float(os.getenv("FLAT_TAX", "50"))

TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "24"))
OTP_TTL_MINUTES = int(os.getenv("OTP_TTL_MINUTES", "5"))

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_API_URL = os.getenv("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta")

SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@modernmart.com")
