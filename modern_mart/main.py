# modern_mart/main.py
import os
import time
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .database import create_tables
from .routes import (
    auth, cart, categories, chatbot, contact, login, orders,
    products, profile, recently_visited, reviews, users, wishlist,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup"""
    create_tables()
    logger.info(f"{config.APP_NAME} starting ({config.ENVIRONMENT}), database at {config.DATABASE_PATH}")
    yield


app = FastAPI(
    title=config.APP_NAME,
    version=config.APP_VERSION,
    description="Modern Mart storefront API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# ---------------------------
# Per-IP rate limiting (sliding window, in memory)
# ---------------------------
_ip_hits: Dict[str, List[float]] = {}
_last_sweep = 0.0


def _sweep_idle_ips(now: float):
    """Forget clients with no hits inside the current window."""
    global _last_sweep
    _last_sweep = now
    for ip in [ip for ip, hits in _ip_hits.items() if not hits or now - hits[-1] >= config.RATE_LIMIT_WINDOW_SEC]:
        del _ip_hits[ip]


@app.middleware("http")
async def throttle_middleware(request: Request, call_next):
    if config.RATE_LIMIT_MAX_REQUESTS > 0:
        ip = request.client.host if request.client else "unknown"
        now = time.time()
        if now - _last_sweep >= config.RATE_LIMIT_WINDOW_SEC:
            _sweep_idle_ips(now)

        # rejected requests are not recorded, so a list never outgrows the limit
        hits = [t for t in _ip_hits.get(ip, []) if now - t < config.RATE_LIMIT_WINDOW_SEC]
        if len(hits) >= config.RATE_LIMIT_MAX_REQUESTS:
            _ip_hits[ip] = hits
            logger.warning(f"Rate limit exceeded for {ip}")
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests from this IP, please try again later."},
            )
        hits.append(now)
        _ip_hits[ip] = hits
    return await call_next(request)


# ---------------------------
# Static assets (product images, avatars)
# ---------------------------
os.makedirs(config.IMAGES_DIR, exist_ok=True)
os.makedirs(config.AVATARS_DIR, exist_ok=True)

app.mount("/api/images", StaticFiles(directory=config.IMAGES_DIR), name="images")
app.mount("/database/images", StaticFiles(directory=config.IMAGES_DIR), name="database-images")
app.mount("/api/avatars", StaticFiles(directory=config.AVATARS_DIR), name="avatars")
app.mount("/avatars", StaticFiles(directory=config.AVATARS_DIR), name="legacy-avatars")

# ---------------------------
# Routers
# ---------------------------
for module in (
    auth, cart, categories, chatbot, contact, login, orders,
    products, profile, recently_visited, reviews, users, wishlist,
):
    app.include_router(module.router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Welcome to the Modern Mart API"


@app.get("/api/health")
async def health_check():
    return {
        "status": "OK",
        "message": "Modern Mart API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------------------------
# Error handlers
# ---------------------------
@app.exception_handler(StarletteHTTPException)
async def route_not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        logger.info(f"404 - Route not found: {request.url.path}")
        return JSONResponse(
            status_code=404,
            content={
                "detail": "Route not found",
                "message": f"The requested route {request.url.path} does not exist",
            },
        )
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    content = {"detail": "Internal Server Error"}
    if config.ENVIRONMENT == "development":
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
