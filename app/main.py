from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.errors import RateLimitExceeded
import logging
import os
from dotenv import load_dotenv

# Load .env variables
load_dotenv()

# Configure base logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("app")

from app import models  # noqa: F401
from app.routers import (
    auth,
    users,
    bookings,
    court_blocks,
    tournaments,
    tournament_participants,
    invite_codes,
    notifications,
    email,
    announcements,
    news,
    video_lessons,
    activity_logs,
)
from app.database import SessionLocal
from app.init_db import create_initial_admin
from app.services.email import email_service
from app.utils.rate_limiter import limiter, rate_limit_exceeded_handler
import uvicorn

app = FastAPI(
    title="GST Tennis Academy API",
    description="API for bookings, tournaments, invite codes, notifications and content of the academy",
    version="1.0.0",
)

# Setup rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _error_emails_enabled() -> bool:
    return os.getenv("ENABLE_ERROR_EMAILS", "false").lower() in {"1", "true", "yes"}


@app.on_event("startup")
def on_startup():
    if _error_emails_enabled() and not email_service.is_configured():
        logger.warning("Email error reporting enabled but SMTP settings are missing")

    db = SessionLocal()
    try:
        create_initial_admin(db)
    finally:
        db.close()


# Configure CORS
cors_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["bookings"])
app.include_router(court_blocks.router, prefix="/api/court-blocks", tags=["court-blocks"])
app.include_router(tournaments.router, prefix="/api/tournaments", tags=["tournaments"])
app.include_router(
    tournament_participants.router,
    prefix="/api/tournament_participants",
    tags=["tournament_participants"],
)
app.include_router(invite_codes.router, prefix="/api/invite-codes", tags=["invite-codes"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
app.include_router(email.router, prefix="/api", tags=["email"])
app.include_router(announcements.router, prefix="/api/announcements", tags=["announcements"])
app.include_router(news.router, prefix="/api/news", tags=["news"])
app.include_router(video_lessons.router, prefix="/api/video-lessons", tags=["video-lessons"])
app.include_router(activity_logs.router, prefix="/api/activity-logs", tags=["activity-logs"])


@app.get("/")
def read_root():
    return {"message": "Welcome to GST Tennis Academy API"}


# Error payloads are always {"error": "..."}; dict details are returned as-is
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Dati non validi"
    if errors:
        first = errors[0]
        message = str(first.get("msg", message)).removeprefix("Value error, ")
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in errors
    ]
    return JSONResponse(status_code=400, content={"error": message, "details": details})


# Global unhandled exception handler -> logs ERROR and sends email
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    try:
        logger.exception(
            "Unhandled error | path=%s | method=%s | client=%s",
            request.url.path,
            request.method,
            request.client.host if request.client else "unknown",
        )

        if _error_emails_enabled():
            email_service.send_error_email(
                {
                    "path": request.url.path,
                    "method": request.method,
                    "client": request.client.host if request.client else "unknown",
                    "user": getattr(request.state, "user_email", "Anonymous"),
                    "exception": exc,
                }
            )
    finally:
        return JSONResponse(status_code=500, content={"error": "Errore del server"})


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
