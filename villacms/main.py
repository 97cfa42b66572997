import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .db import SessionLocal, ensure_schema
from .errors import error_body
from .limiter import limiter
from .models import User, UserRole
from .routers import auth, villas, rooms, reservations, housekeeping, dashboard, users, views
from .security import hash_password

# --- Logging configuration ---
_level = logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level (useful under Docker Compose)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("villacms.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, getattr(settings, "DEBUG", False))

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: villas, rooms, reservations and housekeeping.\n\n"
        "Session-cookie based auth; user management is admin only."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.on_event("startup")
def startup_event():
    """Creates missing tables and makes sure an admin account exists."""
    logger.info("Running startup tasks...")
    ensure_schema()

    def _ensure_default_admin():
        db = SessionLocal()
        try:
            if db.query(User).filter(User.role == UserRole.ADMIN.value).first():
                return
            username = settings.ADMIN_USERNAME
            user = db.query(User).filter(User.username == username).first()
            if user:
                user.role = UserRole.ADMIN.value
            else:
                user = User(username=username, hashed_password=hash_password(settings.ADMIN_PASSWORD), role=UserRole.ADMIN.value)
                db.add(user)
            db.commit()
            logger.info("Default admin user %r ensured.", username)
        finally:
            db.close()

    _ensure_default_admin()
    logger.info("Startup tasks complete.")


# --- Error rendering: every failure leaves as {"error": ...} ---

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(error_body(exc), status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse({"error": "; ".join(parts) or "Invalid request"}, status_code=422)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Server error"}, status_code=500)


# Add the limiter to the app state
app.state.limiter = limiter
# Add the exception handler for rate limit exceeded errors
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(auth.router)
app.include_router(villas.router)
app.include_router(rooms.router)
app.include_router(reservations.router)
app.include_router(housekeeping.router)
app.include_router(dashboard.router)
app.include_router(views.router)
app.include_router(users.router)


@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}
