from typing import Optional
from passlib.context import CryptContext
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from fastapi import Request, Response, Depends
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .errors import NotAuthenticated, Forbidden
from .models import User, UserRole

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="villacms-session")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def session_payload(user: User) -> dict:
    return {"userId": user.id, "username": user.username, "role": user.role}


def set_session(response: Response, user: User):
    token = serializer.dumps(session_payload(user))
    is_production = getattr(settings, "ENVIRONMENT", "development") == "production"
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=is_production,
        path="/",
        max_age=settings.session_max_age_seconds,
    )


def clear_session(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")


def read_session(request: Request) -> Optional[dict]:
    """Returns the verified cookie payload, or None when missing, tampered or expired."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    try:
        data = serializer.loads(token, max_age=settings.session_max_age_seconds)
    except (SignatureExpired, BadSignature):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("userId"), int):
        return None
    return data


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Dependency for routes that need a logged-in user.
    The user is reloaded so a deleted account or changed role takes effect
    before the cookie expires.
    """
    payload = read_session(request)
    if not payload:
        raise NotAuthenticated()

    user = db.get(User, payload["userId"])
    if not user:
        raise NotAuthenticated()

    return user


def require_admin(user: User = Depends(require_user)) -> User:
    if user.role != UserRole.ADMIN.value:
        raise Forbidden()
    return user
