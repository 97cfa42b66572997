import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import NotAuthenticated
from ..limiter import limiter
from ..models import User
from ..schemas import LoginIn, SessionUserOut
from ..security import verify_password, set_session, clear_session, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


def _user_body(user: User) -> dict:
    return SessionUserOut.model_validate(user).model_dump(by_alias=True)


@router.post("/login")
@limiter.limit(settings.RATE_LIMIT_AUTH_API)
def login(request: Request, payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == payload.username).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        logger.warning("Failed login for username=%r", payload.username)
        raise NotAuthenticated("Invalid username or password")
    set_session(response, user)
    logger.info("User %s logged in", user.username)
    return {"ok": True, "user": _user_body(user)}


@router.get("/auth/me")
def me(user: User = Depends(require_user)):
    return {"user": _user_body(user)}


@router.post("/logout")
def logout(response: Response):
    clear_session(response)
    return {"ok": True}
