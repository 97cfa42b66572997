import logging
from typing import List
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import BadRequest, Conflict, NotFound, ValidationFailed
from ..models import User, UserRole, is_valid_role
from ..schemas import UserCreateIn, UserOut, UserUpdateIn
from ..security import hash_password, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _check_role(role: str):
    if not is_valid_role(role):
        raise ValidationFailed(f"Invalid role: {role}")


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@router.get("", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return db.query(User).order_by(User.id.asc()).all()


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserCreateIn, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    username = (payload.username or "").strip()
    if not username or not payload.password:
        raise BadRequest("username and password are required")
    role = payload.role or UserRole.OWNER.value
    _check_role(role)
    if db.query(User).filter(User.username == username).first():
        raise Conflict("Username already exists")
    user = User(username=username, hashed_password=hash_password(payload.password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Admin %s created user %s (%s)", admin.username, user.username, user.role)
    return user


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdateIn, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    user = _get_user(db, user_id)
    if payload.username is not None:
        username = payload.username.strip()
        if not username:
            raise BadRequest("username cannot be empty")
        taken = db.query(User).filter(User.username == username, User.id != user.id).first()
        if taken:
            raise Conflict("Username already exists")
        user.username = username
    if payload.password:
        user.hashed_password = hash_password(payload.password)
    if payload.role is not None:
        _check_role(payload.role)
        user.role = payload.role
    db.commit()
    db.refresh(user)
    logger.info("Admin %s updated user %s", admin.username, user.id)
    return user


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    user = _get_user(db, user_id)
    if user.id == admin.id:
        raise Conflict("You cannot delete your own account")
    db.delete(user)
    db.commit()
    logger.info("Admin %s deleted user %s", admin.username, user_id)
    return Response(status_code=204)
