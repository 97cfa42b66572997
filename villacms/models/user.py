from datetime import datetime
from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from ..db import Base, utcnow
from enum import Enum

class UserRole(str, Enum):
    ADMIN = "admin"
    OWNER = "owner"

# Staff roles are scoped per desk/team, e.g. frontdesk_villa1, housekeeper_am
STAFF_ROLE_PREFIXES = ("frontdesk_", "housekeeper_")

def is_valid_role(role: str) -> bool:
    if role in (UserRole.ADMIN.value, UserRole.OWNER.value):
        return True
    return any(role.startswith(p) and len(role) > len(p) for p in STAFF_ROLE_PREFIXES)

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(150), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), default=UserRole.OWNER.value, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
