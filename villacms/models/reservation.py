from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING
from enum import Enum as PyEnum
from sqlalchemy import CheckConstraint, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base, utcnow

if TYPE_CHECKING:
    from .room import Room

class ReservationStatus(str, PyEnum):
    BOOKED = "booked"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str | None) -> "ReservationStatus":
        """Accepts the legacy ``reserved`` spelling as ``booked``."""
        if not value or value == "reserved":
            return cls.BOOKED
        return cls(value)

class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (CheckConstraint("check_in < check_out", name="ck_reservations_stay_order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id"), index=True)
    guest_name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Half-open stay interval [check_in, check_out), naive UTC
    check_in: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    check_out: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default=ReservationStatus.BOOKED.value, nullable=False)

    # Guest details captured at the front desk
    nationality: Mapped[str | None] = mapped_column(String(100))
    passport_number: Mapped[str | None] = mapped_column(String(100))
    num_guests: Mapped[int | None] = mapped_column(Integer)
    source: Mapped[str | None] = mapped_column(String(100))
    phone: Mapped[str | None] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)
    payment_method: Mapped[str | None] = mapped_column(String(50))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    room: Mapped[Room] = relationship(back_populates="reservations")
