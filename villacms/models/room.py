from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

class RoomStatus(str, PyEnum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    MAINTENANCE = "maintenance"

class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    villa_id: Mapped[int] = mapped_column(ForeignKey("villas.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    # Cached occupancy/cleaning state, written by reservation transitions
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=RoomStatus.AVAILABLE.value)

    villa: Mapped["Villa"] = relationship(back_populates="rooms")
    reservations: Mapped[list["Reservation"]] = relationship(back_populates="room", cascade="all, delete-orphan")
    histories: Mapped[list["ReservationHistory"]] = relationship(
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="ReservationHistory.check_out.desc()",
    )
