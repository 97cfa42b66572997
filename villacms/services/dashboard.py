from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..db import utcnow
from ..models import Reservation, Room, RoomStatus


def dashboard_summary(db: Session, now: datetime | None = None) -> dict:
    """
    Headline numbers for the front desk.
    ``occupied_rooms`` reads the cached room status only; reservations play no part in it.
    """
    now = now or utcnow()
    total_rooms = db.query(func.count(Room.id)).scalar() or 0
    occupied_rooms = db.query(func.count(Room.id)).filter(Room.status == RoomStatus.CHECKED_IN.value).scalar() or 0
    reservations_today = (
        db.query(Reservation)
        .options(joinedload(Reservation.room).joinedload(Room.villa))
        .filter(Reservation.check_in <= now, Reservation.check_out > now)
        .order_by(Reservation.check_in.asc())
        .all()
    )
    return {
        "total_rooms": total_rooms,
        "occupied_rooms": occupied_rooms,
        "reservations_today": reservations_today,
    }
