import logging
from sqlalchemy.orm import Session, joinedload

from ..errors import NotFound
from ..models import ReservationHistory, Room, RoomStatus

logger = logging.getLogger(__name__)


def last_history(db: Session, room_id: int) -> ReservationHistory | None:
    return (
        db.query(ReservationHistory)
        .filter(ReservationHistory.room_id == room_id)
        .order_by(ReservationHistory.check_out.desc(), ReservationHistory.id.desc())
        .first()
    )


def housekeeping_items(db: Session) -> list[dict]:
    """Rooms waiting for cleaning, with the guest who last stayed in each."""
    rooms = (
        db.query(Room)
        .options(joinedload(Room.villa))
        .filter(Room.status == RoomStatus.CHECKED_OUT.value)
        .order_by(Room.id.asc())
        .all()
    )
    items = []
    for r in rooms:
        last = last_history(db, r.id)
        items.append({
            "room_id": r.id,
            "room_name": r.name,
            "villa_name": r.villa.name if r.villa else "",
            "status": r.status,
            "last_guest": last.guest_name if last else None,
            "last_check_out": last.check_out if last else None,
        })
    return items


def mark_clean(db: Session, room_id: int) -> Room:
    room = db.get(Room, room_id)
    if not room:
        raise NotFound("Room not found")
    previous = room.status
    room.status = RoomStatus.AVAILABLE.value
    db.commit()
    db.refresh(room)
    logger.info("Room %s marked clean (was %s)", room.id, previous)
    return room
