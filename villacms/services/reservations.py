"""
Reservation lifecycle: booking with the per-room overlap check, and the
check-in / check-out / cancel transitions that keep ``Room.status`` in step.

Every public function here commits exactly once, so a reservation and the
room it touches are always written together. Transitions take the room
lock before a conditional status update, so they queue behind bookings and
each other.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import and_, or_, not_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..errors import Conflict, NotFound, ValidationFailed
from ..models import Reservation, ReservationHistory, ReservationStatus, Room, RoomStatus

logger = logging.getLogger(__name__)

GUEST_FIELDS = (
    "nationality",
    "passport_number",
    "num_guests",
    "source",
    "phone",
    "email",
    "notes",
    "payment_method",
)

CONFLICT_MESSAGE = "Room is not available for the selected dates"

# Name of the PostgreSQL exclusion constraint created by the migrations
OVERLAP_CONSTRAINT = "reservation_no_overlap"

# A new future booking must not hide an occupied, dirty or blocked room
_STICKY_ROOM_STATUSES = {
    RoomStatus.CHECKED_IN.value,
    RoomStatus.CHECKED_OUT.value,
    RoomStatus.MAINTENANCE.value,
}


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime into naive UTC.
    Returns None for anything that does not parse.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def overlap_clause(room_id: int, check_in: datetime, check_out: datetime):
    """Non-cancelled reservations of the room intersecting [check_in, check_out)."""
    return and_(
        Reservation.room_id == room_id,
        Reservation.status != ReservationStatus.CANCELLED.value,
        not_(or_(Reservation.check_out <= check_in, Reservation.check_in >= check_out)),
    )


def find_conflict(db: Session, room_id: int, check_in: datetime, check_out: datetime) -> Optional[Reservation]:
    return (
        db.query(Reservation)
        .filter(overlap_clause(room_id, check_in, check_out))
        .order_by(Reservation.check_in.asc())
        .first()
    )


def conflict_summary(r: Reservation) -> dict:
    return {
        "id": r.id,
        "guestName": r.guest_name,
        "checkIn": r.check_in.isoformat(),
        "checkOut": r.check_out.isoformat(),
        "status": r.status,
    }


def _lock_room(db: Session, room_id: int) -> bool:
    # A no-op write takes the room's row lock (PostgreSQL) or the database
    # write lock (SQLite) until commit, so concurrent bookings for the same
    # room run their overlap checks one after another.
    result = db.execute(
        update(Room)
        .where(Room.id == room_id)
        .values(status=Room.status)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


def _get_reservation(db: Session, reservation_id: int) -> Reservation:
    r = (
        db.query(Reservation)
        .options(joinedload(Reservation.room).joinedload(Room.villa))
        .filter(Reservation.id == reservation_id)
        .first()
    )
    if not r:
        raise NotFound("Reservation not found")
    return r


def create_reservation(db: Session, data: dict) -> Reservation:
    """
    Book a room.

    ``data`` uses the model's attribute names (room_id, guest_name, check_in,
    check_out, status and the optional guest fields). Raises
    ``ValidationFailed`` before touching the database, ``NotFound`` for an
    unknown room and ``Conflict`` when the stay overlaps another one.
    """
    room_id = data.get("room_id")
    guest_name = (data.get("guest_name") or "").strip()
    if not room_id or not guest_name or not data.get("check_in") or not data.get("check_out"):
        raise ValidationFailed("roomId, guestName, checkIn, checkOut are required")

    ci = parse_datetime(data["check_in"])
    co = parse_datetime(data["check_out"])
    if ci is None or co is None:
        raise ValidationFailed("Invalid checkIn or checkOut datetime")
    if ci >= co:
        raise ValidationFailed("checkIn must be before checkOut")

    try:
        status = ReservationStatus.parse(data.get("status"))
    except ValueError:
        raise ValidationFailed(f"Invalid reservation status: {data.get('status')}")
    if status not in (ReservationStatus.BOOKED, ReservationStatus.CHECKED_IN):
        raise ValidationFailed("New reservations must be booked or checked_in")

    try:
        if not _lock_room(db, room_id):
            raise NotFound("Room not found")

        conflict = find_conflict(db, room_id, ci, co)
        if conflict:
            logger.info(
                "Booking rejected: room=%s [%s, %s) overlaps reservation %s",
                room_id, ci, co, conflict.id,
            )
            raise Conflict(CONFLICT_MESSAGE, extra={"conflict": conflict_summary(conflict)})

        reservation = Reservation(
            room_id=room_id,
            guest_name=guest_name,
            check_in=ci,
            check_out=co,
            status=status.value,
            **{f: data.get(f) for f in GUEST_FIELDS},
        )
        db.add(reservation)

        room = db.get(Room, room_id)
        if status == ReservationStatus.CHECKED_IN:
            room.status = RoomStatus.CHECKED_IN.value
        elif room.status not in _STICKY_ROOM_STATUSES:
            room.status = RoomStatus.RESERVED.value

        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if OVERLAP_CONSTRAINT in str(exc.orig):
            raise Conflict(CONFLICT_MESSAGE)
        raise
    except Exception:
        db.rollback()
        raise

    logger.info("Reservation %s booked: room=%s guest=%r [%s, %s)", reservation.id, room_id, guest_name, ci, co)
    return _get_reservation(db, reservation.id)


def _claim(db: Session, r: Reservation, expected: ReservationStatus, new: ReservationStatus, action: str):
    """
    Move ``r`` from ``expected`` to ``new`` with a conditional UPDATE.
    A concurrent transition that got there first leaves zero rows matched.
    """
    result = db.execute(
        update(Reservation)
        .where(Reservation.id == r.id, Reservation.status == expected.value)
        .values(status=new.value)
    )
    if result.rowcount == 0:
        current = db.query(Reservation.status).filter(Reservation.id == r.id).scalar()
        raise Conflict(f"Cannot {action} a reservation that is {current}")


def check_in(db: Session, reservation_id: int) -> Reservation:
    r = _get_reservation(db, reservation_id)
    try:
        _lock_room(db, r.room_id)
        _claim(db, r, ReservationStatus.BOOKED, ReservationStatus.CHECKED_IN, "check in")
        occupant = (
            db.query(Reservation.id)
            .filter(
                Reservation.room_id == r.room_id,
                Reservation.id != r.id,
                Reservation.status == ReservationStatus.CHECKED_IN.value,
            )
            .first()
        )
        if occupant:
            raise Conflict(f"Room is still occupied by reservation {occupant.id}")
        r.room.status = RoomStatus.CHECKED_IN.value
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Reservation %s checked in (room %s)", r.id, r.room_id)
    return _get_reservation(db, reservation_id)


def check_out(db: Session, reservation_id: int) -> Reservation:
    r = _get_reservation(db, reservation_id)
    try:
        _lock_room(db, r.room_id)
        _claim(db, r, ReservationStatus.CHECKED_IN, ReservationStatus.CHECKED_OUT, "check out")
        # Left dirty on purpose: housekeeping lists rooms in this state
        r.room.status = RoomStatus.CHECKED_OUT.value
        db.add(
            ReservationHistory(
                reservation_id=r.id,
                room_id=r.room_id,
                guest_name=r.guest_name,
                check_in=r.check_in,
                check_out=r.check_out,
                status_at_checkout=ReservationStatus.CHECKED_OUT.value,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Reservation %s checked out (room %s)", r.id, r.room_id)
    return _get_reservation(db, reservation_id)


def cancel(db: Session, reservation_id: int) -> Reservation:
    r = _get_reservation(db, reservation_id)
    try:
        _lock_room(db, r.room_id)
        _claim(db, r, ReservationStatus.BOOKED, ReservationStatus.CANCELLED, "cancel")
        db.refresh(r.room)
        if r.room.status == RoomStatus.RESERVED.value:
            still_booked = (
                db.query(Reservation.id)
                .filter(
                    Reservation.room_id == r.room_id,
                    Reservation.id != r.id,
                    Reservation.status == ReservationStatus.BOOKED.value,
                )
                .first()
            )
            if not still_booked:
                r.room.status = RoomStatus.AVAILABLE.value
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Reservation %s cancelled (room %s)", r.id, r.room_id)
    return _get_reservation(db, reservation_id)


def get_reservation(db: Session, reservation_id: int) -> Reservation:
    return _get_reservation(db, reservation_id)


def list_reservations(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> list[Reservation]:
    """
    Reservations ordered by check-in. With a window, keeps stays touching it:
    ``check_in <= end`` and ``check_out >= start`` (both bounds inclusive).
    """
    q = db.query(Reservation).options(joinedload(Reservation.room).joinedload(Room.villa))
    if start:
        q = q.filter(Reservation.check_out >= start)
    if end:
        q = q.filter(Reservation.check_in <= end)
    return q.order_by(Reservation.check_in.asc(), Reservation.id.asc()).all()
