import threading
from datetime import datetime

import pytest

from villacms.db import SessionLocal, utcnow
from villacms.errors import Conflict, NotFound, ValidationFailed
from villacms.models import Reservation, ReservationHistory, ReservationStatus, Room
from villacms.services import reservations as booking


def _data(room_id, check_in, check_out, guest="Guest", **extra):
    data = {"room_id": room_id, "guest_name": guest, "check_in": check_in, "check_out": check_out}
    data.update(extra)
    return data


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-05-01", datetime(2025, 5, 1)),
        ("2025-05-01T09:30:00", datetime(2025, 5, 1, 9, 30)),
        ("2025-05-01T09:30:00Z", datetime(2025, 5, 1, 9, 30)),
        ("2025-05-01T09:30:00+02:00", datetime(2025, 5, 1, 7, 30)),
        (" 2025-05-01 ", datetime(2025, 5, 1)),
        ("01/05/2025", None),
        ("", None),
    ],
)
def test_parse_datetime(raw, expected):
    assert booking.parse_datetime(raw) == expected


def test_status_parse_accepts_legacy_spelling():
    assert ReservationStatus.parse(None) is ReservationStatus.BOOKED
    assert ReservationStatus.parse("reserved") is ReservationStatus.BOOKED
    assert ReservationStatus.parse("checked_in") is ReservationStatus.CHECKED_IN
    with pytest.raises(ValueError):
        ReservationStatus.parse("gone")


def test_find_conflict_uses_half_open_intervals(db, room):
    booking.create_reservation(db, _data(room.id, "2025-05-10", "2025-05-12"))

    assert booking.find_conflict(db, room.id, datetime(2025, 5, 12), datetime(2025, 5, 14)) is None
    assert booking.find_conflict(db, room.id, datetime(2025, 5, 8), datetime(2025, 5, 10)) is None
    hit = booking.find_conflict(db, room.id, datetime(2025, 5, 11, 23), datetime(2025, 5, 13))
    assert hit is not None and hit.guest_name == "Guest"


def test_find_conflict_ignores_cancelled(db, room):
    r = booking.create_reservation(db, _data(room.id, "2025-05-10", "2025-05-12"))
    booking.cancel(db, r.id)
    assert booking.find_conflict(db, room.id, datetime(2025, 5, 10), datetime(2025, 5, 12)) is None


def test_conflict_carries_summary(db, room):
    first = booking.create_reservation(db, _data(room.id, "2025-05-10", "2025-05-12", guest="First"))
    with pytest.raises(Conflict) as excinfo:
        booking.create_reservation(db, _data(room.id, "2025-05-11", "2025-05-13"))
    assert excinfo.value.status_code == 409
    assert excinfo.value.extra["conflict"]["id"] == first.id
    assert excinfo.value.extra["conflict"]["guestName"] == "First"


def test_validation_happens_before_any_write(db, room):
    with pytest.raises(ValidationFailed):
        booking.create_reservation(db, _data(room.id, "2025-05-12", "2025-05-10"))
    with pytest.raises(ValidationFailed):
        booking.create_reservation(db, _data(room.id, "2025-05-10", "2025-05-12", guest="   "))
    with pytest.raises(ValidationFailed):
        booking.create_reservation(db, _data(room.id, "2025-05-10", "2025-05-12", status="cancelled"))
    assert db.query(Reservation).count() == 0


def test_unknown_room_leaves_session_usable(db, room):
    with pytest.raises(NotFound):
        booking.create_reservation(db, _data(room.id + 100, "2025-05-10", "2025-05-12"))
    r = booking.create_reservation(db, _data(room.id, "2025-05-10", "2025-05-12"))
    assert r.room.status == "reserved"


def test_list_reservations_bounds_are_inclusive(db, room):
    booking.create_reservation(db, _data(room.id, "2025-05-01", "2025-05-03", guest="Before"))
    booking.create_reservation(db, _data(room.id, "2025-05-03", "2025-05-05", guest="Inside"))
    booking.create_reservation(db, _data(room.id, "2025-05-07", "2025-05-09", guest="After"))

    rows = booking.list_reservations(db, datetime(2025, 5, 3), datetime(2025, 5, 7))
    assert [r.guest_name for r in rows] == ["Before", "Inside", "After"]

    rows = booking.list_reservations(db, datetime(2025, 5, 4), datetime(2025, 5, 6))
    assert [r.guest_name for r in rows] == ["Inside"]


def test_concurrent_overlapping_bookings_admit_exactly_one(room):
    attempts = 4
    barrier = threading.Barrier(attempts)
    outcomes = []
    guard = threading.Lock()

    def attempt(i):
        session = SessionLocal()
        try:
            barrier.wait()
            booking.create_reservation(
                session, _data(room.id, f"2025-06-0{1 + i % 2}", "2025-06-05", guest=f"Racer {i}")
            )
            result = "ok"
        except Conflict:
            result = "conflict"
        finally:
            session.close()
        with guard:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(attempts)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["conflict"] * (attempts - 1) + ["ok"]

    check = SessionLocal()
    try:
        assert check.query(Reservation).filter(Reservation.room_id == room.id).count() == 1
        assert check.get(Room, room.id).status == "reserved"
    finally:
        check.close()


def _race(calls):
    """Run each call in its own thread and session, released together."""
    barrier = threading.Barrier(len(calls))
    outcomes = []
    guard = threading.Lock()

    def run(call):
        session = SessionLocal()
        try:
            barrier.wait()
            call(session)
            result = "ok"
        except Conflict:
            result = "conflict"
        finally:
            session.close()
        with guard:
            outcomes.append(result)

    threads = [threading.Thread(target=run, args=(call,)) for call in calls]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return sorted(outcomes)


def test_concurrent_check_outs_write_one_history_row(db, room):
    r = booking.create_reservation(db, _data(room.id, "2025-06-01", "2025-06-05", status="checked_in"))
    rid = r.id

    outcomes = _race([lambda s: booking.check_out(s, rid)] * 2)

    assert outcomes == ["conflict", "ok"]
    db.expire_all()
    assert db.query(ReservationHistory).filter(ReservationHistory.reservation_id == rid).count() == 1
    assert db.get(Reservation, rid).status == "checked_out"


def test_concurrent_check_ins_leave_one_guest_in_the_room(db, room):
    a = booking.create_reservation(db, _data(room.id, "2025-06-01", "2025-06-03", guest="A"))
    b = booking.create_reservation(db, _data(room.id, "2025-06-03", "2025-06-05", guest="B"))
    a_id, b_id = a.id, b.id

    outcomes = _race([lambda s: booking.check_in(s, a_id), lambda s: booking.check_in(s, b_id)])

    assert outcomes == ["conflict", "ok"]
    db.expire_all()
    assert db.query(Reservation).filter(Reservation.status == "checked_in").count() == 1
    assert db.get(Room, room.id).status == "checked_in"


def test_stale_transition_is_rejected(db, room):
    r = booking.create_reservation(db, _data(room.id, "2025-06-01", "2025-06-05"))
    other = SessionLocal()
    try:
        booking.cancel(other, r.id)
    finally:
        other.close()

    # db still holds the reservation as booked
    assert r.status == "booked"
    with pytest.raises(Conflict) as excinfo:
        booking.check_in(db, r.id)
    assert excinfo.value.detail == "Cannot check in a reservation that is cancelled"


def test_created_at_is_naive_utc(db, room):
    before = utcnow()
    r = booking.create_reservation(db, _data(room.id, "2025-06-01", "2025-06-05"))
    assert r.created_at.tzinfo is None
    assert before <= r.created_at <= utcnow()
