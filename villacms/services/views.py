"""
Read-only views derived from already-loaded rooms, reservations and
housekeeping items: occupancy breakdown, status groups, calendar bars,
notifications and the operations summary.

Nothing here touches the database; callers pass the lists in, so each
function can be exercised with plain model instances.
"""

from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from ..models import Reservation, ReservationStatus, Room, RoomStatus

ROOM_STATUS_LABELS = {
    RoomStatus.AVAILABLE.value: "Available",
    RoomStatus.RESERVED.value: "Reserved",
    RoomStatus.CHECKED_IN.value: "Checked in",
    RoomStatus.CHECKED_OUT.value: "Checked out",
    RoomStatus.MAINTENANCE.value: "Maintenance",
}

CALENDAR_SPANS = (7, 14, 31)
DEFAULT_CALENDAR_SPAN = 31


def _day(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value


def day_diff(a: datetime | date, b: datetime | date) -> int:
    """Whole calendar days from ``a`` to ``b``, ignoring the time of day."""
    return (_day(b) - _day(a)).days


def _live(reservations: Iterable[Reservation]) -> list[Reservation]:
    return [r for r in reservations if r.status != ReservationStatus.CANCELLED.value]


def occupancy_breakdown(rooms: Sequence[Room]) -> dict:
    counts: "OrderedDict[str, int]" = OrderedDict()
    for r in rooms:
        s = r.status or RoomStatus.AVAILABLE.value
        counts[s] = counts.get(s, 0) + 1
    items = [
        {"status": status, "name": ROOM_STATUS_LABELS.get(status, status), "value": value}
        for status, value in counts.items()
        if value > 0
    ]
    return {"total": len(rooms), "items": items}


def group_by_status(items: Iterable, default: str) -> dict[str, list]:
    groups: dict[str, list] = {}
    for item in items:
        groups.setdefault(item.status or default, []).append(item)
    return groups


def group_reservations(reservations: Iterable[Reservation]) -> dict[str, list[Reservation]]:
    return group_by_status(reservations, ReservationStatus.BOOKED.value)


def group_rooms(rooms: Iterable[Room]) -> dict[str, list[Room]]:
    return group_by_status(rooms, RoomStatus.AVAILABLE.value)


def calendar_bar(reservation: Reservation, start: date) -> dict:
    ci = _day(reservation.check_in)
    co = _day(reservation.check_out)
    return {
        "reservation_id": reservation.id,
        "room_id": reservation.room_id,
        "guest_name": reservation.guest_name,
        "status": reservation.status,
        "offset": max(0, day_diff(start, ci)),
        "width": max(1, day_diff(ci, co)),
    }


def calendar_view(rooms: Sequence[Room], reservations: Iterable[Reservation], start: date, span: int = DEFAULT_CALENDAR_SPAN, today: date | None = None) -> dict:
    """
    Day columns for ``[start, start + span)`` and one row of bars per room.
    Stays that do not touch the window are left out.
    """
    today = today or date.today()
    end = start + timedelta(days=span)
    days = [
        {"day": start + timedelta(days=i), "is_today": start + timedelta(days=i) == today}
        for i in range(span)
    ]
    bars_by_room: dict[int, list[dict]] = {}
    for r in _live(reservations):
        ci, co = _day(r.check_in), _day(r.check_out)
        if ci >= end or co < start:
            continue
        bars_by_room.setdefault(r.room_id, []).append(calendar_bar(r, start))
    rows = [
        {
            "room_id": room.id,
            "room_name": room.name,
            "villa_name": room.villa.name if room.villa else "",
            "bars": sorted(bars_by_room.get(room.id, []), key=lambda b: (b["offset"], b["reservation_id"])),
        }
        for room in rooms
    ]
    return {"start": start, "span": span, "days": days, "rows": rows}


def _room_label(r: Reservation) -> str | None:
    if not r.room:
        return None
    villa = r.room.villa.name if r.room.villa else ""
    return f"{villa}, {r.room.name}"


def _reservation_notifications(reservations: Sequence[Reservation], kind: str, title: str, field: str, day: date, fallback: str) -> list[dict]:
    out = []
    for r in reservations:
        when = getattr(r, field)
        if _day(when) != day:
            continue
        out.append({
            "id": f"{kind.replace('_', '-')}-{r.id}",
            "type": kind,
            "title": f"{title}: {r.guest_name}",
            "description": _room_label(r) or fallback,
            "posted_at": when,
            "is_unread": True,
        })
    return out


def notifications(housekeeping: Sequence[dict], reservations: Iterable[Reservation], today: date) -> list[dict]:
    """Rooms to clean first, then today's arrivals, today's departures and tomorrow's arrivals."""
    live = _live(reservations)
    cleaning = [
        {
            "id": f"clean-{item['room_id']}",
            "type": "cleaning",
            "title": f"Room needs cleaning: {item['villa_name']}, {item['room_name']}",
            "description": (
                f"Last guest: {item['last_guest']}" if item.get("last_guest")
                else "This room was just checked out and needs cleaning."
            ),
            "posted_at": item.get("last_check_out"),
            "is_unread": True,
        }
        for item in housekeeping
    ]
    tomorrow = today + timedelta(days=1)
    return (
        cleaning
        + _reservation_notifications(live, "checkin_today", "Check-in today", "check_in", today, "Reservation without a specific room")
        + _reservation_notifications(live, "checkout_today", "Check-out today", "check_out", today, "Reservation ends today")
        + _reservation_notifications(live, "checkin_tomorrow", "Check-in tomorrow", "check_in", tomorrow, "Reservation without a specific room")
    )


def operations_summary(reservations: Iterable[Reservation], housekeeping: Sequence[dict], today: date) -> dict:
    tomorrow = today + timedelta(days=1)
    stats = {"today_check_in": 0, "today_check_out": 0, "tomorrow_check_in": 0}
    for r in _live(reservations):
        ci, co = _day(r.check_in), _day(r.check_out)
        if ci == today:
            stats["today_check_in"] += 1
        if co == today:
            stats["today_check_out"] += 1
        if ci == tomorrow:
            stats["tomorrow_check_in"] += 1
    stats["needs_cleaning"] = len(housekeeping)
    return stats
