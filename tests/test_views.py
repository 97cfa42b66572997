from datetime import date, datetime

from villacms.models import Reservation, Room, Villa
from villacms.services import views

from test_reservations import book


def _room(room_id, name="Garden Room", status="available", villa="Elysian"):
    return Room(id=room_id, villa_id=1, name=name, capacity=2, status=status, villa=Villa(id=1, name=villa))


def _res(res_id, room, check_in, check_out, status="booked", guest=None):
    return Reservation(
        id=res_id,
        room_id=room.id,
        room=room,
        guest_name=guest or f"Guest {res_id}",
        check_in=check_in,
        check_out=check_out,
        status=status,
    )


def test_day_diff_ignores_time_of_day():
    assert views.day_diff(datetime(2025, 1, 1, 23, 0), datetime(2025, 1, 2, 1, 0)) == 1
    assert views.day_diff(date(2025, 1, 5), date(2025, 1, 1)) == -4


def test_occupancy_breakdown_skips_empty_statuses():
    rooms = [_room(1, status="available"), _room(2, status="checked_in"), _room(3, status="checked_in")]
    out = views.occupancy_breakdown(rooms)
    assert out["total"] == 3
    assert out["items"] == [
        {"status": "available", "name": "Available", "value": 1},
        {"status": "checked_in", "name": "Checked in", "value": 2},
    ]


def test_group_reservations_by_status():
    room = _room(1)
    rs = [
        _res(1, room, datetime(2025, 1, 1), datetime(2025, 1, 2)),
        _res(2, room, datetime(2025, 1, 3), datetime(2025, 1, 4), status="checked_in"),
        _res(3, room, datetime(2025, 1, 5), datetime(2025, 1, 6)),
    ]
    groups = views.group_reservations(rs)
    assert [r.id for r in groups["booked"]] == [1, 3]
    assert [r.id for r in groups["checked_in"]] == [2]


def test_calendar_bar_clamps_offset_and_width():
    room = _room(1)
    start = date(2025, 3, 1)
    early = _res(1, room, datetime(2025, 2, 27, 14), datetime(2025, 3, 2, 11))
    same_day = _res(2, room, datetime(2025, 3, 4, 9), datetime(2025, 3, 4, 18))
    assert views.calendar_bar(early, start)["offset"] == 0
    assert views.calendar_bar(early, start)["width"] == 3
    assert views.calendar_bar(same_day, start)["offset"] == 3
    assert views.calendar_bar(same_day, start)["width"] == 1


def test_calendar_view_window_and_rows():
    garden, sunset = _room(1), _room(2, name="Sunset Room")
    start = date(2025, 3, 1)
    rs = [
        _res(1, garden, datetime(2025, 3, 2), datetime(2025, 3, 4)),
        _res(2, garden, datetime(2025, 3, 8), datetime(2025, 3, 10)),  # starts on the window end
        _res(3, garden, datetime(2025, 2, 20), datetime(2025, 2, 28)),  # ends before the window
        _res(4, sunset, datetime(2025, 3, 3), datetime(2025, 3, 5), status="cancelled"),
        _res(5, sunset, datetime(2025, 2, 25), datetime(2025, 3, 1)),  # ends on the first day
    ]
    out = views.calendar_view([garden, sunset], rs, start, span=7, today=date(2025, 3, 3))

    assert out["span"] == 7
    assert [d["day"] for d in out["days"]][0] == date(2025, 3, 1)
    assert len(out["days"]) == 7
    assert [d["is_today"] for d in out["days"]].index(True) == 2

    garden_row, sunset_row = out["rows"]
    assert garden_row["villa_name"] == "Elysian"
    assert [b["reservation_id"] for b in garden_row["bars"]] == [1]
    assert garden_row["bars"][0]["offset"] == 1
    assert garden_row["bars"][0]["width"] == 2
    assert [b["reservation_id"] for b in sunset_row["bars"]] == [5]


def test_notifications_order_and_ids():
    room = _room(7, name="Pool Suite")
    today = date(2025, 4, 10)
    housekeeping = [{
        "room_id": 3, "room_name": "Garden Room", "villa_name": "Elysian", "status": "checked_out",
        "last_guest": "Ken", "last_check_out": datetime(2025, 4, 10, 11),
    }]
    rs = [
        _res(1, room, datetime(2025, 4, 10, 14), datetime(2025, 4, 12), guest="Arriving"),
        _res(2, room, datetime(2025, 4, 8), datetime(2025, 4, 10, 11), status="checked_in", guest="Leaving"),
        _res(3, room, datetime(2025, 4, 11, 14), datetime(2025, 4, 13), guest="Tomorrow"),
        _res(4, room, datetime(2025, 4, 10, 14), datetime(2025, 4, 11), status="cancelled", guest="Ghost"),
    ]
    out = views.notifications(housekeeping, rs, today)
    assert [n["id"] for n in out] == ["clean-3", "checkin-today-1", "checkout-today-2", "checkin-tomorrow-3"]
    assert out[0]["title"] == "Room needs cleaning: Elysian, Garden Room"
    assert out[0]["description"] == "Last guest: Ken"
    assert out[1]["title"] == "Check-in today: Arriving"
    assert out[1]["description"] == "Elysian, Pool Suite"
    assert all(n["is_unread"] for n in out)


def test_operations_summary_counts():
    room = _room(1)
    today = date(2025, 4, 10)
    rs = [
        _res(1, room, datetime(2025, 4, 10, 14), datetime(2025, 4, 12)),
        _res(2, room, datetime(2025, 4, 8), datetime(2025, 4, 10, 11)),
        _res(3, room, datetime(2025, 4, 11), datetime(2025, 4, 13)),
        _res(4, room, datetime(2025, 4, 11), datetime(2025, 4, 13), status="cancelled"),
    ]
    assert views.operations_summary(rs, [{}, {}], today) == {
        "today_check_in": 1,
        "today_check_out": 1,
        "tomorrow_check_in": 1,
        "needs_cleaning": 2,
    }


def test_views_endpoints(staff_client, make_room):
    garden = make_room("Garden Room")
    make_room("Sunset Room", status="maintenance")
    book(staff_client, garden.id, "2025-04-10T14:00:00", "2025-04-12T11:00:00", guest="Arriving")

    occ = staff_client.get("/api/views/occupancy").json()
    assert occ["total"] == 2
    assert {i["status"]: i["value"] for i in occ["items"]} == {"reserved": 1, "maintenance": 1}

    groups = staff_client.get("/api/views/groups", params={"kind": "rooms"}).json()
    assert [r["name"] for r in groups["maintenance"]] == ["Sunset Room"]
    groups = staff_client.get("/api/views/groups").json()
    assert groups["booked"][0]["guestName"] == "Arriving"

    cal = staff_client.get("/api/views/calendar", params={"start": "2025-04-08", "span": 7}).json()
    assert len(cal["days"]) == 7
    garden_row = next(row for row in cal["rows"] if row["roomId"] == garden.id)
    assert garden_row["bars"][0]["offset"] == 2
    assert garden_row["bars"][0]["width"] == 2

    notes = staff_client.get("/api/views/notifications", params={"today": "2025-04-09"}).json()
    assert [n["id"] for n in notes] == [f"checkin-tomorrow-{garden_row['bars'][0]['reservationId']}"]

    ops = staff_client.get("/api/views/operations", params={"today": "2025-04-10"}).json()
    assert ops == {"todayCheckIn": 1, "todayCheckOut": 0, "tomorrowCheckIn": 0, "needsCleaning": 0}


def test_calendar_rejects_unknown_span(staff_client):
    resp = staff_client.get("/api/views/calendar", params={"span": 10})
    assert resp.status_code == 400
    assert resp.json() == {"error": "span must be one of 7, 14, 31"}


def test_notifications_only_look_at_today_and_tomorrow(staff_client, make_room):
    garden = make_room("Garden Room")
    book(staff_client, garden.id, "2025-01-02", "2025-01-04", guest="Long Gone")
    today_stay = book(staff_client, garden.id, "2025-04-10T14:00:00", "2025-04-11T11:00:00", guest="Tonight").json()
    book(staff_client, garden.id, "2025-04-20", "2025-04-22", guest="Next Week")

    notes = staff_client.get("/api/views/notifications", params={"today": "2025-04-10"}).json()
    assert [n["id"] for n in notes] == [f"checkin-today-{today_stay['id']}"]
    assert notes[0]["title"] == "Check-in today: Tonight"
