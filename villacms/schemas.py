from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from .models import RoomStatus


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


# ==== Outbound ====

class VillaBrief(CamelModel):
    id: int
    name: str
    location: Optional[str] = None

class RoomBrief(CamelModel):
    id: int
    villa_id: int
    name: str
    capacity: int
    status: str

class RoomOut(RoomBrief):
    villa: Optional[VillaBrief] = None

class VillaOut(VillaBrief):
    rooms: List[RoomBrief] = []

class ReservationOut(CamelModel):
    id: int
    room_id: int
    guest_name: str
    check_in: datetime
    check_out: datetime
    status: str
    nationality: Optional[str] = None
    passport_number: Optional[str] = None
    num_guests: Optional[int] = None
    source: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
    room: Optional[RoomOut] = None

class UserOut(CamelModel):
    id: int
    username: str
    role: str
    created_at: Optional[datetime] = None

class SessionUserOut(CamelModel):
    id: int
    username: str
    role: str

class HousekeepingItemOut(CamelModel):
    room_id: int
    room_name: str
    villa_name: str
    status: str
    last_guest: Optional[str] = None
    last_check_out: Optional[datetime] = None

class DashboardOut(CamelModel):
    total_rooms: int
    occupied_rooms: int
    reservations_today: List[ReservationOut]


# ==== Inbound ====

class LoginIn(BaseModel):
    username: str
    password: str

class VillaIn(CamelModel):
    name: str
    location: Optional[str] = None

class RoomCreateIn(CamelModel):
    villa_id: int
    name: str
    capacity: int = 2
    status: RoomStatus = RoomStatus.AVAILABLE

class RoomUpdateIn(CamelModel):
    villa_id: Optional[int] = None
    name: Optional[str] = None
    capacity: Optional[int] = None
    status: Optional[RoomStatus] = None

class ReservationCreateIn(CamelModel):
    # Required fields are checked by the booking service so the error
    # message matches the one the front desk UI already displays.
    room_id: Optional[int] = None
    guest_name: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    status: Optional[str] = None
    nationality: Optional[str] = None
    passport_number: Optional[str] = None
    num_guests: Optional[int] = None
    source: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    payment_method: Optional[str] = None

class UserCreateIn(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None
    role: str = "owner"

class UserUpdateIn(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


# ==== Derived views ====

class OccupancyItemOut(CamelModel):
    status: str
    name: str
    value: int

class OccupancyOut(CamelModel):
    total: int
    items: List[OccupancyItemOut]

class CalendarDayOut(CamelModel):
    day: date
    is_today: bool

class CalendarBarOut(CamelModel):
    reservation_id: int
    room_id: int
    guest_name: str
    status: str
    offset: int
    width: int

class CalendarRowOut(CamelModel):
    room_id: int
    room_name: str
    villa_name: str
    bars: List[CalendarBarOut]

class CalendarOut(CamelModel):
    start: date
    span: int
    days: List[CalendarDayOut]
    rows: List[CalendarRowOut]

class NotificationOut(CamelModel):
    id: str
    type: str
    title: str
    description: str
    posted_at: Optional[datetime] = None
    is_unread: bool = True

class OperationsOut(CamelModel):
    today_check_in: int
    today_check_out: int
    tomorrow_check_in: int
    needs_cleaning: int
