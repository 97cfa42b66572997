from datetime import date, datetime, timedelta
from typing import Dict, List, Literal, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from ..db import get_db, utcnow
from ..errors import BadRequest
from ..models import Room
from ..schemas import CalendarOut, NotificationOut, OccupancyOut, OperationsOut, ReservationOut, RoomOut
from ..security import require_user
from ..services import views
from ..services.housekeeping import housekeeping_items
from ..services.reservations import list_reservations

router = APIRouter(prefix="/api/views", tags=["views"], dependencies=[Depends(require_user)])


def _rooms(db: Session) -> list[Room]:
    return db.query(Room).options(joinedload(Room.villa)).order_by(Room.villa_id.asc(), Room.name.asc()).all()


def _today(today: Optional[date]) -> date:
    return today or utcnow().date()


@router.get("/occupancy", response_model=OccupancyOut)
def occupancy(db: Session = Depends(get_db)):
    return views.occupancy_breakdown(_rooms(db))


@router.get("/groups")
def groups(kind: Literal["rooms", "reservations"] = "reservations", db: Session = Depends(get_db)) -> Dict[str, List[dict]]:
    if kind == "rooms":
        grouped, schema = views.group_rooms(_rooms(db)), RoomOut
    else:
        grouped, schema = views.group_reservations(list_reservations(db)), ReservationOut
    return {
        status: [schema.model_validate(item).model_dump(by_alias=True, mode="json") for item in items]
        for status, items in grouped.items()
    }


@router.get("/calendar", response_model=CalendarOut)
def calendar(start: Optional[date] = None, span: int = views.DEFAULT_CALENDAR_SPAN, db: Session = Depends(get_db)):
    if span not in views.CALENDAR_SPANS:
        raise BadRequest(f"span must be one of {', '.join(str(s) for s in views.CALENDAR_SPANS)}")
    today = _today(None)
    start = start or today
    window_start = datetime.combine(start, datetime.min.time())
    window_end = window_start + timedelta(days=span)
    reservations = list_reservations(db, window_start, window_end)
    return views.calendar_view(_rooms(db), reservations, start, span, today=today)


@router.get("/notifications", response_model=List[NotificationOut])
def notifications(today: Optional[date] = None, db: Session = Depends(get_db)):
    day = _today(today)
    # Arrivals and departures for today and tomorrow only
    window_start = datetime.combine(day, datetime.min.time())
    reservations = list_reservations(db, window_start, window_start + timedelta(days=2))
    return views.notifications(housekeeping_items(db), reservations, day)


@router.get("/operations", response_model=OperationsOut)
def operations(today: Optional[date] = None, db: Session = Depends(get_db)):
    day = _today(today)
    window_start = datetime.combine(day, datetime.min.time())
    reservations = list_reservations(db, window_start, window_start + timedelta(days=3))
    return views.operations_summary(reservations, housekeeping_items(db), day)
