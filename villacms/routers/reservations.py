from datetime import datetime
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import BadRequest
from ..schemas import ReservationCreateIn, ReservationOut
from ..security import require_user
from ..services import reporting
from ..services import reservations as booking

router = APIRouter(prefix="/api/reservations", tags=["reservations"], dependencies=[Depends(require_user)])


def parse_range(start: Optional[str], end: Optional[str]) -> tuple[Optional[datetime], Optional[datetime]]:
    s = booking.parse_datetime(start) if start else None
    e = booking.parse_datetime(end) if end else None
    if (start and s is None) or (end and e is None):
        raise BadRequest("Invalid start or end datetime")
    return s, e


@router.get("", response_model=List[ReservationOut])
def list_reservations(start: Optional[str] = None, end: Optional[str] = None, db: Session = Depends(get_db)):
    s, e = parse_range(start, end)
    return booking.list_reservations(db, s, e)


@router.post("", response_model=ReservationOut, status_code=201)
def create_reservation(payload: ReservationCreateIn, db: Session = Depends(get_db)):
    return booking.create_reservation(db, payload.model_dump())


@router.get("/export")
def export_reservations(format: Literal["csv", "pdf"] = "csv", start: Optional[str] = None, end: Optional[str] = None, db: Session = Depends(get_db)):
    s, e = parse_range(start, end)
    rows = booking.list_reservations(db, s, e)
    if format == "pdf":
        period = None
        if s or e:
            period = f"Period: {s.date().isoformat() if s else '...'} to {e.date().isoformat() if e else '...'}"
        body = reporting.generate_pdf_report(rows, f"{settings.APP_NAME} reservations", period)
        return Response(
            content=body,
            media_type="application/pdf",
            headers={"Content-Disposition": 'attachment; filename="reservations.pdf"'},
        )
    return Response(
        content=reporting.generate_csv_report(rows),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="reservations.csv"'},
    )


@router.get("/{reservation_id}", response_model=ReservationOut)
def get_reservation(reservation_id: int, db: Session = Depends(get_db)):
    return booking.get_reservation(db, reservation_id)


@router.put("/{reservation_id}/checkin", response_model=ReservationOut)
def checkin_reservation(reservation_id: int, db: Session = Depends(get_db)):
    return booking.check_in(db, reservation_id)


@router.put("/{reservation_id}/checkout", response_model=ReservationOut)
def checkout_reservation(reservation_id: int, db: Session = Depends(get_db)):
    return booking.check_out(db, reservation_id)


@router.put("/{reservation_id}/cancel", response_model=ReservationOut)
def cancel_reservation(reservation_id: int, db: Session = Depends(get_db)):
    return booking.cancel(db, reservation_id)
