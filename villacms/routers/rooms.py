import logging
from typing import List
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from ..errors import NotFound, ValidationFailed
from ..models import Room, Villa
from ..schemas import RoomCreateIn, RoomOut, RoomUpdateIn
from ..security import require_user
from ..services.housekeeping import mark_clean

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["rooms"], dependencies=[Depends(require_user)])


def _get_room(db: Session, room_id: int) -> Room:
    room = db.query(Room).options(joinedload(Room.villa)).filter(Room.id == room_id).first()
    if not room:
        raise NotFound("Room not found")
    return room


def _require_villa(db: Session, villa_id: int):
    if not db.get(Villa, villa_id):
        raise NotFound("Villa not found")


@router.get("", response_model=List[RoomOut])
def list_rooms(db: Session = Depends(get_db)):
    return db.query(Room).options(joinedload(Room.villa)).order_by(Room.villa_id.asc(), Room.name.asc()).all()


@router.post("", response_model=RoomOut, status_code=201)
def create_room(payload: RoomCreateIn, db: Session = Depends(get_db)):
    _require_villa(db, payload.villa_id)
    name = payload.name.strip()
    if not name:
        raise ValidationFailed("name is required")
    if payload.capacity < 1:
        raise ValidationFailed("capacity must be at least 1")
    room = Room(villa_id=payload.villa_id, name=name, capacity=payload.capacity, status=payload.status.value)
    db.add(room)
    db.commit()
    logger.info("Room %s created in villa %s", room.id, room.villa_id)
    return _get_room(db, room.id)


@router.get("/{room_id}", response_model=RoomOut)
def get_room(room_id: int, db: Session = Depends(get_db)):
    return _get_room(db, room_id)


@router.put("/{room_id}", response_model=RoomOut)
def update_room(room_id: int, payload: RoomUpdateIn, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    if payload.villa_id is not None:
        _require_villa(db, payload.villa_id)
        room.villa_id = payload.villa_id
    if payload.name is not None:
        if not payload.name.strip():
            raise ValidationFailed("name is required")
        room.name = payload.name.strip()
    if payload.capacity is not None:
        if payload.capacity < 1:
            raise ValidationFailed("capacity must be at least 1")
        room.capacity = payload.capacity
    if payload.status is not None:
        room.status = payload.status.value
    db.commit()
    return _get_room(db, room_id)


@router.delete("/{room_id}", status_code=204)
def delete_room(room_id: int, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    db.delete(room)
    db.commit()
    logger.info("Room %s deleted", room_id)
    return Response(status_code=204)


@router.put("/{room_id}/clean", response_model=RoomOut)
def clean_room(room_id: int, db: Session = Depends(get_db)):
    mark_clean(db, room_id)
    return _get_room(db, room_id)
