from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload

from ..db import get_db
from ..errors import ValidationFailed
from ..models import Villa
from ..schemas import VillaIn, VillaOut
from ..security import require_user

router = APIRouter(prefix="/api/villas", tags=["villas"], dependencies=[Depends(require_user)])


@router.get("", response_model=List[VillaOut])
def list_villas(db: Session = Depends(get_db)):
    return db.query(Villa).options(selectinload(Villa.rooms)).order_by(Villa.id.asc()).all()


@router.post("", response_model=VillaOut, status_code=201)
def create_villa(payload: VillaIn, db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise ValidationFailed("name is required")
    villa = Villa(name=name, location=(payload.location or "").strip() or None)
    db.add(villa)
    db.commit()
    db.refresh(villa)
    return villa
