from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import HousekeepingItemOut
from ..security import require_user
from ..services.housekeeping import housekeeping_items

router = APIRouter(prefix="/api/housekeeping", tags=["housekeeping"], dependencies=[Depends(require_user)])


@router.get("", response_model=List[HousekeepingItemOut])
def housekeeping(db: Session = Depends(get_db)):
    return housekeeping_items(db)
