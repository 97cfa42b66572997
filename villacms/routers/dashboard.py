from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import DashboardOut
from ..security import require_user
from ..services.dashboard import dashboard_summary

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"], dependencies=[Depends(require_user)])


@router.get("", response_model=DashboardOut)
def dashboard(db: Session = Depends(get_db)):
    return dashboard_summary(db)
