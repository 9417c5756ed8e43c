"""Owner reporting routes."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vehicle_care.db.models import User
from vehicle_care.db.session import get_db
from vehicle_care.routes.deps import get_current_user
from vehicle_care.schemas.common import APIResponse
from vehicle_care.services.report_service import get_dashboard_summary, get_monthly_report


router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/summary", response_model=APIResponse[dict])
def summary_report(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return APIResponse(success=True, data=get_dashboard_summary(db=db, user=user))


@router.get("/monthly", response_model=APIResponse[dict])
def monthly_report(
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    today = date.today()
    return APIResponse(
        success=True,
        data=get_monthly_report(
            db=db,
            user=user,
            year=year or today.year,
            month=month or today.month,
        ),
    )
