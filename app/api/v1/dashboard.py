# app/api/v1/dashboard.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.db.session import get_db
from app.schemas.dashboard import ActivityOut, DashboardStats
from app.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard")


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    db: Session = Depends(get_db),
    principal=Depends(get_current_principal),
):
    return DashboardService().stats(db, principal)


@router.get("/activities", response_model=List[ActivityOut])
def recent_activities(
    limit: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    principal=Depends(get_current_principal),
):
    return DashboardService().activities(db, principal, limit=limit)
