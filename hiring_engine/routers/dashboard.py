from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hiring_engine.database import get_db
from hiring_engine.models.user import User
from hiring_engine.routers.auth_deps import enforce_authentication
from hiring_engine.schemas.dashboard import DashboardResponse, JobAnalyticsResponse
from hiring_engine.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard")


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    return DashboardService(db, current_user).overview()


@router.get("/job/{jd_id}", response_model=JobAnalyticsResponse)
def get_job_analytics(
    jd_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    return DashboardService(db, current_user).job_analytics(jd_id)
