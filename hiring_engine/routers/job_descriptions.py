from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hiring_engine.core.schemas import MessageResponse
from hiring_engine.database import get_db
from hiring_engine.models.user import User
from hiring_engine.routers.auth_deps import enforce_authentication, require_recruiter
from hiring_engine.schemas.job_description import (
    JobDescriptionCreate,
    JobDescriptionListResponse,
    JobDescriptionResponse,
    JobDescriptionUpdate,
    ParseJobDescriptionResponse,
)
from hiring_engine.services.job_service import JobDescriptionService
from hiring_engine.services.ml_client import MLServiceClient, get_ml_client

router = APIRouter()


@router.post("/parse-jd", response_model=ParseJobDescriptionResponse)
def parse_job_description(
    data: JobDescriptionCreate,
    db: Session = Depends(get_db),
    ml: MLServiceClient = Depends(get_ml_client),
    current_user: Optional[User] = Depends(require_recruiter),
):
    jd = JobDescriptionService(db, current_user).create_from_text(data, ml)
    return {"jd_id": jd.id, "data": {"parsed_data": jd.parsed_data}}


@router.get("/job-descriptions", response_model=JobDescriptionListResponse)
def list_job_descriptions(
    status: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    items, total, skip, limit = JobDescriptionService(db, current_user).list_job_descriptions(
        status, search, skip, limit
    )
    return {"count": len(items), "total": total, "skip": skip, "limit": limit, "job_descriptions": items}


@router.get("/job-descriptions/{jd_id}", response_model=JobDescriptionResponse)
def get_job_description(
    jd_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    return {"data": JobDescriptionService(db, current_user).get_job_description(jd_id, count_view=True)}


@router.put("/job-descriptions/{jd_id}", response_model=JobDescriptionResponse)
def update_job_description(
    jd_id: int,
    update: JobDescriptionUpdate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(require_recruiter),
):
    return {"data": JobDescriptionService(db, current_user).update_job_description(jd_id, update)}


@router.delete("/job-descriptions/{jd_id}", response_model=MessageResponse)
def delete_job_description(
    jd_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(require_recruiter),
):
    JobDescriptionService(db, current_user).delete_job_description(jd_id)
    return {"message": "Job description deleted successfully"}
