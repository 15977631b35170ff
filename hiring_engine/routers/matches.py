from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from hiring_engine.core.config import settings
from hiring_engine.core.limiter import limiter
from hiring_engine.core.schemas import MessageResponse
from hiring_engine.database import get_db
from hiring_engine.models.user import User
from hiring_engine.routers.auth_deps import enforce_authentication, require_recruiter
from hiring_engine.schemas.match import (
    MatchListResponse, MatchRequest, MatchResponse, MatchRunResponse, MatchUpdate
)
from hiring_engine.services.match_service import MatchOrchestrator, MatchService
from hiring_engine.services.ml_client import MLServiceClient, get_ml_client

router = APIRouter()


@router.post("/match", response_model=MatchRunResponse)
@limiter.limit(settings.match_rate_limit)
def run_match(
    request: Request,
    body: MatchRequest,
    db: Session = Depends(get_db),
    ml: MLServiceClient = Depends(get_ml_client),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    result = MatchOrchestrator(db, ml, current_user).run(body.resume_id, body.job_description_id)
    match = result.match
    return {
        "match_id": match.id,
        "created": result.created,
        "data": {
            "fit_score": match.fit_score,
            "match_details": match.match_details or {},
            "gap_analysis": match.gap_analysis or {},
            "interview_questions": match.interview_questions or [],
        },
    }


@router.get("/matches", response_model=MatchListResponse)
def list_matches(
    resume_id: Optional[int] = Query(None, alias="resumeId"),
    job_description_id: Optional[int] = Query(None, alias="jobDescriptionId"),
    min_score: Optional[float] = Query(None, alias="minScore", ge=0, le=100),
    status: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    items, total, skip, limit = MatchService(db, current_user).list_matches(
        resume_id, job_description_id, min_score, status, skip, limit
    )
    return {"count": len(items), "total": total, "skip": skip, "limit": limit, "matches": items}


@router.get("/matches/{match_id}", response_model=MatchResponse)
def get_match(
    match_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    return {"data": MatchService(db, current_user).get_match(match_id)}


@router.put("/matches/{match_id}", response_model=MatchResponse)
def update_match(
    match_id: int,
    update: MatchUpdate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(require_recruiter),
):
    return {"data": MatchService(db, current_user).update_match(match_id, update)}


@router.delete("/matches/{match_id}", response_model=MessageResponse)
def delete_match(
    match_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(require_recruiter),
):
    MatchService(db, current_user).delete_match(match_id)
    return {"message": "Match deleted successfully"}
