from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from sqlalchemy.orm import Session

from hiring_engine.core.config import settings
from hiring_engine.core.limiter import limiter
from hiring_engine.core.schemas import MessageResponse
from hiring_engine.database import get_db
from hiring_engine.models.user import User
from hiring_engine.routers.auth_deps import enforce_authentication, require_recruiter
from hiring_engine.schemas.resume import (
    ResumeListResponse, ResumeParseResponse, ResumeResponse, ResumeUpdate
)
from hiring_engine.services.ml_client import MLServiceClient, get_ml_client
from hiring_engine.services.resume_service import ResumeService

router = APIRouter()


@router.post("/parse-resume", response_model=ResumeParseResponse)
@limiter.limit(settings.upload_rate_limit)
async def parse_resume(
    request: Request,
    resume: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    ml: MLServiceClient = Depends(get_ml_client),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    saved, parsed = await ResumeService(db, current_user).upload_and_parse(resume, ml)
    return {
        "success": True,
        "resume_id": saved.id,
        "data": {"extracted_text": parsed["extractedText"], "parsed_data": parsed["parsedData"]},
    }


@router.get("/resumes", response_model=ResumeListResponse)
def list_resumes(
    status: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    items, total, skip, limit = ResumeService(db, current_user).list_resumes(status, search, skip, limit)
    return {"count": len(items), "total": total, "skip": skip, "limit": limit, "data": items}


@router.get("/resumes/{resume_id}", response_model=ResumeResponse)
def get_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(enforce_authentication),
):
    return {"data": ResumeService(db, current_user).get_resume(resume_id)}


@router.put("/resumes/{resume_id}", response_model=ResumeResponse)
def update_resume(
    resume_id: int,
    update: ResumeUpdate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(require_recruiter),
):
    return {"data": ResumeService(db, current_user).update_resume(resume_id, update)}


@router.delete("/resumes/{resume_id}", response_model=MessageResponse)
def delete_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(require_recruiter),
):
    ResumeService(db, current_user).delete_resume(resume_id)
    return {"message": "Resume deleted successfully"}
