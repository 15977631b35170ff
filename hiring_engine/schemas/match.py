from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from hiring_engine.core.schemas import CamelModel, PageMeta
from hiring_engine.schemas.job_description import JobDescriptionOut, JobSummary
from hiring_engine.schemas.resume import ResumeBrief, ResumeDetail

# Recruiter workflow: new -> reviewed -> shortlisted/rejected -> interviewed -> offered
MatchStatus = Literal["new", "reviewed", "shortlisted", "rejected", "interviewed", "offered"]


class MatchRequest(CamelModel):
    # Both optional so a missing id is reported as a 400 with a single message
    resume_id: Optional[int] = None
    job_description_id: Optional[int] = None


class InterviewQuestion(CamelModel):
    question: str
    category: str = "technical"
    difficulty: str = "medium"


class MatchData(CamelModel):
    fit_score: float
    match_details: Dict[str, Any] = {}
    gap_analysis: Dict[str, Any] = {}
    interview_questions: List[InterviewQuestion] = []


class MatchRunResponse(CamelModel):
    success: bool = True
    match_id: int
    created: bool
    data: MatchData


class Feedback(CamelModel):
    recruiter_rating: Optional[int] = Field(default=None, ge=1, le=5)
    comments: Optional[str] = None


class MatchUpdate(CamelModel):
    status: Optional[MatchStatus] = None
    recruiter_notes: Optional[str] = None
    feedback: Optional[Feedback] = None
    ranking: Optional[int] = None


class MatchOut(CamelModel):
    id: int
    resume_id: int
    job_description_id: int
    fit_score: float
    match_details: Optional[Dict[str, Any]] = None
    gap_analysis: Optional[Dict[str, Any]] = None
    interview_questions: Optional[List[InterviewQuestion]] = None
    recruiter_notes: Optional[str] = None
    status: str
    ranking: Optional[int] = None
    feedback: Optional[Feedback] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    resume: Optional[ResumeBrief] = None
    job_description: Optional[JobSummary] = None


class MatchDetailOut(MatchOut):
    resume: Optional[ResumeDetail] = None
    job_description: Optional[JobDescriptionOut] = None


class MatchResponse(CamelModel):
    success: bool = True
    data: MatchDetailOut


class MatchListResponse(PageMeta):
    matches: List[MatchOut]
