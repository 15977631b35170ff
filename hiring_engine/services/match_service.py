"""
Match orchestration and match-result CRUD.

An orchestration run asks the ML service for three things, strictly in order:
a fit score with a match breakdown, a gap analysis built on that breakdown,
and a set of interview questions. Persistence is gated on all three
succeeding: a failed step raises UpstreamError and nothing is written. Each
call already carries its own timeout and bounded retry (see ml_client).

The result is upserted on the unique (resume, job description) pair. The
job's applicant counter is bumped with an atomic SQL increment, on every
successful run ("attempts", the default) or only when the pair is new
("distinct").
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from hiring_engine.core.config import settings
from hiring_engine.core.exceptions import NotFoundError, PersistenceError, ValidationError
from hiring_engine.models.job_description import JobDescription
from hiring_engine.models.match_result import QUESTION_CATEGORIES, QUESTION_DIFFICULTIES, MatchResult
from hiring_engine.models.resume import Resume
from hiring_engine.schemas.match import MatchUpdate
from hiring_engine.services.base import BaseService
from hiring_engine.services.ml_client import MLServiceClient

COUNT_ATTEMPTS = "attempts"


def normalize_questions(raw_questions: List[Any]) -> List[Dict[str, str]]:
    """Coerce ML output into {question, category, difficulty} dicts, dropping blanks."""
    questions = []
    for item in raw_questions:
        if isinstance(item, str):
            item = {"question": item}
        if not isinstance(item, dict):
            continue
        text = str(item.get("question") or "").strip()
        if not text:
            continue
        category = item.get("category")
        difficulty = item.get("difficulty")
        questions.append({
            "question": text,
            "category": category if category in QUESTION_CATEGORIES else "technical",
            "difficulty": difficulty if difficulty in QUESTION_DIFFICULTIES else "medium",
        })
    return questions


@dataclass
class OrchestrationResult:
    match: MatchResult
    created: bool


class MatchOrchestrator(BaseService):

    def __init__(self, db, ml: MLServiceClient, user=None, count_mode: Optional[str] = None):
        super().__init__(db, user)
        self.ml = ml
        self.count_mode = count_mode or settings.applicant_count_mode

    def run(self, resume_id: Optional[int], job_description_id: Optional[int]) -> OrchestrationResult:
        if not resume_id or not job_description_id:
            raise ValidationError("Resume ID and Job Description ID are required")

        resume = self.db.get(Resume, resume_id)
        jd = self.db.get(JobDescription, job_description_id)
        if not resume or not jd:
            raise NotFoundError("Resume or Job Description not found")

        resume_data = resume.parsed_data or {}
        job_data = jd.parsed_data or {}

        self._logger.info(f"Matching resume {resume_id} against job {job_description_id}")
        scored = self.ml.match(resume_data, job_data)

        self._logger.info("Requesting gap analysis")
        gap_analysis = self.ml.improve(resume_data, job_data, scored["matchDetails"])

        self._logger.info("Generating interview questions")
        questions = normalize_questions(self.ml.interview(resume_data, job_data))

        fields = {
            "fit_score": scored["fitScore"],
            "match_details": scored["matchDetails"],
            "gap_analysis": gap_analysis,
            "interview_questions": questions,
        }
        match, created = self._upsert(resume_id, job_description_id, fields)

        if created or self.count_mode == COUNT_ATTEMPTS:
            self.db.query(JobDescription).filter(JobDescription.id == job_description_id).update(
                {JobDescription.applicants: JobDescription.applicants + 1}, synchronize_session=False
            )

        self.commit()
        self.db.refresh(match)
        self._logger.info(
            f"Match {match.id} {'created' if created else 'refreshed'} with fit score {match.fit_score}"
        )
        return OrchestrationResult(match=match, created=created)

    def _find(self, resume_id: int, job_description_id: int) -> Optional[MatchResult]:
        return self.db.query(MatchResult).filter(
            MatchResult.resume_id == resume_id,
            MatchResult.job_description_id == job_description_id,
        ).first()

    def _upsert(self, resume_id: int, job_description_id: int, fields: Dict[str, Any]) -> Tuple[MatchResult, bool]:
        existing = self._find(resume_id, job_description_id)
        if existing:
            for key, value in fields.items():
                setattr(existing, key, value)
            return existing, False

        match = MatchResult(resume_id=resume_id, job_description_id=job_description_id, status="new", **fields)
        self.db.add(match)
        try:
            self.db.flush()
        except IntegrityError as e:
            # A concurrent run inserted the pair first; nothing else is pending, so
            # roll back and overwrite the winner's row instead.
            self.db.rollback()
            self._logger.info(f"Pair ({resume_id}, {job_description_id}) inserted concurrently, updating")
            existing = self._find(resume_id, job_description_id)
            if existing is None:
                raise PersistenceError("Match could not be saved", details={"reason": str(e.orig)})
            for key, value in fields.items():
                setattr(existing, key, value)
            return existing, False
        return match, True


class MatchService(BaseService):

    def list_matches(
        self,
        resume_id: Optional[int] = None,
        job_description_id: Optional[int] = None,
        min_score: Optional[float] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ):
        query = self.db.query(MatchResult)
        if resume_id is not None:
            query = query.filter(MatchResult.resume_id == resume_id)
        if job_description_id is not None:
            query = query.filter(MatchResult.job_description_id == job_description_id)
        if min_score is not None:
            query = query.filter(MatchResult.fit_score >= min_score)
        if status:
            query = query.filter(MatchResult.status == status)
        query = query.order_by(MatchResult.fit_score.desc(), MatchResult.created_at.desc(), MatchResult.id.desc())
        return self.paginate(
            query, skip, limit,
            joinedload(MatchResult.resume),
            joinedload(MatchResult.job_description),
        )

    def get_match(self, match_id: int) -> MatchResult:
        match = (
            self.db.query(MatchResult)
            .options(joinedload(MatchResult.resume), joinedload(MatchResult.job_description))
            .filter(MatchResult.id == match_id)
            .first()
        )
        if not match:
            raise NotFoundError("Match not found")
        return match

    def update_match(self, match_id: int, update: MatchUpdate) -> MatchResult:
        match = self.get_match(match_id)
        if update.status:
            match.status = update.status
        if update.recruiter_notes:
            match.recruiter_notes = update.recruiter_notes
        if update.feedback:
            match.feedback = update.feedback.model_dump(by_alias=True, exclude_none=True)
        if update.ranking is not None:
            match.ranking = update.ranking

        self.commit()
        self.db.refresh(match)
        return match

    def delete_match(self, match_id: int) -> None:
        match = self.get_match(match_id)
        self.db.delete(match)
        self.commit()
        self._logger.info(f"Match {match_id} deleted")
