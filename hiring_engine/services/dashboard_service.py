"""
Read-only reporting queries for the recruiter dashboard.
"""
from collections import Counter
from datetime import datetime, time, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import joinedload

from hiring_engine.core.exceptions import NotFoundError
from hiring_engine.models.job_description import JobDescription
from hiring_engine.models.match_result import MatchResult
from hiring_engine.models.resume import Resume
from hiring_engine.services.base import BaseService

RECENT_MATCHES_LIMIT = 10
TOP_CANDIDATES_LIMIT = 20
SKILLS_DEMAND_LIMIT = 10
ACTIVITY_DAYS = 7

# Fit score buckets: excellent >= 80, 60 <= good < 80, 40 <= fair < 60, poor < 40
SCORE_BUCKETS = (("excellent", 80), ("good", 60), ("fair", 40), ("poor", None))


class DashboardService(BaseService):

    def _scoped(self, query, model):
        if self.owner_scope is not None:
            query = query.filter(model.user_id == self.owner_scope)
        return query

    def _score_distribution(self, job_description_id: Optional[int] = None) -> Dict[str, int]:
        bucket = case(
            *((MatchResult.fit_score >= floor, name) for name, floor in SCORE_BUCKETS if floor is not None),
            else_=SCORE_BUCKETS[-1][0],
        )
        query = self.db.query(bucket.label("bucket"), func.count(MatchResult.id))
        if job_description_id is not None:
            query = query.filter(MatchResult.job_description_id == job_description_id)
        counts = dict(query.group_by(bucket).all())
        return {name: int(counts.get(name, 0)) for name, _ in SCORE_BUCKETS}

    def _skills_demand(self) -> List[Dict[str, object]]:
        counter: Counter = Counter()
        for job in self._scoped(self.db.query(JobDescription), JobDescription).all():
            skills = job.required_skills
            # A skill listed twice in one job still counts once for that job
            counter.update({str(s).strip() for s in skills if str(s).strip()})
        return [
            {"skill": skill, "count": count}
            for skill, count in sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))[:SKILLS_DEMAND_LIMIT]
        ]

    def _recent_activity(self, now: Optional[datetime] = None) -> List[Dict[str, object]]:
        """Per-day match counts and average fit score for the last seven UTC calendar days, oldest first."""
        today = (now or datetime.now(timezone.utc)).date()
        first_day = today - timedelta(days=ACTIVITY_DAYS - 1)
        since = datetime.combine(first_day, time.min)

        rows = self.db.query(MatchResult.created_at, MatchResult.fit_score).filter(
            MatchResult.created_at >= since
        ).all()

        buckets: Dict[str, List[float]] = {
            (first_day + timedelta(days=offset)).isoformat(): [] for offset in range(ACTIVITY_DAYS)
        }
        for created_at, fit_score in rows:
            if created_at is None:
                continue
            if created_at.tzinfo is not None:
                created_at = created_at.astimezone(timezone.utc)
            key = created_at.date().isoformat()
            if key in buckets:
                buckets[key].append(fit_score)

        return [
            {
                "date": day,
                "count": len(scores),
                "avg_score": round(sum(scores) / len(scores), 2) if scores else None,
            }
            for day, scores in buckets.items()
        ]

    def overview(self) -> Dict[str, object]:
        total_resumes = self._scoped(self.db.query(Resume), Resume).count()
        total_jds = self._scoped(self.db.query(JobDescription), JobDescription).count()
        active_jds = self._scoped(
            self.db.query(JobDescription).filter(JobDescription.status == "active"), JobDescription
        ).count()
        total_matches = self.db.query(MatchResult).count()

        with_relations = (joinedload(MatchResult.resume), joinedload(MatchResult.job_description))
        recent_matches = (
            self.db.query(MatchResult).options(*with_relations)
            .order_by(MatchResult.created_at.desc(), MatchResult.id.desc())
            .limit(RECENT_MATCHES_LIMIT).all()
        )
        top_candidates = (
            self.db.query(MatchResult).options(*with_relations)
            .order_by(MatchResult.fit_score.desc(), MatchResult.id.asc())
            .limit(TOP_CANDIDATES_LIMIT).all()
        )

        status_rows = (
            self.db.query(MatchResult.status, func.count(MatchResult.id))
            .group_by(MatchResult.status).all()
        )
        avg_score, max_score, min_score = self.db.query(
            func.avg(MatchResult.fit_score), func.max(MatchResult.fit_score), func.min(MatchResult.fit_score)
        ).one()

        return {
            "stats": {
                "total_resumes": total_resumes,
                "total_jds": total_jds,
                "total_matches": total_matches,
                "active_jds": active_jds,
            },
            "recent_matches": recent_matches,
            "top_candidates": top_candidates,
            "status_distribution": [{"status": s or "new", "count": c} for s, c in status_rows],
            "avg_fit_score": {
                "avg_score": round(float(avg_score), 2) if avg_score is not None else 0,
                "max_score": float(max_score) if max_score is not None else 0,
                "min_score": float(min_score) if min_score is not None else 0,
            },
            "score_distribution": self._score_distribution(),
            "skills_demand": self._skills_demand(),
            "recent_activity": self._recent_activity(),
        }

    def job_analytics(self, jd_id: int) -> Dict[str, object]:
        job = self.db.get(JobDescription, jd_id)
        if not job:
            raise NotFoundError("Job description not found")

        matches = (
            self.db.query(MatchResult)
            .options(joinedload(MatchResult.resume))
            .filter(MatchResult.job_description_id == jd_id)
            .order_by(MatchResult.fit_score.desc(), MatchResult.id.asc())
            .all()
        )
        total = len(matches)
        avg_fit = sum(m.fit_score for m in matches) / total if total else 0.0

        return {
            "job": job,
            "analytics": {
                "total_applicants": total,
                "avg_fit_score": round(avg_fit, 2),
                "score_distribution": self._score_distribution(jd_id),
                "matches": matches,
            },
        }
