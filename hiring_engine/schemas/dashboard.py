from typing import List, Optional

from pydantic import Field

from hiring_engine.core.schemas import CamelModel
from hiring_engine.schemas.job_description import JobDescriptionOut
from hiring_engine.schemas.match import MatchOut


class DashboardStats(CamelModel):
    total_resumes: int
    total_jds: int = Field(alias="totalJDs")
    total_matches: int
    active_jds: int = Field(alias="activeJDs")


class StatusCount(CamelModel):
    status: str
    count: int


class FitScoreSummary(CamelModel):
    avg_score: float = 0
    max_score: float = 0
    min_score: float = 0


class ScoreDistribution(CamelModel):
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0


class SkillDemand(CamelModel):
    skill: str
    count: int


class ActivityDay(CamelModel):
    date: str
    count: int
    avg_score: Optional[float] = None


class DashboardResponse(CamelModel):
    success: bool = True
    stats: DashboardStats
    recent_matches: List[MatchOut]
    top_candidates: List[MatchOut]
    status_distribution: List[StatusCount]
    avg_fit_score: FitScoreSummary
    score_distribution: ScoreDistribution
    skills_demand: List[SkillDemand]
    recent_activity: List[ActivityDay]


class JobAnalytics(CamelModel):
    total_applicants: int
    avg_fit_score: float
    score_distribution: ScoreDistribution
    matches: List[MatchOut]


class JobAnalyticsResponse(CamelModel):
    success: bool = True
    job: JobDescriptionOut
    analytics: JobAnalytics
