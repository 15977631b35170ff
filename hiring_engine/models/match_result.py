from sqlalchemy import Column, Integer, Float, Text, String, JSON, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hiring_engine.database import Base

QUESTION_CATEGORIES = ("technical", "behavioral", "situational", "role-specific")
QUESTION_DIFFICULTIES = ("easy", "medium", "hard")


class MatchResult(Base):
    __tablename__ = "match_results"
    __table_args__ = (
        UniqueConstraint("resume_id", "job_description_id", name="uq_match_resume_job"),
    )

    id = Column(Integer, primary_key=True, index=True)
    resume_id = Column(Integer, ForeignKey("resumes.id", ondelete="CASCADE"), nullable=False, index=True)
    job_description_id = Column(
        Integer, ForeignKey("job_descriptions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    fit_score = Column(Float, nullable=False, index=True)  # 0-100
    match_details = Column(JSON, default=dict)  # matchedSkills, missingSkills, skillOverlap, ...
    gap_analysis = Column(JSON, default=dict)  # recommendations, improvementAreas, learningPath, ...
    interview_questions = Column(JSON, default=list)  # [{question, category, difficulty}]

    recruiter_notes = Column(Text)
    status = Column(String, default="new", index=True)
    ranking = Column(Integer)
    feedback = Column(JSON)  # {recruiterRating: 1-5, comments}

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    resume = relationship("Resume", back_populates="matches")
    job_description = relationship("JobDescription", back_populates="matches")
