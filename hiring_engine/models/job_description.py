from sqlalchemy import Column, Integer, String, Text, Float, JSON, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hiring_engine.database import Base


class JobDescription(Base):
    __tablename__ = "job_descriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String, nullable=False, index=True)
    company = Column(String, nullable=False, index=True)
    location = Column(String)
    department = Column(String)
    employment_type = Column(String, default="Full-time")
    salary_min = Column(Float)
    salary_max = Column(Float)
    salary_currency = Column(String, default="USD")
    description = Column(Text, nullable=False)

    # requiredSkills, optionalSkills, keywords, seniority, experience, responsibilities, ...
    parsed_data = Column(JSON, default=dict)

    status = Column(String, default="active", index=True)
    applicants = Column(Integer, default=0, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    tags = Column(JSON, default=list)
    deadline = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    matches = relationship("MatchResult", back_populates="job_description", cascade="all, delete-orphan")

    @property
    def salary_range(self):
        if self.salary_min is None and self.salary_max is None:
            return None
        return {"min": self.salary_min, "max": self.salary_max, "currency": self.salary_currency or "USD"}

    @property
    def required_skills(self):
        return (self.parsed_data or {}).get("requiredSkills") or []
