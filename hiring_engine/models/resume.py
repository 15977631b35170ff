from sqlalchemy import Column, Integer, String, Text, JSON, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hiring_engine.database import Base


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Uploaded file metadata
    file_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    file_size = Column(Integer)
    file_type = Column(String)

    # Fields extracted by the ML service
    extracted_text = Column(Text)
    parsed_data = Column(JSON, default=dict)  # name, email, phone, skills, experience, education, ...

    status = Column(String, default="pending", index=True)
    tags = Column(JSON, default=list)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    matches = relationship("MatchResult", back_populates="resume", cascade="all, delete-orphan")

    @property
    def candidate_name(self):
        return (self.parsed_data or {}).get("name")

    @property
    def candidate_email(self):
        return (self.parsed_data or {}).get("email")

    @property
    def skills(self):
        return (self.parsed_data or {}).get("skills") or []
