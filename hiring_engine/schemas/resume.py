from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import field_validator

from hiring_engine.core.schemas import CamelModel, PageMeta


def skill_name(value: Any) -> Optional[str]:
    """A skill as plain text: strings as-is, objects by their name. None if it has no text form."""
    if isinstance(value, dict):
        value = value.get("name") or value.get("skill")
    if isinstance(value, str):
        return value.strip()
    return None


class ResumeBrief(CamelModel):
    id: int
    file_name: str
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    skills: List[str] = []

    @field_validator("candidate_name", "candidate_email", mode="before")
    @classmethod
    def text_or_none(cls, value):
        return value if isinstance(value, str) else None

    @field_validator("skills", mode="before")
    @classmethod
    def skills_as_text(cls, value):
        if not isinstance(value, list):
            return []
        return [name for name in map(skill_name, value) if name]


class ResumeSummary(CamelModel):
    id: int
    user_id: Optional[int] = None
    file_name: str
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    parsed_data: Optional[Dict[str, Any]] = None
    status: str
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ResumeDetail(ResumeSummary):
    extracted_text: Optional[str] = None


class ResumeUpdate(CamelModel):
    tags: Optional[List[str]] = None
    notes: Optional[str] = None


class ResumeParseData(CamelModel):
    extracted_text: Optional[str] = None
    parsed_data: Dict[str, Any]


class ResumeParseResponse(CamelModel):
    success: bool = True
    resume_id: int
    data: ResumeParseData


class ResumeResponse(CamelModel):
    success: bool = True
    data: ResumeDetail


class ResumeListResponse(PageMeta):
    data: List[ResumeSummary]
