from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from hiring_engine.core.schemas import CamelModel, PageMeta

EmploymentType = Literal["Full-time", "Part-time", "Contract", "Internship", "Freelance"]
JobStatus = Literal["draft", "active", "closed", "on-hold"]


class SalaryRange(CamelModel):
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    currency: str = "USD"


class JobDescriptionCreate(CamelModel):
    # title/company/description are checked by the service so the error names all three
    title: Optional[str] = None
    company: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    department: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    salary_range: Optional[SalaryRange] = None
    deadline: Optional[datetime] = None
    tags: Optional[List[str]] = None


class JobDescriptionUpdate(CamelModel):
    title: Optional[str] = None
    company: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    department: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    salary_range: Optional[SalaryRange] = None
    parsed_data: Optional[Dict[str, Any]] = None
    status: Optional[JobStatus] = None
    tags: Optional[List[str]] = None
    deadline: Optional[datetime] = None


class JobSummary(CamelModel):
    id: int
    title: str
    company: str
    location: Optional[str] = None


class JobDescriptionOut(CamelModel):
    id: int
    user_id: Optional[int] = None
    title: str
    company: str
    location: Optional[str] = None
    department: Optional[str] = None
    employment_type: Optional[str] = None
    salary_range: Optional[SalaryRange] = None
    description: str
    parsed_data: Optional[Dict[str, Any]] = None
    status: str
    applicants: int = 0
    views: int = 0
    tags: Optional[List[str]] = None
    deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ParsedJobData(CamelModel):
    parsed_data: Dict[str, Any]


class ParseJobDescriptionResponse(CamelModel):
    success: bool = True
    jd_id: int
    data: ParsedJobData


class JobDescriptionResponse(CamelModel):
    success: bool = True
    data: JobDescriptionOut


class JobDescriptionListResponse(PageMeta):
    job_descriptions: List[JobDescriptionOut]
