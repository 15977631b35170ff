from typing import Optional

from sqlalchemy import or_

from hiring_engine.core.exceptions import NotFoundError, ValidationError
from hiring_engine.models.job_description import JobDescription
from hiring_engine.schemas.job_description import JobDescriptionCreate, JobDescriptionUpdate
from hiring_engine.services.base import BaseService
from hiring_engine.services.ml_client import MLServiceClient

NON_NULLABLE_FIELDS = ("status", "employment_type", "parsed_data", "tags")


class JobDescriptionService(BaseService):

    def create_from_text(self, data: JobDescriptionCreate, ml: MLServiceClient) -> JobDescription:
        title = (data.title or "").strip()
        company = (data.company or "").strip()
        description = (data.description or "").strip()
        if not title or not company or not description:
            raise ValidationError("Title, company, and description are required")

        self._logger.info(f"Parsing job description '{title}' at {company}")
        parsed_data = ml.parse_jd(title, company, description)

        salary = data.salary_range
        jd = JobDescription(
            user_id=self.user.id if self.user else None,
            title=title,
            company=company,
            description=description,
            location=data.location,
            department=data.department,
            employment_type=data.employment_type or "Full-time",
            salary_min=salary.min if salary else None,
            salary_max=salary.max if salary else None,
            salary_currency=salary.currency if salary else "USD",
            deadline=data.deadline,
            tags=data.tags or [],
            parsed_data=parsed_data,
            status="active",
            applicants=0,
            views=0,
        )
        self.db.add(jd)
        self.commit()
        self.db.refresh(jd)
        self._logger.info(f"Job description {jd.id} saved")
        return jd

    def list_job_descriptions(self, status: Optional[str] = None, search: Optional[str] = None,
                              skip: int = 0, limit: Optional[int] = None):
        query = self.db.query(JobDescription)
        if self.owner_scope is not None:
            query = query.filter(JobDescription.user_id == self.owner_scope)
        if status:
            query = query.filter(JobDescription.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                JobDescription.title.ilike(pattern),
                JobDescription.company.ilike(pattern),
            ))
        query = query.order_by(JobDescription.created_at.desc(), JobDescription.id.desc())
        return self.paginate(query, skip, limit)

    def get_job_description(self, jd_id: int, count_view: bool = False) -> JobDescription:
        jd = self.db.get(JobDescription, jd_id)
        if not jd:
            raise NotFoundError("Job description not found")
        if count_view:
            self.db.query(JobDescription).filter(JobDescription.id == jd_id).update(
                {JobDescription.views: JobDescription.views + 1}, synchronize_session=False
            )
            self.commit()
            self.db.refresh(jd)
        return jd

    def update_job_description(self, jd_id: int, update: JobDescriptionUpdate) -> JobDescription:
        jd = self.get_job_description(jd_id)
        self.check_ownership(jd.user_id, "update", "job description")

        changes = update.model_dump(exclude_unset=True)
        salary = changes.pop("salary_range", None)
        for field in ("title", "company", "description"):
            if field in changes and not (changes[field] or "").strip():
                raise ValidationError(f"{field.capitalize()} cannot be empty")
        if "salary_range" in update.model_fields_set:
            salary = salary or {}
            jd.salary_min = salary.get("min")
            jd.salary_max = salary.get("max")
            jd.salary_currency = salary.get("currency") or "USD"

        for field, value in changes.items():
            if value is None and field in NON_NULLABLE_FIELDS:
                continue
            setattr(jd, field, value)

        self.commit()
        self.db.refresh(jd)
        return jd

    def delete_job_description(self, jd_id: int) -> None:
        jd = self.get_job_description(jd_id)
        self.check_ownership(jd.user_id, "delete", "job description")
        self.db.delete(jd)
        self.commit()
        self._logger.info(f"Job description {jd_id} deleted")
