from typing import Any, Dict, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import or_
from starlette.concurrency import run_in_threadpool

from hiring_engine.core.exceptions import NotFoundError
from hiring_engine.models.resume import Resume
from hiring_engine.schemas.resume import ResumeUpdate
from hiring_engine.services import storage
from hiring_engine.services.base import BaseService
from hiring_engine.services.ml_client import MLServiceClient


class ResumeService(BaseService):

    async def upload_and_parse(self, file: Optional[UploadFile], ml: MLServiceClient) -> Tuple[Resume, Dict[str, Any]]:
        """
        Store an uploaded resume, have the ML service parse it and persist the result.

        Validation happens before anything is written. Once the file is on disk,
        any failure (ML service, database) deletes it again before re-raising.
        """
        file_path, file_size = await storage.save_upload(file)
        try:
            parsed = await run_in_threadpool(ml.parse_resume, file_path, file.filename, file.content_type)

            resume = Resume(
                user_id=self.user.id if self.user else None,
                file_name=file.filename,
                file_path=file_path,
                file_size=file_size,
                file_type=file.content_type,
                extracted_text=parsed["extractedText"],
                parsed_data=parsed["parsedData"],
                status="parsed",
                tags=[],
            )
            self.db.add(resume)
            self.commit()
            self.db.refresh(resume)
        except Exception:
            self._logger.warning(f"Resume parsing failed, cleaning up {file_path}")
            storage.remove_file(file_path)
            raise

        self._logger.info(f"Resume {resume.id} saved from {file.filename}")
        return resume, parsed

    def list_resumes(self, status: Optional[str] = None, search: Optional[str] = None,
                     skip: int = 0, limit: Optional[int] = None):
        query = self.db.query(Resume)
        if self.owner_scope is not None:
            query = query.filter(Resume.user_id == self.owner_scope)
        if status:
            query = query.filter(Resume.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Resume.file_name.ilike(pattern),
                Resume.parsed_data["name"].as_string().ilike(pattern),
                Resume.parsed_data["email"].as_string().ilike(pattern),
            ))
        query = query.order_by(Resume.created_at.desc(), Resume.id.desc())
        return self.paginate(query, skip, limit)

    def get_resume(self, resume_id: int) -> Resume:
        resume = self.db.get(Resume, resume_id)
        if not resume:
            raise NotFoundError("Resume not found")
        return resume

    def update_resume(self, resume_id: int, update: ResumeUpdate) -> Resume:
        resume = self.get_resume(resume_id)
        self.check_ownership(resume.user_id, "update", "resume")

        if update.tags is not None:
            resume.tags = update.tags
        if update.notes is not None:
            resume.notes = update.notes

        self.commit()
        self.db.refresh(resume)
        return resume

    def delete_resume(self, resume_id: int) -> None:
        resume = self.get_resume(resume_id)
        self.check_ownership(resume.user_id, "delete", "resume")

        file_path = resume.file_path
        self.db.delete(resume)
        self.commit()
        # The record is gone either way; a missing file is not an error
        storage.remove_file(file_path)
        self._logger.info(f"Resume {resume_id} deleted")
