import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from hiring_engine.core.config import settings
from hiring_engine.core.exceptions import AccessDeniedError, PersistenceError
from hiring_engine.models.user import User


class BaseService:
    """
    Shared plumbing for the data-access services: the session, the requester
    (None for anonymous requests), owner scoping, pagination and commits that
    surface database failures as PersistenceError.
    """

    def __init__(self, db: Session, user: Optional[User] = None):
        self.db = db
        self.user = user
        self._logger = logging.getLogger(self.__class__.__module__)

    @property
    def owner_scope(self) -> Optional[int]:
        """User id to filter lists by; None means no owner filter (anonymous or admin)."""
        if self.user is None or self.user.is_admin:
            return None
        return self.user.id

    def check_ownership(self, owner_id: Optional[int], action: str, entity: str) -> None:
        if self.user is None or self.user.is_admin or owner_id is None:
            return
        if owner_id != self.user.id:
            self._logger.warning(
                f"User {self.user.id} denied {action} on {entity} owned by {owner_id}"
            )
            raise AccessDeniedError(f"Not authorized to {action} this {entity}")

    @staticmethod
    def paginate(query: Query, skip: int, limit: Optional[int], *options) -> Tuple[List[Any], int, int, int]:
        """Apply skip/limit (clamped to the configured page size). Loader options are added after counting."""
        skip = max(0, skip)
        limit = settings.default_page_size if not limit else min(max(1, limit), settings.max_page_size)
        total = query.order_by(None).count()
        items = query.options(*options).offset(skip).limit(limit).all()
        return items, total, skip, limit

    def commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            self._logger.warning(f"Integrity error: {e.orig}")
            raise PersistenceError("Constraint violation", status_code=400, details={"reason": str(e.orig)})
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Database error: {e}", exc_info=True)
            raise PersistenceError("Database operation failed")
