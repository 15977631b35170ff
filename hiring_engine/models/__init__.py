# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, resume, job_description, match_result

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .resume import Resume
from .job_description import JobDescription
from .match_result import MatchResult

__all__ = [
    "User",
    "UserRole",
    "Resume",
    "JobDescription",
    "MatchResult",
]
