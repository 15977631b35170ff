"""
Authentication and role dependencies.

Bearer tokens are optional at the decoding step: a request without an
Authorization header resolves to an anonymous requester (None). Whether
anonymous requests are allowed through is decided by enforce_authentication,
which is mounted on every resource router and honours settings.auth_required.
"""
import logging
from typing import Callable, List, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hiring_engine.core.config import settings
from hiring_engine.core.exceptions import AccessDeniedError, AuthenticationError
from hiring_engine.database import get_db
from hiring_engine.models.user import User, UserRole
from hiring_engine.services import auth as auth_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

NO_TOKEN_MESSAGE = "No authentication token, access denied"


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Resolve the requester from the bearer token, or None when no token was sent."""
    if credentials is None or not credentials.credentials:
        return None

    payload = auth_service.decode_access_token(credentials.credentials)
    if payload is None:
        logger.warning("Authentication failed: invalid token")
        raise AuthenticationError()
    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: token expired")
        raise AuthenticationError()
    if payload.get("type") != "access":
        logger.warning("Authentication failed: wrong token type")
        raise AuthenticationError()

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Authentication failed: missing subject")
        raise AuthenticationError()

    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"Authentication failed: user {user_id} not found")
        raise AuthenticationError()
    if not user.is_active:
        logger.warning(f"Authentication failed: user {user_id} is deactivated")
        raise AuthenticationError("User account is deactivated")
    return user


def enforce_authentication(user: Optional[User] = Depends(get_optional_user)) -> Optional[User]:
    if user is None and settings.auth_required:
        raise AuthenticationError(NO_TOKEN_MESSAGE)
    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """A signed-in user, regardless of auth_required."""
    if user is None:
        raise AuthenticationError(NO_TOKEN_MESSAGE)
    return user


def require_role(allowed_roles: List[UserRole], label: str, strict: bool = False) -> Callable:
    """
    Dependency factory that checks the requester holds one of the allowed roles.

    Anonymous requesters only get this far when auth_required is off; they pass
    unless strict is set, in which case a token is always required.

    Usage:
        @router.delete("/{item_id}")
        def remove(item_id: int, user = Depends(require_recruiter)):
            ...
    """
    def role_checker(user: Optional[User] = Depends(enforce_authentication)) -> Optional[User]:
        if user is None:
            if strict:
                raise AuthenticationError(NO_TOKEN_MESSAGE)
            return None
        if user.role not in allowed_roles:
            logger.warning(f"User {user.id} ({user.role.value}) lacks {label} privileges")
            raise AccessDeniedError(f"Access denied. {label} privileges required.")
        return user
    return role_checker


require_recruiter = require_role([UserRole.RECRUITER, UserRole.ADMIN], "Recruiter")
# Account management never runs anonymously
require_account_admin = require_role([UserRole.ADMIN], "Admin", strict=True)
