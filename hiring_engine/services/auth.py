"""
Account management: registration, credential checks and admin user controls.
Token and password primitives live in core.security and are re-exported here.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from hiring_engine.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from hiring_engine.core.security import (  # noqa: F401
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from hiring_engine.models.user import User, UserRole
from hiring_engine.schemas.auth import RegisterRequest
from hiring_engine.services.base import BaseService

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def register_user(db: Session, data: RegisterRequest, role: UserRole = UserRole.RECRUITER) -> User:
    if get_user_by_email(db, data.email):
        raise ValidationError("User already exists")

    user = User(
        email=data.email.lower(),
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name,
        company=data.company,
        role=role,
        is_active=True,
    )
    db.add(user)
    BaseService(db).commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.role.value})")
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login for {email}")
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    user.last_login = datetime.now(timezone.utc)
    BaseService(db).commit()
    db.refresh(user)
    return user


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.role.value)


def list_users(db: Session, skip: int = 0, limit: Optional[int] = None):
    query = db.query(User).order_by(User.created_at.desc(), User.id.desc())
    return BaseService.paginate(query, skip, limit)


def set_user_status(db: Session, user_id: int, is_active: bool, acting_user: User) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.id == acting_user.id and not is_active:
        raise ValidationError("You cannot deactivate your own account")

    user.is_active = is_active
    BaseService(db).commit()
    db.refresh(user)
    logger.info(f"User {user.id} {'activated' if is_active else 'deactivated'} by {acting_user.id}")
    return user
