import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hiring_engine.database import get_db
from hiring_engine.models.user import User
from hiring_engine.routers.auth_deps import get_current_user, require_account_admin
from hiring_engine.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserListResponse,
    UserStatusUpdate,
)
from hiring_engine.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, data)
    return {"access_token": auth_service.issue_token(user), "user": user}


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, data.email, data.password)
    logger.info(f"User {user.id} logged in")
    return {"access_token": auth_service.issue_token(user), "user": user}


@router.get("/me", response_model=CurrentUserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return {"user": current_user}


@router.get("/users", response_model=UserListResponse)
def list_users(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    admin: User = Depends(require_account_admin),
):
    items, total, skip, limit = auth_service.list_users(db, skip, limit)
    return {"count": len(items), "total": total, "skip": skip, "limit": limit, "users": items}


@router.patch("/users/{user_id}/status", response_model=CurrentUserResponse)
def set_user_status(
    user_id: int,
    data: UserStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_account_admin),
):
    return {"user": auth_service.set_user_status(db, user_id, data.is_active, admin)}
