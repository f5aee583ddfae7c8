# routers/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import require_capability, verify_token
from models.user import UserRole
from permissions import Capability, Principal
from schemas.user import (
     LoginRequest,
     LoginResponse,
     RegisterRequest,
     RoleUpdateRequest,
     UserListResponse,
     UserResponse,
)
from services import user_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse, summary="Log in")
def login(body: LoginRequest, db: Session = Depends(get_session)):
     token, user = user_service.authenticate(db, body.email, body.password)
     return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED, summary="Create a user")
def register(
     body: RegisterRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_USERS)),
):
     return user_service.register_user(db, body)


@router.get("/me", response_model=UserResponse, summary="Current user")
def me(db: Session = Depends(get_session), principal: Principal = Depends(verify_token)):
     return user_service.get_user(db, principal.id)


@router.get("/users", response_model=UserListResponse, summary="List users")
def list_users(
     role: Optional[UserRole] = Query(None),
     page: int = Query(1, ge=1),
     page_size: int = Query(20, ge=1, le=100),
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_USERS)),
):
     users, total = user_service.list_users(db, role=role, page=page, page_size=page_size)
     return UserListResponse(
          data=[UserResponse.model_validate(u) for u in users],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.put("/users/{user_id}/role", response_model=UserResponse, summary="Change a user's role")
def change_role(
     user_id: int,
     body: RoleUpdateRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_USERS)),
):
     return user_service.change_role(db, principal, user_id, body.new_role)
