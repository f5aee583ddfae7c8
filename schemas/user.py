# schemas/user.py
"""
Pydantic schemas for authentication and user management.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from models.user import UserRole


class LoginRequest(BaseModel):
     email: str
     password: str


class RegisterRequest(BaseModel):
     name: str = Field(..., min_length=1, max_length=255)
     email: str = Field(..., min_length=3, max_length=255)
     password: str = Field(..., min_length=6, description="At least 6 characters")
     role: UserRole

     model_config = ConfigDict(
          json_schema_extra={
               "example": {"name": "Karim Agent", "email": "karim@example.com", "password": "secret123", "role": "agent"}
          }
     )


class RoleUpdateRequest(BaseModel):
     new_role: UserRole


class UserResponse(BaseModel):
     id: int
     name: str
     email: str
     role: UserRole
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
     token: str
     user: UserResponse


class UserListResponse(BaseModel):
     data: List[UserResponse]
     total: int
     page: int = 1
     page_size: int = 20
