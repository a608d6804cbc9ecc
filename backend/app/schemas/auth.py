"""
Authentication request schemas.
"""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    department: Optional[str] = None


class UserLogin(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)


class RoleLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenRefresh(BaseModel):
    token: str = Field(..., min_length=1)
