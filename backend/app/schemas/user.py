"""
User administration schemas.
"""

from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole, UserStatus


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    department: Optional[str] = None
    enrolled_course_id: Optional[int] = None
    assigned_mentor_id: Optional[int] = None


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    enrolled_course_id: Optional[int] = None
    assigned_mentor_id: Optional[int] = None
    status: Optional[UserStatus] = None
    role: Optional[UserRole] = None


class PasswordChange(BaseModel):
    new_password: str = Field(..., min_length=6)


class BulkStatusUpdate(BaseModel):
    user_ids: List[int] = Field(..., min_length=1)
    status: UserStatus
