"""
User model for Training Hub.

Defines the User table with authentication fields, role, profile
information and the trainee enrollment/mentor assignment references.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import Integer, String, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from app.core.database import Base


class UserRole(str, Enum):
    """Roles a user can hold."""
    ADMIN = "admin"
    MENTOR = "mentor"
    TRAINEE = "trainee"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    """
    User model for authentication and profile management.
    """
    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Authentication fields
    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.TRAINEE.value)

    # Profile fields
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    # Trainee assignments
    enrolled_course_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True
    )
    assigned_mentor_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    status: Mapped[str] = mapped_column(String(20), default=UserStatus.ACTIVE.value, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # Relationships
    enrolled_course = relationship("Course", foreign_keys=[enrolled_course_id])
    assigned_mentor = relationship("User", remote_side=[id], foreign_keys=[assigned_mentor_id])

    # Table constraints
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'mentor', 'trainee')", name="check_user_role"),
        CheckConstraint("status IN ('active', 'inactive')", name="check_user_status"),
        Index("idx_user_role_status", "role", "status"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    def has_role(self, role: str) -> bool:
        return self.role == role

    def to_dict(self) -> dict:
        """Convert user to dictionary representation (never includes the password hash)."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "department": self.department,
            "status": self.status,
            "enrolled_course_id": self.enrolled_course_id,
            "enrolled_course_name": self.enrolled_course.course_name if self.enrolled_course else None,
            "assigned_mentor_id": self.assigned_mentor_id,
            "assigned_mentor_name": self.assigned_mentor.full_name if self.assigned_mentor else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
