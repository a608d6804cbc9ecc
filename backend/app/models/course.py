"""
Course models for Training Hub.

Defines Course, CourseModule and CourseSubtopic: a course owns ordered
modules, and each module owns ordered subtopics.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import Integer, String, DateTime, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from app.core.database import Base


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Course(Base):
    """
    Course model representing a complete training program.
    """
    __tablename__ = "courses"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Basic information
    course_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    department: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    mentor_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    course_template: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    course_duration: Mapped[str] = mapped_column(String(100), nullable=False)  # free text, e.g. "6 weeks"

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
    modules = relationship(
        "CourseModule",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CourseModule.module_order"
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, course_name='{self.course_name}')>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseName": self.course_name,
            "description": self.description,
            "department": self.department,
            "mentorName": self.mentor_name,
            "courseTemplate": self.course_template,
            "courseDuration": self.course_duration,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }


class CourseModule(Base):
    """
    Module model representing an ordered unit within a course.
    """
    __tablename__ = "course_modules"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Course relationship
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )

    # Basic information
    module_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Position within the course (1-based, not enforced unique)
    module_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

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
    course = relationship("Course", back_populates="modules")
    subtopics = relationship(
        "CourseSubtopic",
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CourseSubtopic.subtopic_order"
    )

    # Table constraints
    __table_args__ = (
        CheckConstraint("duration_days >= 0", name="check_module_duration_positive"),
        Index("idx_module_course_order", "course_id", "module_order"),
    )

    def __repr__(self) -> str:
        return f"<CourseModule(id={self.id}, module_name='{self.module_name}', course_id={self.course_id})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseId": self.course_id,
            "moduleName": self.module_name,
            "description": self.description,
            "durationDays": self.duration_days,
            "moduleOrder": self.module_order,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }


class CourseSubtopic(Base):
    """
    Subtopic model representing an ordered lesson within a module.
    """
    __tablename__ = "course_subtopics"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Module relationship
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("course_modules.id", ondelete="CASCADE"), nullable=False
    )

    # Basic information
    subtopic_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    training_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Position within the module (1-based, not enforced unique)
    subtopic_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

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
    module = relationship("CourseModule", back_populates="subtopics")

    # Table constraints
    __table_args__ = (
        CheckConstraint("duration_days >= 0", name="check_subtopic_duration_positive"),
        Index("idx_subtopic_module_order", "module_id", "subtopic_order"),
    )

    def __repr__(self) -> str:
        return f"<CourseSubtopic(id={self.id}, subtopic_name='{self.subtopic_name}', module_id={self.module_id})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "moduleId": self.module_id,
            "subtopicName": self.subtopic_name,
            "description": self.description,
            "durationDays": self.duration_days,
            "trainingBy": self.training_by,
            "subtopicOrder": self.subtopic_order,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }
