"""
Database models for Training Hub.

This module contains all SQLAlchemy models for the application:
- User model for authentication, roles and trainee assignments
- Course models for the course/module/subtopic structure
- Class schedule model for planned sessions
"""

from app.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .user import User, UserRole, UserStatus
from .course import Course, CourseModule, CourseSubtopic
from .class_schedule import ClassSchedule

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "UserStatus",
    "Course",
    "CourseModule",
    "CourseSubtopic",
    "ClassSchedule"
]
