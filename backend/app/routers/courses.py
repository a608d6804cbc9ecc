"""
Courses router for Training Hub.

Flat course CRUD plus the aggregate endpoints: ``POST /complete`` writes a
course with all of its modules and subtopics atomically, and the hierarchy
endpoints return courses as nested trees.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import CONTENT_EDITORS
from app.core.responses import success_response
from app.models.user import User
from app.routers.auth import get_current_user, require_roles
from app.schemas.course import CourseCreate, CourseUpdate, CourseAggregateCreate
from app.services import course_service


router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_course(
    course_data: CourseCreate,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Create a course without modules.
    """
    course = course_service.create_course(db, course_data)
    return success_response(data=course.to_dict(), message="Course created successfully")


@router.post("/complete", status_code=status.HTTP_201_CREATED)
async def create_complete_course(
    course_data: CourseAggregateCreate,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Create a course with its modules and subtopics in one transaction.
    """
    tree = course_service.create_course_aggregate(db, course_data)
    return success_response(data=tree, message="Course with modules and subtopics created successfully")


@router.get("/")
async def list_courses(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List all courses with their modules and subtopics.
    """
    return success_response(data=course_service.list_course_hierarchies(db))


@router.get("/hierarchy")
async def list_course_hierarchies(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success_response(data=course_service.list_course_hierarchies(db))


@router.get("/department/{department}")
async def list_courses_by_department(
    department: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    courses = course_service.list_courses(db, department=department)
    return success_response(data=[course.to_dict() for course in courses])


@router.get("/mentor/{mentor_name}")
async def list_courses_by_mentor(
    mentor_name: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    courses = course_service.list_courses(db, mentor_name=mentor_name)
    return success_response(data=[course.to_dict() for course in courses])


@router.get("/{course_id}")
async def get_course(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    course = course_service.get_course_or_404(db, course_id)
    return success_response(data=course.to_dict())


@router.get("/{course_id}/hierarchy")
async def get_course_hierarchy(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get one course as a tree of ordered modules and subtopics.
    """
    return success_response(data=course_service.get_course_hierarchy(db, course_id))


@router.get("/{course_id}/statistics")
async def get_course_statistics(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success_response(data=course_service.get_course_statistics(db, course_id))


@router.put("/{course_id}")
async def update_course(
    course_id: int,
    course_data: CourseUpdate,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    course = course_service.update_course(db, course_id, course_data)
    return success_response(data=course.to_dict(), message="Course updated successfully")


@router.delete("/{course_id}")
async def delete_course(
    course_id: int,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Delete a course together with its modules and subtopics.
    """
    course_service.delete_course(db, course_id)
    return success_response(message="Course deleted successfully")
