"""
Class schedule router for Training Hub.

Anyone signed in can browse classes; creating, editing and deleting them is
reserved for admins.
"""

from datetime import datetime
from typing import Dict, Any, Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotFound, ValidationFailed
from app.core.permissions import ADMIN_ONLY
from app.core.responses import success_response, pagination_meta
from app.models.class_schedule import ClassSchedule
from app.models.course import Course
from app.models.user import User
from app.routers.auth import get_current_user, require_roles
from app.schemas.class_schedule import ClassScheduleCreate, ClassScheduleUpdate
from app.services.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)

router = APIRouter()


def get_class_or_404(db: Session, class_id: int) -> ClassSchedule:
    class_schedule = db.get(ClassSchedule, class_id)
    if class_schedule is None:
        raise NotFound("Class schedule not found")
    return class_schedule


def upcoming_filter(now: Optional[datetime] = None):
    """SQL condition for classes starting after ``now``."""
    now = now or datetime.now()
    return or_(
        ClassSchedule.class_date > now.date(),
        and_(ClassSchedule.class_date == now.date(), ClassSchedule.class_time > now.time())
    )


def schedule_order(query):
    return query.order_by(ClassSchedule.class_date.desc(), ClassSchedule.class_time.asc(), ClassSchedule.id.asc())


def upcoming_classes(db: Session) -> list:
    return db.query(ClassSchedule).filter(upcoming_filter()).order_by(
        ClassSchedule.class_date.asc(),
        ClassSchedule.class_time.asc(),
        ClassSchedule.id.asc()
    ).all()


def check_course(db: Session, course_id: Optional[int]) -> None:
    if course_id is not None and db.get(Course, course_id) is None:
        raise NotFound("Course not found")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_class(
    class_data: ClassScheduleCreate,
    current_user: User = Depends(require_roles(*ADMIN_ONLY)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Schedule a class. The start must lie in the future.
    """
    if datetime.combine(class_data.class_date, class_data.class_time) <= datetime.now():
        raise ValidationFailed("Class date and time must be in the future")
    check_course(db, class_data.course_id)

    with UnitOfWork(db, name="Class scheduling", error_context="Failed to create class schedule") as uow:
        class_schedule = ClassSchedule(
            class_title=class_data.class_title,
            description=class_data.description,
            course_id=class_data.course_id,
            mentor_name=class_data.mentor_name,
            class_date=class_data.class_date,
            class_time=class_data.class_time,
            duration=class_data.duration or settings.DEFAULT_CLASS_DURATION,
            class_type=class_data.class_type or settings.DEFAULT_CLASS_TYPE,
            max_trainees=class_data.max_trainees or settings.DEFAULT_MAX_TRAINEES,
            meeting_link=class_data.meeting_link
        )
        db.add(class_schedule)
        uow.flush()
        class_id = class_schedule.id

    logger.info(f"Class {class_id} scheduled for {class_data.class_date} {class_data.class_time}")
    return success_response(
        data=get_class_or_404(db, class_id).to_dict(),
        message="Class schedule created successfully"
    )


@router.get("/")
async def list_classes(
    course_id: Optional[int] = None,
    mentor_name: Optional[str] = None,
    upcoming: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List classes with optional filters and paging.
    """
    query = db.query(ClassSchedule)
    if course_id is not None:
        query = query.filter(ClassSchedule.course_id == course_id)
    if mentor_name:
        query = query.filter(ClassSchedule.mentor_name == mentor_name)

    if upcoming:
        query = query.filter(upcoming_filter()).order_by(
            ClassSchedule.class_date.asc(), ClassSchedule.class_time.asc(), ClassSchedule.id.asc()
        )
    else:
        query = schedule_order(query)

    total = query.count()
    classes = query.offset((page - 1) * limit).limit(limit).all()

    return success_response(
        message="Classes retrieved successfully",
        data={
            "classes": [class_schedule.to_dict() for class_schedule in classes],
            "pagination": pagination_meta(page, limit, total)
        }
    )


@router.get("/upcoming")
async def list_upcoming_classes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success_response(data=[class_schedule.to_dict() for class_schedule in upcoming_classes(db)])


@router.get("/course/{course_id}")
async def list_course_classes(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    classes = schedule_order(db.query(ClassSchedule).filter(ClassSchedule.course_id == course_id)).all()
    return success_response(data=[class_schedule.to_dict() for class_schedule in classes])


@router.get("/mentor/{mentor_name}")
async def list_mentor_classes(
    mentor_name: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    classes = schedule_order(db.query(ClassSchedule).filter(ClassSchedule.mentor_name == mentor_name)).all()
    return success_response(data=[class_schedule.to_dict() for class_schedule in classes])


@router.get("/{class_id}")
async def get_class(
    class_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success_response(data=get_class_or_404(db, class_id).to_dict())


@router.put("/{class_id}")
async def update_class(
    class_id: int,
    class_data: ClassScheduleUpdate,
    current_user: User = Depends(require_roles(*ADMIN_ONLY)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    class_schedule = get_class_or_404(db, class_id)
    changes = class_data.model_dump(exclude_unset=True)
    check_course(db, changes.get("course_id"))

    with UnitOfWork(db, name="Class update", error_context="Failed to update class schedule"):
        for field, value in changes.items():
            if value is None and field not in ("course_id", "meeting_link"):
                continue
            setattr(class_schedule, field, value)

    db.refresh(class_schedule)
    return success_response(data=class_schedule.to_dict(), message="Class schedule updated successfully")


@router.delete("/{class_id}")
async def delete_class(
    class_id: int,
    current_user: User = Depends(require_roles(*ADMIN_ONLY)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    class_schedule = get_class_or_404(db, class_id)
    with UnitOfWork(db, name="Class deletion", error_context="Failed to delete class schedule"):
        db.delete(class_schedule)

    logger.info(f"Class {class_id} deleted")
    return success_response(message="Class schedule deleted successfully")
