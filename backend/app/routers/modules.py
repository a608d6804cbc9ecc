"""
Modules router for Training Hub.

Single-module CRUD and reordering within a course. Every write requires an
admin or mentor and runs inside a ``UnitOfWork``.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy import func
import logging

from app.core.database import get_db
from app.core.exceptions import NotFound, ValidationFailed
from app.core.permissions import CONTENT_EDITORS
from app.core.responses import success_response
from app.models.course import Course, CourseModule, CourseSubtopic
from app.models.user import User
from app.routers.auth import get_current_user, require_roles
from app.schemas.course import ModuleCreate, ModuleUpdate, ModuleReorder
from app.services.course_service import get_course_hierarchy
from app.services.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)

router = APIRouter()


def get_module_or_404(db: Session, module_id: int) -> CourseModule:
    module = db.get(CourseModule, module_id)
    if module is None:
        raise NotFound("Module not found")
    return module


def module_with_subtopics(db: Session, module: CourseModule) -> Dict[str, Any]:
    subtopics = db.query(CourseSubtopic).filter(
        CourseSubtopic.module_id == module.id
    ).order_by(CourseSubtopic.subtopic_order, CourseSubtopic.id).all()

    data = module.to_dict()
    data["subtopics"] = [subtopic.to_dict() for subtopic in subtopics]
    return data


def next_module_order(db: Session, course_id: int) -> int:
    current_max = db.query(
        func.coalesce(func.max(CourseModule.module_order), 0)
    ).filter(CourseModule.course_id == course_id).scalar()
    return current_max + 1


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_module(
    module_data: ModuleCreate,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Add a module to a course, appended after the last one unless
    ``moduleOrder`` is given.
    """
    module_name = module_data.module_name.strip()
    if not module_name:
        raise ValidationFailed("Module name is required")
    if db.get(Course, module_data.course_id) is None:
        raise NotFound("Course not found")

    module_order = module_data.module_order
    if module_order is None:
        module_order = next_module_order(db, module_data.course_id)

    with UnitOfWork(db, name="Module creation", error_context="Failed to create module") as uow:
        module = CourseModule(
            course_id=module_data.course_id,
            module_name=module_name,
            description=module_data.description,
            duration_days=module_data.duration_days,
            module_order=module_order
        )
        db.add(module)
        uow.flush()
        module_id = module.id

    logger.info(f"Module {module_id} added to course {module_data.course_id} at position {module_order}")
    module = get_module_or_404(db, module_id)
    return success_response(data=module_with_subtopics(db, module), message="Module created successfully")


@router.get("/course/{course_id}")
async def list_course_modules(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List a course's modules in order, each with its ordered subtopics.
    """
    course = get_course_hierarchy(db, course_id)
    return success_response(data=course["modules"])


@router.put("/course/{course_id}/reorder")
async def reorder_modules(
    course_id: int,
    reorder: ModuleReorder,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Assign new positions to modules of one course; all or nothing.
    """
    if db.get(Course, course_id) is None:
        raise NotFound("Course not found")

    requested_ids = {item.id for item in reorder.module_orders}
    modules = db.query(CourseModule).filter(
        CourseModule.course_id == course_id,
        CourseModule.id.in_(requested_ids)
    ).all()
    if len(modules) != len(requested_ids):
        raise ValidationFailed("One or more modules do not belong to this course")

    by_id = {module.id: module for module in modules}
    with UnitOfWork(db, name="Module reorder", error_context="Failed to reorder modules"):
        for item in reorder.module_orders:
            by_id[item.id].module_order = item.module_order

    course = get_course_hierarchy(db, course_id)
    return success_response(data=course["modules"], message="Modules reordered successfully")


@router.get("/{module_id}")
async def get_module(
    module_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    module = get_module_or_404(db, module_id)
    return success_response(data=module_with_subtopics(db, module))


@router.put("/{module_id}")
async def update_module(
    module_id: int,
    module_data: ModuleUpdate,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    module = get_module_or_404(db, module_id)
    changes = module_data.model_dump(exclude_unset=True, exclude_none=True)
    changes["module_name"] = changes["module_name"].strip()
    if not changes["module_name"]:
        raise ValidationFailed("Module name is required")

    with UnitOfWork(db, name="Module update", error_context="Failed to update module"):
        for field, value in changes.items():
            setattr(module, field, value)

    db.refresh(module)
    return success_response(data=module_with_subtopics(db, module), message="Module updated successfully")


@router.delete("/{module_id}")
async def delete_module(
    module_id: int,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Delete a module and its subtopics.
    """
    module = get_module_or_404(db, module_id)
    with UnitOfWork(db, name="Module deletion", error_context="Failed to delete module"):
        db.delete(module)

    logger.info(f"Module {module_id} deleted")
    return success_response(message="Module deleted successfully")
