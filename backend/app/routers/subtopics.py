"""
Subtopics router for Training Hub.

Subtopic CRUD, bulk insertion into a module, and reordering. A subtopic
created without ``trainingBy`` is trained by the owning course's mentor.
"""

from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy import func
import logging

from app.core.database import get_db
from app.core.exceptions import NotFound, ValidationFailed
from app.core.permissions import CONTENT_EDITORS
from app.core.responses import success_response
from app.models.course import CourseSubtopic
from app.models.user import User
from app.routers.auth import get_current_user, require_roles
from app.routers.modules import get_module_or_404
from app.schemas.course import SubtopicCreate, SubtopicBulkCreate, SubtopicUpdate, SubtopicReorder
from app.services.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)

router = APIRouter()


def get_subtopic_or_404(db: Session, subtopic_id: int) -> CourseSubtopic:
    subtopic = db.get(CourseSubtopic, subtopic_id)
    if subtopic is None:
        raise NotFound("Subtopic not found")
    return subtopic


def next_subtopic_order(db: Session, module_id: int) -> int:
    current_max = db.query(
        func.coalesce(func.max(CourseSubtopic.subtopic_order), 0)
    ).filter(CourseSubtopic.module_id == module_id).scalar()
    return current_max + 1


def module_subtopics(db: Session, module_id: int) -> list:
    subtopics = db.query(CourseSubtopic).filter(
        CourseSubtopic.module_id == module_id
    ).order_by(CourseSubtopic.subtopic_order, CourseSubtopic.id).all()
    return [subtopic.to_dict() for subtopic in subtopics]


def subtopic_detail(subtopic: CourseSubtopic) -> Dict[str, Any]:
    data = subtopic.to_dict()
    module = subtopic.module
    data["moduleName"] = module.module_name
    data["courseId"] = module.course_id
    data["courseName"] = module.course.course_name
    return data


def _required_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationFailed("Subtopic name is required")
    return name


def _trainer(training_by: Optional[str], default: str) -> str:
    if training_by and training_by.strip():
        return training_by.strip()
    return default


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_subtopic(
    subtopic_data: SubtopicCreate,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    subtopic_name = _required_name(subtopic_data.subtopic_name)
    module = get_module_or_404(db, subtopic_data.module_id)
    mentor_name = module.course.mentor_name

    subtopic_order = subtopic_data.subtopic_order
    if subtopic_order is None:
        subtopic_order = next_subtopic_order(db, module.id)

    with UnitOfWork(db, name="Subtopic creation", error_context="Failed to create subtopic") as uow:
        subtopic = CourseSubtopic(
            module_id=subtopic_data.module_id,
            subtopic_name=subtopic_name,
            description=subtopic_data.description,
            duration_days=subtopic_data.duration_days,
            training_by=_trainer(subtopic_data.training_by, mentor_name),
            subtopic_order=subtopic_order
        )
        db.add(subtopic)
        uow.flush()
        subtopic_id = subtopic.id

    logger.info(f"Subtopic {subtopic_id} added to module {subtopic_data.module_id}")
    return success_response(
        data=get_subtopic_or_404(db, subtopic_id).to_dict(),
        message="Subtopic created successfully"
    )


@router.get("/module/{module_id}")
async def list_module_subtopics(
    module_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    get_module_or_404(db, module_id)
    return success_response(data=module_subtopics(db, module_id))


@router.post("/module/{module_id}/bulk", status_code=status.HTTP_201_CREATED)
async def bulk_create_subtopics(
    module_id: int,
    bulk: SubtopicBulkCreate,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Append several subtopics to a module; either all are stored or none.
    """
    names = [_required_name(item.subtopic_name) for item in bulk.subtopics]
    module = get_module_or_404(db, module_id)
    mentor_name = module.course.mentor_name
    next_order = next_subtopic_order(db, module_id)

    with UnitOfWork(db, name="Bulk subtopic creation", error_context="Failed to create subtopics") as uow:
        for name, item in zip(names, bulk.subtopics):
            if item.subtopic_order is None:
                position = next_order
                next_order += 1
            else:
                position = item.subtopic_order
            db.add(CourseSubtopic(
                module_id=module_id,
                subtopic_name=name,
                description=item.description,
                duration_days=item.duration_days,
                training_by=_trainer(item.training_by, mentor_name),
                subtopic_order=position
            ))
        uow.flush()

    logger.info(f"Added {len(names)} subtopics to module {module_id}")
    return success_response(
        data=module_subtopics(db, module_id),
        message=f"{len(names)} subtopics created successfully"
    )


@router.put("/module/{module_id}/reorder")
async def reorder_subtopics(
    module_id: int,
    reorder: SubtopicReorder,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    get_module_or_404(db, module_id)

    requested_ids = {item.id for item in reorder.subtopic_orders}
    subtopics = db.query(CourseSubtopic).filter(
        CourseSubtopic.module_id == module_id,
        CourseSubtopic.id.in_(requested_ids)
    ).all()
    if len(subtopics) != len(requested_ids):
        raise ValidationFailed("One or more subtopics do not belong to this module")

    by_id = {subtopic.id: subtopic for subtopic in subtopics}
    with UnitOfWork(db, name="Subtopic reorder", error_context="Failed to reorder subtopics"):
        for item in reorder.subtopic_orders:
            by_id[item.id].subtopic_order = item.subtopic_order

    return success_response(data=module_subtopics(db, module_id), message="Subtopics reordered successfully")


@router.get("/{subtopic_id}")
async def get_subtopic(
    subtopic_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get a subtopic with the names of its module and course.
    """
    return success_response(data=subtopic_detail(get_subtopic_or_404(db, subtopic_id)))


@router.put("/{subtopic_id}")
async def update_subtopic(
    subtopic_id: int,
    subtopic_data: SubtopicUpdate,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    subtopic = get_subtopic_or_404(db, subtopic_id)
    changes = subtopic_data.model_dump(exclude_unset=True, exclude_none=True)
    changes["subtopic_name"] = _required_name(changes["subtopic_name"])

    with UnitOfWork(db, name="Subtopic update", error_context="Failed to update subtopic"):
        for field, value in changes.items():
            setattr(subtopic, field, value)

    db.refresh(subtopic)
    return success_response(data=subtopic.to_dict(), message="Subtopic updated successfully")


@router.delete("/{subtopic_id}")
async def delete_subtopic(
    subtopic_id: int,
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    subtopic = get_subtopic_or_404(db, subtopic_id)
    with UnitOfWork(db, name="Subtopic deletion", error_context="Failed to delete subtopic"):
        db.delete(subtopic)

    logger.info(f"Subtopic {subtopic_id} deleted")
    return success_response(message="Subtopic deleted successfully")
