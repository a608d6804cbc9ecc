"""
Course aggregate service for Training Hub.

Holds the two operations that treat a course and its modules/subtopics as
one unit:

- ``create_course_aggregate`` inserts a course, its modules and their
  subtopics inside a single ``UnitOfWork``; any failure leaves nothing behind.
- ``get_course_hierarchy`` / ``list_course_hierarchies`` read the whole tree
  with one left-joined query and rebuild it with ``build_course_tree``.

Flat course CRUD and statistics live here too so the routers stay thin.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationFailed
from app.models.course import Course, CourseModule, CourseSubtopic
from app.schemas.course import CourseAggregateCreate, CourseFields
from app.services.hierarchy import build_course_tree
from app.services.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)

REQUIRED_COURSE_FIELDS_MESSAGE = (
    "Course name, description, department, mentor name, and course duration are required"
)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _positive(value: Optional[int]) -> bool:
    return value is not None and value > 0


def validate_course_fields(payload: CourseFields) -> Dict[str, Any]:
    """
    Trim and check the course columns.

    Returns:
        Dict[str, Any]: column values ready for ``Course(**values)``

    Raises:
        ValidationFailed: when any required field is missing or blank
    """
    values = {
        "course_name": _clean(payload.course_name),
        "description": _clean(payload.description),
        "department": _clean(payload.department),
        "mentor_name": _clean(payload.mentor_name),
        "course_duration": _clean(payload.course_duration),
    }
    if not all(values.values()):
        raise ValidationFailed(REQUIRED_COURSE_FIELDS_MESSAGE)
    values["course_template"] = _clean(payload.course_template)
    return values


# Hierarchy reads

def hierarchy_query():
    """Left join course -> modules -> subtopics, ordered by position."""
    return (
        select(
            Course.id.label("id"),
            Course.course_name.label("course_name"),
            Course.description.label("description"),
            Course.department.label("department"),
            Course.mentor_name.label("mentor_name"),
            Course.course_template.label("course_template"),
            Course.course_duration.label("course_duration"),
            Course.created_at.label("created_at"),
            Course.updated_at.label("updated_at"),
            CourseModule.id.label("module_id"),
            CourseModule.module_name.label("module_name"),
            CourseModule.description.label("module_description"),
            CourseModule.duration_days.label("module_duration_days"),
            CourseModule.module_order.label("module_order"),
            CourseModule.created_at.label("module_created_at"),
            CourseModule.updated_at.label("module_updated_at"),
            CourseSubtopic.id.label("subtopic_id"),
            CourseSubtopic.subtopic_name.label("subtopic_name"),
            CourseSubtopic.description.label("subtopic_description"),
            CourseSubtopic.duration_days.label("subtopic_duration_days"),
            CourseSubtopic.training_by.label("training_by"),
            CourseSubtopic.subtopic_order.label("subtopic_order"),
            CourseSubtopic.created_at.label("subtopic_created_at"),
            CourseSubtopic.updated_at.label("subtopic_updated_at"),
        )
        .select_from(Course)
        .outerjoin(CourseModule, CourseModule.course_id == Course.id)
        .outerjoin(CourseSubtopic, CourseSubtopic.module_id == CourseModule.id)
        .order_by(
            Course.id,
            CourseModule.module_order.asc(),
            CourseModule.id.asc(),
            CourseSubtopic.subtopic_order.asc(),
            CourseSubtopic.id.asc(),
        )
    )


def get_course_hierarchy(db: Session, course_id: int) -> Dict[str, Any]:
    """
    Fetch one course with all of its modules and subtopics.

    Raises:
        NotFound: when no course has ``course_id``
    """
    rows = db.execute(hierarchy_query().where(Course.id == course_id)).mappings().all()
    courses = build_course_tree(rows)
    if not courses:
        raise NotFound("Course not found")
    return courses[0]


def list_course_hierarchies(db: Session) -> List[Dict[str, Any]]:
    rows = db.execute(hierarchy_query()).mappings().all()
    return build_course_tree(rows)


# Aggregate write

def create_course_aggregate(db: Session, payload: CourseAggregateCreate) -> Dict[str, Any]:
    """
    Create a course with its modules and subtopics in one transaction.

    Modules take positions 1..N in input order, subtopics 1..M within their
    module. A subtopic without ``trainingBy`` is trained by the course mentor.

    Returns:
        Dict[str, Any]: the stored course tree, read back through the hierarchy query

    Raises:
        ValidationFailed: missing course fields or empty module list (nothing
            written), or a module/subtopic missing required fields (rolled back)
        TransactionFailed: the store rejected a statement (rolled back)
    """
    course_values = validate_course_fields(payload)

    modules = payload.modules
    if not modules:
        raise ValidationFailed("At least one module is required")

    course_name = course_values["course_name"]
    mentor_name = course_values["mentor_name"]

    with UnitOfWork(db, name=f"Creation of course '{course_name}'") as uow:
        course = Course(**course_values)
        db.add(course)
        uow.flush()
        course_id = course.id
        logger.info(f"Course created with ID: {course_id}")

        for i, module_data in enumerate(modules):
            module_name = _clean(module_data.module_name)
            module_description = _clean(module_data.description)
            if not module_name or not module_description or not _positive(module_data.duration_days):
                raise ValidationFailed(
                    f"Module {i + 1} is missing required fields (moduleName, description, durationDays)"
                )

            module = CourseModule(
                course_id=course_id,
                module_name=module_name,
                description=module_description,
                duration_days=module_data.duration_days,
                module_order=i + 1,
            )
            db.add(module)
            uow.flush()
            logger.info(f"Module \"{module_name}\" created with ID: {module.id}")

            subtopics = module_data.subtopics or []
            for j, subtopic_data in enumerate(subtopics):
                subtopic_name = _clean(subtopic_data.subtopic_name)
                subtopic_description = _clean(subtopic_data.description)
                if not subtopic_name or not subtopic_description or not _positive(subtopic_data.duration_days):
                    raise ValidationFailed(
                        f"Subtopic {j + 1} in module \"{module_name}\" is missing required fields "
                        f"(subtopicName, description, durationDays)"
                    )

                db.add(CourseSubtopic(
                    module_id=module.id,
                    subtopic_name=subtopic_name,
                    description=subtopic_description,
                    duration_days=subtopic_data.duration_days,
                    training_by=_clean(subtopic_data.training_by) or mentor_name,
                    subtopic_order=j + 1,
                ))
                uow.flush()

            if subtopics:
                logger.info(f"Added {len(subtopics)} subtopics to module \"{module_name}\"")

    return get_course_hierarchy(db, course_id)


# Flat course CRUD

def get_course_or_404(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFound("Course not found")
    return course


def create_course(db: Session, payload: CourseFields) -> Course:
    values = validate_course_fields(payload)
    with UnitOfWork(db, name="Course creation", error_context="Failed to create course") as uow:
        course = Course(**values)
        db.add(course)
        uow.flush()
        course_id = course.id
    logger.info(f"Course created with ID: {course_id}")
    return get_course_or_404(db, course_id)


def update_course(db: Session, course_id: int, payload: CourseFields) -> Course:
    values = validate_course_fields(payload)
    course = get_course_or_404(db, course_id)
    with UnitOfWork(db, name="Course update", error_context="Failed to update course"):
        for field, value in values.items():
            setattr(course, field, value)
    db.refresh(course)
    return course


def delete_course(db: Session, course_id: int) -> None:
    """Delete a course; its modules and subtopics go with it."""
    course = get_course_or_404(db, course_id)
    with UnitOfWork(db, name="Course deletion", error_context="Failed to delete course"):
        db.delete(course)
    logger.info(f"Course {course_id} deleted")


def list_courses(db: Session, department: Optional[str] = None, mentor_name: Optional[str] = None) -> List[Course]:
    query = db.query(Course)
    if department:
        query = query.filter(Course.department == department)
    if mentor_name:
        query = query.filter(Course.mentor_name == mentor_name)
    return query.order_by(Course.created_at.desc(), Course.id.desc()).all()


def get_course_statistics(db: Session, course_id: int) -> Dict[str, Any]:
    course = get_course_or_404(db, course_id)

    module_count, total_duration = db.query(
        func.count(CourseModule.id),
        func.coalesce(func.sum(CourseModule.duration_days), 0)
    ).filter(CourseModule.course_id == course_id).one()

    subtopic_count = db.query(func.count(CourseSubtopic.id)).join(
        CourseModule, CourseModule.id == CourseSubtopic.module_id
    ).filter(CourseModule.course_id == course_id).scalar()

    return {
        "id": course.id,
        "courseName": course.course_name,
        "moduleCount": module_count,
        "subtopicCount": subtopic_count,
        "totalDuration": total_duration,
    }
