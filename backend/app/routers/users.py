"""
User administration router for Training Hub.

Admin-only: the router is mounted with an admin role dependency in
``app.routers``. Handles account CRUD, filtering, statistics, bulk status
changes and CSV export.
"""

from typing import Dict, Any, Optional
import csv
import io
import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from sqlalchemy import func, or_

from app.core.database import get_db
from app.core.exceptions import NotFound, ValidationFailed
from app.core.permissions import ADMIN_ONLY
from app.core.responses import success_response, pagination_meta
from app.core.security import get_password_hash
from app.models.course import Course
from app.models.user import User, UserRole, UserStatus
from app.routers.auth import require_roles
from app.schemas.user import UserCreate, UserUpdate, PasswordChange, BulkStatusUpdate
from app.services.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)

router = APIRouter()

CSV_COLUMNS = [
    "id", "username", "email", "role", "first_name", "last_name",
    "phone", "department", "status", "enrolled_course_name",
    "assigned_mentor_name", "created_at"
]


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def check_assignments(db: Session, enrolled_course_id: Optional[int], assigned_mentor_id: Optional[int]) -> None:
    """Enrollment must name an existing course and the mentor must hold the mentor role."""
    if enrolled_course_id is not None and db.get(Course, enrolled_course_id) is None:
        raise NotFound("Course not found")
    if assigned_mentor_id is not None:
        mentor = db.get(User, assigned_mentor_id)
        if mentor is None or mentor.role != UserRole.MENTOR.value:
            raise ValidationFailed("Assigned mentor must be an existing mentor")


def check_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None) -> None:
    if email:
        query = db.query(User).filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ValidationFailed("Email already registered")
    if username:
        query = db.query(User).filter(User.username == username)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ValidationFailed("Username already taken")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    check_unique(db, user_data.username, user_data.email)
    check_assignments(db, user_data.enrolled_course_id, user_data.assigned_mentor_id)

    with UnitOfWork(db, name="User creation", error_context="Failed to create user") as uow:
        user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            role=user_data.role.value,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            phone=user_data.phone,
            department=user_data.department,
            enrolled_course_id=user_data.enrolled_course_id,
            assigned_mentor_id=user_data.assigned_mentor_id
        )
        db.add(user)
        uow.flush()
        user_id = user.id

    logger.info(f"User {user_data.username} created with role {user_data.role.value}")
    return success_response(data=get_user_or_404(db, user_id).to_dict(), message="User created successfully")


@router.get("/")
async def list_users(
    role: Optional[UserRole] = None,
    department: Optional[str] = None,
    status_filter: Optional[UserStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List users, newest first, with optional filters and paging.
    """
    query = db.query(User)

    if role:
        query = query.filter(User.role == role.value)
    if department:
        query = query.filter(User.department == department)
    if status_filter:
        query = query.filter(User.status == status_filter.value)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                User.username.ilike(search_term),
                User.email.ilike(search_term),
                User.first_name.ilike(search_term),
                User.last_name.ilike(search_term)
            )
        )

    total = query.count()
    users = query.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()

    return success_response(data={
        "users": [user.to_dict() for user in users],
        "pagination": pagination_meta(page, limit, total)
    })


@router.get("/statistics")
async def get_user_statistics(
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Totals by status and by role.
    """
    by_status = dict(db.query(User.status, func.count(User.id)).group_by(User.status).all())
    by_role = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())

    return success_response(data={
        "total": sum(by_status.values()),
        "active": by_status.get(UserStatus.ACTIVE.value, 0),
        "inactive": by_status.get(UserStatus.INACTIVE.value, 0),
        "by_role": {role.value: by_role.get(role.value, 0) for role in UserRole}
    })


@router.get("/departments")
async def list_departments(
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    rows = db.query(User.department).filter(
        User.department.isnot(None),
        User.department != ""
    ).distinct().order_by(User.department).all()
    return success_response(data=[row[0] for row in rows])


@router.get("/export")
async def export_users(
    db: Session = Depends(get_db)
) -> StreamingResponse:
    """
    Export all users as CSV.
    """
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    for user in users:
        writer.writerow(user.to_dict())

    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={
            "Content-Disposition": "attachment; filename=users.csv"
        }
    )


@router.put("/bulk-status")
async def bulk_update_status(
    bulk: BulkStatusUpdate,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    users = db.query(User).filter(User.id.in_(bulk.user_ids)).all()
    if not users:
        raise NotFound("No matching users found")

    with UnitOfWork(db, name="Bulk status update", error_context="Failed to update user status"):
        for user in users:
            user.status = bulk.status.value

    logger.info(f"Set status {bulk.status.value} on {len(users)} users")
    return success_response(
        data={"updated": len(users)},
        message=f"{len(users)} users updated successfully"
    )


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success_response(data=get_user_or_404(db, user_id).to_dict())


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    user = get_user_or_404(db, user_id)
    changes = user_data.model_dump(exclude_unset=True)

    check_unique(db, None, changes.get("email"), exclude_id=user_id)
    check_assignments(db, changes.get("enrolled_course_id"), changes.get("assigned_mentor_id"))

    for field in ("role", "status"):
        if changes.get(field) is not None:
            changes[field] = changes[field].value

    with UnitOfWork(db, name="User update", error_context="Failed to update user"):
        for field, value in changes.items():
            if value is None and field not in ("phone", "department", "enrolled_course_id", "assigned_mentor_id"):
                continue
            setattr(user, field, value)

    db.refresh(user)
    return success_response(data=user.to_dict(), message="User updated successfully")


@router.put("/{user_id}/password")
async def change_password(
    user_id: int,
    password_data: PasswordChange,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    user = get_user_or_404(db, user_id)
    with UnitOfWork(db, name="Password change", error_context="Failed to change password"):
        user.hashed_password = get_password_hash(password_data.new_password)

    logger.info(f"Password changed for user {user_id}")
    return success_response(message="Password updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_roles(*ADMIN_ONLY)),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    if current_user.id == user_id:
        raise ValidationFailed("You cannot delete your own account")

    user = get_user_or_404(db, user_id)
    with UnitOfWork(db, name="User deletion", error_context="Failed to delete user"):
        db.delete(user)

    logger.info(f"User {user_id} deleted")
    return success_response(message="User deleted successfully")
