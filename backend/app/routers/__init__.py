"""
API routers for Training Hub.

This module contains all API route definitions organized by feature:
- auth: Registration, login and token handling
- courses: Courses and the course aggregate (modules + subtopics)
- modules: Course modules
- subtopics: Module subtopics
- users: User administration (admin only)
- classes: Class schedules
"""

from fastapi import APIRouter, Depends

from app.core.permissions import ADMIN_ONLY
from app.core.rate_limit import rate_limited
from .auth import router as auth_router, require_roles
from .courses import router as courses_router
from .modules import router as modules_router
from .subtopics import router as subtopics_router
from .users import router as users_router
from .classes import router as classes_router


# Create main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["authentication"],
    dependencies=[Depends(rate_limited("auth"))]
)

api_router.include_router(
    courses_router,
    prefix="/courses",
    tags=["courses"]
)

api_router.include_router(
    modules_router,
    prefix="/modules",
    tags=["modules"]
)

api_router.include_router(
    subtopics_router,
    prefix="/subtopics",
    tags=["subtopics"]
)

api_router.include_router(
    users_router,
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_roles(*ADMIN_ONLY))]
)

api_router.include_router(
    classes_router,
    prefix="/classes",
    tags=["classes"]
)

__all__ = ["api_router"]
