"""
Role checks for Training Hub.

Pure set membership, kept apart from request handling so the gate can be
exercised without HTTP.
"""

from typing import Iterable, Optional

from app.models.user import UserRole


ADMIN_ONLY = (UserRole.ADMIN,)
CONTENT_EDITORS = (UserRole.ADMIN, UserRole.MENTOR)

DASHBOARD_URLS = {
    UserRole.ADMIN: "/admin-dashboard",
    UserRole.MENTOR: "/mentor-dashboard",
    UserRole.TRAINEE: "/trainee-dashboard",
}


def is_role_allowed(role: Optional[str], required_roles: Iterable[str]) -> bool:
    """
    Return True when ``role`` is one of ``required_roles``.

    Unknown or missing roles are always denied.
    """
    if not role:
        return False
    try:
        caller = UserRole(role)
    except ValueError:
        return False
    return caller in {UserRole(r) for r in required_roles}


def dashboard_url_for(role: str) -> Optional[str]:
    try:
        return DASHBOARD_URLS[UserRole(role)]
    except ValueError:
        return None
