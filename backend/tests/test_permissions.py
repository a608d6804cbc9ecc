"""
Role gate: the pure check and its enforcement before any write.
"""
import pytest

from app.core.permissions import ADMIN_ONLY, CONTENT_EDITORS, dashboard_url_for, is_role_allowed
from app.models import Course, CourseModule, UserRole
from conftest import API


@pytest.mark.parametrize("role,required,allowed", [
    ("admin", CONTENT_EDITORS, True),
    ("mentor", CONTENT_EDITORS, True),
    ("trainee", CONTENT_EDITORS, False),
    ("mentor", ADMIN_ONLY, False),
    ("admin", ADMIN_ONLY, True),
    ("superuser", CONTENT_EDITORS, False),
    (None, CONTENT_EDITORS, False),
    ("", ADMIN_ONLY, False),
])
def test_is_role_allowed(role, required, allowed):
    assert is_role_allowed(role, required) is allowed


def test_plain_strings_work_as_required_roles():
    assert is_role_allowed("mentor", ["admin", "mentor"])
    assert not is_role_allowed("trainee", ["admin", "mentor"])


def test_dashboard_urls():
    assert dashboard_url_for(UserRole.ADMIN.value) == "/admin-dashboard"
    assert dashboard_url_for("mentor") == "/mentor-dashboard"
    assert dashboard_url_for("trainee") == "/trainee-dashboard"
    assert dashboard_url_for("unknown") is None


@pytest.fixture
def course(db_session):
    course = Course(
        course_name="Gatekeeping",
        description="desc",
        department="Security",
        mentor_name="Mario",
        course_duration="2 weeks",
    )
    db_session.add(course)
    db_session.commit()
    return course.id


def test_trainee_module_write_is_refused_before_any_change(client, trainee_headers, course, db_session):
    response = client.post(
        f"{API}/modules/",
        json={"courseId": course, "moduleName": "Sneaky"},
        headers=trainee_headers,
    )

    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Insufficient permissions"}
    assert db_session.query(CourseModule).count() == 0


def test_mentor_module_write_is_allowed(client, mentor_headers, course):
    response = client.post(
        f"{API}/modules/",
        json={"courseId": course, "moduleName": "Allowed"},
        headers=mentor_headers,
    )

    assert response.status_code == 201


def test_missing_token_is_unauthorized(client, course):
    response = client.get(f"{API}/courses/{course}")

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_garbage_token_is_unauthorized(client, course):
    response = client.get(f"{API}/courses/{course}", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_mentor_cannot_manage_users_or_classes(client, mentor_headers):
    assert client.get(f"{API}/users/", headers=mentor_headers).status_code == 403
    response = client.post(f"{API}/classes/", headers=mentor_headers, json={
        "class_title": "Intro",
        "description": "Kickoff",
        "mentor_name": "Mario",
        "class_date": "2999-01-01",
        "class_time": "10:00:00",
    })
    assert response.status_code == 403
