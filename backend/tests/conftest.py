"""
Pytest configuration and shared fixtures.

The environment is set before anything from ``app`` is imported so the
engine is the in-memory SQLite one and password hashing stays fast.
"""
import os

os.environ["TESTING"] = "True"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.rate_limit import RequestRateLimiter
from app.core.security import get_password_hash
from app.main import create_app
from app.models import User, UserRole
from app.routers.auth import issue_token


API = "/api/v1"
DEFAULT_PASSWORD = "Secur3Pass!"


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    import app.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app = create_app(rate_limiter=RequestRateLimiter("1000 per minute"))
    return TestClient(app)


@pytest.fixture
def make_user(db_session):
    """Insert a user directly and return it."""
    def _make_user(username: str, role: UserRole = UserRole.TRAINEE, **fields) -> User:
        user = User(
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            hashed_password=get_password_hash(fields.pop("password", DEFAULT_PASSWORD)),
            role=role.value,
            first_name=fields.pop("first_name", username.capitalize()),
            last_name=fields.pop("last_name", "Tester"),
            **fields
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user):
    return make_user("alice", UserRole.ADMIN)


@pytest.fixture
def mentor_user(make_user):
    return make_user("mario", UserRole.MENTOR)


@pytest.fixture
def trainee_user(make_user):
    return make_user("tina", UserRole.TRAINEE)


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def mentor_headers(mentor_user):
    return bearer(mentor_user)


@pytest.fixture
def trainee_headers(trainee_user):
    return bearer(trainee_user)


@pytest.fixture
def course_payload():
    """Aggregate payload: modules A, B, C; B carries subtopics x, y."""
    return {
        "courseName": "Backend Foundations",
        "description": "Services, storage and APIs",
        "department": "Engineering",
        "mentorName": "Mario Rossi",
        "courseDuration": "6 weeks",
        "modules": [
            {"moduleName": "A", "description": "First", "durationDays": 3},
            {
                "moduleName": "B",
                "description": "Second",
                "durationDays": 2,
                "subtopics": [
                    {"subtopicName": "x", "description": "Topic x", "durationDays": 1, "trainingBy": "Guest"},
                    {"subtopicName": "y", "description": "Topic y", "durationDays": 1},
                ],
            },
            {"moduleName": "C", "description": "Third", "durationDays": 4},
        ],
    }
