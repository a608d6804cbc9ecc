"""
Core building blocks for the Training Hub backend.

- config: ``settings`` loaded from the environment
- database: engine, sessions and the declarative ``Base``
- security: password hashing and JWT access tokens
- exceptions / responses: error types and the JSON envelope they map onto
- permissions / rate_limit: role checks and per-client throttling
"""

from .config import settings
from .database import Base, SessionLocal, get_db
from .exceptions import (
    LMSError,
    ValidationFailed,
    AuthenticationFailed,
    PermissionDenied,
    NotFound,
    RateLimited,
    TransactionFailed
)
from .responses import success_response, error_response

__all__ = [
    "settings",
    "Base",
    "SessionLocal",
    "get_db",
    "LMSError",
    "ValidationFailed",
    "AuthenticationFailed",
    "PermissionDenied",
    "NotFound",
    "RateLimited",
    "TransactionFailed",
    "success_response",
    "error_response"
]
