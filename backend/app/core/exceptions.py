"""
Application errors for Training Hub.

Services raise these; the exception handlers registered in ``app.main``
are the only place they become HTTP responses.
"""

from fastapi import status


class LMSError(Exception):
    """Base class for errors that map onto a response status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(LMSError):
    """Missing or malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationFailed(LMSError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(LMSError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(LMSError):
    status_code = status.HTTP_404_NOT_FOUND


class RateLimited(LMSError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class TransactionFailed(LMSError):
    """A store error inside a unit of work; the transaction was rolled back."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
