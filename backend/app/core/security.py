"""
Security utilities for Training Hub.

Handles password hashing, JWT token creation/verification, and the
password rules applied at registration.
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings


# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

WEAK_PASSWORDS = {"123456", "password", "admin", "user", "123456789", "qwerty", "abc123"}
MIN_PASSWORD_LENGTH = 6


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        bool: True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        str: The hashed password
    """
    return pwd_context.hash(password)


def create_access_token(
    subject: str | Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The subject of the token (usually the username)
        expires_delta: Optional custom expiration time
        additional_claims: Optional additional claims to include in the token

    Returns:
        str: The encoded JWT token
    """
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode = {"exp": expire}

    # Handle subject
    if isinstance(subject, str):
        to_encode["sub"] = subject
    elif isinstance(subject, dict):
        to_encode.update(subject)

    if additional_claims:
        to_encode.update(additional_claims)

    to_encode["iat"] = datetime.utcnow()

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token to verify

    Returns:
        Optional[Dict[str, Any]]: The decoded token payload if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def check_password_rules(password: str, username: str, email: str) -> Optional[str]:
    """
    Check a new password against the registration rules.

    Returns:
        Optional[str]: The first rule violation, or None when the password is acceptable
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."

    lowered = password.lower()
    if lowered in WEAK_PASSWORDS:
        return "Password is too weak. Please choose a stronger password."

    local_part = email.split("@")[0].lower()
    if username.lower() in lowered or (local_part and local_part in lowered):
        return "Password should not contain your username or email."

    return None
