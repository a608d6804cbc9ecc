"""
Authentication router for Training Hub.

Handles registration, login (by username/email or by role), token refresh,
profile lookup and logout. Also provides the authentication and role
dependencies used by every other router.
"""

from datetime import timedelta
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from sqlalchemy import or_

from app.core.database import get_db
from app.core.exceptions import AuthenticationFailed, PermissionDenied, ValidationFailed
from app.core.permissions import is_role_allowed, dashboard_url_for
from app.core.responses import success_response
from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    verify_token,
    check_password_rules
)
from app.core.config import settings
from app.models.user import User
from app.schemas.auth import UserRegister, UserLogin, RoleLogin, TokenRefresh
from app.services.unit_of_work import UnitOfWork
import logging


logger = logging.getLogger(__name__)

router = APIRouter()

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def issue_token(user: User) -> str:
    """Create an access token carrying the user's identity and role."""
    return create_access_token(
        subject=user.username,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        additional_claims={
            "user_id": user.id,
            "role": user.role,
            "email": user.email
        }
    )


# Dependencies
def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token.
    """
    payload = verify_token(token)
    if payload is None:
        raise AuthenticationFailed("Invalid or expired token")

    username: str = payload.get("sub")
    if username is None:
        raise AuthenticationFailed("Invalid or expired token")

    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise AuthenticationFailed("User not found")

    if not user.is_active:
        raise AuthenticationFailed("User account is inactive")

    return user


def require_roles(*roles: str):
    """
    Build a dependency that lets the request through only when the
    authenticated user holds one of ``roles``.
    """
    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not is_role_allowed(current_user.role, roles):
            logger.warning(f"User {current_user.username} ({current_user.role}) denied; requires {list(roles)}")
            raise PermissionDenied("Insufficient permissions")
        return current_user

    return dependency


def _find_by_login(db: Session, login: str) -> User | None:
    return db.query(User).filter(
        or_(
            User.username == login,
            User.email == login
        )
    ).first()


def _authenticate(user: User | None, password: str) -> User:
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthenticationFailed("Invalid credentials")
    if not user.is_active:
        raise PermissionDenied("User account is deactivated")
    return user


# Endpoints
@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Register a new user.
    """
    # Check if user already exists
    existing_user = db.query(User).filter(
        or_(
            User.email == user_data.email,
            User.username == user_data.username
        )
    ).first()

    if existing_user:
        if existing_user.email == user_data.email:
            raise ValidationFailed("Email already registered")
        raise ValidationFailed("Username already taken")

    problem = check_password_rules(user_data.password, user_data.username, user_data.email)
    if problem:
        raise ValidationFailed(problem)

    with UnitOfWork(db, name="Registration", error_context="Failed to register user") as uow:
        new_user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            role=user_data.role.value,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            phone=user_data.phone,
            department=user_data.department
        )
        db.add(new_user)
        uow.flush()
        user_id = new_user.id

    user = db.get(User, user_id)
    logger.info(f"User registered: {user.username} ({user.role})")

    return success_response(
        message="User registered successfully",
        data={"token": issue_token(user), "user": user.to_dict()}
    )


@router.post("/login")
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Log in with username or email.
    """
    user = _authenticate(_find_by_login(db, credentials.username), credentials.password)
    logger.info(f"User logged in: {user.username}")

    return success_response(
        message="Login successful",
        data={"token": issue_token(user), "user": user.to_dict()}
    )


@router.post("/role-login")
async def role_login(
    credentials: RoleLogin,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Log in by email and receive the dashboard for the user's role.
    """
    user = db.query(User).filter(User.email == credentials.email).first()
    user = _authenticate(user, credentials.password)

    return success_response(
        message="Login successful",
        data={
            "token": issue_token(user),
            "user": user.to_dict(),
            "role": user.role,
            "dashboardUrl": dashboard_url_for(user.role)
        }
    )


@router.post("/refresh-token")
async def refresh_token(
    token_data: TokenRefresh,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Refresh access token using existing valid token.
    """
    payload = verify_token(token_data.token)
    if payload is None:
        raise AuthenticationFailed("Invalid or expired token")

    username: str = payload.get("sub")
    user = db.query(User).filter(User.username == username).first()

    if not user or not user.is_active:
        raise AuthenticationFailed("Invalid user")

    return success_response(
        message="Token refreshed successfully",
        data={"token": issue_token(user)}
    )


@router.get("/profile")
async def get_profile(
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    """
    Get current user information.
    """
    return success_response(data=current_user.to_dict())


@router.post("/logout")
async def logout(
    current_user: User = Depends(get_current_user)
) -> Dict[str, Any]:
    """
    Logout endpoint. Tokens are stateless, so this only records the event.
    """
    logger.info(f"User logged out: {current_user.username}")
    return success_response(message="Logged out successfully")
