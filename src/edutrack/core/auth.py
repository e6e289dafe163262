"""
Authentication Module

Provides authentication dependencies for FastAPI endpoints.
This module handles JWT token validation and turns the token claims into an
``Actor`` (the authenticated caller) using the security utilities defined in
security.py. Role checks happen in the service layer via core.permissions.

SECURITY NOTE:
- Development mode auth bypass is ONLY enabled when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable test tokens
- The is_production check provides an additional safety layer
"""

import logging
import os
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from edutrack.core.config import settings
from edutrack.core.security import ACCESS_TOKEN_TYPE, decode_token
from edutrack.modules.users.models import UserRole

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)


@dataclass(frozen=True)
class Actor:
    """
    The authenticated caller.

    Populated from JWT claims after token validation.

    Attributes:
        id: User's unique identifier (also the teacher/parent profile id)
        email: User's email address
        role: User's role
        school_id: Owning school (None for super admins and parents)
        name: User's display name (optional)
    """

    id: str
    email: str
    role: UserRole
    school_id: str | None = None
    name: str | None = None

    def __str__(self) -> str:
        return f"Actor(id={self.id}, role={self.role.value}, school_id={self.school_id})"


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _is_dev_mode_safe() -> bool:
    """
    Check if development mode is safe to enable.

    Requires settings.is_development, not settings.is_production, and a
    PYTHON_ENV environment variable that is neither production nor staging.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var != "production"
        and env_var != "staging"
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


# Development mode flag - allows mock authentication for LOCAL testing ONLY
_DEVELOPMENT_MODE = _is_dev_mode_safe()

_DEV_SUPER_ADMIN = Actor(
    id="00000000-0000-0000-0000-000000000001",
    email="admin@edutrack.dev",
    role=UserRole.SUPER_ADMIN,
    name="Development Admin",
)


def actor_from_claims(payload: dict) -> Actor:
    """
    Build an Actor from decoded token claims.

    Raises:
        HTTPException 401: If required claims are missing or malformed
    """
    token_type = payload.get("type", ACCESS_TOKEN_TYPE)
    if token_type != ACCESS_TOKEN_TYPE:
        logger.warning(f"Invalid token type: {token_type}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        user_id = payload.get("sub")
        if not user_id:
            raise ValueError("Missing 'sub' claim in token")
        UUID(user_id)

        role = UserRole(payload.get("role", ""))

        return Actor(
            id=user_id,
            email=payload.get("email", ""),
            role=role,
            school_id=payload.get("school_id"),
            name=payload.get("name"),
        )
    except (ValueError, KeyError) as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def _validate_jwt_token(token: str) -> Actor:
    """
    Validate JWT token and extract the caller.

    Raises:
        HTTPException 401: If token is invalid or expired
    """
    if _DEVELOPMENT_MODE and token in ["dev-token", "test-token"]:
        logger.debug("Development mode: Using test token")
        return _DEV_SUPER_ADMIN

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    return actor_from_claims(payload)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Actor:
    """
    FastAPI dependency that validates the bearer token and returns the caller.

    Usage:
        @router.get("/classes")
        async def list_classes(actor: Actor = Depends(get_current_actor)):
            ...

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
    """
    actor = await _validate_jwt_token(credentials.credentials)
    logger.debug(f"Authenticated {actor}")
    return actor


__all__ = [
    "Actor",
    "actor_from_claims",
    "get_current_actor",
]
