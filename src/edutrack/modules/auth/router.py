"""
Authentication router.

Endpoints:
- POST /auth/login - Exchange email and password for a token pair
- POST /auth/refresh - Exchange a refresh token for a new access token
- GET /auth/me - The authenticated user
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.rate_limit import client_ip_key, enforce_rate_limit
from edutrack.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)
from edutrack.modules.auth.schemas import LoginRequest, LoginResponse, RefreshRequest, TokenResponse
from edutrack.modules.shared.schemas import ItemResponse
from edutrack.modules.users import service as user_service
from edutrack.modules.users.models import User
from edutrack.modules.users.repository import UserRepository
from edutrack.modules.users.schemas import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()

LOGIN_LIMIT = 10
LOGIN_WINDOW_SECONDS = 60


def _auth_error(status_code: int, error: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": error, "message": message})


def _access_token_for(user: User) -> str:
    return create_access_token(
        subject=str(user.id),
        additional_claims={
            "email": user.email,
            "role": user.role.value,
            "school_id": user.school_id,
            "name": f"{user.first_name} {user.last_name}",
        },
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate a user and return JWT tokens.

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 403: Account deactivated
        HTTPException 429: Too many attempts from this address
    """
    await enforce_rate_limit(client_ip_key(request, "login"), LOGIN_LIMIT, LOGIN_WINDOW_SECONDS)

    user = await UserRepository.get_by_email(db, credentials.email)
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed login attempt for {credentials.email}")
        raise _auth_error(
            status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS", "Invalid email or password."
        )

    if not user.is_active:
        logger.warning(f"Login attempt for inactive account: {credentials.email}")
        raise _auth_error(
            status.HTTP_403_FORBIDDEN, "ACCOUNT_INACTIVE", "Your account has been deactivated."
        )

    logger.info(f"User logged in: {user.id} (role: {user.role.value})")
    return {
        "access_token": _access_token_for(user),
        "refresh_token": create_refresh_token(subject=str(user.id)),
        "user": user,
    }


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    payload = decode_token(body.refresh_token)
    if payload is None or payload.get("type") != REFRESH_TOKEN_TYPE:
        raise _auth_error(
            status.HTTP_401_UNAUTHORIZED, "INVALID_TOKEN", "Invalid or expired refresh token."
        )

    user = await UserRepository.get_by_id(db, payload.get("sub", ""))
    if user is None or not user.is_active:
        logger.warning(f"Refresh rejected for user {payload.get('sub')}")
        raise _auth_error(
            status.HTTP_401_UNAUTHORIZED, "INVALID_TOKEN", "Invalid or expired refresh token."
        )

    return {"access_token": _access_token_for(user)}


@router.get("/me", response_model=ItemResponse[UserResponse])
async def me(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    user = await user_service.get_user(db, actor.id)
    return {"message": "User retrieved successfully", "item": user}
