"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field

from edutrack.modules.users.schemas import UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    """Token pair; ``refresh_token`` is omitted when refreshing."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"


class LoginResponse(TokenResponse):
    user: UserResponse
