"""
Authentication API Endpoints for Hive Portal.

Handles admin login, logout and the current-session lookup.
"""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Cookie, HTTPException, Request, Response
from pydantic import BaseModel, Field

from portal.core.config import get_settings
from portal.core.dependencies import CurrentUser, DbSession
from portal.core.exceptions import AuthError
from portal.middleware.security import limiter
from portal.models.user import User
from portal.services.auth_service import (
    authenticate_user,
    create_access_token,
    create_session,
    invalidate_session,
    is_admin,
)

router = APIRouter(prefix="/auth")
settings = get_settings()


# ============== Request/Response Models ==============

class LoginRequest(BaseModel):
    """Admin login request."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class UserResponse(BaseModel):
    """User data response."""

    id: str
    email: str
    display_name: str | None
    role: str
    is_admin: bool

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            display_name=user.display_name,
            role=user.role,
            is_admin=is_admin(user),
        )


class AuthResponse(BaseModel):
    """Authentication response with user data and tokens."""

    user: UserResponse
    access_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None


# ============== Endpoints ==============

@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.login_rate)
async def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    session: DbSession,
) -> AuthResponse:
    """
    Authenticate and create a session.

    On success, creates a session cookie for browser clients
    and returns an access token for API clients.
    """
    try:
        user = await authenticate_user(session, data.email, data.password)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    session_id = await create_session(user_id=str(user.id))

    response.set_cookie(
        key="session_id",
        value=session_id,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        max_age=60 * 60 * 24 * settings.session_expire_days,
    )

    access_token = create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )

    return AuthResponse(
        user=UserResponse.from_user(user),
        access_token=access_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post("/logout")
async def logout(
    response: Response,
    session_cookie: Annotated[str | None, Cookie(alias="session_id")] = None,
) -> dict[str, str]:
    """
    Logout and invalidate the current session.

    Clears the session cookie and invalidates the session in Redis.
    """
    if session_cookie:
        await invalidate_session(session_cookie)

    response.delete_cookie(key="session_id")
    return {"message": "Successfully logged out"}


@router.get("/me", response_model=UserResponse)
async def get_me(user: CurrentUser) -> UserResponse:
    """Get the current authenticated user's information."""
    return UserResponse.from_user(user)
