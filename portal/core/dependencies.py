"""
FastAPI Dependencies for Hive Portal.

Reusable dependencies for database access, workflow services,
authentication and the admin guard.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_db
from portal.core.exceptions import AuthError
from portal.models.user import User
from portal.services.auth_service import (
    decode_token,
    get_current_user_from_session,
    get_user,
    is_admin,
)
from portal.services.content_service import ContentService
from portal.services.draft_service import DraftService
from portal.services.record_store import RecordStore
from portal.services.wishlist_service import WishlistService

# Security scheme for API documentation
security = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database sessions."""
    async for session in get_db():
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_store(session: DbSession) -> RecordStore:
    return RecordStore(session)


Store = Annotated[RecordStore, Depends(get_store)]


def get_draft_service(store: Store) -> DraftService:
    return DraftService(store)


def get_wishlist_service(store: Store) -> WishlistService:
    return WishlistService(store)


def get_content_service(store: Store) -> ContentService:
    return ContentService(store)


Drafts = Annotated[DraftService, Depends(get_draft_service)]
Wishes = Annotated[WishlistService, Depends(get_wishlist_service)]
Content = Annotated[ContentService, Depends(get_content_service)]


async def get_current_user(
    session: DbSession,
    session_cookie: Annotated[str | None, Cookie(alias="session_id")] = None,
    authorization: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
) -> User:
    """
    Get the currently authenticated user.

    Supports both session cookies and Bearer tokens.
    Session cookies are preferred for browser clients.
    Bearer tokens are supported for API clients.

    Raises:
        HTTPException: If authentication fails
    """
    # Try session cookie first (for browser clients)
    if session_cookie:
        try:
            return await get_current_user_from_session(session, session_cookie)
        except AuthError:
            pass  # Fall through to token auth

    # Try Bearer token (for API clients)
    if authorization and authorization.credentials:
        try:
            payload = decode_token(authorization.credentials)
        except AuthError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

        user_id = payload.get("sub")
        user = await get_user(session, user_id) if user_id else None
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token",
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is disabled",
            )
        return user

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> User:
    """
    Require that the current user is an admin.

    Mounted once per admin router so the check runs before any
    admin operation is reached.

    Raises:
        HTTPException: If user is not an admin
    """
    if not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user

