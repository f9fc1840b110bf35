"""
Authentication Service for Hive Portal.

Handles admin sign-in, Redis-backed sessions, JWT access tokens and the
admin role lookup used to guard every CMS operation.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import redis.asyncio as redis
from fastapi import status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import get_settings
from portal.core.exceptions import AuthError
from portal.models.user import User, UserRole

logger = logging.getLogger(__name__)
settings = get_settings()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Redis connection for session storage
_redis_pool: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get or create Redis connection pool."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_pool


async def close_redis() -> None:
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a plain password."""
    return pwd_context.hash(password)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        raise AuthError("Invalid or expired token", status.HTTP_401_UNAUTHORIZED) from e


def is_admin(user: User | None) -> bool:
    """Role lookup: does this user carry the admin role."""
    return bool(user and user.is_active and user.role == UserRole.ADMIN.value)


# ==================== Sessions ====================


async def create_session(user_id: str) -> str:
    """
    Create a new server-side session.

    Args:
        user_id: The user's id

    Returns:
        Session ID string
    """
    session_id = secrets.token_urlsafe(32)
    redis_client = await get_redis()

    session_key = f"session:{session_id}"
    await redis_client.hset(
        session_key,
        mapping={
            "user_id": user_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
        },
    )
    await redis_client.expire(session_key, timedelta(days=settings.session_expire_days))

    return session_id


async def validate_session(session_id: str) -> str:
    """
    Resolve a session to its user id, refreshing its expiry.

    Raises:
        AuthError: If the session is unknown or expired
    """
    redis_client = await get_redis()
    session_key = f"session:{session_id}"

    session_data = await redis_client.hgetall(session_key)
    if not session_data:
        raise AuthError("Invalid or expired session", status.HTTP_401_UNAUTHORIZED)

    await redis_client.expire(session_key, timedelta(days=settings.session_expire_days))
    return session_data["user_id"]


async def invalidate_session(session_id: str) -> None:
    """Sign out: delete the session from Redis."""
    redis_client = await get_redis()
    await redis_client.delete(f"session:{session_id}")


# ==================== Users ====================


async def get_user(session: AsyncSession, user_id: str) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def authenticate_user(session: AsyncSession, email: str, password: str) -> User:
    """
    Check an email/password pair.

    Raises:
        AuthError: On unknown email, wrong password or inactive account
    """
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed sign-in for {email}")
        raise AuthError("Invalid email or password", status.HTTP_401_UNAUTHORIZED)

    if not user.is_active:
        raise AuthError("Account is disabled", status.HTTP_403_FORBIDDEN)

    return user


async def get_current_user_from_session(session: AsyncSession, session_id: str) -> User:
    """Resolve a session cookie to an active user."""
    user_id = await validate_session(session_id)
    user = await get_user(session, user_id)
    if not user:
        await invalidate_session(session_id)
        raise AuthError("User not found", status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        raise AuthError("Account is disabled", status.HTTP_403_FORBIDDEN)
    return user


async def create_admin(session: AsyncSession, email: str, password: str, display_name: str | None = None) -> User:
    """Provision an admin account, or promote an existing one."""
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user:
        user.role = UserRole.ADMIN.value
        user.password_hash = get_password_hash(password)
        user.is_active = True
    else:
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            display_name=display_name,
            role=UserRole.ADMIN.value,
        )
        session.add(user)

    await session.commit()
    await session.refresh(user)
    logger.info(f"Admin account ready: {email}")
    return user
