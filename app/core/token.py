"""
Token management and validation logic.
All JWT and authentication dependency operations are centralized here.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import AuthenticationError
from app.infra.db import get_db
from app.models.user import User

# HTTP Bearer scheme (Only shows a token input box in Swagger).
# Missing credentials are reported as AuthenticationError below.
security_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """Resolved identity of the user making the current request"""

    user_id: str
    user: User


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"exp": expire, "iat": datetime.utcnow()})

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate JWT token string"""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def verify_token(token: str) -> Optional[str]:
    """Verify token and extract user ID (sub claim)"""
    payload = decode_token(token)
    if payload is None:
        return None
    return payload.get("sub")


async def get_current_user_id(
    auth: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security_scheme)],
) -> str:
    """
    FastAPI dependency to validate token and return current user ID.
    Used in protected routes.
    """
    if auth is None:
        raise AuthenticationError("Not authenticated")
    user_id = verify_token(auth.credentials)
    if not user_id:
        raise AuthenticationError("Could not validate credentials")
    return user_id


async def get_caller(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Caller:
    """Resolve the token subject to a live user; stale tokens are rejected."""
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User for this token no longer exists")
    return Caller(user_id=user.id, user=user)


# Frequently used Dependency Annotation
CallerDep = Annotated[Caller, Depends(get_caller)]
