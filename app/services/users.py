"""
User store: account creation, credential checks and onboarding.
"""

import random
from typing import Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import AuthenticationError, ConflictError, NotFoundError
from app.core.logging import get_logger
from app.core.security import get_password_hash, verify_password
from app.models.user import User

logger = get_logger(__name__)


def random_avatar_url() -> str:
    idx = random.randint(1, settings.avatar_count)
    return f"{settings.avatar_base_url}/{idx}.png"


async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", details={"user_id": user_id})
    return user


async def create_user(db: AsyncSession, email: str, password: str, full_name: str) -> User:
    """Register a new, not yet onboarded, user"""
    if await get_by_email(db, email):
        raise ConflictError("Email already exists, please use a different one")

    user = User(
        id=str(uuid4()),
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        full_name=full_name.strip(),
        profile_pic=random_avatar_url(),
        is_onboarded=False,
    )
    db.add(user)
    await db.commit()

    logger.info("user.created", user_id=user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await get_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")
    return user


async def onboard_user(
    db: AsyncSession,
    user_id: str,
    *,
    full_name: str,
    bio: str,
    native_language: str,
    learning_language: str,
    location: str,
    profile_pic: Optional[str] = None,
) -> User:
    """Complete the language profile and mark the user as onboarded"""
    user = await get_user(db, user_id)

    user.full_name = full_name.strip()
    user.bio = bio.strip()
    user.native_language = native_language.strip().lower()
    user.learning_language = learning_language.strip().lower()
    user.location = location.strip()
    if profile_pic:
        user.profile_pic = profile_pic
    user.is_onboarded = True

    await db.commit()

    logger.info("user.onboarded", user_id=user.id)
    return user
