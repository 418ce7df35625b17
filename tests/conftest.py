import os

os.environ["JWT_SECRET_KEY"] = "test-secret-key-which-is-long-enough-for-hs256"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENV"] = "development"

from typing import Optional
from uuid import uuid4

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.token import create_access_token
from app.infra.db import get_db
from app.main import app
from app.models import Base, User


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory schema per test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(session_factory):
    """Insert a user in its own committed session and return it"""

    async def _make_user(
        name: str,
        native_language: str = "english",
        learning_language: str = "spanish",
        is_onboarded: bool = True,
        email: Optional[str] = None,
    ) -> User:
        user = User(
            id=str(uuid4()),
            email=email or f"{name.lower()}_{uuid4().hex[:6]}@example.com",
            hashed_password="not-a-real-hash",
            full_name=name,
            profile_pic=f"https://example.com/{name.lower()}.png",
            bio=f"Hi, I'm {name}",
            native_language=native_language,
            learning_language=learning_language,
            location="Seoul",
            is_onboarded=is_onboarded,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_headers():
    def _auth_headers(user: User) -> dict:
        token = create_access_token(data={"sub": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
