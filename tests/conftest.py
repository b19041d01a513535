"""Shared pytest fixtures: in-memory database, row factories and the HTTP client."""

import itertools
from datetime import datetime, timedelta
from typing import AsyncGenerator, Awaitable, Callable, Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from storage.database import Base, configure_sqlite, create_session_factory, get_session
from storage.models import Category, Language, Snippet, User
from storage.repositories import CategoryRepository, LanguageRepository, SnippetRepository, UserRepository
from utils.slugify import slugify

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    test_engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    configure_sqlite(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    repo = UserRepository(db_session)

    async def _make_user(
        username: str,
        is_admin: bool = False,
        is_approved: bool = True,
        api_key: Optional[str] = None,
    ) -> User:
        return await repo.create(
            username=username,
            email=f"{username}@example.com",
            password_hash="x",
            api_key=api_key or f"key-{username}",
            is_admin=is_admin,
            is_approved=is_approved,
        )

    return _make_user


@pytest_asyncio.fixture
async def make_category(db_session: AsyncSession) -> Callable[[str], Awaitable[Category]]:
    repo = CategoryRepository(db_session)

    async def _make_category(name: str) -> Category:
        return await repo.create(name=name, slug=slugify(name))

    return _make_category


@pytest_asyncio.fixture
async def make_language(db_session: AsyncSession) -> Callable[[str], Awaitable[Language]]:
    repo = LanguageRepository(db_session)

    async def _make_language(name: str) -> Language:
        return await repo.create(name=name, slug=slugify(name))

    return _make_language


@pytest_asyncio.fixture
async def make_snippet(db_session: AsyncSession) -> Callable[..., Awaitable[Snippet]]:
    """Insert snippet rows directly; each call is one minute newer than the previous one."""
    repo = SnippetRepository(db_session)
    counter = itertools.count(1)

    async def _make_snippet(owner: User, title: str = "Snippet", **fields) -> Snippet:
        n = next(counter)
        values = {
            "title": title,
            "slug": f"{slugify(title)}-{n}",
            "short_id": f"sid{n:05d}",
            "code": f"print({n})",
            "created_at": BASE_TIME + timedelta(minutes=n),
            "user_id": owner.id,
            "is_private": False,
        }
        values.update(fields)
        return await repo.create(**values)

    return _make_snippet


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
