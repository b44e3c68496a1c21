"""Shared fixtures and factories.

Each test gets a fresh in-memory SQLite database. The app's ``get_db``
dependency is overridden to use it, and the ``db`` fixture hands the test a
session on the same connection for setup and assertions.
"""

import uuid
from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import backend.app.models  # noqa: F401 — register tables on Base.metadata
from backend.app.config import settings
from backend.app.db import Base, get_db, make_engine
from backend.app.main import app
from backend.app.models.feature import FeatureRequest, Upvote
from backend.app.models.user import User
from backend.app.services.auth import hash_password, issue_token

# Cheap hashes keep the suite fast
settings.bcrypt_rounds = 4

DEFAULT_PASSWORD = "correct-horse"


@pytest.fixture
async def engine():
    eng = make_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def _now() -> str:
    return datetime.now(UTC).isoformat()


async def create_user(
    db: AsyncSession,
    email: str = "user@example.com",
    role: str = "user",
    password: str = DEFAULT_PASSWORD,
    name: str | None = None,
) -> User:
    user = User(
        id=str(uuid.uuid4()),
        email=email,
        password_hash=hash_password(password),
        role=role,
        name=name,
        created_at=_now(),
    )
    db.add(user)
    await db.flush()
    return user


async def create_feature(
    db: AsyncSession,
    owner_id: str,
    title: str = "Dark Mode",
    description: str = "Support a dark theme",
    status: str = "pending",
    created_at: str | None = None,
) -> FeatureRequest:
    created_at = created_at or _now()
    feature = FeatureRequest(
        id=str(uuid.uuid4()),
        title=title,
        description=description,
        status=status,
        owner_id=owner_id,
        created_at=created_at,
        updated_at=created_at,
    )
    db.add(feature)
    await db.flush()
    return feature


async def create_upvote(db: AsyncSession, user_id: str, request_id: str) -> Upvote:
    upvote = Upvote(user_id=user_id, request_id=request_id, created_at=_now())
    db.add(upvote)
    await db.flush()
    return upvote


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user)}"}
