"""Tests for the featureboard CLI."""

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from typer.testing import CliRunner

from backend.app.db import Base
from backend.app.models.user import User
from cli.main import app
from tests.conftest import create_user

runner = CliRunner()


@pytest.fixture
def cli_session_factory(tmp_path):
    # File-backed so each asyncio.run() loop gets its own fresh connection
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}", poolclass=NullPool)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with factory() as session:
            await create_user(session, email="alice@example.com")
            await session.commit()

    asyncio.run(_setup())
    with patch("cli.main.async_session", factory):
        yield factory


def _role_of(factory, email: str) -> str | None:
    async def _query():
        async with factory() as session:
            return await session.scalar(select(User.role).where(User.email == email))

    return asyncio.run(_query())


def test_set_role_grants_admin(cli_session_factory):
    result = runner.invoke(app, ["set-role", "Alice@Example.com", "admin"])
    assert result.exit_code == 0
    assert "admin" in result.output
    assert _role_of(cli_session_factory, "alice@example.com") == "admin"


def test_set_role_revokes_admin(cli_session_factory):
    runner.invoke(app, ["set-role", "alice@example.com", "admin"])
    result = runner.invoke(app, ["set-role", "alice@example.com", "user"])
    assert result.exit_code == 0
    assert _role_of(cli_session_factory, "alice@example.com") == "user"


def test_set_role_unknown_user(cli_session_factory):
    result = runner.invoke(app, ["set-role", "ghost@example.com", "admin"])
    assert result.exit_code == 1


def test_set_role_rejects_unknown_role(cli_session_factory):
    result = runner.invoke(app, ["set-role", "alice@example.com", "owner"])
    assert result.exit_code != 0
    assert _role_of(cli_session_factory, "alice@example.com") == "user"
