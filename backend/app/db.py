from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from backend.app.config import DATA_DIR, DATABASE_URL


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    # Per-connection pragmas: must run on every new connection, not once
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.execute("PRAGMA busy_timeout = 5000")
    cursor.execute("PRAGMA synchronous = NORMAL")
    cursor.close()


def make_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async SQLite engine with foreign keys enforced on every connection."""
    eng = create_async_engine(
        url,
        echo=False,
        connect_args={"check_same_thread": False},
        **kwargs,
    )
    event.listen(eng.sync_engine, "connect", _set_sqlite_pragmas)
    return eng


engine = make_engine(DATABASE_URL)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncSession:
    """FastAPI dependency for database sessions.

    One session per request: everything a handler writes is committed
    together, or rolled back together when the handler raises.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create all tables and apply database-wide pragmas."""
    import backend.app.models  # noqa: F401 — ensure models are registered

    DATA_DIR.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        # journal_mode is persistent in the database file
        await conn.execute(text("PRAGMA journal_mode = WAL"))

        await conn.run_sync(Base.metadata.create_all)
