"""Async SQLAlchemy engine, session factory, and declarative base."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.config import settings


def utcnow() -> datetime:
    """Timezone-aware current time used for all server-stamped columns."""
    return datetime.now(UTC)


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement (and therefore ON DELETE CASCADE) for sqlite.

    SQLite ships with foreign keys disabled per connection, so the pragma has
    to be issued every time the pool opens a new DBAPI connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _make_engine() -> AsyncEngine:
    if settings.is_sqlite:
        engine = create_async_engine(settings.async_database_url, echo=settings.debug)
        enable_sqlite_foreign_keys(engine)
        return engine
    return create_async_engine(
        settings.async_database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


engine = _make_engine()

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin that adds created_date and updated_date columns.

    Values are stamped by the repository layer on create/update; the
    defaults only cover rows inserted outside of it.
    """

    created_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async database session for FastAPI dependency injection.

    One session per request. Repositories commit after every mutating call,
    so the trailing commit here only flushes leftovers of tracked handles.

    Usage::

        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
