"""Process-wide async engine and session factory (SQLAlchemy 2.x).

PostgreSQL runs on asyncpg, SQLite on aiosqlite. The one-ballot-per-voter
rule and the cascades from elections to candidates and rosters are enforced
by the database, so SQLite connections switch ``PRAGMA foreign_keys`` on as
they are opened.
"""

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the engine created by :func:`init_engine`.

    Raises:
        RuntimeError: If no engine exists yet.
    """
    if _engine is None:
        msg = "Database engine not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        msg = "Session factory not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _session_factory


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Run ``PRAGMA foreign_keys=ON`` on each new SQLite connection of ``engine``."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _foreign_keys_on(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _driver_options(is_sqlite: bool, schema: str | None, busy_timeout: float | None) -> dict[str, object]:
    # SQLite has no schemas; PostgreSQL has no busy timeout.
    if is_sqlite:
        return {"timeout": busy_timeout} if busy_timeout is not None else {}
    return {"options": f"-c search_path={schema},public"} if schema is not None else {}


def init_engine(
    database_url: str,
    *,
    schema: str | None = None,
    busy_timeout: float | None = None,
    **kwargs: object,
) -> AsyncEngine:
    """Create the shared engine and session factory.

    Args:
        database_url: Async SQLAlchemy URL.
        schema: PostgreSQL schema to put first on the search path.
        busy_timeout: Seconds a SQLite connection waits on a write lock.
        **kwargs: Passed through to ``create_async_engine``.

    Returns:
        The new engine.
    """
    global _engine, _session_factory  # noqa: PLW0603
    is_sqlite = database_url.startswith("sqlite")
    options = _driver_options(is_sqlite, schema, busy_timeout)
    if options:
        connect_args = kwargs.pop("connect_args", {})
        if not isinstance(connect_args, dict):
            msg = "connect_args must be a dict"
            raise TypeError(msg)
        kwargs["connect_args"] = {**connect_args, **options}
    if not is_sqlite:
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("max_overflow", 5)
    _engine = create_async_engine(database_url, **kwargs)
    enable_sqlite_foreign_keys(_engine)
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is None:
        return
    await _engine.dispose()
    _engine, _session_factory = None, None
