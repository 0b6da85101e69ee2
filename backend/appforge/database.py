from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import settings
from .models.base import Base
from .models import user, app, chat_history  # noqa: F401  (register tables on Base.metadata)

# Global state for connections
class AppState:
    engine: Optional[AsyncEngine] = None
    session_factory: Optional[async_sessionmaker] = None

state = AppState()

def _enable_sqlite_pragmas(dbapi_connection, connection_record):
    # SQLite leaves FKs off and LIKE case-insensitive unless told otherwise.
    # Transactions are opened by the "begin" hook so SAVEPOINTs nest inside them
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA case_sensitive_like=ON")
    cursor.close()

def _begin_sqlite_transaction(conn):
    conn.exec_driver_sql("BEGIN")

def create_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """Create an async engine; SQLite URLs get the pragmas the schema relies on."""
    url = database_url or settings.DATABASE_URL
    engine = create_async_engine(
        url,
        echo=settings.DB_ECHO if echo is None else echo,
        pool_pre_ping=True,
    )
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_pragmas)
        event.listen(engine.sync_engine, "begin", _begin_sqlite_transaction)
    return engine

def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

async def create_schema(engine: AsyncEngine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def init_database(database_url: Optional[str] = None):
    """Initialize the engine and session factory"""
    state.engine = create_engine(database_url)
    state.session_factory = create_session_factory(state.engine)

async def close_database():
    """Dispose the connection pool"""
    if state.engine:
        await state.engine.dispose()
    state.engine = None
    state.session_factory = None

# Dependencies
async def get_db_session() -> AsyncIterator[AsyncSession]:
    """One session per request; commit on success, roll back on error."""
    async with state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
