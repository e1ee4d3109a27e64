"""Database engine and session management."""
import logging
from typing import AsyncGenerator, Dict, Any
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from sqlalchemy import text

from resume_optimizer.config import settings
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def setup_sql_logging():
    """
    Configure SQLAlchemy SQL statement logging.

    Set SQL_ECHO=true in .env to log statements through the 'sqlalchemy.engine' logger.
    """
    if settings.sql_echo:
        log_level = getattr(logging, settings.sql_log_level.upper(), logging.INFO)
        logging.getLogger('sqlalchemy.engine').setLevel(log_level)
        logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)
        logger.info(f"SQL logging enabled at {settings.sql_log_level} level")
    else:
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
        logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)


setup_sql_logging()


def _engine_options() -> Dict[str, Any]:
    if settings.is_sqlite:
        # aiosqlite connections are not shared across event loops
        return {"poolclass": NullPool}
    return {
        "pool_size": 5,
        "max_overflow": 5,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_timeout": 30,
        "connect_args": {"connect_timeout": 10},
    }


engine = create_async_engine(
    settings.sqlalchemy_url,
    echo=settings.sql_echo,
    echo_pool=False,
    **_engine_options(),
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session.
    Commits pending work on success and rolls back on error.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_db() -> None:
    """Run a trivial query; raises when the database is unreachable."""
    async with engine.connect() as conn:
        result = await conn.execute(text("SELECT 1"))
        result.fetchone()


async def init_db() -> None:
    """Verify connectivity and create missing tables."""
    # Register models on Base.metadata
    from resume_optimizer.database import models  # noqa: F401

    try:
        logger.info("Testing database connection...")
        await check_db()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connection established successfully")
    except Exception as e:
        error_msg = str(e)
        if "1040" in error_msg or "Too many connections" in error_msg:
            logger.error(
                "MySQL connection limit reached. Close stale connections or raise max_connections",
                extra={"error": error_msg}
            )
        else:
            logger.error(f"Failed to connect to database: {e}", extra={"error": error_msg})
        raise


async def close_db() -> None:
    """Dispose of the engine and its pooled connections."""
    try:
        await engine.dispose(close=True)
        logger.info("Database connections closed and engine disposed")
    except Exception as e:
        logger.error(f"Error closing database connections: {e}", extra={"error": str(e)})
        raise
