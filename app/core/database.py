from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from fastapi import HTTPException
from app.core.config import settings
import logging
from sqlalchemy import event

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    options = {
        "echo": settings.log_level == "DEBUG",
        "future": True,
    }
    # SQLite pools do not accept sizing arguments
    if not settings.database_url.startswith("sqlite"):
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
    return options


engine: AsyncEngine = create_async_engine(settings.database_url, **_engine_options())


if engine.dialect.name == "postgresql":
    # Set search_path to the schema from settings after connecting
    @event.listens_for(engine.sync_engine, "connect")
    def set_search_path(dbapi_connection, connection_record):
        logger.info("Setting search path to %s", settings.db_schema)
        cursor = dbapi_connection.cursor()
        cursor.execute(f"SET search_path TO {settings.db_schema}")
        cursor.close()


async_session_maker = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_async_session() -> AsyncSession:
    """FastAPI dependency for getting database session"""
    async with async_session_maker() as session:
        try:
            yield session
        except HTTPException:
            await session.rollback()
            raise
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {type(e).__name__}: {e}")
            raise
        finally:
            await session.close()


async def create_db_and_tables():
    logger.info("Creating database tables")
    # Register table metadata before create_all
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


async def close_db():
    await engine.dispose()
