"""
Async database access.

Request handlers get a session from ``get_db``. Services that need one short
transaction per record (bulk import, identifier assignment) open their own
sessions from ``get_session_maker()``.
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import get_settings

settings = get_settings()


def engine_options(database_url: str) -> dict:
    """Driver-specific engine arguments."""
    if database_url.startswith("postgresql"):
        # PgBouncer in transaction mode cannot use prepared statement caches
        return {
            "connect_args": {
                "statement_cache_size": 0,
                "prepared_statement_cache_size": 0,
            },
            "pool_size": 20,
            "max_overflow": 30,
            "pool_pre_ping": True,
            "pool_recycle": 300,
        }
    if database_url.startswith("sqlite"):
        # Writers queue on the database lock while another import holds the counter
        return {"connect_args": {"timeout": 30}}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **engine_options(settings.database_url),
)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_maker() -> async_sessionmaker:
    return async_session_maker


async def init_db():
    # Models must be imported so their tables are registered on Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
