import logging
from collections.abc import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from .config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict:
    """
    Engine keyword arguments for the wiki database. Server backends are
    usually read replicas that drop idle connections, so pooled connections
    are pinged before reuse and Postgres is asked to enforce the same query
    ceiling on its side.
    """
    options: dict = {"echo": False, "future": True}
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return options

    options["pool_pre_ping"] = True
    options["pool_recycle"] = 1800
    if url.get_backend_name() == "postgresql":
        timeout_ms = int(settings.query_timeout_seconds * 1000)
        options["connect_args"] = {
            "server_settings": {
                "statement_timeout": str(timeout_ms),
                "default_transaction_read_only": "on",
            }
        }
    return options


engine: AsyncEngine = create_async_engine(settings.database_url, **engine_options(settings.database_url))
async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    # Sessions only read; whatever transaction a request opened is discarded.
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


async def init_db() -> None:
    """Create the wiki tables on an empty local database."""
    # Import models for SQLModel metadata registration
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Wiki schema created on %s", make_url(settings.database_url).render_as_string(hide_password=True))
