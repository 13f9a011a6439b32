"""
Database Configuration Module
Async engine with connection pooling, built once at startup
"""
import ssl
from typing import Optional

from fastapi import Request
from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.schema import CreateSchema

from config import Settings
from logging_config import get_logger

logger = get_logger(__name__)

SCHEMA = "bridge"

# Base for models, every table lives in the bridge schema
Base = declarative_base(metadata=MetaData(schema=SCHEMA))


def build_ssl_context(verify: bool) -> ssl.SSLContext:
    """TLS context for asyncpg; verification is relaxed unless requested"""
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def build_connect_args(settings: Settings) -> dict:
    connect_args = {}
    if settings.database_ssl:
        connect_args["ssl"] = build_ssl_context(settings.database_ssl_verify)
    if settings.command_timeout is not None:
        connect_args["command_timeout"] = settings.command_timeout
    return connect_args


def create_engine(settings: Settings) -> Optional[AsyncEngine]:
    """
    Create the process-wide async engine.

    Returns None when DATABASE_URL is not configured; store-backed
    endpoints then answer 503 while /health keeps working.
    """
    if not settings.database_url:
        logger.warning("database_url_missing", hint="set DATABASE_URL")
        return None

    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,              # Verify connections before use
        pool_recycle=3600,               # Recycle connections after 1 hour
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        connect_args=build_connect_args(settings),
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def check_database(engine: Optional[AsyncEngine]) -> bool:
    """
    Single connectivity check at startup.
    Failure is logged, never fatal: the pool reconnects lazily.
    """
    if engine is None:
        return False
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("database_check", connected=False, error=str(e))
        return False
    logger.info("database_check", connected=True)
    return True


async def create_schema(engine: AsyncEngine) -> None:
    """Create the bridge schema and both tables if they are missing"""
    import models  # noqa: F401  registers tables on Base.metadata

    async with engine.begin() as conn:
        await conn.execute(CreateSchema(SCHEMA, if_not_exists=True))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("schema_ready", schema=SCHEMA)


async def close_db_connections(engine: Optional[AsyncEngine]) -> None:
    """
    Gracefully close all database connections.
    Call this on application shutdown.
    """
    if engine is not None:
        await engine.dispose()


def get_uow_provider(request: Request):
    """
    Dependency for FastAPI returning the unit-of-work factory built at startup.

    Usage:
        async with uow_provider() as uow:
            rows = await uow.shelf_changes.feed(uow.session, actor, limit)
    """
    provider = getattr(request.app.state, "uow_provider", None)
    if provider is None:
        from infrastructure.uow import create_uow_provider
        provider = create_uow_provider(None)
    return provider
