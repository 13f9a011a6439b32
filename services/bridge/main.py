"""
Bridge-Y API - Activity gateway
Shelf lifecycle changes and actor pulses into PostgreSQL, plus read-back queries

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8091
    python main.py
"""
from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI
from contextlib import asynccontextmanager

import uvicorn

from config import Settings, SERVICE_NAME
from database import create_engine, create_session_factory, create_schema, check_database, close_db_connections
from infrastructure.uow import create_uow_provider
from logging_config import setup_logging, get_logger
from error_handler import register_exception_handlers
from schemas import HealthResponse

# API Routers
from api.endpoints import shelf, pulse
from api.middleware import LoggingMiddleware, add_cors_middleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the connection pool once, hand it to every request, dispose on exit"""
    settings: Settings = app.state.settings
    logger.info("bridge_startup", environment=settings.environment, host=settings.host, port=settings.port)

    engine = create_engine(settings)
    session_factory = create_session_factory(engine) if engine is not None else None
    app.state.engine = engine
    app.state.uow_provider = create_uow_provider(session_factory)

    if engine is not None:
        await check_database(engine)
        if settings.create_schema:
            await create_schema(engine)

    yield

    logger.info("bridge_shutdown")
    await close_db_connections(engine)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(level=settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title="Bridge-Y",
        description="Activity event gateway: shelf changes and pulses",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    add_cors_middleware(app)
    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(shelf.router)
    app.include_router(pulse.router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Liveness only, never touches the store"""
        return HealthResponse(ok=True, ts=datetime.now(timezone.utc), service=SERVICE_NAME)

    return app


app = create_app()


def run() -> None:
    """Console entry point; uvicorn exits non-zero if the socket cannot be bound"""
    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
