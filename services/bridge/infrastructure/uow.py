"""
Unit of Work + Repositories - Infrastructure Layer
==================================================
One session per request, one statement per repository call.
SQLAlchemy failures leave the unit of work as StoreUnavailable / StoreError.
"""
from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exceptions import StoreError, StoreUnavailable
from logging_config import get_logger, log_error

logger = get_logger(__name__)

# Connection-level failures: the database is down, refusing or saturated
UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, OSError, TimeoutError)


def translate_store_error(exc: BaseException) -> Optional[Exception]:
    """Map a driver/SQLAlchemy exception onto the API error taxonomy"""
    if isinstance(exc, UNAVAILABLE_ERRORS):
        return StoreUnavailable(reason=str(exc))
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return StoreUnavailable(reason=str(exc))
    if isinstance(exc, SQLAlchemyError):
        return StoreError(reason=str(exc))
    return None


class UnitOfWork:
    """
    Thin unit of work around one AsyncSession.

    Usage:
        async with UnitOfWork(session_factory) as uow:
            row_id, ts = await uow.shelf_changes.add(uow.session, row)
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self.shelf_changes = ShelfChangeRepository()
        self.thread_continuity = ThreadContinuityRepository()

    async def __aenter__(self) -> "UnitOfWork":
        if self._session_factory is None:
            logger.warning("store_not_configured")
            raise StoreUnavailable(reason="DATABASE_URL is not configured")
        self._session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Commit or rollback, then close; driver errors are translated"""
        try:
            if exc_type is None:
                if self._session:
                    await self._session.commit()
            else:
                if self._session:
                    await self._session.rollback()
        except (SQLAlchemyError, OSError) as e:
            exc_val = exc_val or e
        finally:
            if self._session:
                await self._session.close()
                self._session = None

        if exc_val is None:
            return False

        translated = translate_store_error(exc_val)
        if translated is None:
            return False

        log_error(exc_val, {"event_source": "store", "mapped_to": type(translated).__name__})
        raise translated from exc_val

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError(
                "Session not available. Use 'async with UnitOfWork() as uow:' pattern."
            )
        return self._session


class ShelfChangeRepository:
    """bridge.shelf_change - insert and read only"""

    def insert_statement(self, row: dict):
        from models import ShelfChange

        return insert(ShelfChange).values(**row).returning(ShelfChange.id, ShelfChange.ts)

    def feed_statement(self, actor: Optional[str], limit: int):
        """Newest first; id breaks ties between identical timestamps"""
        from models import ShelfChange, SHELF_CHANGE_COLUMNS

        stmt = select(*SHELF_CHANGE_COLUMNS)
        if actor:
            stmt = stmt.where(ShelfChange.actor == actor)
        return stmt.order_by(ShelfChange.ts.desc(), ShelfChange.id.desc()).limit(limit)

    def receipt_statement(self, receipt_hash: str):
        """First match wins: receipt_hash is not unique"""
        from models import ShelfChange, SHELF_CHANGE_COLUMNS

        return (
            select(*SHELF_CHANGE_COLUMNS)
            .where(ShelfChange.receipt_hash == receipt_hash)
            .order_by(ShelfChange.id.asc())
            .limit(1)
        )

    async def add(self, session: AsyncSession, row: dict):
        result = await session.execute(self.insert_statement(row))
        inserted = result.one()
        logger.info("row_inserted", table="shelf_change", id=inserted.id, actor=row["actor"])
        return inserted.id, inserted.ts

    async def feed(self, session: AsyncSession, actor: Optional[str], limit: int) -> list[dict]:
        result = await session.execute(self.feed_statement(actor, limit))
        return [dict(row) for row in result.mappings().all()]

    async def get_by_receipt(self, session: AsyncSession, receipt_hash: str) -> Optional[dict]:
        result = await session.execute(self.receipt_statement(receipt_hash))
        row = result.mappings().first()
        return dict(row) if row is not None else None


class ThreadContinuityRepository:
    """bridge.thread_continuity - insert only"""

    def insert_statement(self, row: dict):
        from models import ThreadContinuity

        return insert(ThreadContinuity).values(**row).returning(ThreadContinuity.id, ThreadContinuity.ts)

    async def add(self, session: AsyncSession, row: dict):
        result = await session.execute(self.insert_statement(row))
        inserted = result.one()
        logger.info("row_inserted", table="thread_continuity", id=inserted.id, actor=row["actor"])
        return inserted.id, inserted.ts


def create_uow_provider(session_factory: Optional[async_sessionmaker[AsyncSession]]):
    """Factory used by the API dependency"""
    return lambda: UnitOfWork(session_factory)
