from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """SQLite only: take the write lock at BEGIN.

    Deferred transactions upgrade their lock mid-statement and SQLite fails
    such upgrades with SQLITE_BUSY instead of waiting when another writer
    is committing.

    Every session then holds the single database write lock until it ends,
    so on SQLite all movements serialize, different products included.
    Movements on different products only run in parallel on PostgreSQL,
    where the guarded UPDATE locks just the one stock row.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """Async engine plus session factory for one service instance."""

    def __init__(self, url: str, echo: bool = False):
        is_sqlite = url.startswith("sqlite")
        connect_args = {}
        if is_sqlite:
            # Let concurrent writers wait on the file lock instead of failing
            connect_args["timeout"] = 30
        self.url = url
        self.engine = create_async_engine(url, echo=echo, connect_args=connect_args)
        if is_sqlite:
            _use_immediate_transactions(self.engine)
        self.session_maker = async_sessionmaker(self.engine, expire_on_commit=False)

        from .immutability import register_immutability_listeners
        register_immutability_listeners()

    async def create_all(self) -> None:
        # Import models so they are attached to Base.metadata
        from . import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.database
    async with database.session_maker() as session:
        yield session
