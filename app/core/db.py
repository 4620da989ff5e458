# app/core/db.py

import asyncio
import os
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool

from app.core.config import DatabaseConfig
from app.core.exceptions import PoolExhaustedError, StoreUnavailableError
from app.core.query import (
    ExecuteResult,
    Params,
    Statement,
    fetch_rows,
    run_statement,
    to_execute_result,
)
from app.core.transaction import TransactionHandle
from app.utils.logger import get_logger

logger = get_logger(__name__)

# =====================================================
# BASE
# =====================================================
Base = declarative_base()


# =====================================================
# SQLITE CONNECTION BEHAVIOUR
# =====================================================
def _configure_sqlite(engine: AsyncEngine, *, immediate: bool):
    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection, _):
        # take BEGIN away from the driver so "begin" below controls it
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def on_begin(conn):
        # IMMEDIATE takes the write lock up front: concurrent writers queue
        # on the busy timeout instead of interleaving read-modify-write.
        conn.exec_driver_sql("BEGIN IMMEDIATE" if immediate else "BEGIN")


# =====================================================
# MANAGER
# =====================================================
class DatabaseManager:
    """
    Owns the bounded connection pool to the primary store and the single
    connection to the secondary (local/offline) SQLite store.

    Constructed explicitly and handed to callers; nothing here is global.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine: AsyncEngine | None = None
        self.local_engine: AsyncEngine | None = None
        self._local_lock = asyncio.Lock()

    # -------------------------------------------------
    # STARTUP
    # -------------------------------------------------
    async def initialize(self):
        self.engine = self._create_primary_engine()

        # probe: one connection, released straight away
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.commit()
        except (OperationalError, OSError, PoolTimeoutError) as exc:
            await self.engine.dispose()
            self.engine = None
            logger.critical("Primary database unreachable", extra={"db_type": self.config.db_type})
            raise StoreUnavailableError("Primary database is unreachable") from exc

        logger.info(
            "Primary database connected",
            extra={"db_type": self.config.db_type, "pool_size": self.config.pool_size},
        )

        self.local_engine = self._create_local_engine()
        async with self.local_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Local database opened", extra={"path": self.config.sqlite_path})

    def _create_primary_engine(self) -> AsyncEngine:
        cfg = self.config
        connect_args = {}
        pool_args = {
            "poolclass": AsyncAdaptedQueuePool,
            "pool_size": cfg.pool_size,
            "max_overflow": 0,
            "pool_timeout": cfg.pool_timeout,
        }

        if cfg.db_type == "postgres":
            connect_args["command_timeout"] = cfg.command_timeout
            if cfg.ssl:
                ssl_ctx = ssl.create_default_context()
                if not cfg.ssl_verify:
                    ssl_ctx.check_hostname = False
                    ssl_ctx.verify_mode = ssl.CERT_NONE
                connect_args["ssl"] = ssl_ctx
            pool_args["pool_pre_ping"] = True
            pool_args["isolation_level"] = "READ COMMITTED"

        elif cfg.db_type == "sqlite":
            connect_args = {"check_same_thread": False, "timeout": cfg.command_timeout}

        engine = create_async_engine(
            cfg.url,
            echo=False,
            echo_pool=cfg.echo_pool,
            connect_args=connect_args,
            **pool_args,
        )

        if cfg.db_type == "sqlite":
            _configure_sqlite(engine, immediate=True)
        return engine

    def _create_local_engine(self) -> AsyncEngine:
        path = self.config.sqlite_path
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        engine = create_async_engine(
            f"sqlite+aiosqlite:///{path}",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _configure_sqlite(engine, immediate=False)
        return engine

    # -------------------------------------------------
    # CONNECTION CHECKOUT
    # -------------------------------------------------
    async def _acquire(self) -> AsyncConnection:
        if self.engine is None:
            raise StoreUnavailableError("Database manager is not initialized")
        try:
            return await self.engine.connect()
        except PoolTimeoutError as exc:
            logger.warning(
                "Connection pool exhausted",
                extra={"pool_size": self.config.pool_size, "timeout": self.config.pool_timeout},
            )
            raise PoolExhaustedError(
                details={"pool_size": self.config.pool_size, "timeout": self.config.pool_timeout},
            ) from exc
        except (OperationalError, OSError) as exc:
            raise StoreUnavailableError() from exc

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[AsyncConnection]:
        conn = await self._acquire()
        try:
            yield conn
        finally:
            await conn.close()

    # -------------------------------------------------
    # QUERY EXECUTOR
    # -------------------------------------------------
    async def query(self, statement: Statement, params: Params = None) -> list[dict]:
        async with self._connection() as conn:
            result = await run_statement(conn, statement, params)
            rows = fetch_rows(result)
            await conn.commit()
        return rows

    async def query_one(self, statement: Statement, params: Params = None) -> dict | None:
        rows = await self.query(statement, params)
        return rows[0] if rows else None

    async def execute(self, statement: Statement, params: Params = None) -> ExecuteResult:
        async with self._connection() as conn:
            result = await run_statement(conn, statement, params)
            outcome = to_execute_result(result)
            await conn.commit()
        return outcome

    async def query_local(self, statement: Statement, params: Params = None) -> list[dict]:
        if self.local_engine is None:
            raise StoreUnavailableError("Local database is not open")
        async with self._local_lock:
            async with self.local_engine.connect() as conn:
                result = await run_statement(conn, statement, params)
                rows = fetch_rows(result)
                await conn.commit()
        return rows

    # -------------------------------------------------
    # TRANSACTIONS
    # -------------------------------------------------
    async def begin_transaction(self) -> TransactionHandle:
        conn = await self._acquire()
        try:
            trans = await conn.begin()
        except BaseException:
            await conn.close()
            raise
        return TransactionHandle(conn, trans)

    async def commit(self, handle: TransactionHandle):
        await handle.commit()

    async def rollback(self, handle: TransactionHandle):
        await handle.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[TransactionHandle]:
        handle = await self.begin_transaction()
        try:
            yield handle
        except BaseException:
            if handle.is_open:
                await handle.rollback()
            raise
        if handle.is_open:
            await handle.commit()

    # -------------------------------------------------
    # SCHEMA (DEV ONLY)
    # -------------------------------------------------
    async def init_models(self):
        if self.config.app_env != "development":
            raise RuntimeError("init_models() is forbidden outside development")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # -------------------------------------------------
    # TEARDOWN
    # -------------------------------------------------
    async def shutdown(self):
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
        if self.local_engine is not None:
            await self.local_engine.dispose()
            self.local_engine = None
        logger.info("Database connections closed")


# =====================================================
# DEPENDENCY
# =====================================================
def get_db(request: Request) -> DatabaseManager:
    return request.app.state.db


# =====================================================
# MODEL IMPORT
# =====================================================
import app.models  # noqa
