# app/core/transaction.py

from enum import Enum

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncTransaction

from app.core.exceptions import TransactionStateError
from app.core.query import (
    ExecuteResult,
    Params,
    Statement,
    fetch_rows,
    run_statement,
    to_execute_result,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)


class TransactionState(str, Enum):
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionHandle:
    """
    A dedicated pooled connection with an open transaction on it.

    The connection stays checked out of the pool until ``commit()`` or
    ``rollback()`` is called; both release it unconditionally. Exactly one
    of them may be called, and any statement issued after that fails with
    TransactionStateError.
    """

    def __init__(self, connection: AsyncConnection, transaction: AsyncTransaction):
        self._connection = connection
        self._transaction = transaction
        self.state = TransactionState.OPEN

    def __repr__(self):
        return f"<TransactionHandle state={self.state.value}>"

    @property
    def is_open(self) -> bool:
        return self.state is TransactionState.OPEN

    def _ensure_open(self, action: str):
        if not self.is_open:
            raise TransactionStateError(
                f"Cannot {action}: transaction already {self.state.value}",
                details={"state": self.state.value},
            )

    # ---------------- QUERIES ----------------
    async def query(self, statement: Statement, params: Params = None) -> list[dict]:
        self._ensure_open("query")
        result = await run_statement(self._connection, statement, params)
        return fetch_rows(result)

    async def query_one(self, statement: Statement, params: Params = None) -> dict | None:
        rows = await self.query(statement, params)
        return rows[0] if rows else None

    async def execute(self, statement: Statement, params: Params = None) -> ExecuteResult:
        self._ensure_open("execute")
        result = await run_statement(self._connection, statement, params)
        return to_execute_result(result)

    # ---------------- LIFECYCLE ----------------
    async def commit(self):
        self._ensure_open("commit")
        try:
            await self._transaction.commit()
            self.state = TransactionState.COMMITTED
        except BaseException:
            # closing the connection below rolls back whatever the driver left open
            self.state = TransactionState.ROLLED_BACK
            logger.exception("Transaction commit failed")
            raise
        finally:
            await self._release()

    async def rollback(self):
        self._ensure_open("rollback")
        try:
            await self._transaction.rollback()
        finally:
            self.state = TransactionState.ROLLED_BACK
            await self._release()

    async def _release(self):
        await self._connection.close()
