# app/core/query.py

from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql import Executable

from app.core.exceptions import StoreUnavailableError

Statement = str | Executable
Params = Mapping[str, Any] | None


@dataclass(frozen=True)
class ExecuteResult:
    rowcount: int
    inserted_id: Any = None


def as_statement(statement: Statement) -> Executable:
    """
    Plain SQL strings are wrapped in ``text()`` so values can only ever
    reach the database as named bind parameters (``:name``).
    """
    if isinstance(statement, str):
        return text(statement)
    return statement


def fetch_rows(result: CursorResult) -> list[dict]:
    if not result.returns_rows:
        return []
    return [dict(row) for row in result.mappings().all()]


async def run_statement(
    conn: AsyncConnection,
    statement: Statement,
    params: Params = None,
) -> CursorResult:
    stmt = as_statement(statement)
    try:
        if params:
            return await conn.execute(stmt, dict(params))
        return await conn.execute(stmt)
    except DBAPIError as exc:
        if exc.connection_invalidated:
            raise StoreUnavailableError("Database connection lost") from exc
        raise


def to_execute_result(result: CursorResult) -> ExecuteResult:
    inserted_id = None
    if result.is_insert and result.inserted_primary_key:
        inserted_id = result.inserted_primary_key[0]
    return ExecuteResult(rowcount=result.rowcount, inserted_id=inserted_id)
