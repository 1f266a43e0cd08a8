"""Read-only access to the remote business tables.

Two collaborators implement the same narrow interface:

- ``SqlDataSource`` reads straight from the database with async SQLAlchemy.
- ``RestDataSource`` reads through the hosted store's REST endpoint with httpx.

Both return rows as plain string-keyed dicts whose values are JSON-native, so a
freshly fetched row and the same row loaded back from an exported file compare
equal.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

import httpx
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finance_backup.config import settings
from finance_backup.logger import get_logger
from finance_backup.models import TableName
from finance_backup.schemas import Row

logger = get_logger(__name__)

# Columns of the related user resolved for every sale
MEMBER_FIELDS = ("name", "region", "email")
MEMBER_KEY = "users"


class FetchError(Exception):
    """Raised when a table cannot be read from the data source."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"{table}: {message}")
        self.table = table


class DataSource(Protocol):
    async def fetch(self, table: TableName) -> list[Row]: ...

    async def fetch_sales_with_members(self) -> list[Row]: ...


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def normalize_row(row: Any) -> Row:
    """Convert a driver row mapping into a dict of JSON-native values."""
    return {str(key): _jsonable(value) for key, value in dict(row).items()}


def _checked_table(table: TableName | str) -> TableName:
    # Only whitelisted names ever reach a query string
    return TableName(table)


class SqlDataSource:
    """Fetch tables with plain SELECTs over an async SQLAlchemy session."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession] | None = None) -> None:
        if session_maker is None:
            from finance_backup.database import async_session_maker

            session_maker = async_session_maker
        self._session_maker = session_maker

    async def _select(self, table: TableName, sql: str) -> list[Row]:
        try:
            async with self._session_maker() as session:
                result = await session.execute(text(sql))
                return [normalize_row(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            raise FetchError(table.value, str(exc)) from exc

    async def fetch(self, table: TableName) -> list[Row]:
        table = _checked_table(table)
        return await self._select(table, f'SELECT * FROM "{table.value}"')

    async def fetch_sales_with_members(self) -> list[Row]:
        member_columns = ", ".join(
            ['"users"."id" AS "__member_id"']
            + [f'"users"."{field}" AS "__member_{field}"' for field in MEMBER_FIELDS]
        )
        sql = (
            f'SELECT "sales".*, {member_columns} FROM "sales" '
            'LEFT OUTER JOIN "users" ON "users"."id" = "sales"."member_id"'
        )
        rows = await self._select(TableName.SALES, sql)
        return [_nest_member(row) for row in rows]


def _nest_member(row: Row) -> Row:
    member_id = row.pop("__member_id", None)
    member = {field: row.pop(f"__member_{field}", None) for field in MEMBER_FIELDS}
    row[MEMBER_KEY] = member if member_id is not None else None
    return row


class RestDataSource:
    """Fetch tables from the hosted store's REST interface."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.rest_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.rest_api_key
        self.timeout = timeout or settings.rest_timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get(self, table: TableName, select_clause: str) -> list[Row]:
        timeout = httpx.Timeout(self.timeout, connect=5.0)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    f"/rest/v1/{table.value}",
                    params={"select": select_clause},
                    headers=self._headers(),
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as exc:
            raise FetchError(table.value, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise FetchError(table.value, "response is not valid JSON") from exc

        if not isinstance(payload, list):
            raise FetchError(table.value, f"expected a list of rows, got {type(payload).__name__}")
        return [normalize_row(row) for row in payload if isinstance(row, dict)]

    async def fetch(self, table: TableName) -> list[Row]:
        return await self._get(_checked_table(table), "*")

    async def fetch_sales_with_members(self) -> list[Row]:
        embed = f"{MEMBER_KEY}!member_id({','.join(MEMBER_FIELDS)})"
        return await self._get(TableName.SALES, f"*,{embed}")


def build_data_source(kind: str | None = None) -> DataSource:
    """Build the data source named by settings (``sql`` or ``rest``)."""
    kind = (kind or settings.data_source).lower()
    if kind == "sql":
        return SqlDataSource()
    if kind == "rest":
        return RestDataSource()
    raise ValueError(f"Unsupported data source: {kind}")
