"""Snapshot assembly.

One assembly run captures its timestamp before any fetch starts and reuses it
for ``timestamp``, ``exportedAt`` and every filename of the run.

Tables are fetched concurrently (at most ``fetch_concurrency`` at a time), each
in its own query with no shared transaction, so a snapshot is a best-effort
view: a table read later may already contain writes made after another table
was read. The fetch window is measured and logged when it grows past
``consistency_window_seconds``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from finance_backup.config import settings
from finance_backup.logger import get_logger
from finance_backup.models import SCOPE_TABLES, ExportScope, TableName, scope_version
from finance_backup.schemas import Row, Snapshot, SnapshotMetadata
from finance_backup.services.table_fetcher import FetchResult, TableFetcher

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """ISO instant with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def format_exported_at(moment: datetime, tz_name: str | None = None) -> str:
    """Human-readable rendering of the capture instant in the display timezone."""
    local = moment.astimezone(ZoneInfo(tz_name or settings.display_timezone))
    return local.strftime("%d/%m/%Y, %I:%M:%S %p")


def build_snapshot(
    tables: Iterable[tuple[TableName | str, Sequence[Row]]],
    *,
    captured_at: datetime,
    version: str,
) -> Snapshot:
    """Wrap fetched tables into a snapshot, dropping tables with no rows."""
    data: dict[str, list[Row]] = {}
    for table, rows in tables:
        if not rows:
            continue
        key = table.value if isinstance(table, TableName) else str(table)
        data[key] = list(rows)

    metadata = SnapshotMetadata(
        timestamp=format_timestamp(captured_at),
        exported_at=format_exported_at(captured_at),
        version=version,
        table_count=len(data),
        total_records=sum(len(rows) for rows in data.values()),
    )
    return Snapshot(metadata=metadata, data=data)


async def assemble_snapshot(
    fetcher: TableFetcher,
    tables: Sequence[TableName] | None = None,
    *,
    version: str | None = None,
    clock: Clock | None = None,
    concurrency: int | None = None,
) -> Snapshot:
    """Fetch every table in ``tables`` and build one snapshot from the results."""
    tables = tuple(SCOPE_TABLES[ExportScope.FULL] if tables is None else tables)
    captured_at = (clock or utc_now)()
    semaphore = asyncio.Semaphore(max(1, concurrency or settings.fetch_concurrency))

    async def _fetch(table: TableName) -> FetchResult:
        async with semaphore:
            return await fetcher.fetch(table)

    started = time.perf_counter()
    results = await asyncio.gather(*(_fetch(table) for table in tables))
    window_seconds = time.perf_counter() - started

    if window_seconds > settings.consistency_window_seconds:
        logger.warning(
            "snapshot_consistency_window_exceeded",
            window_seconds=round(window_seconds, 2),
            limit_seconds=settings.consistency_window_seconds,
            table_count=len(tables),
        )

    failed = [result.table.value for result in results if result.failed]
    snapshot = build_snapshot(
        ((result.table, result.rows) for result in results),
        captured_at=captured_at,
        version=version or settings.snapshot_version,
    )
    logger.info(
        "Snapshot assembled",
        version=snapshot.metadata.version,
        table_count=snapshot.metadata.table_count,
        total_records=snapshot.metadata.total_records,
        failed_tables=failed,
        window_ms=round(window_seconds * 1000, 2),
    )
    return snapshot


async def assemble_scope(
    fetcher: TableFetcher,
    scope: ExportScope,
    *,
    clock: Clock | None = None,
) -> Snapshot:
    """Scoped assembly: the scope's table subset tagged with its own version."""
    return await assemble_snapshot(
        fetcher,
        SCOPE_TABLES[scope],
        version=scope_version(scope),
        clock=clock,
    )
