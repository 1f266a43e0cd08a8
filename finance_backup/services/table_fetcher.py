"""Per-table fetch with a partial-success policy.

A table that cannot be read is reported as empty so one broken table never
aborts a backup. There are no retries; a transient failure yields an empty
table for that run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from finance_backup.logger import get_logger
from finance_backup.models import TableName
from finance_backup.schemas import Row
from finance_backup.services.data_sources import DataSource

logger = get_logger(__name__)


@dataclass
class FetchResult:
    table: TableName
    rows: list[Row] = field(default_factory=list)
    failed: bool = False

    @property
    def count(self) -> int:
        return len(self.rows)


class TableFetcher:
    """Fetch whole tables from a data source, never raising."""

    def __init__(self, source: DataSource) -> None:
        self.source = source

    async def fetch(self, table: TableName) -> FetchResult:
        table = TableName(table)
        logger.debug("Fetching table", table=table.value)
        try:
            if table is TableName.SALES:
                rows = await self.source.fetch_sales_with_members()
            else:
                rows = await self.source.fetch(table)
        except Exception as exc:
            logger.warning(
                "Table fetch failed, continuing with empty table",
                table=table.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return FetchResult(table=table, failed=True)

        rows = list(rows or [])
        logger.info("Fetched table", table=table.value, row_count=len(rows))
        return FetchResult(table=table, rows=rows)
