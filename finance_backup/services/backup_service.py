"""Backup export orchestration.

Fetch -> assemble -> encode -> deliver, plus the live and re-hydrated report
renders. The three named export operations never raise: any pipeline-fatal
failure comes back as ``ExportOutcome(ok=False, error=...)``.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any

from finance_backup.logger import async_log_timing, get_logger, log_exception
from finance_backup.models import ExportScope
from finance_backup.schemas import ExportOptions, ExportOutcome, Snapshot
from finance_backup.services.exporter import Artifact, build_artifacts, summarize
from finance_backup.services.rehydration import rehydrate
from finance_backup.services.report_render import render_report, report_today
from finance_backup.services.sinks import FileSink, SinkError
from finance_backup.services.snapshot import Clock, assemble_scope
from finance_backup.services.table_fetcher import TableFetcher

logger = get_logger(__name__)


class ExportError(Exception):
    """Raised when an export cannot complete."""


class BackupService:
    """Run exports for one data source and one sink."""

    def __init__(
        self,
        fetcher: TableFetcher,
        sink: FileSink,
        *,
        clock: Clock | None = None,
        as_of: date | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.sink = sink
        self.clock = clock
        self.as_of = as_of

    def _as_of(self) -> date:
        return self.as_of or report_today()

    async def assemble(self, scope: ExportScope = ExportScope.FULL) -> Snapshot:
        return await assemble_scope(self.fetcher, scope, clock=self.clock)

    async def snapshot_document(self, scope: ExportScope = ExportScope.FULL) -> dict[str, Any]:
        snapshot = await self.assemble(scope)
        return snapshot.to_document()

    async def _deliver(self, artifact: Artifact) -> str:
        try:
            return await asyncio.to_thread(
                self.sink.deliver, artifact.content, artifact.filename, artifact.mime_type
            )
        except SinkError as exc:
            raise ExportError(f"Failed to deliver {artifact.filename}: {exc}") from exc

    async def export(
        self,
        scope: ExportScope = ExportScope.FULL,
        options: ExportOptions | None = None,
    ) -> ExportOutcome:
        """Assemble, encode and deliver one export; never raises."""
        options = options or ExportOptions()
        try:
            async with async_log_timing("export", logger=logger, scope=scope.value) as timing:
                snapshot = await self.assemble(scope)
                artifacts = await asyncio.to_thread(
                    build_artifacts, snapshot, scope, options, as_of=self._as_of()
                )
                for artifact in artifacts:
                    await self._deliver(artifact)
                summary = summarize(snapshot, artifacts)
                timing["artifact_count"] = len(artifacts)
                timing["total_records"] = summary.total_records
        except Exception as exc:
            log_exception(logger, exc, "Export failed", scope=scope.value)
            return ExportOutcome(ok=False, scope=scope, error=str(exc) or type(exc).__name__)

        logger.info(
            "Export completed",
            scope=scope.value,
            table_count=summary.table_count,
            total_records=summary.total_records,
            size=summary.human_size,
            filenames=summary.filenames,
        )
        return ExportOutcome(ok=True, scope=scope, summary=summary)

    async def export_everything(self, options: ExportOptions | None = None) -> ExportOutcome:
        return await self.export(ExportScope.FULL, options)

    async def export_financial_subset(self, options: ExportOptions | None = None) -> ExportOutcome:
        return await self.export(ExportScope.FINANCIAL, options)

    async def export_sales_subset(self, options: ExportOptions | None = None) -> ExportOutcome:
        return await self.export(ExportScope.SALES, options)

    async def render_live_report(
        self,
        scope: ExportScope = ExportScope.FULL,
        *,
        search: str | None = None,
    ) -> str:
        snapshot = await self.assemble(scope)
        return await asyncio.to_thread(render_report, snapshot, as_of=self._as_of(), search=search)


def rehydrate_report(
    content: bytes | str,
    *,
    as_of: date | None = None,
    search: str | None = None,
    source_label: str | None = "Backup file",
) -> str:
    """Re-render a report from a previously exported dump or report page.

    Raises:
        RehydrationError: If the content is not a backup document.
    """
    snapshot = rehydrate(content)
    label = f"{source_label} | {snapshot.metadata.exported_at}" if source_label else None
    return render_report(snapshot, as_of=as_of or report_today(), search=search, source_label=label)
