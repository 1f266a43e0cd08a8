"""Turn one snapshot into the artifacts requested by ``ExportOptions``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from finance_backup.config import settings
from finance_backup.logger import get_logger, log_timing
from finance_backup.models import BACKUP_TABLES, SCOPE_FILE_KIND, ExportScope, table_file_label
from finance_backup.schemas import ExportOptions, ExportSummary, Snapshot
from finance_backup.services.business_report import render_business_report
from finance_backup.services.encoders import (
    compact_size,
    encode_csv,
    encode_dashboard,
    encode_full_dump,
    encode_sql,
)
from finance_backup.services.report_render import report_today

logger = get_logger(__name__)

MIME_HTML = "text/html"
MIME_JSON = "application/json"
MIME_CSV = "text/csv"
MIME_MARKDOWN = "text/markdown"
MIME_SQL = "application/sql"


@dataclass(frozen=True)
class Artifact:
    filename: str
    content: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


def sanitize_timestamp(timestamp: str) -> str:
    """``2024-01-15T10:30:45.123Z`` -> ``2024-01-15T10-30-45``."""
    return re.sub(r"[:.]", "-", timestamp)[:-5]


def export_basename(scope: ExportScope, timestamp: str, prefix: str | None = None) -> str:
    return f"{prefix or settings.export_prefix}-{SCOPE_FILE_KIND[scope]}-{sanitize_timestamp(timestamp)}"


def build_artifacts(
    snapshot: Snapshot,
    scope: ExportScope,
    options: ExportOptions,
    *,
    as_of: date | None = None,
) -> list[Artifact]:
    """Encode every requested artifact fully in memory.

    Per-table files are written only for tables present in the snapshot.
    """
    base = export_basename(scope, snapshot.metadata.timestamp)
    artifacts: list[Artifact] = []

    if options.include_dashboard:
        with log_timing("encode_dashboard", logger=logger, level="debug"):
            artifacts.append(Artifact(f"{base}-dashboard.html", encode_dashboard(snapshot, as_of), MIME_HTML))

    if options.include_full_dump:
        artifacts.append(Artifact(f"{base}.json", encode_full_dump(snapshot), MIME_JSON))

    for table in BACKUP_TABLES:
        if table in options.per_table_csv and snapshot.rows(table):
            artifacts.append(
                Artifact(f"{base}-{table_file_label(table)}.csv", encode_csv(snapshot.rows(table)), MIME_CSV)
            )

    if options.include_business_report:
        report = render_business_report(snapshot, as_of or report_today())
        artifacts.append(Artifact(f"{base}-report.md", report.encode("utf-8"), MIME_MARKDOWN))

    for table in BACKUP_TABLES:
        if table in options.per_table_sql and snapshot.rows(table):
            artifacts.append(
                Artifact(
                    f"{base}-{table.value}.sql",
                    encode_sql(table, snapshot.rows(table), snapshot.metadata.exported_at),
                    MIME_SQL,
                )
            )

    return artifacts


def format_bytes(size: int) -> str:
    """Human-readable size on a 1024 base, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[index]}"


def summarize(snapshot: Snapshot, artifacts: list[Artifact]) -> ExportSummary:
    size = compact_size(snapshot)
    return ExportSummary(
        table_count=snapshot.metadata.table_count,
        total_records=snapshot.metadata.total_records,
        byte_size=size,
        human_size=format_bytes(size),
        filenames=[artifact.filename for artifact in artifacts],
        version=snapshot.metadata.version,
        timestamp=snapshot.metadata.timestamp,
    )
