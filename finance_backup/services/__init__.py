"""Services package."""

from finance_backup.services.backup_service import BackupService, ExportError, rehydrate_report
from finance_backup.services.data_sources import (
    DataSource,
    FetchError,
    RestDataSource,
    SqlDataSource,
    build_data_source,
)
from finance_backup.services.encoders import EncodingError
from finance_backup.services.rehydration import RehydrationError, rehydrate
from finance_backup.services.report_render import render_report
from finance_backup.services.report_stats import compute_statistics
from finance_backup.services.sinks import (
    FileSink,
    LocalDirectorySink,
    ObjectStoreSink,
    SinkError,
    build_sink,
)
from finance_backup.services.snapshot import assemble_scope, assemble_snapshot, build_snapshot
from finance_backup.services.table_fetcher import FetchResult, TableFetcher

__all__ = [
    "BackupService",
    "ExportError",
    "rehydrate_report",
    "DataSource",
    "FetchError",
    "RestDataSource",
    "SqlDataSource",
    "build_data_source",
    "EncodingError",
    "RehydrationError",
    "rehydrate",
    "render_report",
    "compute_statistics",
    "FileSink",
    "LocalDirectorySink",
    "ObjectStoreSink",
    "SinkError",
    "build_sink",
    "assemble_scope",
    "assemble_snapshot",
    "build_snapshot",
    "FetchResult",
    "TableFetcher",
]
