from finance_backup.schemas.backup import (
    ExportOptions,
    ExportOutcome,
    ExportSummary,
    Row,
    Snapshot,
    SnapshotMetadata,
)

__all__ = [
    "ExportOptions",
    "ExportOutcome",
    "ExportSummary",
    "Row",
    "Snapshot",
    "SnapshotMetadata",
]
