"""Table catalog shared by the backup services."""

from finance_backup.models.tables import (
    BACKUP_TABLES,
    SCOPE_FILE_KIND,
    SCOPE_TABLES,
    ExportScope,
    TableName,
    scope_version,
    table_file_label,
)

__all__ = [
    "BACKUP_TABLES",
    "SCOPE_FILE_KIND",
    "SCOPE_TABLES",
    "ExportScope",
    "TableName",
    "scope_version",
    "table_file_label",
]
