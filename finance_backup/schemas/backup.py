"""Pydantic schemas for snapshots and export runs."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from finance_backup.models import ExportScope, TableName

Row = dict[str, Any]


class SnapshotMetadata(BaseModel):
    """Identity and size of one snapshot.

    Serialized with the camelCase keys of the dump format.
    """

    model_config = ConfigDict(populate_by_name=True)

    timestamp: str
    exported_at: str = Field(alias="exportedAt")
    version: str
    table_count: int = Field(alias="tableCount", ge=0)
    total_records: int = Field(alias="totalRecords", ge=0)


class Snapshot(BaseModel):
    """Versioned bundle of fetched tables plus summary metadata."""

    metadata: SnapshotMetadata
    data: dict[str, list[Row]] = Field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        """Return the ``{metadata, data}`` document written by the structured dump."""
        return {
            "metadata": self.metadata.model_dump(by_alias=True),
            "data": self.data,
        }

    def rows(self, table: TableName | str) -> list[Row]:
        key = table.value if isinstance(table, TableName) else table
        return self.data.get(key, [])


class ExportOptions(BaseModel):
    """Which artifacts one export run produces."""

    include_dashboard: bool = True
    include_full_dump: bool = True
    include_business_report: bool = False
    per_table_csv: set[TableName] = Field(default_factory=set)
    per_table_sql: set[TableName] = Field(default_factory=set)


class ExportSummary(BaseModel):
    """Counts, size and filenames reported once an export finishes."""

    table_count: int
    total_records: int
    byte_size: int
    human_size: str
    filenames: list[str]
    version: str
    timestamp: str


class ExportOutcome(BaseModel):
    """Result of an export entry point; failures carry the raw message."""

    ok: bool
    scope: ExportScope
    summary: ExportSummary | None = None
    error: str | None = None
