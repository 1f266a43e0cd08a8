"""Snapshot encoders.

Each encoder returns the complete artifact as bytes; nothing is handed to a
sink until its encoding has finished.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Sequence
from datetime import date
from io import StringIO
from typing import Any

from finance_backup.logger import get_logger, log_exception
from finance_backup.models import TableName
from finance_backup.schemas import Row, Snapshot
from finance_backup.services.report_render import render_error_document, render_report

logger = get_logger(__name__)


class EncodingError(Exception):
    """Raised when a snapshot cannot be encoded into an artifact."""


def encode_full_dump(snapshot: Snapshot) -> bytes:
    """Pretty-printed UTF-8 ``{metadata, data}`` document."""
    try:
        text = json.dumps(snapshot.to_document(), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Snapshot is not JSON serializable: {exc}") from exc
    return text.encode("utf-8")


def compact_size(snapshot: Snapshot) -> int:
    """Byte size of the compact JSON document, reported in export summaries."""
    try:
        text = json.dumps(snapshot.to_document(), ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Snapshot is not JSON serializable: {exc}") from exc
    return len(text.encode("utf-8"))


# =============================================================================
# Delimited text
# =============================================================================


def stringify_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def column_union(rows: Sequence[Row]) -> list[str]:
    """All keys seen across ``rows``, in first-seen order."""
    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return list(columns)


def encode_csv(rows: Sequence[Row]) -> bytes:
    """CSV with a header of the key union; missing fields are empty."""
    if not rows:
        return b""
    columns = column_union(rows)
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([stringify_value(row.get(column)) for column in columns])
    content = output.getvalue()
    output.close()
    return content.encode("utf-8")


# =============================================================================
# SQL inserts
# =============================================================================


def sql_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return stringify_value(value)
    if isinstance(value, (dict, list)):
        value = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    text = str(value).replace("'", "''")
    return f"'{text}'"


def encode_sql(table: TableName | str, rows: Sequence[Row], generated_at: str) -> bytes:
    """``INSERT`` statements for one table, columns taken from the first row."""
    name = table.value if isinstance(table, TableName) else table
    if not rows:
        return f"-- Table {name} is empty\n".encode("utf-8")

    lines = [
        f"-- SQL Export for table: {name}",
        f"-- Generated on: {generated_at}",
        "",
    ]
    columns = list(rows[0].keys())
    column_list = ", ".join(f'"{column}"' for column in columns)
    for row in rows:
        values = ", ".join(sql_literal(row.get(column)) for column in columns)
        lines.append(f'INSERT INTO "{name}" ({column_list}) VALUES ({values});')
    return ("\n".join(lines) + "\n").encode("utf-8")


# =============================================================================
# Interactive report
# =============================================================================


def encode_dashboard(snapshot: Snapshot, as_of: date | None = None) -> bytes:
    """Interactive report; a render failure yields the error document instead."""
    try:
        document = render_report(snapshot, as_of=as_of)
    except Exception as exc:
        log_exception(
            logger,
            exc,
            "Dashboard rendering failed, writing error document",
            version=snapshot.metadata.version,
        )
        document = render_error_document(str(exc) or type(exc).__name__)
    return document.encode("utf-8")
