"""Re-hydration of previously exported backups.

Accepted inputs:
- a structured dump ``{"metadata": {...}, "data": {...}}``
- a bare ``data`` mapping of table name to rows
- an interactive report page, whose snapshot is embedded in
  ``<script type="application/json" id="snapshot-data">``

The result is a brand-new ``Snapshot``: counts are recomputed from the data
actually present, and money strings written with the legacy currency symbol
are rewritten to the display symbol.
"""

from __future__ import annotations

import html
import json
import re
from collections.abc import Mapping
from typing import Any

from finance_backup.config import settings
from finance_backup.logger import get_logger
from finance_backup.schemas import Row, Snapshot, SnapshotMetadata
from finance_backup.templates import SNAPSHOT_SCRIPT_ID

logger = get_logger(__name__)

UNKNOWN = "Unknown"

_EMBEDDED_SNAPSHOT = re.compile(
    r"<script[^>]*\bid=[\"']" + re.escape(SNAPSHOT_SCRIPT_ID) + r"[\"'][^>]*>(?P<body>.*?)</script>",
    re.IGNORECASE | re.DOTALL,
)


class RehydrationError(Exception):
    """Raised when uploaded content is not a snapshot document."""


def _decode(content: bytes | str) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise RehydrationError("Backup file is not UTF-8 text") from exc


def extract_document(content: bytes | str) -> dict[str, Any]:
    """Parse uploaded bytes into the JSON object they carry."""
    text = _decode(content).lstrip("\ufeff").strip()
    if not text:
        raise RehydrationError("Backup file is empty")

    if text.startswith("<"):
        match = _EMBEDDED_SNAPSHOT.search(text)
        if match is None:
            raise RehydrationError("No embedded snapshot data found in this report")
        text = match.group("body").strip()
        # Pages written by other tools may entity-escape the block
        if text.startswith("{&") or "&quot;" in text:
            text = html.unescape(text)

    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RehydrationError(f"Invalid backup file: {exc.msg} (line {exc.lineno})") from exc

    if not isinstance(document, dict):
        raise RehydrationError("Backup file must contain a JSON object")
    return document


def currency_pattern(legacy_symbol: str) -> re.Pattern[str]:
    return re.compile(re.escape(legacy_symbol) + r"(\d+(?:,\d{3})*(?:\.\d{2})?)")


def normalize_currency(
    value: Any,
    *,
    symbol: str | None = None,
    legacy_symbol: str | None = None,
    pattern: re.Pattern[str] | None = None,
) -> Any:
    """Rewrite ``$1,234.56``-style amounts to the display symbol, recursively."""
    symbol = symbol or settings.display_currency_symbol
    pattern = pattern or currency_pattern(legacy_symbol or settings.legacy_currency_symbol)

    if isinstance(value, str):
        return pattern.sub(lambda match: symbol + match.group(1), value)
    if isinstance(value, list):
        return [normalize_currency(item, symbol=symbol, pattern=pattern) for item in value]
    if isinstance(value, dict):
        return {
            key: normalize_currency(item, symbol=symbol, pattern=pattern)
            for key, item in value.items()
        }
    return value


def _split(document: dict[str, Any]) -> tuple[Mapping[str, Any], Mapping[str, Any]]:
    data = document.get("data")
    if isinstance(data, dict):
        metadata = document.get("metadata")
        return (metadata if isinstance(metadata, dict) else {}), data
    return {}, document


def _tables(data: Mapping[str, Any]) -> dict[str, list[Row]]:
    tables: dict[str, list[Row]] = {}
    for name, rows in data.items():
        if not isinstance(rows, list):
            continue
        records = [row for row in rows if isinstance(row, dict)]
        if records:
            tables[str(name)] = records
    return tables


def _text(metadata: Mapping[str, Any], key: str) -> str:
    value = metadata.get(key)
    if value is None or value == "":
        return UNKNOWN
    return str(value)


def rehydrate(content: bytes | str) -> Snapshot:
    """Rebuild a snapshot from an uploaded dump or report page.

    Raises:
        RehydrationError: If the content cannot be parsed as a backup.
    """
    metadata, raw_data = _split(extract_document(content))
    data = normalize_currency(_tables(raw_data))

    snapshot = Snapshot(
        metadata=SnapshotMetadata(
            timestamp=_text(metadata, "timestamp"),
            exported_at=_text(metadata, "exportedAt"),
            version=_text(metadata, "version"),
            table_count=len(data),
            total_records=sum(len(rows) for rows in data.values()),
        ),
        data=data,
    )
    logger.info(
        "Backup re-hydrated",
        version=snapshot.metadata.version,
        table_count=snapshot.metadata.table_count,
        total_records=snapshot.metadata.total_records,
    )
    return snapshot
