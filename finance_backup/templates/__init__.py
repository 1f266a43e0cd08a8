"""Templates package."""

from finance_backup.templates.report import (
    LAYOUT_SCRIPT_ID,
    REPORT_TITLE,
    SCRIPT,
    SNAPSHOT_SCRIPT_ID,
    STYLES,
    error_document,
)

__all__ = [
    "LAYOUT_SCRIPT_ID",
    "REPORT_TITLE",
    "SCRIPT",
    "SNAPSHOT_SCRIPT_ID",
    "STYLES",
    "error_document",
]
