"""API routers package."""

from finance_backup.routers import backups

__all__ = ["backups"]
