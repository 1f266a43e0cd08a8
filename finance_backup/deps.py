"""Common FastAPI dependencies for consistent type annotations.

Usage:
    from finance_backup.deps import BackupServiceDep

    async def my_endpoint(service: BackupServiceDep):
        # service is a BackupService wired to the configured data source and sink
        ...
"""

from typing import Annotated

from fastapi import Depends

from finance_backup.services.backup_service import BackupService
from finance_backup.services.data_sources import build_data_source
from finance_backup.services.sinks import build_sink
from finance_backup.services.table_fetcher import TableFetcher


def get_backup_service() -> BackupService:
    return BackupService(TableFetcher(build_data_source()), build_sink())


BackupServiceDep = Annotated[BackupService, Depends(get_backup_service)]

__all__ = ["BackupServiceDep", "get_backup_service"]
