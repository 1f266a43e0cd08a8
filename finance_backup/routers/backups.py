"""Backup export and report endpoints."""

import asyncio
from typing import Any

from fastapi import APIRouter, File, Form, Query, Response, UploadFile, status
from fastapi.responses import HTMLResponse, JSONResponse

from finance_backup.deps import BackupServiceDep
from finance_backup.logger import get_logger
from finance_backup.models import ExportScope
from finance_backup.schemas import ExportOptions, ExportOutcome
from finance_backup.services.backup_service import rehydrate_report
from finance_backup.services.rehydration import RehydrationError
from finance_backup.utils import raise_bad_request, raise_not_found, raise_too_large

router = APIRouter(prefix="/backups", tags=["backups"])
logger = get_logger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024


def _scope(name: str) -> ExportScope:
    try:
        return ExportScope(name.lower())
    except ValueError as exc:
        raise_not_found(f"Export scope '{name}'", cause=exc)


def _outcome(outcome: ExportOutcome, response: Response) -> ExportOutcome:
    if not outcome.ok:
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return outcome


@router.post("/export", response_model=ExportOutcome)
async def export_everything(
    service: BackupServiceDep,
    response: Response,
    options: ExportOptions | None = None,
) -> ExportOutcome:
    """Export every table with the requested artifacts."""
    return _outcome(await service.export_everything(options), response)


@router.post("/export/financial", response_model=ExportOutcome)
async def export_financial(
    service: BackupServiceDep,
    response: Response,
    options: ExportOptions | None = None,
) -> ExportOutcome:
    """Export the financial tables only."""
    return _outcome(await service.export_financial_subset(options), response)


@router.post("/export/sales", response_model=ExportOutcome)
async def export_sales(
    service: BackupServiceDep,
    response: Response,
    options: ExportOptions | None = None,
) -> ExportOutcome:
    """Export the sales tables only."""
    return _outcome(await service.export_sales_subset(options), response)


@router.get("/snapshot")
async def get_snapshot(
    service: BackupServiceDep,
    scope: str = Query(default=ExportScope.FULL.value),
) -> JSONResponse:
    """Assemble a snapshot and return the structured dump document."""
    document: dict[str, Any] = await service.snapshot_document(_scope(scope))
    return JSONResponse(content=document)


@router.get("/report", response_class=HTMLResponse)
async def live_report(
    service: BackupServiceDep,
    scope: str = Query(default=ExportScope.FULL.value),
    search: str | None = Query(default=None, max_length=200),
) -> HTMLResponse:
    """Render the interactive report from freshly fetched data."""
    page = await service.render_live_report(_scope(scope), search=search)
    return HTMLResponse(content=page)


@router.post("/report", response_class=HTMLResponse)
async def rehydrated_report(
    file: UploadFile = File(...),
    search: str | None = Form(default=None),
) -> HTMLResponse:
    """Render the interactive report from an uploaded dump or report page."""
    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise_too_large("File exceeds 50MB limit")
    if not content:
        raise_bad_request("Uploaded file is empty")

    try:
        page = await asyncio.to_thread(rehydrate_report, content, search=search)
    except RehydrationError as exc:
        logger.warning("Backup upload rejected", filename=file.filename, error=str(exc))
        raise_bad_request(str(exc), cause=exc)
    return HTMLResponse(content=page)
