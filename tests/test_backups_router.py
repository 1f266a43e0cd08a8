"""Tests for the backup API endpoints."""

import json
import threading

import pytest
import pytest_asyncio
from conftest import AS_OF, FailingSink, FakeDataSource, MemorySink, fixed_clock
from httpx import ASGITransport, AsyncClient

from finance_backup.deps import get_backup_service
from finance_backup.main import app
from finance_backup.routers import backups
from finance_backup.services.backup_service import BackupService
from finance_backup.services.encoders import encode_full_dump
from finance_backup.services.table_fetcher import TableFetcher


def _override(source: FakeDataSource, sink) -> None:
    service = BackupService(TableFetcher(source), sink, clock=fixed_clock, as_of=AS_OF)
    app.dependency_overrides[get_backup_service] = lambda: service


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def sink(fake_source) -> MemorySink:
    memory_sink = MemorySink()
    _override(fake_source, memory_sink)
    return memory_sink


@pytest.mark.asyncio
async def test_health(client):
    """Health endpoint reports the configured source and sink."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["data_source"] in ("sql", "rest")
    assert "X-Request-ID" in response.headers


class TestExportEndpoints:
    @pytest.mark.asyncio
    async def test_export_everything(self, client, sink):
        response = await client.post("/backups/export")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["scope"] == "full"
        assert data["summary"]["total_records"] == 31
        assert set(sink.delivered) == set(data["summary"]["filenames"])

    @pytest.mark.asyncio
    async def test_export_with_options(self, client, sink):
        response = await client.post(
            "/backups/export",
            json={"include_dashboard": False, "include_full_dump": False, "per_table_csv": ["expenses"]},
        )

        assert response.status_code == 200
        assert response.json()["summary"]["filenames"] == [
            "blessin-finance-backup-2024-03-15T10-30-45-Expenses.csv"
        ]

    @pytest.mark.asyncio
    async def test_export_rejects_unknown_table(self, client, sink):
        response = await client.post("/backups/export", json={"per_table_csv": ["passwords"]})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_financial_and_sales(self, client, sink):
        financial = await client.post("/backups/export/financial")
        sales = await client.post("/backups/export/sales")

        assert financial.json()["summary"]["version"] == "2.0.0-financial"
        assert sales.json()["summary"]["version"] == "2.0.0-sales"

    @pytest.mark.asyncio
    async def test_failed_export_is_500(self, client, fake_source):
        _override(fake_source, FailingSink())

        response = await client.post("/backups/export")

        assert response.status_code == 500
        data = response.json()
        assert data["ok"] is False
        assert "disk full" in data["error"]


class TestSnapshotEndpoint:
    @pytest.mark.asyncio
    async def test_full_snapshot(self, client, sink):
        response = await client.get("/backups/snapshot")

        assert response.status_code == 200
        document = response.json()
        assert document["metadata"]["tableCount"] == 12
        assert "notifications" not in document["data"]
        assert sink.delivered == {}

    @pytest.mark.asyncio
    async def test_scoped_snapshot(self, client, sink):
        response = await client.get("/backups/snapshot", params={"scope": "financial"})

        assert response.json()["metadata"]["version"] == "2.0.0-financial"

    @pytest.mark.asyncio
    async def test_unknown_scope(self, client, sink):
        response = await client.get("/backups/snapshot", params={"scope": "everything"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Export scope 'everything' not found"


class TestReportEndpoints:
    @pytest.mark.asyncio
    async def test_live_report(self, client, sink):
        response = await client.get("/backups/report", params={"search": "asha"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Blessin Finance Database Dashboard" in response.text
        assert 'value="asha"' in response.text

    @pytest.mark.asyncio
    async def test_upload_report(self, client, snapshot):
        files = {"file": ("backup.json", encode_full_dump(snapshot), "application/json")}

        response = await client.post("/backups/report", files=files, data={"search": "widget"})

        assert response.status_code == 200
        assert "Data Source: Backup file" in response.text
        assert 'value="widget"' in response.text

    @pytest.mark.asyncio
    async def test_upload_renders_off_the_event_loop(self, client, snapshot, monkeypatch):
        threads = []

        def rehydrate(content, **kwargs):
            threads.append(threading.current_thread())
            return "<html></html>"

        monkeypatch.setattr(backups, "rehydrate_report", rehydrate)
        files = {"file": ("backup.json", encode_full_dump(snapshot), "application/json")}

        response = await client.post("/backups/report", files=files)

        assert response.status_code == 200
        assert threads and threads[0] is not threading.main_thread()

    @pytest.mark.asyncio
    async def test_upload_invalid_file(self, client):
        files = {"file": ("backup.json", b"not a backup", "application/json")}

        response = await client.post("/backups/report", files=files)

        assert response.status_code == 400
        assert "Invalid backup file" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_upload_empty_file(self, client):
        files = {"file": ("backup.json", b"", "application/json")}

        response = await client.post("/backups/report", files=files)

        assert response.status_code == 400
        assert response.json()["detail"] == "Uploaded file is empty"

    @pytest.mark.asyncio
    async def test_upload_too_large(self, client, monkeypatch):
        monkeypatch.setattr(backups, "MAX_UPLOAD_BYTES", 10)
        files = {"file": ("backup.json", json.dumps({"data": {}}).encode() * 2, "application/json")}

        response = await client.post("/backups/report", files=files)

        assert response.status_code == 413
