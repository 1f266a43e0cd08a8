"""Test fixtures and configuration."""

import copy
from datetime import UTC, date, datetime

import pytest

from finance_backup.models import BACKUP_TABLES, TableName
from finance_backup.services.data_sources import FetchError
from finance_backup.services.sinks import SinkError
from finance_backup.services.snapshot import build_snapshot

FIXED_MOMENT = datetime(2024, 3, 15, 10, 30, 45, 123000, tzinfo=UTC)
AS_OF = date(2024, 3, 15)

SAMPLE_DATA = {
    "sales": [
        {
            "id": 1,
            "member_id": "u1",
            "total_amount": 1000,
            "payment_method": "cash",
            "status": "completed",
            "date": "2024-03-02",
            "users": {"name": "Asha", "region": "North", "email": "asha@example.com"},
        },
        {
            "id": 2,
            "member_id": None,
            "customer_name": "Walk-in",
            "total_amount": "500.60",
            "payment_method": "card",
            "date": "2024-03-02",
            "users": None,
        },
        {
            "id": 3,
            "member_id": "u3",
            "total_amount": 800,
            "date": "2024-02-10",
            "users": {"name": "Ravi", "region": "South", "email": "ravi@example.com"},
        },
        {"id": 4, "total_amount": 200, "created_at": "2024-03-10T09:00:00+00:00", "users": None},
    ],
    "expenses": [
        {"id": 1, "amount": 300, "category": "Rent", "description": "Office rent", "date": "2024-03-01"},
        {"id": 2, "amount": "150.25", "category": "Utilities", "date": "2024-03-05"},
        {"id": 3, "amount": 100, "category": None, "date": "2024-02-20"},
    ],
    "cash_transactions": [
        {"id": 1, "type": "income", "amount": 400, "date": "2024-03-03"},
        {"id": 2, "type": "expense", "amount": 120, "date": "2024-03-04"},
        {"id": 3, "type": "transfer", "amount": 50, "date": "2024-03-04"},
    ],
    "investments": [
        {"id": 1, "name": "Index Fund", "amount": 1000, "current_value": 1200, "date": "2024-01-01"},
        {"id": 2, "name": "Bonds", "amount": 500, "current_value": None, "date": "2024-01-05"},
    ],
    "loans": [
        {"id": 1, "borrower_name": "Kiran", "amount": 2000, "status": "active", "interest_rate": 12},
        {"id": 2, "borrower_name": "Meera", "amount": 700, "status": "closed", "interest_rate": 10},
    ],
    "goods_purchases": [
        {"id": 1, "vendor_name": "Acme", "total_amount": 600, "date": "2024-03-01"},
        {"id": 2, "vendor_name": "Globex", "amount": 150, "date": "2024-03-02"},
    ],
    "clearances": [
        {"id": 1, "product_name": "Old stock", "value": 80, "date": "2024-03-01"},
        {"id": 2, "product_name": "Damaged", "amount": 20, "date": "2024-03-02"},
    ],
    "inventory_transactions": [
        {"id": 1, "product_name": "Widget", "type": "in", "quantity": 10, "unit_price": 5},
        {"id": 2, "product_name": "Widget", "transaction_type": "out", "quantity": 0},
        {"id": 3, "product_name": "Gadget", "type": "in", "quantity": 2, "price": 7.5},
    ],
    "products": [
        {"id": 1, "name": "Widget", "price": 100, "availability": "in-stock", "category": "Tools"},
        {"id": 2, "name": "Gadget", "price": "250.5", "availability": "low-stock"},
        {"id": 3, "name": "Doohickey", "price": 0, "availability": "out-of-stock"},
        {"id": 4, "name": "Thingamajig"},
    ],
    "users": [
        {"id": "u1", "name": "Asha", "role": "admin", "is_active": True},
        {"id": "u2", "name": "Bala", "role": "reseller", "is_active": False},
        {"id": "u3", "name": "Ravi", "role": "reseller"},
        {"id": "u4", "name": "Nobody"},
    ],
    "requests": [{"id": 1, "customer_name": "Asha", "status": "pending", "priority": "high"}],
    "notifications": [],
    "settings": [{"key": "currency", "value": "INR"}],
}

# Non-empty tables of SAMPLE_DATA and their row total
SAMPLE_TABLE_COUNT = 12
SAMPLE_TOTAL_RECORDS = 31


class FakeDataSource:
    """In-memory data source; tables listed in ``failing`` raise FetchError."""

    def __init__(self, tables: dict | None = None, failing: set[str] | None = None) -> None:
        self.tables = copy.deepcopy(tables or {})
        self.failing = set(failing or ())
        self.calls: list[str] = []

    def _rows(self, table: str) -> list[dict]:
        self.calls.append(table)
        if table in self.failing:
            raise FetchError(table, "permission denied")
        return copy.deepcopy(self.tables.get(table, []))

    async def fetch(self, table: TableName) -> list[dict]:
        return self._rows(TableName(table).value)

    async def fetch_sales_with_members(self) -> list[dict]:
        return self._rows(TableName.SALES.value)


class MemorySink:
    """Collects delivered artifacts."""

    def __init__(self) -> None:
        self.delivered: dict[str, tuple[bytes, str]] = {}

    def deliver(self, content: bytes, filename: str, mime_type: str) -> str:
        self.delivered[filename] = (content, mime_type)
        return f"memory://{filename}"


class FailingSink:
    def deliver(self, content: bytes, filename: str, mime_type: str) -> str:
        raise SinkError("disk full")


def fixed_clock() -> datetime:
    return FIXED_MOMENT


@pytest.fixture
def sample_data() -> dict:
    return copy.deepcopy(SAMPLE_DATA)


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def snapshot(sample_data):
    return build_snapshot(sample_data.items(), captured_at=FIXED_MOMENT, version="2.0.0")


@pytest.fixture
def empty_snapshot():
    return build_snapshot(
        ((table, []) for table in BACKUP_TABLES),
        captured_at=FIXED_MOMENT,
        version="2.0.0",
    )


@pytest.fixture
def fake_source(sample_data) -> FakeDataSource:
    return FakeDataSource(sample_data)


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()
