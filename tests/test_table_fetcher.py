"""Tests for the per-table fetch policy."""

import pytest
from conftest import FakeDataSource

from finance_backup.models import TableName
from finance_backup.services.table_fetcher import TableFetcher


class ExplodingSource(FakeDataSource):
    async def fetch(self, table):
        raise RuntimeError("connection reset")


@pytest.mark.asyncio
async def test_fetch_returns_rows_and_count(sample_data) -> None:
    fetcher = TableFetcher(FakeDataSource(sample_data))

    result = await fetcher.fetch(TableName.PRODUCTS)

    assert result.failed is False
    assert result.count == 4
    assert result.rows[0]["name"] == "Widget"


@pytest.mark.asyncio
async def test_sales_use_the_member_join(sample_data) -> None:
    source = FakeDataSource(sample_data)
    fetcher = TableFetcher(source)

    result = await fetcher.fetch(TableName.SALES)

    assert result.count == 4
    assert result.rows[0]["users"]["name"] == "Asha"


@pytest.mark.asyncio
async def test_fetch_error_yields_empty_table(sample_data) -> None:
    fetcher = TableFetcher(FakeDataSource(sample_data, failing={"expenses"}))

    result = await fetcher.fetch(TableName.EXPENSES)

    assert result.failed is True
    assert result.rows == []
    assert result.count == 0


@pytest.mark.asyncio
async def test_unexpected_exception_is_contained() -> None:
    fetcher = TableFetcher(ExplodingSource())

    result = await fetcher.fetch(TableName.LOANS)

    assert result.failed is True
    assert result.count == 0


@pytest.mark.asyncio
async def test_missing_table_is_empty_not_failed() -> None:
    fetcher = TableFetcher(FakeDataSource({}))

    result = await fetcher.fetch(TableName.REWARDS)

    assert result.failed is False
    assert result.count == 0
