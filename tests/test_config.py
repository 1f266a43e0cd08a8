"""Tests for configuration helpers."""

import pytest
from pydantic import ValidationError

from finance_backup.config import Settings, parse_comma_list


def test_parse_comma_list_defaults() -> None:
    assert parse_comma_list(None, ["sales"]) == ["sales"]


def test_parse_comma_list_accepts_list() -> None:
    assert parse_comma_list(["users", "products"], ["sales"]) == ["users", "products"]


def test_parse_comma_list_splits_string() -> None:
    assert parse_comma_list("sales, products, ,users", []) == ["sales", "products", "users"]


def test_settings_defaults(monkeypatch) -> None:
    monkeypatch.delenv("DEFAULT_CSV_TABLES", raising=False)
    settings = Settings(_env_file=None)

    assert settings.export_prefix == "blessin"
    assert settings.snapshot_version == "2.0.0"
    assert settings.display_currency_symbol == "₹"
    assert settings.legacy_currency_symbol == "$"
    assert settings.fetch_concurrency >= 1
    assert settings.default_csv_tables == []


def test_default_csv_tables_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULT_CSV_TABLES", "sales, products")
    settings = Settings(_env_file=None)

    assert settings.default_csv_tables == ["sales", "products"]


def test_data_source_and_sink_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DATA_SOURCE", "rest")
    monkeypatch.setenv("EXPORT_SINK", "s3")
    settings = Settings(_env_file=None)

    assert settings.data_source == "rest"
    assert settings.export_sink == "s3"


def test_fetch_concurrency_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, fetch_concurrency=0)
