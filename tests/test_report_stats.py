"""Tests for report statistics."""

import json
from datetime import date
from decimal import Decimal

from finance_backup.services.report_stats import (
    cash_flow_summary,
    compute_statistics,
    expense_summary,
    field_value,
    financial_breakdown,
    financial_overview,
    inventory_summary,
    percentage,
    product_summary,
    row_date,
    sales_analytics,
    statistics_document,
    table_rows,
    to_decimal,
    user_summary,
)


class TestHelpers:
    def test_to_decimal_tolerates_loose_values(self) -> None:
        assert to_decimal(10) == Decimal("10")
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(" 3 ") == Decimal("3")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(None) == 0
        assert to_decimal(True) == 0
        assert to_decimal("abc") == 0
        assert to_decimal("NaN") == 0
        assert to_decimal({"a": 1}) == 0

    def test_row_date_prefers_date_then_created_at(self) -> None:
        assert row_date({"date": "2024-03-02", "created_at": "2024-01-01"}) == date(2024, 3, 2)
        assert row_date({"created_at": "2024-03-10T09:00:00+00:00"}) == date(2024, 3, 10)
        assert row_date({"date": "not a date"}) is None
        assert row_date({}) is None

    def test_row_date_uses_display_timezone_for_timestamps(self) -> None:
        late_utc = {"created_at": "2024-03-31T20:00:00Z"}

        assert row_date(late_utc, tz_name="Asia/Kolkata") == date(2024, 4, 1)
        assert row_date(late_utc, tz_name="UTC") == date(2024, 3, 31)
        assert row_date({"created_at": "2024-03-31T20:00:00"}, tz_name="Asia/Kolkata") == date(2024, 3, 31)
        assert row_date({"date": "2024-03-31T23:59:59-05:00"}, tz_name="UTC") == date(2024, 4, 1)

    def test_oversized_amounts_count_as_zero(self) -> None:
        assert to_decimal("1e30") == 0
        assert to_decimal(Decimal("-1e24")) == 0
        assert to_decimal(1e300) == 0
        assert to_decimal("999999999999999999999999") == Decimal("999999999999999999999999")

    def test_field_value_reads_dotted_paths(self) -> None:
        row = {"users": {"name": "Asha"}, "plain": 1}
        assert field_value(row, "users.name") == "Asha"
        assert field_value(row, "users.region") is None
        assert field_value({"users": None}, "users.name") is None
        assert field_value(row, "plain") == 1

    def test_table_rows_ignores_malformed_tables(self) -> None:
        assert table_rows({"sales": "oops"}, "sales") == []
        assert table_rows({"sales": [1, {"id": 1}]}, "sales") == [{"id": 1}]
        assert table_rows(None, "sales") == []

    def test_percentage_guards_zero_denominator(self) -> None:
        assert percentage(Decimal("5"), Decimal("0")) == 0
        assert percentage(Decimal("1"), Decimal("3")) == Decimal("33.3")


class TestFinancialOverview:
    def test_sample_figures(self, sample_data) -> None:
        fin = financial_overview(sample_data)

        assert fin.sales_revenue == Decimal("2500.60")
        assert fin.cash_inflow == Decimal("400.00")
        assert fin.total_revenue == Decimal("2900.60")
        assert fin.total_expenses == Decimal("550.25")
        assert fin.cash_outflow == Decimal("120.00")
        assert fin.inventory_purchases == Decimal("750.00")
        assert fin.inventory_clearances == Decimal("100.00")
        assert fin.total_costs == Decimal("1520.25")
        assert fin.net_income == Decimal("1380.35")
        assert fin.profit_margin == Decimal("47.6")
        assert fin.investment_value == Decimal("1700.00")
        assert fin.loans_outstanding == Decimal("2000.00")

    def test_margin_is_zero_without_revenue(self) -> None:
        fin = financial_overview({"expenses": [{"amount": 100}]})

        assert fin.total_revenue == 0
        assert fin.net_income == Decimal("-100.00")
        assert fin.profit_margin == 0

    def test_missing_sales_contribute_nothing(self, sample_data) -> None:
        del sample_data["sales"]

        fin = financial_overview(sample_data)

        assert fin.sales_revenue == 0
        assert fin.total_revenue == Decimal("400.00")

    def test_empty_data(self) -> None:
        fin = financial_overview({})
        assert fin.net_income == 0
        assert fin.profit_margin == 0

    def test_breakdown_counts(self, sample_data) -> None:
        assert financial_breakdown(sample_data) == {
            "sales": 4,
            "expenses": 3,
            "cash_transactions": 3,
            "investments": 2,
            "loans": 2,
            "inventory_transactions": 3,
            "goods_purchases": 2,
            "clearances": 2,
        }


class TestSalesAnalytics:
    def test_sample_figures(self, sample_data, as_of) -> None:
        sales = sales_analytics(sample_data, as_of)

        assert sales.count == 4
        assert sales.total_revenue == Decimal("2500.60")
        assert sales.average_sale == Decimal("625.15")
        assert sales.month_count == 3
        assert sales.month_revenue == Decimal("1700.60")
        assert sales.last_month_count == 1
        assert sales.last_month_revenue == Decimal("800.00")
        assert sales.monthly_growth == Decimal("112.6")
        assert sales.best_day == date(2024, 3, 2)
        assert sales.best_day_revenue == Decimal("1500.60")

    def test_growth_is_zero_without_last_month(self, as_of) -> None:
        sales = sales_analytics({"sales": [{"total_amount": 50, "date": "2024-03-01"}]}, as_of)

        assert sales.monthly_growth == 0
        assert sales.month_revenue == Decimal("50.00")

    def test_january_compares_with_december(self) -> None:
        data = {
            "sales": [
                {"total_amount": 100, "date": "2023-12-20"},
                {"total_amount": 150, "date": "2024-01-05"},
            ]
        }

        sales = sales_analytics(data, date(2024, 1, 31))

        assert sales.last_month_revenue == Decimal("100.00")
        assert sales.monthly_growth == Decimal("50.0")

    def test_best_day_ties_go_to_earliest(self, as_of) -> None:
        data = {
            "sales": [
                {"total_amount": 100, "date": "2024-03-05"},
                {"total_amount": 100, "date": "2024-03-01"},
            ]
        }

        assert sales_analytics(data, as_of).best_day == date(2024, 3, 1)

    def test_no_sales(self, as_of) -> None:
        sales = sales_analytics({}, as_of)

        assert sales.count == 0
        assert sales.average_sale == 0
        assert sales.best_day is None
        assert sales.best_day_revenue is None

    def test_month_follows_display_timezone(self) -> None:
        data = {
            "sales": [
                {"total_amount": 100, "created_at": "2024-03-31T20:00:00Z"},
                {"total_amount": 40, "created_at": "2024-03-31T10:00:00Z"},
            ]
        }

        sales = sales_analytics(data, date(2024, 4, 15))

        assert sales.month_count == 1
        assert sales.month_revenue == Decimal("100.00")
        assert sales.last_month_revenue == Decimal("40.00")
        assert sales.best_day == date(2024, 4, 1)

    def test_huge_amounts_do_not_break_statistics(self) -> None:
        data = {
            "sales": [
                {"total_amount": "1e30", "date": "2024-01-10"},
                {"total_amount": "999999999999999999999999", "date": "2024-01-11"},
                {"total_amount": 25, "date": "2024-01-12"},
            ]
        }

        stats = compute_statistics(data, date(2024, 1, 20))

        assert stats.sales.total_revenue == Decimal("1000000000000000000000024.00")
        assert stats.sales.best_day == date(2024, 1, 11)
        assert stats.financial.profit_margin == Decimal("100.0")


class TestDomainSummaries:
    def test_inventory(self, sample_data) -> None:
        inventory = inventory_summary(sample_data)

        assert (inventory.transactions, inventory.inbound, inventory.outbound) == (3, 2, 1)
        assert inventory.purchase_value == Decimal("750.00")
        assert inventory.clearance_value == Decimal("100.00")

    def test_users(self, sample_data) -> None:
        users = user_summary(sample_data)

        assert users.total == 4
        assert users.active == 3
        assert users.resellers == 2
        assert users.admins == 1
        assert list(users.by_role.items()) == [("reseller", 2), ("Unknown", 1), ("admin", 1)]

    def test_products(self, sample_data) -> None:
        products = product_summary(sample_data)

        assert (products.in_stock, products.low_stock, products.out_of_stock) == (1, 1, 1)
        assert products.total == 4
        assert products.total_value == Decimal("350.50")

    def test_expenses(self, sample_data, as_of) -> None:
        expenses = expense_summary(sample_data, as_of)

        assert expenses.total == Decimal("550.25")
        assert expenses.average == Decimal("183.42")
        assert expenses.month_count == 2
        assert expenses.month_total == Decimal("450.25")
        assert list(expenses.by_category.items()) == [
            ("Rent", Decimal("300.00")),
            ("Utilities", Decimal("150.25")),
            ("Uncategorized", Decimal("100.00")),
        ]

    def test_cash_flow(self, sample_data) -> None:
        flow = cash_flow_summary(sample_data)

        assert flow.count == 3
        assert flow.income == Decimal("400.00")
        assert flow.expense == Decimal("120.00")
        assert flow.net == Decimal("280.00")


def test_compute_statistics_is_pure(sample_data, as_of) -> None:
    first = compute_statistics(sample_data, as_of)
    second = compute_statistics(sample_data, as_of)

    assert first == second
    assert "total_revenue" not in sample_data


def test_statistics_document_is_json_native(sample_data, as_of) -> None:
    document = statistics_document(compute_statistics(sample_data, as_of))

    assert document["financial"]["total_revenue"] == "2900.60"
    assert document["financial"]["inventory_costs"] == "850.00"
    assert document["financial"]["profit_margin"] == "47.6"
    assert document["sales"]["best_day"] == "2024-03-02"
    assert document["sales"]["count"] == 4
    assert list(document["users"]["by_role"]) == ["reseller", "Unknown", "admin"]
    assert document["expenses"]["by_category"]["Rent"] == "300.00"
    assert json.loads(json.dumps(document)) == document


def test_statistics_document_without_sales(as_of) -> None:
    document = statistics_document(compute_statistics({}, as_of))

    assert document["sales"]["best_day"] is None
    assert document["sales"]["best_day_revenue"] is None
