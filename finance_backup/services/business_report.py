"""Markdown business report built from the report statistics."""

from __future__ import annotations

from datetime import date

from finance_backup.config import settings
from finance_backup.models import TableName
from finance_backup.schemas import Snapshot
from finance_backup.services.report_sections import format_money
from finance_backup.services.report_stats import (
    compute_statistics,
    has_rows,
    percentage,
    quantize_money,
)


def render_business_report(snapshot: Snapshot, as_of: date, symbol: str | None = None) -> str:
    """Summaries for sales, expenses, stock, financial health and users.

    A block is written only when its source tables are present, like the
    report sections.
    """
    symbol = symbol or settings.display_currency_symbol
    data = snapshot.data
    stats = compute_statistics(data, as_of)

    def money(amount) -> str:
        return format_money(amount, symbol)

    lines = [
        "# Blessin Finance Business Report",
        f"Generated on: {snapshot.metadata.exported_at}",
        f"Data Version: {snapshot.metadata.version}",
        "",
    ]

    if has_rows(data, TableName.SALES):
        sales = stats.sales
        lines += [
            "## Sales Analysis",
            f"- Total Sales: {money(sales.total_revenue)}",
            f"- Number of Sales: {sales.count:,}",
            f"- Average Sale: {money(sales.average_sale)}",
            f"- This Month: {money(sales.month_revenue)} ({sales.month_count:,} sales)",
            f"- Monthly Growth: {sales.monthly_growth}%",
            "",
        ]

    if has_rows(data, TableName.EXPENSES):
        expenses = stats.expenses
        lines += [
            "## Expenses Analysis",
            f"- Total Expenses: {money(expenses.total)}",
            f"- Number of Transactions: {expenses.count:,}",
            "- Expenses by Category:",
        ]
        lines += [f"  - {name}: {money(amount)}" for name, amount in expenses.by_category.items()]
        lines.append("")

    if has_rows(data, TableName.PRODUCTS):
        products = stats.products
        lines += [
            "## Inventory Analysis",
            f"- Total Products: {products.total:,}",
            f"- In Stock: {products.in_stock:,}",
            f"- Low Stock: {products.low_stock:,}",
            f"- Out of Stock: {products.out_of_stock:,}",
            "",
        ]

    if has_rows(data, TableName.SALES) and has_rows(data, TableName.EXPENSES):
        revenue = stats.sales.total_revenue
        spent = stats.expenses.total
        profit = quantize_money(revenue - spent)
        lines += [
            "## Financial Health",
            f"- Revenue: {money(revenue)}",
            f"- Expenses: {money(spent)}",
            f"- Profit: {money(profit)}",
            f"- Profit Margin: {percentage(profit, revenue)}%",
            "",
        ]

    if has_rows(data, TableName.USERS):
        users = stats.users
        lines += [
            "## User Analysis",
            f"- Total Users: {users.total:,}",
            f"- Active Users: {users.active:,}",
            "- Users by Role:",
        ]
        lines += [f"  - {role}: {count:,}" for role, count in users.by_role.items()]
        lines.append("")

    return "\n".join(lines)
