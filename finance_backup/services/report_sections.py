"""Report sections and table layouts.

``SECTIONS`` is the single list that decides both which navigation tabs exist
and which content blocks are rendered. A section is visible when at least one
of its source tables has rows.

Table layouts are plain data: the server-side renderer and the report's own
script (after a re-upload) both build listing rows from the same column specs,
so a cell reads the same whichever side produced it. Summary cards work the
same way: each card names a dotted path into the statistics document, and both
sides format the value they find there.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from finance_backup.config import settings
from finance_backup.models import TableName
from finance_backup.services.report_stats import (
    FINANCIAL_TABLES,
    INVENTORY_TABLES,
    Data,
    field_value,
    has_rows,
    pick,
    to_decimal,
)

CELL_KINDS = ("text", "strong", "id", "money", "signed_money", "number", "percent", "date", "badge")
STAT_FORMATS = ("count", "money", "percent", "signed_percent", "date", "length")
STAT_TONES = ("positive", "negative", "sign")


@dataclass(frozen=True)
class ColumnSpec:
    """One listing column.

    ``fields`` is a fallback chain: the first truthy value wins. Dotted names
    read nested objects (``users.name`` on joined sales rows). A ``derive`` of
    ``difference`` or ``product`` computes the value from two ``operands``
    fallback chains instead.
    """

    header: str
    fields: tuple[str, ...] = ()
    kind: str = "text"
    default: str = "N/A"
    derive: str | None = None
    operands: tuple[tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in CELL_KINDS:
            raise ValueError(f"Unknown cell kind: {self.kind}")


@dataclass(frozen=True)
class TableLayout:
    key: str
    source: TableName
    title: str
    columns: tuple[ColumnSpec, ...]

    @property
    def search_label(self) -> str:
        return self.title.lower()


@dataclass(frozen=True)
class StatCard:
    """One summary card.

    ``metric`` is a dotted path into the statistics document. ``detail`` is a
    template whose ``{path:format}`` placeholders are filled the same way; the
    detail line is dropped when any placeholder has no value. A ``sign`` tone
    colours the value by whether it is negative.
    """

    label: str
    metric: str
    fmt: str = "count"
    detail: str | None = None
    tone: str | None = None

    def __post_init__(self) -> None:
        if self.fmt not in STAT_FORMATS:
            raise ValueError(f"Unknown stat format: {self.fmt}")
        if self.tone is not None and self.tone not in STAT_TONES:
            raise ValueError(f"Unknown stat tone: {self.tone}")


@dataclass(frozen=True)
class StatBreakdown:
    title: str
    metric: str
    fmt: str = "count"
    titled_keys: bool = False


@dataclass(frozen=True)
class SectionSpec:
    key: str
    title: str
    tables: tuple[TableName, ...]
    listings: tuple[str, ...] = field(default_factory=tuple)
    cards: tuple[StatCard, ...] = field(default_factory=tuple)
    breakdowns: tuple[StatBreakdown, ...] = field(default_factory=tuple)

    def is_visible(self, data: Data) -> bool:
        return has_rows(data, *self.tables)


def _id(header: str = "ID") -> ColumnSpec:
    return ColumnSpec(header, ("id",), "id")


def _date(header: str = "Date", *fields: str) -> ColumnSpec:
    return ColumnSpec(header, fields or ("date", "created_at"), "date")


TABLE_LAYOUTS: dict[str, TableLayout] = {
    layout.key: layout
    for layout in (
        TableLayout(
            "sales-table",
            TableName.SALES,
            "Sales",
            (
                _id("Sale ID"),
                ColumnSpec("Customer", ("customer_name", "users.name", "customer_id"), default="Unknown"),
                ColumnSpec("Region", ("users.region", "region")),
                ColumnSpec("Amount", ("total_amount",), "money"),
                ColumnSpec("Payment Method", ("payment_method",)),
                ColumnSpec("Status", ("status",), "badge", default="completed"),
                _date(),
            ),
        ),
        TableLayout(
            "users-table",
            TableName.USERS,
            "Users",
            (
                ColumnSpec("Name", ("name",), "strong", default="Unknown"),
                ColumnSpec("Email", ("email",)),
                ColumnSpec("Role", ("role",), "badge", default="unknown"),
                ColumnSpec("Region", ("region",)),
                ColumnSpec("Sub-Region", ("sub_region",)),
                ColumnSpec("Due Balance", ("due_balance",), "money"),
                ColumnSpec("Revenue Contribution", ("total_revenue_generated",), "money"),
                _date("Joined", "created_at"),
            ),
        ),
        TableLayout(
            "products-table",
            TableName.PRODUCTS,
            "Products",
            (
                ColumnSpec("Product", ("name",), "strong", default="Unnamed Product"),
                ColumnSpec("Category", ("category",), default="Uncategorized"),
                ColumnSpec("Brand", ("brand",)),
                ColumnSpec("Price", ("price",), "money"),
                ColumnSpec("Availability", ("availability",), "badge", default="unknown"),
                _date("Created", "created_at"),
            ),
        ),
        TableLayout(
            "inventory-transactions-table",
            TableName.INVENTORY_TRANSACTIONS,
            "Inventory Transactions",
            (
                _id("Transaction ID"),
                ColumnSpec("Product", ("product_name", "product_id"), default="Unknown"),
                ColumnSpec("Type", ("type", "transaction_type"), "badge"),
                ColumnSpec("Quantity", ("quantity",), "number", default="0"),
                ColumnSpec("Unit Price", ("unit_price", "price"), "money"),
                ColumnSpec(
                    "Total Value",
                    kind="money",
                    derive="product",
                    operands=(("quantity",), ("unit_price", "price")),
                ),
                _date(),
            ),
        ),
        TableLayout(
            "goods-purchases-table",
            TableName.GOODS_PURCHASES,
            "Goods Purchases",
            (
                _id("Purchase ID"),
                ColumnSpec("Vendor", ("vendor_name", "vendor"), default="Unknown"),
                ColumnSpec("Description", ("description", "note")),
                ColumnSpec("Amount", ("total_amount", "amount"), "money"),
                ColumnSpec("Payment Method", ("payment_method",)),
                _date(),
            ),
        ),
        TableLayout(
            "clearances-table",
            TableName.CLEARANCES,
            "Clearances",
            (
                _id("Clearance ID"),
                ColumnSpec("Product", ("product_name", "product_id"), default="Unknown"),
                ColumnSpec("Quantity", ("quantity",), "number", default="0"),
                ColumnSpec("Value", ("value", "amount"), "money"),
                ColumnSpec("Reason", ("reason", "description")),
                _date(),
            ),
        ),
        TableLayout(
            "expenses-table",
            TableName.EXPENSES,
            "Expenses",
            (
                _id("Expense ID"),
                ColumnSpec("Description", ("description", "title"), default="No description"),
                ColumnSpec("Category", ("category",), default="Uncategorized"),
                ColumnSpec("Amount", ("amount",), "money"),
                _date(),
                ColumnSpec("Added By", ("added_by",), default="System"),
            ),
        ),
        TableLayout(
            "transactions-table",
            TableName.CASH_TRANSACTIONS,
            "Cash Transactions",
            (
                _id("Transaction ID"),
                ColumnSpec("Type", ("type",), "badge"),
                ColumnSpec("Description", ("description", "title")),
                ColumnSpec("Amount", ("amount",), "money"),
                _date(),
                ColumnSpec("Status", ("status",), "badge", default="completed"),
            ),
        ),
        TableLayout(
            "investments-table",
            TableName.INVESTMENTS,
            "Investments",
            (
                ColumnSpec("Investment", ("name", "title"), "strong", default="Investment"),
                ColumnSpec("Type", ("type", "investment_type")),
                ColumnSpec("Amount", ("amount",), "money"),
                ColumnSpec("Current Value", ("current_value", "amount"), "money"),
                ColumnSpec(
                    "Return",
                    kind="signed_money",
                    derive="difference",
                    operands=(("current_value", "amount"), ("amount",)),
                ),
                _date(),
            ),
        ),
        TableLayout(
            "loans-table",
            TableName.LOANS,
            "Loans",
            (
                _id("Loan ID"),
                ColumnSpec("Borrower", ("borrower_name", "borrower", "lender")),
                ColumnSpec("Amount", ("amount",), "money"),
                ColumnSpec("Interest Rate", ("interest_rate",), "percent", default="0"),
                ColumnSpec("Status", ("status",), "badge", default="active"),
                _date("Due Date", "due_date"),
            ),
        ),
        TableLayout(
            "requests-table",
            TableName.REQUESTS,
            "Requests",
            (
                _id("Request ID"),
                ColumnSpec("Customer", ("customer_name", "requester", "user_id"), default="Unknown"),
                ColumnSpec("Type", ("type", "request_type")),
                ColumnSpec("Status", ("status",), "badge", default="pending"),
                ColumnSpec("Priority", ("priority",), "badge", default="low"),
                _date("Created", "created_at"),
            ),
        ),
    )
}

SECTIONS: tuple[SectionSpec, ...] = (
    SectionSpec(
        "finances",
        "Financial Overview",
        (
            TableName.SALES,
            TableName.EXPENSES,
            TableName.CASH_TRANSACTIONS,
            TableName.INVESTMENTS,
            TableName.LOANS,
        ),
        cards=(
            StatCard(
                "Total Revenue",
                "financial.total_revenue",
                "money",
                "Sales {financial.sales_revenue:money} + inflow {financial.cash_inflow:money}",
                "positive",
            ),
            StatCard(
                "Total Costs",
                "financial.total_costs",
                "money",
                "Expenses {financial.total_expenses:money}, outflow {financial.cash_outflow:money}, "
                "inventory {financial.inventory_costs:money}",
                "negative",
            ),
            StatCard("Net Income", "financial.net_income", "money", tone="sign"),
            StatCard("Profit Margin", "financial.profit_margin", "percent", tone="sign"),
            StatCard("Investment Value", "financial.investment_value", "money"),
            StatCard("Loans Outstanding", "financial.loans_outstanding", "money"),
        ),
        breakdowns=(StatBreakdown("Records by Table", "breakdown", titled_keys=True),),
    ),
    SectionSpec(
        "sales",
        "Sales Analytics",
        (TableName.SALES,),
        ("sales-table",),
        cards=(
            StatCard("Total Sales", "sales.count"),
            StatCard("Total Revenue", "sales.total_revenue", "money", tone="positive"),
            StatCard("Average Sale", "sales.average_sale", "money"),
            StatCard("This Month", "sales.month_revenue", "money", "{sales.month_count:count} sales"),
            StatCard(
                "Monthly Growth",
                "sales.monthly_growth",
                "signed_percent",
                "Last month {sales.last_month_revenue:money}",
                "sign",
            ),
            StatCard("Best Day", "sales.best_day", "date", "{sales.best_day_revenue:money}"),
        ),
    ),
    SectionSpec(
        "users",
        "Users & Resellers",
        (TableName.USERS,),
        ("users-table",),
        cards=(
            StatCard("Total Users", "users.total"),
            StatCard("Active Users", "users.active"),
            StatCard("Resellers", "users.resellers"),
            StatCard("Admins", "users.admins"),
        ),
        breakdowns=(StatBreakdown("Users by Role", "users.by_role"),),
    ),
    SectionSpec(
        "products",
        "Products",
        (TableName.PRODUCTS,),
        ("products-table",),
        cards=(
            StatCard("Total Products", "products.total"),
            StatCard("In Stock", "products.in_stock", tone="positive"),
            StatCard("Low Stock", "products.low_stock"),
            StatCard("Out of Stock", "products.out_of_stock", tone="negative"),
            StatCard("Catalog Value", "products.total_value", "money"),
        ),
    ),
    SectionSpec(
        "inventory",
        "Inventory",
        (TableName.INVENTORY_TRANSACTIONS, TableName.GOODS_PURCHASES, TableName.CLEARANCES),
        ("inventory-transactions-table", "goods-purchases-table", "clearances-table"),
        cards=(
            StatCard("Transactions", "inventory.transactions"),
            StatCard("Inbound", "inventory.inbound", tone="positive"),
            StatCard("Outbound", "inventory.outbound", tone="negative"),
            StatCard(
                "Purchase Value", "inventory.purchase_value", "money", "{inventory.purchases:count} purchases"
            ),
            StatCard(
                "Clearance Value",
                "inventory.clearance_value",
                "money",
                "{inventory.clearances:count} clearances",
            ),
        ),
    ),
    SectionSpec(
        "expenses",
        "Expenses",
        (TableName.EXPENSES,),
        ("expenses-table",),
        cards=(
            StatCard("Total Expenses", "expenses.total", "money", "{expenses.count:count} records", "negative"),
            StatCard("Average Expense", "expenses.average", "money"),
            StatCard("This Month", "expenses.month_total", "money", "{expenses.month_count:count} expenses"),
            StatCard("Categories", "expenses.by_category", "length"),
        ),
        breakdowns=(StatBreakdown("Expenses by Category", "expenses.by_category", "money"),),
    ),
    SectionSpec(
        "transactions",
        "Cash Flow",
        (TableName.CASH_TRANSACTIONS,),
        ("transactions-table",),
        cards=(
            StatCard("Transactions", "cash_flow.count"),
            StatCard("Income", "cash_flow.income", "money", tone="positive"),
            StatCard("Expense", "cash_flow.expense", "money", tone="negative"),
            StatCard("Net Flow", "cash_flow.net", "money", tone="sign"),
        ),
    ),
    SectionSpec("investments", "Investments", (TableName.INVESTMENTS,), ("investments-table",)),
    SectionSpec("loans", "Loans", (TableName.LOANS,), ("loans-table",)),
    SectionSpec("requests", "Requests", (TableName.REQUESTS,), ("requests-table",)),
)


def visible_sections(data: Data) -> list[SectionSpec]:
    """Sections that get both a navigation tab and a content block."""
    return [section for section in SECTIONS if section.is_visible(data)]


# =============================================================================
# Cell formatting
# =============================================================================


def format_money(amount: Any, symbol: str, *, signed: bool = False) -> str:
    value = to_decimal(amount)
    sign = "-" if value < 0 else ("+" if signed and value > 0 else "")
    return f"{sign}{symbol}{abs(value):,.2f}"


def _derived(row: Mapping[str, Any], column: ColumnSpec) -> Any:
    left, right = (to_decimal(pick(row, *chain)) for chain in column.operands)
    if column.derive == "difference":
        return left - right
    if column.derive == "product":
        return left * right
    raise ValueError(f"Unknown derived column: {column.derive}")


def cell_text(row: Mapping[str, Any], column: ColumnSpec, symbol: str) -> str:
    """Plain-text value of one cell; this is also what search matches against."""
    value = _derived(row, column) if column.derive else pick(row, *column.fields)

    if column.kind in ("money", "signed_money"):
        return format_money(value, symbol, signed=column.kind == "signed_money")
    if column.kind == "number":
        # Zero quantities are falsy, so fall back to the raw field
        if value is None and column.fields:
            value = field_value(row, column.fields[0])
        return column.default if value is None else str(value)
    if column.kind == "date":
        if isinstance(value, str) and len(value) >= 10:
            return value[:10]
        return column.default
    if value is None or value == "":
        return f"#{column.default}" if column.kind == "id" else column.default
    if column.kind == "id":
        return f"#{value}"
    if column.kind == "percent":
        return f"{value}%"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def badge_class(text: str) -> str:
    slug = "".join(ch if ch.isalnum() else "-" for ch in text.lower()).strip("-")
    return f"status-{slug or 'unknown'}"


def row_matches(cells: list[str], query: str | None) -> bool:
    """Case-insensitive substring match against any rendered cell."""
    if not query:
        return True
    needle = query.strip().lower()
    return not needle or any(needle in cell.lower() for cell in cells)


# =============================================================================
# Stat formatting
# =============================================================================

_PLACEHOLDER = re.compile(r"\{([a-z_.]+):([a-z_]+)\}")


def format_stat(value: Any, fmt: str, symbol: str) -> str:
    """Display text of one statistics-document value."""
    if value is None:
        return "N/A"
    if fmt == "money":
        return format_money(value, symbol)
    if fmt in ("percent", "signed_percent"):
        sign = "+" if fmt == "signed_percent" and to_decimal(value) > 0 else ""
        return f"{sign}{value}%"
    if fmt == "length":
        return f"{len(value):,}"
    if fmt == "date":
        return str(value)
    return f"{int(value):,}"


def card_detail(card: StatCard, stats: Mapping[str, Any], symbol: str) -> str | None:
    if not card.detail:
        return None
    missing = False

    def fill(match: re.Match[str]) -> str:
        nonlocal missing
        value = field_value(stats, match.group(1))
        if value is None:
            missing = True
            return ""
        return format_stat(value, match.group(2), symbol)

    text = _PLACEHOLDER.sub(fill, card.detail)
    return None if missing else text


def card_tone(card: StatCard, value: Any) -> str | None:
    if card.tone == "sign":
        return "positive" if to_decimal(value) >= 0 else "negative"
    return card.tone


def breakdown_items(spec: StatBreakdown, stats: Mapping[str, Any], symbol: str) -> list[tuple[str, str]]:
    entries = field_value(stats, spec.metric) or {}
    return [
        (name.replace("_", " ").title() if spec.titled_keys else name, format_stat(value, spec.fmt, symbol))
        for name, value in entries.items()
    ]


def layout_document(symbol: str, legacy_symbol: str, tz_name: str | None = None) -> dict[str, Any]:
    """Layout JSON embedded in the report for the client-side re-render."""
    return {
        "symbol": symbol,
        "legacySymbol": legacy_symbol,
        "timezone": tz_name or settings.display_timezone,
        "breakdownTables": [table.value for table in (*FINANCIAL_TABLES, *INVENTORY_TABLES)],
        "sections": [
            {
                "key": section.key,
                "title": section.title,
                "tables": [table.value for table in section.tables],
                "listings": list(section.listings),
                "cards": [asdict(card) for card in section.cards],
                "breakdowns": [asdict(spec) for spec in section.breakdowns],
            }
            for section in SECTIONS
        ],
        "tables": {
            key: {
                "source": layout.source.value,
                "title": layout.title,
                "columns": [asdict(column) for column in layout.columns],
            }
            for key, layout in TABLE_LAYOUTS.items()
        },
    }
