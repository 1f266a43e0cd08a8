"""Statistics derived from a snapshot's ``data`` mapping.

Every function here is a pure reduction over the data mapping (plus an explicit
``as_of`` date where "this month" matters). The live report, the re-hydrated
report and the markdown business report all call these same functions, so the
figures cannot drift between them.

Rows are schema-less: any field may be missing, ``None``, a number or a numeric
string. Missing or unparseable amounts count as zero; ``a or b`` fallbacks
follow the stored data's conventions (e.g. investment value is
``current_value`` when set, else ``amount``).
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Context, Decimal, InvalidOperation
from typing import Any
from zoneinfo import ZoneInfo

from finance_backup.config import settings
from finance_backup.models import TableName
from finance_backup.schemas import Row

Data = Mapping[str, Sequence[Row]]

ZERO = Decimal("0")
_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")

# Amounts at or above 10**24 are treated as unparseable. Rounding runs in a wide
# context so sums of in-range amounts always quantize.
MAX_AMOUNT_DIGITS = 24
_ROUNDING = Context(prec=60)

FINANCIAL_TABLES = (
    TableName.SALES,
    TableName.EXPENSES,
    TableName.CASH_TRANSACTIONS,
    TableName.INVESTMENTS,
    TableName.LOANS,
)
INVENTORY_TABLES = (
    TableName.INVENTORY_TRANSACTIONS,
    TableName.GOODS_PURCHASES,
    TableName.CLEARANCES,
)


# =============================================================================
# Row access helpers
# =============================================================================


def table_rows(data: Data | None, table: TableName | str) -> list[Row]:
    """Rows of ``table``; an absent or malformed table is an empty sequence."""
    if not data:
        return []
    key = table.value if isinstance(table, TableName) else table
    rows = data.get(key)
    if not isinstance(rows, (list, tuple)):
        return []
    return [row for row in rows if isinstance(row, Mapping)]


def has_rows(data: Data | None, *tables: TableName | str) -> bool:
    return any(table_rows(data, table) for table in tables)


def field_value(row: Mapping[str, Any], path: str) -> Any:
    """Read ``path`` from a row; dotted paths descend into nested objects."""
    value: Any = row
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def pick(row: Mapping[str, Any], *fields: str) -> Any:
    """First truthy value among ``fields``, or ``None``."""
    for name in fields:
        value = field_value(row, name)
        if value:
            return value
    return None


def to_decimal(value: Any) -> Decimal:
    """Coerce a loosely typed amount; anything non-numeric becomes zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not result.is_finite() or (result and result.adjusted() >= MAX_AMOUNT_DIGITS):
        return ZERO
    return result


def row_date(row: Mapping[str, Any], *fields: str, tz_name: str | None = None) -> date | None:
    """Calendar date of a row (``date`` then ``created_at`` by default).

    Timestamps carrying an offset are converted to the display timezone first,
    so ``2024-03-31T20:00:00Z`` is April 1st in ``Asia/Kolkata``.
    """
    value = pick(row, *(fields or ("date", "created_at")))
    if isinstance(value, str):
        text = value.strip()
        try:
            value = datetime.fromisoformat(text) if len(text) > 10 else date.fromisoformat(text)
        except ValueError:
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(tz_name or settings.display_timezone))
        return value.date()
    if isinstance(value, date):
        return value
    return None


def quantize_money(amount: Decimal | int) -> Decimal:
    if isinstance(amount, int):
        amount = Decimal(amount)
    return amount.quantize(_CENT, context=_ROUNDING)


def percentage(numerator: Decimal, denominator: Decimal) -> Decimal:
    """``numerator / denominator * 100``; zero when the denominator is not positive."""
    if denominator <= 0:
        return ZERO.quantize(_TENTH)
    return (numerator / denominator * 100).quantize(_TENTH, context=_ROUNDING)


def sum_field(rows: Sequence[Mapping[str, Any]], *fields: str) -> Decimal:
    return quantize_money(sum((to_decimal(pick(row, *fields)) for row in rows), ZERO))


def _previous_month(as_of: date) -> tuple[int, int]:
    if as_of.month == 1:
        return as_of.year - 1, 12
    return as_of.year, as_of.month - 1


def _in_month(row: Mapping[str, Any], year: int, month: int) -> bool:
    day = row_date(row)
    return day is not None and day.year == year and day.month == month


def _rows_with_type(rows: Sequence[Row], value: str, *fields: str) -> list[Row]:
    fields = fields or ("type",)
    return [row for row in rows if any(field_value(row, name) == value for name in fields)]


# =============================================================================
# Per-domain statistics
# =============================================================================


@dataclass(frozen=True)
class FinancialOverview:
    sales_revenue: Decimal
    cash_inflow: Decimal
    total_expenses: Decimal
    cash_outflow: Decimal
    inventory_purchases: Decimal
    inventory_clearances: Decimal
    inventory_costs: Decimal
    investment_value: Decimal
    loans_outstanding: Decimal
    total_revenue: Decimal
    total_costs: Decimal
    net_income: Decimal
    profit_margin: Decimal


def financial_overview(data: Data) -> FinancialOverview:
    """Revenue, costs, net income and margin across every money table."""
    cash = table_rows(data, TableName.CASH_TRANSACTIONS)
    sales_revenue = sum_field(table_rows(data, TableName.SALES), "total_amount")
    cash_inflow = sum_field(_rows_with_type(cash, "income"), "amount")
    total_expenses = sum_field(table_rows(data, TableName.EXPENSES), "amount")
    cash_outflow = sum_field(_rows_with_type(cash, "expense"), "amount")
    inventory_purchases = sum_field(
        table_rows(data, TableName.GOODS_PURCHASES), "total_amount", "amount"
    )
    inventory_clearances = sum_field(table_rows(data, TableName.CLEARANCES), "value", "amount")
    active_loans = [
        row for row in table_rows(data, TableName.LOANS) if field_value(row, "status") == "active"
    ]

    total_revenue = sales_revenue + cash_inflow
    total_costs = total_expenses + cash_outflow + inventory_purchases + inventory_clearances
    net_income = total_revenue - total_costs

    return FinancialOverview(
        sales_revenue=sales_revenue,
        cash_inflow=cash_inflow,
        total_expenses=total_expenses,
        cash_outflow=cash_outflow,
        inventory_purchases=inventory_purchases,
        inventory_clearances=inventory_clearances,
        inventory_costs=inventory_purchases + inventory_clearances,
        investment_value=sum_field(
            table_rows(data, TableName.INVESTMENTS), "current_value", "amount"
        ),
        loans_outstanding=sum_field(active_loans, "amount"),
        total_revenue=total_revenue,
        total_costs=total_costs,
        net_income=net_income,
        profit_margin=percentage(net_income, total_revenue),
    )


def financial_breakdown(data: Data) -> dict[str, int]:
    """Row counts of the financial and inventory tables, in display order."""
    return {
        table.value: len(table_rows(data, table))
        for table in (*FINANCIAL_TABLES, *INVENTORY_TABLES)
    }


@dataclass(frozen=True)
class SalesAnalytics:
    count: int
    total_revenue: Decimal
    average_sale: Decimal
    month_count: int
    month_revenue: Decimal
    last_month_count: int
    last_month_revenue: Decimal
    monthly_growth: Decimal
    best_day: date | None = None
    best_day_revenue: Decimal | None = None


def sales_analytics(data: Data, as_of: date) -> SalesAnalytics:
    """Sales totals, this month vs last month, and the best single day."""
    sales = table_rows(data, TableName.SALES)
    total_revenue = sum_field(sales, "total_amount")
    average = quantize_money(total_revenue / len(sales)) if sales else quantize_money(ZERO)

    this_month = [row for row in sales if _in_month(row, as_of.year, as_of.month)]
    last_month = [row for row in sales if _in_month(row, *_previous_month(as_of))]
    month_revenue = sum_field(this_month, "total_amount")
    last_month_revenue = sum_field(last_month, "total_amount")

    by_day: dict[date, Decimal] = defaultdict(lambda: ZERO)
    for row in sales:
        day = row_date(row)
        if day is not None:
            by_day[day] += to_decimal(field_value(row, "total_amount"))

    best_day = best_revenue = None
    if by_day:
        # Highest revenue wins; ties go to the earliest day
        best_day, best_revenue = min(by_day.items(), key=lambda item: (-item[1], item[0]))

    return SalesAnalytics(
        count=len(sales),
        total_revenue=total_revenue,
        average_sale=average,
        month_count=len(this_month),
        month_revenue=month_revenue,
        last_month_count=len(last_month),
        last_month_revenue=last_month_revenue,
        monthly_growth=percentage(month_revenue - last_month_revenue, last_month_revenue),
        best_day=best_day,
        best_day_revenue=None if best_revenue is None else quantize_money(best_revenue),
    )


@dataclass(frozen=True)
class InventorySummary:
    transactions: int
    inbound: int
    outbound: int
    purchases: int
    purchase_value: Decimal
    clearances: int
    clearance_value: Decimal


def inventory_summary(data: Data) -> InventorySummary:
    movements = table_rows(data, TableName.INVENTORY_TRANSACTIONS)
    purchases = table_rows(data, TableName.GOODS_PURCHASES)
    clearances = table_rows(data, TableName.CLEARANCES)
    return InventorySummary(
        transactions=len(movements),
        inbound=len(_rows_with_type(movements, "in", "type", "transaction_type")),
        outbound=len(_rows_with_type(movements, "out", "type", "transaction_type")),
        purchases=len(purchases),
        purchase_value=sum_field(purchases, "total_amount", "amount"),
        clearances=len(clearances),
        clearance_value=sum_field(clearances, "value", "amount"),
    )


@dataclass(frozen=True)
class UserSummary:
    total: int
    active: int
    resellers: int
    admins: int
    by_role: dict[str, int] = field(default_factory=dict)


def user_summary(data: Data) -> UserSummary:
    users = table_rows(data, TableName.USERS)
    roles = Counter(str(field_value(user, "role") or "Unknown") for user in users)
    return UserSummary(
        total=len(users),
        # Active unless explicitly flagged inactive
        active=sum(1 for user in users if field_value(user, "is_active") is not False),
        resellers=roles.get("reseller", 0),
        admins=roles.get("admin", 0),
        by_role=dict(sorted(roles.items(), key=lambda item: (-item[1], item[0]))),
    )


@dataclass(frozen=True)
class ProductSummary:
    total: int
    in_stock: int
    low_stock: int
    out_of_stock: int
    total_value: Decimal


def product_summary(data: Data) -> ProductSummary:
    products = table_rows(data, TableName.PRODUCTS)
    availability = Counter(field_value(product, "availability") for product in products)
    return ProductSummary(
        total=len(products),
        in_stock=availability.get("in-stock", 0),
        low_stock=availability.get("low-stock", 0),
        out_of_stock=availability.get("out-of-stock", 0),
        total_value=sum_field(products, "price"),
    )


@dataclass(frozen=True)
class ExpenseSummary:
    count: int
    total: Decimal
    average: Decimal
    month_count: int
    month_total: Decimal
    by_category: dict[str, Decimal] = field(default_factory=dict)


def expense_summary(data: Data, as_of: date) -> ExpenseSummary:
    expenses = table_rows(data, TableName.EXPENSES)
    total = sum_field(expenses, "amount")
    this_month = [row for row in expenses if _in_month(row, as_of.year, as_of.month)]

    categories: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for row in expenses:
        category = str(field_value(row, "category") or "Uncategorized")
        categories[category] += to_decimal(field_value(row, "amount"))

    return ExpenseSummary(
        count=len(expenses),
        total=total,
        average=quantize_money(total / len(expenses)) if expenses else quantize_money(ZERO),
        month_count=len(this_month),
        month_total=sum_field(this_month, "amount"),
        by_category={
            name: quantize_money(amount)
            for name, amount in sorted(categories.items(), key=lambda item: (-item[1], item[0]))
        },
    )


@dataclass(frozen=True)
class CashFlowSummary:
    count: int
    income: Decimal
    expense: Decimal
    net: Decimal


def cash_flow_summary(data: Data) -> CashFlowSummary:
    transactions = table_rows(data, TableName.CASH_TRANSACTIONS)
    income = sum_field(_rows_with_type(transactions, "income"), "amount")
    expense = sum_field(_rows_with_type(transactions, "expense"), "amount")
    return CashFlowSummary(count=len(transactions), income=income, expense=expense, net=income - expense)


@dataclass(frozen=True)
class ReportStatistics:
    """Every figure shown in a report, computed in one pass over ``data``."""

    financial: FinancialOverview
    breakdown: dict[str, int]
    sales: SalesAnalytics
    inventory: InventorySummary
    users: UserSummary
    products: ProductSummary
    expenses: ExpenseSummary
    cash_flow: CashFlowSummary


def compute_statistics(data: Data, as_of: date) -> ReportStatistics:
    return ReportStatistics(
        financial=financial_overview(data),
        breakdown=financial_breakdown(data),
        sales=sales_analytics(data, as_of),
        inventory=inventory_summary(data),
        users=user_summary(data),
        products=product_summary(data),
        expenses=expense_summary(data, as_of),
        cash_flow=cash_flow_summary(data),
    )


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    return value


def statistics_document(stats: ReportStatistics) -> dict[str, Any]:
    """JSON-native view of ``stats``; stat cards address it by dotted path.

    Money and percentages are decimal strings, dates are ISO strings and a
    missing best day stays ``None``.
    """
    return _plain(asdict(stats))
