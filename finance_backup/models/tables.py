"""Backed-up tables and the named export scopes built from them."""

from enum import Enum

from finance_backup.config import settings


class TableName(str, Enum):
    """Business tables eligible for backup, in export order."""

    PRODUCTS = "products"
    USERS = "users"
    EXPENSES = "expenses"
    SALES = "sales"
    REQUESTS = "requests"
    PRODUCT_REQUEST_ITEMS = "product_request_items"
    NOTIFICATIONS = "notifications"
    CASH_TRANSACTIONS = "cash_transactions"
    CLEARANCES = "clearances"
    COMPANY_BALANCE = "company_balance"
    GOODS_PURCHASES = "goods_purchases"
    INVENTORY_TRANSACTIONS = "inventory_transactions"
    INVESTMENTS = "investments"
    LOAN_PAYMENTS = "loan_payments"
    LOANS = "loans"
    REWARDS = "rewards"
    SETTINGS = "settings"


class ExportScope(str, Enum):
    """Named table subsets an export can cover."""

    FULL = "full"
    FINANCIAL = "financial"
    SALES = "sales"


BACKUP_TABLES: tuple[TableName, ...] = tuple(TableName)

SCOPE_TABLES: dict[ExportScope, tuple[TableName, ...]] = {
    ExportScope.FULL: BACKUP_TABLES,
    ExportScope.FINANCIAL: (
        TableName.CASH_TRANSACTIONS,
        TableName.INVESTMENTS,
        TableName.LOANS,
        TableName.LOAN_PAYMENTS,
        TableName.EXPENSES,
        TableName.COMPANY_BALANCE,
    ),
    ExportScope.SALES: (
        TableName.SALES,
        TableName.PRODUCTS,
        TableName.REQUESTS,
        TableName.PRODUCT_REQUEST_ITEMS,
    ),
}

_SCOPE_VERSION_SUFFIX = {
    ExportScope.FULL: "",
    ExportScope.FINANCIAL: "-financial",
    ExportScope.SALES: "-sales",
}

# Middle segment of every filename produced for the scope
SCOPE_FILE_KIND = {
    ExportScope.FULL: "finance-backup",
    ExportScope.FINANCIAL: "financial-backup",
    ExportScope.SALES: "sales-backup",
}

# Suffix used for per-table CSV files
TABLE_FILE_LABELS: dict[TableName, str] = {
    TableName.PRODUCTS: "Products",
    TableName.SALES: "Sales",
    TableName.EXPENSES: "Expenses",
    TableName.USERS: "Users",
    TableName.INVENTORY_TRANSACTIONS: "Inventory",
}


def scope_version(scope: ExportScope) -> str:
    """Snapshot version tag for a scope, e.g. ``2.0.0-financial``."""
    return f"{settings.snapshot_version}{_SCOPE_VERSION_SUFFIX[scope]}"


def table_file_label(table: TableName) -> str:
    label = TABLE_FILE_LABELS.get(table)
    if label:
        return label
    return "-".join(part.capitalize() for part in table.value.split("_"))
