"""Static parts of the interactive HTML report.

The page is self-contained: styles and the script runtime are inlined and the
snapshot travels inside ``<script type="application/json" id="snapshot-data">``.
The script only reads layout data embedded next to it, so a report opened
offline can still switch tabs, filter rows and load a different backup file.
Loading a file recomputes the summary cards in the browser from the card specs
in the layout, using the same metric names as ``statistics_document``.
"""

from __future__ import annotations

import html

REPORT_TITLE = "Blessin Finance Database Dashboard"

SNAPSHOT_SCRIPT_ID = "snapshot-data"
LAYOUT_SCRIPT_ID = "report-layout"

STYLES = """
* { margin: 0; padding: 0; box-sizing: border-box; }
body {
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
  background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
  color: #333;
  line-height: 1.6;
  min-height: 100vh;
}
.container { max-width: 1600px; margin: 0 auto; padding: 20px; }
.header, .data-section {
  background: rgba(255, 255, 255, 0.95);
  padding: 30px;
  border-radius: 16px;
  margin-bottom: 30px;
  box-shadow: 0 8px 32px rgba(0, 0, 0, 0.1);
}
.header h1 { color: #2563eb; font-size: 2.2rem; margin-bottom: 10px; font-weight: 700; }
.header p { color: #6b7280; margin: 5px 0; }
.header .hint { font-size: 0.85rem; }
.upload-btn {
  background: #3b82f6;
  color: white;
  padding: 10px 20px;
  border: none;
  border-radius: 8px;
  cursor: pointer;
  font-weight: 500;
}
.upload-btn:hover { background: #2563eb; }
.upload-status { margin-left: 12px; font-size: 0.9rem; }
.upload-status.error { color: #dc2626; }
.upload-status.ok { color: #059669; }
.nav-tabs {
  display: flex;
  gap: 8px;
  padding: 8px;
  margin-bottom: 30px;
  border-radius: 12px;
  overflow-x: auto;
  background: rgba(255, 255, 255, 0.95);
}
.nav-tab {
  padding: 12px 20px;
  border-radius: 8px;
  border: 1px solid transparent;
  background: transparent;
  cursor: pointer;
  font-weight: 500;
  white-space: nowrap;
}
.nav-tab:hover { background: rgba(59, 130, 246, 0.1); }
.nav-tab.active { background: #3b82f6; color: white; }
.tab-content { display: none; }
.tab-content.active { display: block; }
.data-section h3 { color: #1f2937; font-size: 1.5rem; margin-bottom: 20px; }
.stats-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(220px, 1fr)); gap: 16px; margin-bottom: 24px; }
.stat-card { background: white; border: 1px solid #e5e7eb; border-radius: 12px; padding: 18px; }
.stat-label { color: #6b7280; font-size: 0.85rem; text-transform: uppercase; letter-spacing: 0.04em; }
.stat-value { color: #111827; font-size: 1.6rem; font-weight: 700; }
.stat-value.positive { color: #059669; }
.stat-value.negative { color: #dc2626; }
.stat-detail { color: #6b7280; font-size: 0.85rem; }
.breakdown { list-style: none; margin-bottom: 24px; }
.breakdown li { display: flex; justify-content: space-between; padding: 6px 0; border-bottom: 1px solid #f3f4f6; }
.table-block { margin-bottom: 28px; }
.table-title { color: #374151; margin-bottom: 8px; }
.search-box { width: 100%; max-width: 360px; padding: 8px 12px; border: 1px solid #d1d5db; border-radius: 8px; margin-bottom: 12px; }
.table-wrapper { overflow-x: auto; }
.data-table { width: 100%; border-collapse: collapse; background: white; }
.data-table th { background: #f9fafb; text-align: left; padding: 10px; font-size: 0.85rem; color: #374151; }
.data-table td { padding: 10px; border-top: 1px solid #f3f4f6; font-size: 0.9rem; }
.status-badge { display: inline-block; padding: 2px 10px; border-radius: 999px; background: #e5e7eb; font-size: 0.8rem; }
.status-completed, .status-active, .status-in-stock, .status-income, .status-in, .status-approved { background: #d1fae5; color: #065f46; }
.status-pending, .status-low-stock, .status-medium { background: #fef3c7; color: #92400e; }
.status-cancelled, .status-out-of-stock, .status-expense, .status-out, .status-rejected, .status-high { background: #fee2e2; color: #991b1b; }
.empty-state { text-align: center; color: #6b7280; }
.footer { text-align: center; color: rgba(255, 255, 255, 0.85); padding: 20px; font-size: 0.9rem; }
"""

SCRIPT = r"""
(function () {
  "use strict";

  var layout = JSON.parse(document.getElementById("report-layout").textContent);

  function isObject(value) {
    return value !== null && typeof value === "object" && !Array.isArray(value);
  }

  function fieldValue(row, path) {
    var value = row;
    var parts = path.split(".");
    for (var i = 0; i < parts.length; i++) {
      if (!isObject(value)) return null;
      value = value[parts[i]];
      if (value === undefined) return null;
    }
    return value;
  }

  function pick(row, fields) {
    for (var i = 0; i < fields.length; i++) {
      var value = fieldValue(row, fields[i]);
      if (value) return value;
    }
    return null;
  }

  var MAX_AMOUNT = 1e24;

  function toNumber(value) {
    var parsed = 0;
    if (typeof value === "number") parsed = value;
    else if (typeof value === "string" && value.trim() !== "") parsed = Number(value.trim());
    return isFinite(parsed) && Math.abs(parsed) < MAX_AMOUNT ? parsed : 0;
  }

  function formatMoney(amount, signed) {
    var value = toNumber(amount);
    var sign = value < 0 ? "-" : (signed && value > 0 ? "+" : "");
    return sign + layout.symbol + Math.abs(value).toLocaleString("en-US", {
      minimumFractionDigits: 2,
      maximumFractionDigits: 2
    });
  }

  function cellText(row, column) {
    var value;
    if (column.derive) {
      var left = toNumber(pick(row, column.operands[0]));
      var right = toNumber(pick(row, column.operands[1]));
      value = column.derive === "difference" ? left - right : left * right;
    } else {
      value = pick(row, column.fields);
    }
    if (column.kind === "money" || column.kind === "signed_money") {
      return formatMoney(value, column.kind === "signed_money");
    }
    if (column.kind === "number") {
      if (value === null && column.fields.length) value = fieldValue(row, column.fields[0]);
      return value === null ? column["default"] : String(value);
    }
    if (column.kind === "date") {
      return typeof value === "string" && value.length >= 10 ? value.slice(0, 10) : column["default"];
    }
    if (value === null || value === "") {
      return column.kind === "id" ? "#" + column["default"] : column["default"];
    }
    if (column.kind === "id") return "#" + value;
    if (column.kind === "percent") return value + "%";
    return String(value);
  }

  function badgeClass(text) {
    var slug = text.toLowerCase().replace(/[^a-z0-9]/g, "-").replace(/^-+|-+$/g, "");
    return "status-" + (slug || "unknown");
  }

  function rowsOf(data, table) {
    var rows = data[table];
    return Array.isArray(rows) ? rows.filter(isObject) : [];
  }

  function el(tag, className, text) {
    var node = document.createElement(tag);
    if (className) node.className = className;
    if (text !== undefined) node.textContent = text;
    return node;
  }

  // ---- statistics -------------------------------------------------------

  var dayFormat = new Intl.DateTimeFormat("en-US", {
    timeZone: layout.timezone,
    year: "numeric",
    month: "2-digit",
    day: "2-digit"
  });

  function zonedDay(moment) {
    var parts = {};
    dayFormat.formatToParts(moment).forEach(function (part) { parts[part.type] = part.value; });
    return parts.year + "-" + parts.month + "-" + parts.day;
  }

  // Timestamps with an offset are bucketed by their day in the display timezone
  function rowDay(row) {
    var value = pick(row, ["date", "created_at"]);
    if (typeof value !== "string") return null;
    var text = value.trim();
    if (!/^\d{4}-\d{2}-\d{2}/.test(text)) return null;
    if (/[T ]\d{2}:\d{2}.*(Z|[+-]\d{2}:?\d{2})$/.test(text)) {
      var moment = new Date(text);
      if (!isNaN(moment.getTime())) return zonedDay(moment);
    }
    return text.slice(0, 10);
  }

  function previousMonth(month) {
    var year = Number(month.slice(0, 4));
    var index = Number(month.slice(5, 7)) - 1;
    if (index === 0) {
      year -= 1;
      index = 12;
    }
    return year + "-" + (index < 10 ? "0" : "") + index;
  }

  function inMonth(month) {
    return function (row) {
      var day = rowDay(row);
      return day !== null && day.slice(0, 7) === month;
    };
  }

  function cents(value) { return Math.round(value * 100) / 100; }

  function tenths(value) { return Math.round(value * 10) / 10; }

  function sumField(rows, fields) {
    return cents(rows.reduce(function (sum, row) { return sum + toNumber(pick(row, fields)); }, 0));
  }

  function percentage(numerator, denominator) {
    return denominator > 0 ? tenths(numerator / denominator * 100) : 0;
  }

  function withType(rows, value, fields) {
    return rows.filter(function (row) {
      return fields.some(function (name) { return fieldValue(row, name) === value; });
    });
  }

  function tally(rows, field, fallback, amountField) {
    var totals = Object.create(null);
    rows.forEach(function (row) {
      var key = String(fieldValue(row, field) || fallback);
      totals[key] = (totals[key] || 0) + (amountField ? toNumber(fieldValue(row, amountField)) : 1);
    });
    return totals;
  }

  // Largest first, ties by name; an array of pairs keeps that order
  function ranked(totals) {
    return Object.keys(totals).map(function (key) { return [key, totals[key]]; }).sort(function (a, b) {
      if (b[1] !== a[1]) return b[1] - a[1];
      return a[0] < b[0] ? -1 : (a[0] > b[0] ? 1 : 0);
    });
  }

  function computeStatistics(data, asOf) {
    var sales = rowsOf(data, "sales");
    var expenses = rowsOf(data, "expenses");
    var cash = rowsOf(data, "cash_transactions");
    var movements = rowsOf(data, "inventory_transactions");
    var purchases = rowsOf(data, "goods_purchases");
    var clearances = rowsOf(data, "clearances");
    var users = rowsOf(data, "users");
    var products = rowsOf(data, "products");
    var thisMonth = asOf.slice(0, 7);
    var lastMonth = previousMonth(thisMonth);

    var salesRevenue = sumField(sales, ["total_amount"]);
    var cashInflow = sumField(withType(cash, "income", ["type"]), ["amount"]);
    var totalExpenses = sumField(expenses, ["amount"]);
    var cashOutflow = sumField(withType(cash, "expense", ["type"]), ["amount"]);
    var purchaseValue = sumField(purchases, ["total_amount", "amount"]);
    var clearanceValue = sumField(clearances, ["value", "amount"]);
    var totalRevenue = cents(salesRevenue + cashInflow);
    var totalCosts = cents(totalExpenses + cashOutflow + purchaseValue + clearanceValue);
    var netIncome = cents(totalRevenue - totalCosts);
    var activeLoans = rowsOf(data, "loans").filter(function (row) {
      return fieldValue(row, "status") === "active";
    });

    var monthSales = sales.filter(inMonth(thisMonth));
    var lastMonthSales = sales.filter(inMonth(lastMonth));
    var monthRevenue = sumField(monthSales, ["total_amount"]);
    var lastMonthRevenue = sumField(lastMonthSales, ["total_amount"]);
    var byDay = Object.create(null);
    sales.forEach(function (row) {
      var day = rowDay(row);
      if (day !== null) byDay[day] = (byDay[day] || 0) + toNumber(fieldValue(row, "total_amount"));
    });
    var bestDay = null;
    Object.keys(byDay).sort().forEach(function (day) {
      if (bestDay === null || byDay[day] > byDay[bestDay]) bestDay = day;
    });

    var roles = tally(users, "role", "Unknown");
    var monthExpenses = expenses.filter(inMonth(thisMonth));
    var breakdown = {};
    layout.breakdownTables.forEach(function (table) { breakdown[table] = rowsOf(data, table).length; });
    function countWhere(rows, name, value) {
      return rows.filter(function (row) { return fieldValue(row, name) === value; }).length;
    }

    return {
      financial: {
        sales_revenue: salesRevenue,
        cash_inflow: cashInflow,
        total_expenses: totalExpenses,
        cash_outflow: cashOutflow,
        inventory_purchases: purchaseValue,
        inventory_clearances: clearanceValue,
        inventory_costs: cents(purchaseValue + clearanceValue),
        investment_value: sumField(rowsOf(data, "investments"), ["current_value", "amount"]),
        loans_outstanding: sumField(activeLoans, ["amount"]),
        total_revenue: totalRevenue,
        total_costs: totalCosts,
        net_income: netIncome,
        profit_margin: percentage(netIncome, totalRevenue)
      },
      breakdown: breakdown,
      sales: {
        count: sales.length,
        total_revenue: salesRevenue,
        average_sale: sales.length ? cents(salesRevenue / sales.length) : 0,
        month_count: monthSales.length,
        month_revenue: monthRevenue,
        last_month_count: lastMonthSales.length,
        last_month_revenue: lastMonthRevenue,
        monthly_growth: percentage(monthRevenue - lastMonthRevenue, lastMonthRevenue),
        best_day: bestDay,
        best_day_revenue: bestDay === null ? null : cents(byDay[bestDay])
      },
      inventory: {
        transactions: movements.length,
        inbound: withType(movements, "in", ["type", "transaction_type"]).length,
        outbound: withType(movements, "out", ["type", "transaction_type"]).length,
        purchases: purchases.length,
        purchase_value: purchaseValue,
        clearances: clearances.length,
        clearance_value: clearanceValue
      },
      users: {
        total: users.length,
        active: users.filter(function (user) { return fieldValue(user, "is_active") !== false; }).length,
        resellers: roles.reseller || 0,
        admins: roles.admin || 0,
        by_role: ranked(roles)
      },
      products: {
        total: products.length,
        in_stock: countWhere(products, "availability", "in-stock"),
        low_stock: countWhere(products, "availability", "low-stock"),
        out_of_stock: countWhere(products, "availability", "out-of-stock"),
        total_value: sumField(products, ["price"])
      },
      expenses: {
        count: expenses.length,
        total: totalExpenses,
        average: expenses.length ? cents(totalExpenses / expenses.length) : 0,
        month_count: monthExpenses.length,
        month_total: sumField(monthExpenses, ["amount"]),
        by_category: ranked(tally(expenses, "category", "Uncategorized", "amount")).map(function (pair) {
          return [pair[0], cents(pair[1])];
        })
      },
      cash_flow: {
        count: cash.length,
        income: cashInflow,
        expense: cashOutflow,
        net: cents(cashInflow - cashOutflow)
      }
    };
  }

  // ---- stat cards -------------------------------------------------------

  function entries(value) {
    if (Array.isArray(value)) return value;
    if (!isObject(value)) return [];
    return Object.keys(value).map(function (key) { return [key, value[key]]; });
  }

  function formatStat(value, fmt) {
    if (value === null || value === undefined) return "N/A";
    if (fmt === "money") return formatMoney(value, false);
    if (fmt === "percent" || fmt === "signed_percent") {
      var number = toNumber(value);
      return (fmt === "signed_percent" && number > 0 ? "+" : "") + number.toFixed(1) + "%";
    }
    if (fmt === "length") return entries(value).length.toLocaleString("en-US");
    if (fmt === "date") return String(value);
    return toNumber(value).toLocaleString("en-US");
  }

  function cardDetail(card, stats) {
    if (!card.detail) return null;
    var missing = false;
    var text = card.detail.replace(/\{([a-z_.]+):([a-z_]+)\}/g, function (match, path, fmt) {
      var value = fieldValue(stats, path);
      if (value === null) {
        missing = true;
        return "";
      }
      return formatStat(value, fmt);
    });
    return missing ? null : text;
  }

  function titleCase(name) {
    return name.replace(/_/g, " ").replace(/\b[a-z]/g, function (letter) { return letter.toUpperCase(); });
  }

  function renderStats(section, stats, panel) {
    if (section.cards.length) {
      var grid = el("div", "stats-grid");
      section.cards.forEach(function (card) {
        var value = fieldValue(stats, card.metric);
        var tone = card.tone === "sign" ? (toNumber(value) >= 0 ? "positive" : "negative") : card.tone;
        var node = el("div", "stat-card");
        node.appendChild(el("div", "stat-label", card.label));
        node.appendChild(el("div", tone ? "stat-value " + tone : "stat-value", formatStat(value, card.fmt)));
        var detail = cardDetail(card, stats);
        if (detail) node.appendChild(el("div", "stat-detail", detail));
        grid.appendChild(node);
      });
      panel.appendChild(grid);
    }
    section.breakdowns.forEach(function (spec) {
      var items = entries(fieldValue(stats, spec.metric));
      if (!items.length) return;
      panel.appendChild(el("h4", "table-title", spec.title));
      var list = el("ul", "breakdown");
      items.forEach(function (item) {
        var li = el("li");
        li.appendChild(el("span", "", spec.titled_keys ? titleCase(item[0]) : item[0]));
        li.appendChild(el("strong", "", formatStat(item[1], spec.fmt)));
        list.appendChild(li);
      });
      panel.appendChild(list);
    });
  }

  // ---- tabs -------------------------------------------------------------

  function tabs() {
    return Array.prototype.slice.call(document.querySelectorAll(".nav-tab"));
  }

  function showTab(key) {
    tabs().forEach(function (tab) {
      tab.classList.toggle("active", tab.getAttribute("data-tab") === key);
    });
    document.querySelectorAll(".tab-content").forEach(function (content) {
      content.classList.toggle("active", content.id === key + "-content");
    });
  }

  document.addEventListener("click", function (event) {
    var tab = event.target.closest(".nav-tab");
    if (tab) showTab(tab.getAttribute("data-tab"));
  });

  document.addEventListener("keydown", function (event) {
    if (!event.ctrlKey || (event.key !== "ArrowLeft" && event.key !== "ArrowRight")) return;
    var all = tabs();
    if (!all.length) return;
    var current = all.findIndex(function (tab) { return tab.classList.contains("active"); });
    var step = event.key === "ArrowRight" ? 1 : -1;
    var next = (current + step + all.length) % all.length;
    showTab(all[next].getAttribute("data-tab"));
    event.preventDefault();
  });

  // ---- search -----------------------------------------------------------

  function filterTable(input) {
    var table = document.getElementById(input.getAttribute("data-table"));
    if (!table) return;
    var query = input.value.trim().toLowerCase();
    table.querySelectorAll("tbody tr").forEach(function (row) {
      var cells = Array.prototype.map.call(row.cells, function (cell) {
        return cell.textContent.toLowerCase();
      });
      var match = !query || cells.some(function (cell) { return cell.indexOf(query) !== -1; });
      row.style.display = match ? "" : "none";
    });
  }

  document.addEventListener("input", function (event) {
    if (event.target.classList.contains("search-box")) filterTable(event.target);
  });

  // ---- replace data -----------------------------------------------------

  function extractDocument(text) {
    var body = text.replace(/^\uFEFF/, "").trim();
    if (body.charAt(0) === "<") {
      var parsed = new DOMParser().parseFromString(body, "text/html");
      var node = parsed.getElementById("snapshot-data");
      if (!node) throw new Error("No embedded snapshot data found in this report");
      body = node.textContent;
    }
    var doc = JSON.parse(body);
    if (!isObject(doc)) throw new Error("Backup file must contain a JSON object");
    return doc;
  }

  function escapeRegExp(text) {
    return text.replace(/[.*+?^${}()|[\]\\]/g, "\\$&");
  }

  var currencyPattern = new RegExp(escapeRegExp(layout.legacySymbol) + "(\\d+(?:,\\d{3})*(?:\\.\\d{2})?)", "g");

  function normalizeCurrency(value) {
    if (typeof value === "string") {
      return value.replace(currencyPattern, function (match, amount) { return layout.symbol + amount; });
    }
    if (Array.isArray(value)) return value.map(normalizeCurrency);
    if (isObject(value)) {
      var result = {};
      Object.keys(value).forEach(function (key) { result[key] = normalizeCurrency(value[key]); });
      return result;
    }
    return value;
  }

  function splitDocument(doc) {
    var data = isObject(doc.data) ? doc.data : doc;
    var metadata = isObject(doc.data) && isObject(doc.metadata) ? doc.metadata : {};
    var tables = {};
    Object.keys(data).forEach(function (key) {
      var rows = rowsOf(data, key);
      if (rows.length) tables[key] = rows;
    });
    return { metadata: metadata, data: normalizeCurrency(tables) };
  }

  function updateHeader(metadata, data) {
    var keys = Object.keys(data);
    var total = keys.reduce(function (sum, key) { return sum + data[key].length; }, 0);
    var timestamp = String(metadata.timestamp || "Unknown");
    document.getElementById("metaGenerated").textContent = "Generated: " + (metadata.exportedAt || "Unknown");
    document.getElementById("metaVersion").textContent =
      "Data Version: " + (metadata.version || "Unknown") + " | Export ID: " + timestamp.slice(0, 8);
    document.getElementById("metaCoverage").textContent =
      "Coverage: " + keys.length + " data sources | Total Records: " + total.toLocaleString("en-US");
  }

  function buildListing(key, rows) {
    var spec = layout.tables[key];
    var block = el("div", "table-block");
    block.appendChild(el("h4", "table-title", spec.title));
    var search = el("input", "search-box");
    search.type = "search";
    search.placeholder = "Search " + spec.title.toLowerCase() + "...";
    search.setAttribute("data-table", key);
    block.appendChild(search);

    var wrapper = el("div", "table-wrapper");
    var table = el("table", "data-table");
    table.id = key;
    table.setAttribute("data-source", spec.source);
    var headRow = table.createTHead().insertRow();
    spec.columns.forEach(function (column) { headRow.appendChild(el("th", "", column.header)); });
    var body = table.createTBody();
    rows.forEach(function (row) {
      var tr = body.insertRow();
      spec.columns.forEach(function (column) {
        var text = cellText(row, column);
        var td = tr.insertCell();
        if (column.kind === "strong") {
          td.appendChild(el("strong", "", text));
        } else if (column.kind === "badge") {
          td.appendChild(el("span", "status-badge " + badgeClass(text), text));
        } else {
          td.textContent = text;
        }
      });
    });
    wrapper.appendChild(table);
    block.appendChild(wrapper);
    return block;
  }

  function renderData(metadata, data) {
    updateHeader(metadata, data);
    var stats = computeStatistics(data, zonedDay(new Date()));
    var nav = document.getElementById("navTabs");
    var contents = document.getElementById("tabContents");
    nav.textContent = "";
    contents.textContent = "";

    var visible = layout.sections.filter(function (section) {
      return section.tables.some(function (table) { return rowsOf(data, table).length > 0; });
    });
    visible.forEach(function (section) {
      var tab = el("button", "nav-tab", section.title);
      tab.type = "button";
      tab.setAttribute("data-tab", section.key);
      nav.appendChild(tab);

      var content = el("div", "tab-content");
      content.id = section.key + "-content";
      var panel = el("div", "data-section");
      panel.appendChild(el("h3", "", section.title));
      renderStats(section, stats, panel);
      section.listings.forEach(function (key) {
        var rows = rowsOf(data, layout.tables[key].source);
        if (rows.length) panel.appendChild(buildListing(key, rows));
      });
      content.appendChild(panel);
      contents.appendChild(content);
    });

    document.getElementById("emptyState").hidden = visible.length > 0;
    if (visible.length) showTab(visible[0].key);
  }

  function setStatus(message, kind) {
    var status = document.getElementById("uploadStatus");
    status.textContent = message;
    status.className = "upload-status " + kind;
  }

  var fileInput = document.getElementById("backupFileInput");
  document.getElementById("changeBackupBtn").addEventListener("click", function () {
    fileInput.click();
  });
  fileInput.addEventListener("change", function () {
    var file = fileInput.files && fileInput.files[0];
    if (!file) return;
    var reader = new FileReader();
    reader.onload = function () {
      try {
        var parsed = splitDocument(extractDocument(String(reader.result)));
        renderData(parsed.metadata, parsed.data);
        setStatus("Loaded " + file.name, "ok");
      } catch (error) {
        setStatus("Could not load " + file.name + ": " + error.message, "error");
      }
      fileInput.value = "";
    };
    reader.onerror = function () {
      setStatus("Could not read " + file.name, "error");
    };
    reader.readAsText(file);
  });

  document.querySelectorAll(".search-box").forEach(function (input) {
    if (input.value) filterTable(input);
  });
})();
"""


def error_document(message: str, *, title: str = REPORT_TITLE) -> str:
    """Minimal standalone page shown in place of a report that failed to render."""
    safe_title = html.escape(title)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="UTF-8">\n'
        f"<title>{safe_title} - Error</title>\n"
        "<style>body { font-family: sans-serif; padding: 40px; color: #991b1b; }</style>\n"
        "</head>\n"
        "<body>\n"
        "<h1>Error generating dashboard</h1>\n"
        f"<p>{html.escape(message)}</p>\n"
        "</body>\n"
        "</html>\n"
    )
