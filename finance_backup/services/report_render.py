"""Interactive HTML report rendering.

``render_report`` is the one entry point for both the live export path and the
re-hydration path: it takes a ``Snapshot`` and derives every figure from
``snapshot.data`` via ``report_stats``, so a re-uploaded backup renders the
same page as the export that produced it.
"""

from __future__ import annotations

import html
import json
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from finance_backup.config import settings
from finance_backup.schemas import Snapshot
from finance_backup.services.report_sections import (
    TABLE_LAYOUTS,
    SectionSpec,
    TableLayout,
    badge_class,
    breakdown_items,
    card_detail,
    card_tone,
    cell_text,
    format_stat,
    layout_document,
    row_matches,
    visible_sections,
)
from finance_backup.services.report_stats import (
    compute_statistics,
    field_value,
    statistics_document,
    table_rows,
)
from finance_backup.templates import (
    LAYOUT_SCRIPT_ID,
    REPORT_TITLE,
    SCRIPT,
    SNAPSHOT_SCRIPT_ID,
    STYLES,
    error_document,
)

_esc = html.escape


def report_today(tz_name: str | None = None) -> date:
    """Today's date in the display timezone; the default ``as_of`` of a render."""
    return datetime.now(ZoneInfo(tz_name or settings.display_timezone)).date()


def embed_json(document: Any) -> str:
    """Serialize for a ``<script type="application/json">`` block.

    ``<``, ``>`` and ``&`` are written as unicode escapes so no row value can
    close the script element.
    """
    text = json.dumps(document, ensure_ascii=False, separators=(",", ":"))
    return text.replace("&", "\\u0026").replace("<", "\\u003c").replace(">", "\\u003e")


def _card(label: str, value: str, detail: str | None = None, tone: str | None = None) -> str:
    value_class = f"stat-value {tone}" if tone else "stat-value"
    parts = [
        '<div class="stat-card">',
        f'<div class="stat-label">{_esc(label)}</div>',
        f'<div class="{value_class}">{_esc(value)}</div>',
    ]
    if detail:
        parts.append(f'<div class="stat-detail">{_esc(detail)}</div>')
    parts.append("</div>")
    return "".join(parts)


def _grid(cards: list[str]) -> str:
    return '<div class="stats-grid">' + "".join(cards) + "</div>"


def _breakdown(title: str, items: list[tuple[str, str]]) -> str:
    if not items:
        return ""
    entries = "".join(
        f"<li><span>{_esc(name)}</span><strong>{_esc(value)}</strong></li>" for name, value in items
    )
    return f'<h4 class="table-title">{_esc(title)}</h4><ul class="breakdown">{entries}</ul>'


# =============================================================================
# Section statistics
# =============================================================================


def _section_stats(section: SectionSpec, stats: dict[str, Any], symbol: str) -> str:
    """Cards and breakdowns of one section, driven by its declared specs."""
    if not section.cards and not section.breakdowns:
        return ""
    cards = []
    for card in section.cards:
        value = field_value(stats, card.metric)
        cards.append(
            _card(
                card.label,
                format_stat(value, card.fmt, symbol),
                card_detail(card, stats, symbol),
                card_tone(card, value),
            )
        )
    parts = [_grid(cards)] if cards else []
    parts.extend(
        _breakdown(spec.title, breakdown_items(spec, stats, symbol)) for spec in section.breakdowns
    )
    return "".join(parts)


# =============================================================================
# Listings
# =============================================================================


def _cell_html(text: str, kind: str) -> str:
    if kind == "strong":
        return f"<td><strong>{_esc(text)}</strong></td>"
    if kind == "badge":
        return f'<td><span class="status-badge {badge_class(text)}">{_esc(text)}</span></td>'
    return f"<td>{_esc(text)}</td>"


def render_listing(layout: TableLayout, rows: list[dict[str, Any]], symbol: str, search: str | None = None) -> str:
    """One searchable table; rows not matching ``search`` are rendered hidden."""
    header = "".join(f"<th>{_esc(column.header)}</th>" for column in layout.columns)
    body: list[str] = []
    for row in rows:
        cells = [cell_text(row, column, symbol) for column in layout.columns]
        hidden = "" if row_matches(cells, search) else ' style="display:none"'
        rendered = "".join(_cell_html(text, column.kind) for text, column in zip(cells, layout.columns))
        body.append(f"<tr{hidden}>{rendered}</tr>")

    return (
        '<div class="table-block">'
        f'<h4 class="table-title">{_esc(layout.title)}</h4>'
        f'<input type="search" class="search-box" placeholder="Search {_esc(layout.search_label)}..." '
        f'data-table="{layout.key}" value="{_esc(search or "")}">'
        '<div class="table-wrapper">'
        f'<table class="data-table" id="{layout.key}" data-source="{layout.source.value}">'
        f"<thead><tr>{header}</tr></thead>"
        f"<tbody>{''.join(body)}</tbody>"
        "</table></div></div>"
    )


def _render_section(
    section: SectionSpec,
    snapshot: Snapshot,
    stats: dict[str, Any],
    symbol: str,
    search: str | None,
    active: bool,
) -> str:
    parts = [f"<h3>{_esc(section.title)}</h3>", _section_stats(section, stats, symbol)]
    for key in section.listings:
        layout = TABLE_LAYOUTS[key]
        rows = table_rows(snapshot.data, layout.source)
        if rows:
            parts.append(render_listing(layout, rows, symbol, search))

    css = "tab-content active" if active else "tab-content"
    return (
        f'<div id="{section.key}-content" class="{css}">'
        f'<div class="data-section">{"".join(parts)}</div>'
        "</div>"
    )


# =============================================================================
# Page
# =============================================================================


def _header(snapshot: Snapshot, source_label: str | None) -> str:
    meta = snapshot.metadata
    lines = [
        '<div class="header" id="reportHeader">',
        f"<h1>{_esc(REPORT_TITLE)}</h1>",
        '<button id="changeBackupBtn" class="upload-btn" type="button">Change Backup</button>',
        '<input type="file" id="backupFileInput" accept=".json,.html,application/json,text/html" hidden>',
        '<span id="uploadStatus" class="upload-status"></span>',
        f'<p id="metaGenerated">Generated: {_esc(meta.exported_at)}</p>',
        f'<p id="metaVersion">Data Version: {_esc(meta.version)} | Export ID: {_esc(meta.timestamp[:8])}</p>',
        f'<p id="metaCoverage">Coverage: {meta.table_count} data sources | '
        f"Total Records: {meta.total_records:,}</p>",
    ]
    if source_label:
        lines.append(f'<p class="upload-info">Data Source: {_esc(source_label)}</p>')
    lines.append('<p class="hint">Keyboard Shortcuts: Ctrl + Left / Right to navigate between tabs</p>')
    lines.append("</div>")
    return "".join(lines)


def render_report(
    snapshot: Snapshot,
    *,
    as_of: date | None = None,
    search: str | None = None,
    source_label: str | None = None,
    symbol: str | None = None,
) -> str:
    """Render the self-contained interactive report for ``snapshot``.

    Args:
        snapshot: Freshly assembled or re-hydrated snapshot.
        as_of: Date that "this month" is measured against (default: today in
            the display timezone).
        search: Optional pre-applied row filter for every listing.
        source_label: Shown in the header when the data came from a file.
        symbol: Currency symbol for money cells (default from settings).
    """
    as_of = as_of or report_today()
    symbol = symbol or settings.display_currency_symbol
    stats = statistics_document(compute_statistics(snapshot.data, as_of))
    sections = visible_sections(snapshot.data)

    nav = "".join(
        f'<button type="button" class="nav-tab{" active" if index == 0 else ""}" '
        f'data-tab="{section.key}">{_esc(section.title)}</button>'
        for index, section in enumerate(sections)
    )
    contents = "".join(
        _render_section(section, snapshot, stats, symbol, search, index == 0)
        for index, section in enumerate(sections)
    )
    empty_hidden = " hidden" if sections else ""
    layout = layout_document(symbol, settings.legacy_currency_symbol)

    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{_esc(REPORT_TITLE)}</title>\n"
        f"<style>{STYLES}</style>\n"
        "</head>\n"
        "<body>\n"
        '<div class="container">\n'
        f"{_header(snapshot, source_label)}\n"
        f'<div class="nav-tabs" id="navTabs">{nav}</div>\n'
        f'<div id="tabContents">{contents}</div>\n'
        f'<div class="data-section empty-state" id="emptyState"{empty_hidden}>'
        "No data available in this backup.</div>\n"
        f'<div class="footer">Powered by Blessin Finance Database | '
        f"Generated {_esc(snapshot.metadata.exported_at)}</div>\n"
        "</div>\n"
        f'<script type="application/json" id="{SNAPSHOT_SCRIPT_ID}">'
        f"{embed_json(snapshot.to_document())}</script>\n"
        f'<script type="application/json" id="{LAYOUT_SCRIPT_ID}">{embed_json(layout)}</script>\n'
        f"<script>{SCRIPT}</script>\n"
        "</body>\n"
        "</html>\n"
    )


def render_error_document(message: str) -> str:
    return error_document(message)
