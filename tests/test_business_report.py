"""Tests for the markdown business report."""

from finance_backup.services.business_report import render_business_report


def test_sample_report(snapshot, as_of) -> None:
    report = render_business_report(snapshot, as_of)

    assert report.startswith("# Blessin Finance Business Report\n")
    assert "Generated on: 15/03/2024, 04:00:45 PM" in report
    assert "## Sales Analysis" in report
    assert "- Total Sales: ₹2,500.60" in report
    assert "- Number of Sales: 4" in report
    assert "- Monthly Growth: 112.6%" in report
    assert "  - Rent: ₹300.00" in report
    assert "  - Uncategorized: ₹100.00" in report
    assert "- Out of Stock: 1" in report
    assert "- Profit: ₹1,950.35" in report
    assert "- Profit Margin: 78.0%" in report
    assert "  - reseller: 2" in report


def test_sections_follow_present_tables(snapshot, as_of) -> None:
    del snapshot.data["sales"]

    report = render_business_report(snapshot, as_of)

    assert "## Sales Analysis" not in report
    assert "## Financial Health" not in report
    assert "## Expenses Analysis" in report


def test_empty_snapshot_has_only_the_header(empty_snapshot, as_of) -> None:
    report = render_business_report(empty_snapshot, as_of)

    assert "##" not in report
    assert "Data Version: 2.0.0" in report


def test_custom_symbol(snapshot, as_of) -> None:
    assert "- Total Sales: $2,500.60" in render_business_report(snapshot, as_of, symbol="$")
