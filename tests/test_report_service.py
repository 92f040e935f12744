"""
Venue Admin — Expense Report Tests
====================================

What:  HTML rendering of expense sheets and the PDF print flow.
How:   Playwright is replaced with a fake whose page.pdf() writes a
       placeholder file, so no browser is launched.
"""

import uuid
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from venue_admin.exceptions import ReportGenerationError
from venue_admin.services.report_service import ReportService, report_data


def _expense():
    items = [{"desc": "Electricity <meter>", "amount": 1200.5}, {"desc": "Staff", "amount": 3000}]
    return SimpleNamespace(
        id=uuid.uuid4(),
        city=SimpleNamespace(id=uuid.uuid4(), name="North"),
        venue=SimpleNamespace(id=uuid.uuid4(), name="Arena Stadium"),
        month="March",
        year="2025",
        expenses=items,
        total=4200.5,
    )


def _fake_playwright(pdf_error=None):
    """async_playwright() stand-in; returns (factory, browser, page)."""
    page = MagicMock()
    page.set_content = AsyncMock()
    page.evaluate = AsyncMock(return_value=1480)

    async def write_pdf(path, **kwargs):
        if pdf_error is not None:
            raise pdf_error
        Path(path).write_bytes(b"%PDF-1.4 fake")

    page.pdf = AsyncMock(side_effect=write_pdf)

    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=playwright)
    context.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=context), browser, page


class TestRenderHtml:

    def test_report_data_shape(self):
        expense = _expense()
        data = report_data(expense)
        assert data["city"] == {"id": str(expense.city.id), "name": "North"}
        assert data["venue"]["name"] == "Arena Stadium"
        assert data["total"] == 4200.5
        assert len(data["expenses"]) == 2

    def test_template_lists_items_and_total(self, tmp_path):
        html = ReportService(report_dir=str(tmp_path)).render_html(report_data(_expense()))
        assert "Arena Stadium" in html
        assert "March 2025" in html
        assert "1200.50" in html
        assert "4200.50" in html

    def test_template_escapes_descriptions(self, tmp_path):
        html = ReportService(report_dir=str(tmp_path)).render_html(report_data(_expense()))
        assert "Electricity &lt;meter&gt;" in html

    def test_missing_template(self, tmp_path):
        service = ReportService(report_dir=str(tmp_path), template_name="missing.html")
        with pytest.raises(ReportGenerationError):
            service.render_html(report_data(_expense()))


class TestRenderPdf:

    @pytest.mark.asyncio
    async def test_prints_one_tall_page(self, tmp_path):
        factory, browser, page = _fake_playwright()
        expense = _expense()

        with patch("venue_admin.services.report_service.async_playwright", factory):
            path = await ReportService(report_dir=str(tmp_path)).render_expense_report(expense)

        assert path == tmp_path.resolve() / f"venue-expense-report-{expense.id}.pdf"
        assert path.read_bytes().startswith(b"%PDF")
        page.pdf.assert_awaited_once_with(path=str(path), height="1480px", print_background=True)
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_browser_failure_is_reported_and_browser_closed(self, tmp_path):
        factory, browser, _ = _fake_playwright(pdf_error=PlaywrightError("Target closed"))

        with patch("venue_admin.services.report_service.async_playwright", factory):
            with pytest.raises(ReportGenerationError, match="Could not download the file"):
                await ReportService(report_dir=str(tmp_path)).render_expense_report(_expense())

        browser.close.assert_awaited_once()
