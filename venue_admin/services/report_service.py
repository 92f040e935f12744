"""
Venue Admin — Expense Report Service
======================================

What:  Renders a venue expense sheet to PDF.
How:   Jinja2 fills the HTML template, then a headless Chromium (Playwright)
       loads the HTML and prints it. The page height is measured first so
       the whole sheet lands on one tall page with backgrounds kept.
Who:   Called by the /download-expense-report route, which streams the
       returned file.

Output:
    <report_dir>/venue-expense-report-<id>.pdf, overwritten by the next
    download of the same sheet.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from venue_admin.config import settings
from venue_admin.exceptions import ReportGenerationError
from venue_admin.models.venue_expense import VenueExpense

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=True,
)

# Evaluated in the page; the tallest of the body and document measurements
DOCUMENT_HEIGHT_JS = """
() => {
    const body = document.body;
    const html = document.documentElement;
    return Math.max(
        body.scrollHeight, body.offsetHeight,
        html.clientHeight, html.scrollHeight, html.offsetHeight
    );
}
"""


def report_data(expense: VenueExpense) -> Dict[str, Any]:
    return {
        "city": {"id": str(expense.city.id), "name": expense.city.name},
        "venue": {"id": str(expense.venue.id), "name": expense.venue.name},
        "month": expense.month,
        "year": expense.year,
        "expenses": [
            {"desc": item["desc"], "amount": item["amount"]} for item in expense.expenses
        ],
        "total": expense.total,
    }


class ReportService:
    def __init__(self, report_dir: Optional[str] = None, template_name: Optional[str] = None):
        self.report_dir = Path(report_dir or settings.report_dir).resolve()
        self.template_name = template_name or settings.report_template

    def render_html(self, data: Dict[str, Any]) -> str:
        try:
            template = _jinja_env.get_template(self.template_name)
            return template.render(report_data=data)
        except TemplateError as e:
            logger.error("Expense report template failed: %s", str(e))
            raise ReportGenerationError(context={"template": self.template_name})

    async def render_expense_report(self, expense: VenueExpense) -> Path:
        """
        Print the expense sheet to PDF and return the file path.

        Raises:
            ReportGenerationError: template or browser failure. The browser
            is closed either way.
        """
        html = self.render_html(report_data(expense))
        self.report_dir.mkdir(parents=True, exist_ok=True)
        target = self.report_dir / f"venue-expense-report-{expense.id}.pdf"

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(
                    headless=True,
                    args=["--no-sandbox", "--disable-setuid-sandbox"],
                )
                try:
                    page = await browser.new_page()
                    await page.set_content(html)
                    height = await page.evaluate(DOCUMENT_HEIGHT_JS)
                    await page.pdf(
                        path=str(target),
                        height=f"{height}px",
                        print_background=True,
                    )
                finally:
                    await browser.close()
        except (PlaywrightError, OSError) as e:
            logger.error("Expense report %s could not be printed: %s", expense.id, str(e))
            raise ReportGenerationError(context={"report_id": str(expense.id)})

        logger.info("Expense report written: %s", target.name)
        return target


# ── Singleton Instance ────────────────────────────────────────────────────
report_service = ReportService()
