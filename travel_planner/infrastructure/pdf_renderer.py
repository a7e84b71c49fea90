"""
Renders an ExportDocument to PDF bytes with fpdf2.
All positioning comes from the layout; this module only draws.
"""
import io
import logging

from fpdf import FPDF
from fpdf.errors import FPDFException

from travel_planner.application.export import (
    ActivityRow,
    ExportDocument,
    ImageElement,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    ROW_LINE_HEIGHT,
    ROW_PADDING,
    TIME_COLUMN_WIDTH,
    CONTENT_WIDTH,
    TextElement,
)

logger = logging.getLogger(__name__)

PAGE_BACKGROUND = (255, 247, 237)
ACCENT = (194, 65, 12)
HEADING = (67, 20, 7)

TEXT_STYLES = {
    # style: (font family, font style, size, rgb)
    "title": ("times", "B", 24, ACCENT),
    "subtitle": ("helvetica", "", 12, (80, 80, 80)),
    "lodging": ("helvetica", "", 12, (80, 80, 80)),
    "day_heading": ("times", "B", 14, HEADING),
    "placeholder": ("helvetica", "", 10, (150, 150, 150)),
}


def latin1(text: str) -> str:
    """Core PDF fonts are Latin-1 only; anything else becomes '?'."""
    return text.encode("latin-1", "replace").decode("latin-1")


class ItineraryPDF(FPDF):
    def __init__(self, footers: list[str]):
        super().__init__(orientation="P", unit="mm", format="A4")
        self._footers = footers
        self.set_auto_page_break(auto=False)

    def header(self):
        # Cream page background
        self.set_fill_color(*PAGE_BACKGROUND)
        self.rect(0, 0, PAGE_WIDTH, PAGE_HEIGHT, "F")

    def footer(self):
        self.set_y(-15)
        self.set_font("helvetica", "I", 8)
        self.set_text_color(128, 128, 128)
        text = self._footers[self.page_no() - 1] if self.page_no() <= len(self._footers) else ""
        self.cell(0, 10, latin1(text), align="C")


class PdfRenderer:
    """Draws the pages of an ExportDocument."""

    def render(self, document: ExportDocument) -> bytes:
        pdf = ItineraryPDF([page.footer for page in document.pages])
        pdf.set_title(latin1(document.title))

        for page in document.pages:
            pdf.add_page()
            for element in page.elements:
                if isinstance(element, TextElement):
                    self._draw_text(pdf, element)
                elif isinstance(element, ActivityRow):
                    self._draw_row(pdf, element)
                elif isinstance(element, ImageElement):
                    self._draw_image(pdf, element)

        logger.info(f"Rendered '{document.title}' export ({document.page_count} pages)")
        return bytes(pdf.output())

    def _draw_text(self, pdf: FPDF, element: TextElement) -> None:
        family, style, size, color = TEXT_STYLES.get(element.style, TEXT_STYLES["subtitle"])
        pdf.set_font(family, style, size)
        pdf.set_text_color(*color)
        # y is the text baseline, as in the layout
        pdf.text(element.x, element.y, latin1(element.text))

    def _draw_row(self, pdf: FPDF, row: ActivityRow) -> None:
        pdf.set_draw_color(200, 200, 200)
        pdf.set_fill_color(255, 255, 255)
        pdf.rect(row.x, row.y, TIME_COLUMN_WIDTH, row.height, "DF")
        pdf.rect(row.x + TIME_COLUMN_WIDTH, row.y, CONTENT_WIDTH - TIME_COLUMN_WIDTH, row.height, "DF")

        pdf.set_font("helvetica", "B", 10)
        pdf.set_text_color(*ACCENT)
        pdf.set_xy(row.x, row.y + ROW_PADDING)
        pdf.cell(TIME_COLUMN_WIDTH, ROW_LINE_HEIGHT, row.time_label, align="C")

        pdf.set_font("helvetica", "", 10)
        pdf.set_text_color(60, 60, 60)
        for index, line in enumerate(row.lines):
            pdf.set_xy(row.x + TIME_COLUMN_WIDTH + 2, row.y + ROW_PADDING + index * ROW_LINE_HEIGHT)
            pdf.cell(CONTENT_WIDTH - TIME_COLUMN_WIDTH - 4, ROW_LINE_HEIGHT, latin1(line))

    def _draw_image(self, pdf: FPDF, element: ImageElement) -> None:
        try:
            pdf.image(io.BytesIO(element.data), x=element.x, y=element.y, w=element.width, h=element.height)
        except (FPDFException, RuntimeError, ValueError, OSError) as e:
            # Unreadable bytes: keep the export, draw a frame instead
            logger.warning(f"Cover image could not be embedded: {e}")
            pdf.set_draw_color(200, 200, 200)
            pdf.rect(element.x, element.y, element.width, element.height)
            pdf.set_font("helvetica", "I", 8)
            pdf.set_text_color(156, 163, 175)
            pdf.set_xy(element.x, element.y + element.height / 2 - 2)
            pdf.cell(element.width, 4, "(Image unavailable)", align="C")
