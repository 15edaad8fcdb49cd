"""Render report pages to an A4 PDF with PyMuPDF.

Each report page becomes one PDF page in the report's orientation.  The page
content is laid out by ``page.insert_htmlbox``, which handles right-to-left
Arabic text shaping and shrinks the table to fit when a page is crowded.
"""
import html
import logging
from typing import Callable, Optional

import fitz

from errors import ExportCancelled
from report_layout import LANDSCAPE, Report, ReportPage

logger = logging.getLogger(__name__)

_MARGIN_PT = 28            # ~10 mm
_BOTTOM_MARGIN_PT = 56     # ~20 mm, room for signatures under the table

_GROUP_COLOURS = {
    "identity": "#2E8B57",
    "month0": "#B0E0E6",
    "month1": "#DDA0DD",
    "summary": "#FFD700",
}

_CSS = """
* { font-family: sans-serif; color: black; }
body { direction: rtl; }
.info { width: 100%; font-size: 11px; font-weight: bold; margin-bottom: 8px; }
.info td { border: none; text-align: right; padding: 2px 6px; }
h3 { text-align: center; font-size: 13px; margin: 4px 0 6px 0; }
table.grades { border-collapse: collapse; width: 100%; font-size: 9px; }
table.grades th, table.grades td { border: 1px solid black; text-align: center; padding: 4px 2px; font-weight: bold; }
table.grades td.name { text-align: right; padding-right: 5px; white-space: nowrap; }
th.identity { color: white; }
"""


def _paper_rect(orientation: str) -> fitz.Rect:
    return fitz.paper_rect("a4-l" if orientation == LANDSCAPE else "a4")


def page_html(page: ReportPage) -> str:
    """HTML for one report page.  Every value is escaped plain text."""
    esc = html.escape
    parts = ['<table class="info"><tr>']
    parts.extend(f"<td>{esc(line)}</td>" for line in page.info_lines)
    parts.append("</tr></table>")
    parts.append(f"<h3>{esc(page.title)}</h3>")
    parts.append('<table class="grades">')
    for header_row in page.header_rows:
        parts.append("<tr>")
        for cell in header_row:
            colour = _GROUP_COLOURS.get(cell.group, "#f2f2f2")
            parts.append(
                f'<th class="{esc(cell.group)}" colspan="{cell.col_span}" rowspan="{cell.row_span}"'
                f' style="background-color: {colour};">{esc(cell.text)}</th>'
            )
        parts.append("</tr>")
    for row in page.rows:
        parts.append(f"<tr><td>{row.number}</td><td class=\"name\">{esc(row.name)}</td>")
        parts.extend(f"<td>{esc(cell.text)}</td>" for cell in row.cells)
        parts.append("</tr>")
    parts.append("</table>")
    return "".join(parts)


def render(report: Report,
           progress_cb: Optional[Callable[[int, int], None]] = None,
           is_cancelled: Optional[Callable[[], bool]] = None) -> bytes:
    """Return the PDF bytes for *report*.

    *progress_cb(done, total)* is called before each page and once at the
    end.  Raises ExportCancelled as soon as *is_cancelled()* turns true.
    """
    total = len(report.pages)
    paper = _paper_rect(report.orientation)
    content = fitz.Rect(_MARGIN_PT, _MARGIN_PT,
                        paper.width - _MARGIN_PT, paper.height - _BOTTOM_MARGIN_PT)
    doc = fitz.open()
    try:
        for i, page in enumerate(report.pages):
            if is_cancelled and is_cancelled():
                raise ExportCancelled("PDF export cancelled")
            if progress_cb:
                progress_cb(i, total)
            pdf_page = doc.new_page(width=paper.width, height=paper.height)
            spare_height, scale = pdf_page.insert_htmlbox(content, page_html(page), css=_CSS)
            if spare_height < 0:
                raise RuntimeError(f"Page {i + 1} does not fit on the paper")
            if scale < 1:
                logger.debug("Page %d scaled to %.2f to fit", i + 1, scale)
        if progress_cb:
            progress_cb(total, total)
        return doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()
