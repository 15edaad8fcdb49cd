"""Render report pages to a Word (.docx) document with python-docx."""
import io
import logging
from typing import Callable, Optional

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.shared import Mm, Pt

from errors import ExportCancelled
from report_layout import LANDSCAPE, Report, ReportPage, column_count, place_header_cells

logger = logging.getLogger(__name__)

FONT_NAME = "Tajawal"
_GROUP_SHADING = {
    "identity": "2E8B57",
    "month0": "B0E0E6",
    "month1": "DDA0DD",
    "summary": "FFD700",
}


def _set_rtl(paragraph) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    p_pr.append(parse_xml(f"<w:bidi {nsdecls('w')}/>"))


def _write_cell(cell, text: str, bold: bool = True, size: float = 9,
                shading: Optional[str] = None) -> None:
    cell.text = ""
    paragraph = cell.paragraphs[0]
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    _set_rtl(paragraph)
    run = paragraph.add_run(text)
    run.bold = bold
    run.font.size = Pt(size)
    run.font.name = FONT_NAME
    run._element.rPr.rFonts.set(qn("w:cs"), FONT_NAME)
    if shading:
        cell._tc.get_or_add_tcPr().append(
            parse_xml(f'<w:shd {nsdecls("w")} w:fill="{shading}"/>')
        )


def _setup_section(doc, orientation: str) -> None:
    section = doc.sections[0]
    if orientation == LANDSCAPE:
        section.orientation = WD_ORIENT.LANDSCAPE
        section.page_width, section.page_height = Mm(297), Mm(210)
    else:
        section.orientation = WD_ORIENT.PORTRAIT
        section.page_width, section.page_height = Mm(210), Mm(297)
    for side in ("left_margin", "right_margin", "top_margin", "bottom_margin"):
        setattr(section, side, Mm(10))


def _add_page(doc, page: ReportPage) -> None:
    info = doc.add_paragraph()
    _set_rtl(info)
    info_run = info.add_run("    ".join(page.info_lines))
    info_run.bold = True
    info_run.font.size = Pt(11)

    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    _set_rtl(title)
    title_run = title.add_run(page.title)
    title_run.bold = True
    title_run.font.size = Pt(12)

    n_cols = column_count(page.header_rows)
    n_header = len(page.header_rows)
    table = doc.add_table(rows=n_header + len(page.rows), cols=n_cols)
    table.style = "Table Grid"
    table.alignment = WD_TABLE_ALIGNMENT.CENTER
    table._tbl.tblPr.append(parse_xml(f"<w:bidiVisual {nsdecls('w')}/>"))

    for r, c, header in place_header_cells(page.header_rows):
        cell = table.cell(r, c)
        if header.row_span > 1 or header.col_span > 1:
            cell = cell.merge(table.cell(r + header.row_span - 1, c + header.col_span - 1))
        _write_cell(cell, header.text, shading=_GROUP_SHADING.get(header.group))

    for i, row in enumerate(page.rows):
        cells = table.rows[n_header + i].cells
        _write_cell(cells[0], str(row.number))
        _write_cell(cells[1], row.name)
        for j, value in enumerate(row.cells):
            _write_cell(cells[2 + j], value.text)


def render(report: Report,
           progress_cb: Optional[Callable[[int, int], None]] = None,
           is_cancelled: Optional[Callable[[], bool]] = None) -> bytes:
    """Return .docx bytes for *report*, one report page per printed page."""
    total = len(report.pages)
    doc = Document()
    _setup_section(doc, report.orientation)
    for i, page in enumerate(report.pages):
        if is_cancelled and is_cancelled():
            raise ExportCancelled("Word export cancelled")
        if progress_cb:
            progress_cb(i, total)
        if i > 0:
            doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)
        _add_page(doc, page)
    if progress_cb:
        progress_cb(total, total)
    output = io.BytesIO()
    doc.save(output)
    return output.getvalue()
