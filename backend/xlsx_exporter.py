"""Render report pages to an Excel workbook, one worksheet per page."""
import io
import logging
from typing import Callable, Optional

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from errors import ExportCancelled
from report_layout import LANDSCAPE, Report, ReportPage, column_count, place_header_cells

logger = logging.getLogger(__name__)

_THIN = Side(style="thin", color="000000")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)
_CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
_BOLD = Font(bold=True)
_GROUP_FILLS = {
    "identity": "2E8B57",
    "month0": "B0E0E6",
    "month1": "DDA0DD",
    "summary": "FFD700",
}

# rows above the table: info line, title
_TABLE_TOP = 3


def sheet_title(page: ReportPage) -> str:
    title = f"S{page.semester + 1}"
    if page.page_count > 1:
        title += f" p{page.page_index + 1}"
    return title


def _fill_sheet(ws, page: ReportPage, orientation: str) -> None:
    ws.sheet_view.rightToLeft = True
    ws.page_setup.orientation = "landscape" if orientation == LANDSCAPE else "portrait"
    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.page_setup.fitToWidth = 1
    ws.sheet_properties.pageSetUpPr.fitToPage = True

    n_cols = column_count(page.header_rows)
    ws.cell(row=1, column=1, value="    ".join(page.info_lines)).font = _BOLD
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=n_cols)
    title = ws.cell(row=2, column=1, value=page.title)
    title.font = Font(bold=True, size=12)
    title.alignment = _CENTER
    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=n_cols)

    for r, c, header in place_header_cells(page.header_rows):
        row, col = _TABLE_TOP + r, 1 + c
        for rr in range(row, row + header.row_span):
            for cc in range(col, col + header.col_span):
                ws.cell(row=rr, column=cc).border = _BORDER
        cell = ws.cell(row=row, column=col, value=header.text)
        cell.font = _BOLD
        cell.alignment = _CENTER
        fill = _GROUP_FILLS.get(header.group)
        if fill:
            cell.fill = PatternFill(start_color=fill, end_color=fill, fill_type="solid")
        if header.row_span > 1 or header.col_span > 1:
            ws.merge_cells(start_row=row, start_column=col,
                           end_row=row + header.row_span - 1,
                           end_column=col + header.col_span - 1)

    first_data_row = _TABLE_TOP + len(page.header_rows)
    for i, report_row in enumerate(page.rows):
        values = [report_row.number, report_row.name]
        values.extend(cell.value for cell in report_row.cells)
        for j, value in enumerate(values):
            cell = ws.cell(row=first_data_row + i, column=1 + j, value=value)
            cell.border = _BORDER
            cell.alignment = _CENTER
            cell.font = _BOLD

    ws.column_dimensions[get_column_letter(2)].width = 28
    for col in range(3, n_cols + 1):
        ws.column_dimensions[get_column_letter(col)].width = 9


def render(report: Report,
           progress_cb: Optional[Callable[[int, int], None]] = None,
           is_cancelled: Optional[Callable[[], bool]] = None) -> bytes:
    total = len(report.pages)
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for i, page in enumerate(report.pages):
        if is_cancelled and is_cancelled():
            raise ExportCancelled("Excel export cancelled")
        if progress_cb:
            progress_cb(i, total)
        _fill_sheet(wb.create_sheet(sheet_title(page)), page, report.orientation)
    if progress_cb:
        progress_cb(total, total)
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
