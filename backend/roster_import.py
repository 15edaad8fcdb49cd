"""Turn pasted text or an uploaded spreadsheet into a list of student names.

Spreadsheets follow one rule: the first row is a header, names are the
non-empty text values of the first column below it.
"""
import csv
import io
import logging
import os
import zipfile
from typing import Iterable, List

import openpyxl
import xlrd
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from errors import RosterImportError

logger = logging.getLogger(__name__)


def parse_pasted_names(text: str) -> List[str]:
    """One name per line; surrounding whitespace and blank lines are dropped."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def _first_column_names(rows: Iterable[tuple]) -> List[str]:
    names = []
    for i, row in enumerate(rows):
        if i == 0 or not row:
            continue
        value = row[0]
        if isinstance(value, str) and value.strip():
            names.append(value.strip())
    return names


def read_xlsx_names(data: bytes) -> List[str]:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise RosterImportError(f"Not a readable Excel workbook: {e}") from e
    try:
        ws = wb.worksheets[0]
        return _first_column_names(ws.iter_rows(values_only=True))
    finally:
        wb.close()


def read_xls_names(data: bytes) -> List[str]:
    """Legacy binary workbooks (Excel 97-2003), first sheet only."""
    try:
        book = xlrd.open_workbook(file_contents=data)
    except (xlrd.XLRDError, CompDocError, OSError) as e:
        raise RosterImportError(f"Not a readable Excel workbook: {e}") from e
    sheet = book.sheet_by_index(0)
    return _first_column_names(tuple(sheet.row_values(i)) for i in range(sheet.nrows))


def read_csv_names(text: str) -> List[str]:
    return _first_column_names(tuple(row) for row in csv.reader(io.StringIO(text)))


def names_from_upload(filename: str, data: bytes) -> List[str]:
    """Dispatch on the file extension (``.xlsx``/``.xlsm``, ``.xls`` or ``.csv``)."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext in (".xlsx", ".xlsm"):
        names = read_xlsx_names(data)
    elif ext == ".xls":
        names = read_xls_names(data)
    elif ext == ".csv":
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise RosterImportError(f"CSV file is not UTF-8: {e}") from e
        names = read_csv_names(text)
    else:
        raise RosterImportError(f"Unsupported roster file type: {ext or filename!r}")
    logger.info("Read %d names from %s", len(names), filename)
    return names
