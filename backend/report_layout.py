"""Lay out a gradebook as paginated per-semester tables.

Pages hold plain data only: header cells with spans, and rows of cell values.
Screen rendering and every exporter read the same structure, and all numbers
in it come from ``averages``.

Each semester table has three header rows::

    #  | name | month 1 (cols + 3)        | month 2 (cols + 3)        | summary…
       |      | titles… daily exam avg    | titles… daily exam avg    |
       |      | maxes…  Σmax  exam-max max| maxes…  Σmax  exam-max max|

Semester 0 ends with *semester average* and *mid-year*; semester 1 ends with
*semester average*, *yearly effort*, *final exam* and *final grade*.
"""
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple

import averages
from gradebook import (
    FINAL_EXAM_KEY,
    MID_YEAR_KEY,
    MONTHS_PER_SEMESTER,
    SEMESTER_COUNT,
    GradebookState,
    Student,
    column_key,
    exam_key,
)

LANDSCAPE = "landscape"
PORTRAIT = "portrait"
ORIENTATIONS = (LANDSCAPE, PORTRAIT)

# students per printed page
DEFAULT_CHUNK_SIZES: Dict[str, int] = {LANDSCAPE: 20, PORTRAIT: 30}

# ── Labels ────────────────────────────────────────────────────────────────────
LABEL_NUMBER = "ت"
LABEL_NAME = "اسم الطالب"
LABEL_MONTHS = ("الشهر الأول", "الشهر الثاني")
LABEL_DAILY_TOTAL = "مجموع اليومي"
LABEL_EXAM = "التحريري"
LABEL_AVERAGE = "المعدل"
LABEL_SEMESTER_AVG = ("معدل الفصل الاول", "معدل الفصل الثاني")
LABEL_MID_YEAR = "نصف السنة"
LABEL_YEARLY_EFFORT = "السعي السنوي"
LABEL_FINAL_EXAM = "الامتحان النهائي"
LABEL_FINAL_GRADE = "الدرجة النهائية"
SEMESTER_NAMES = ("الاول", "الثاني")


@dataclass
class HeaderCell:
    text: str
    col_span: int = 1
    row_span: int = 1
    group: str = ""              # "identity", "month0", "month1", "summary"
    editable: bool = False
    key: Optional[str] = None    # set on editable cells, e.g. "examMaxGrade"


@dataclass
class ReportCell:
    value: Optional[int]
    key: Optional[str] = None    # grade key for entered values, None when computed
    computed: bool = False

    @property
    def text(self) -> str:
        return "" if self.value is None else str(self.value)


@dataclass
class ReportRow:
    number: int
    student_id: int
    name: str
    cells: List[ReportCell] = field(default_factory=list)


@dataclass
class ReportPage:
    semester: int
    page_index: int
    page_count: int
    title: str
    info_lines: List[str]
    header_rows: List[List[HeaderCell]]
    rows: List[ReportRow]


@dataclass
class Report:
    orientation: str
    chunk_size: int
    pages: List[ReportPage]

    def pages_for(self, sem: int) -> List[ReportPage]:
        return [p for p in self.pages if p.semester == sem]

    def to_dict(self) -> dict:
        data = asdict(self)
        for page, page_data in zip(self.pages, data["pages"]):
            for row, row_data in zip(page.rows, page_data["rows"]):
                for cell, cell_data in zip(row.cells, row_data["cells"]):
                    cell_data["text"] = cell.text
        return data


def place_header_cells(header_rows: List[List[HeaderCell]]) -> List[Tuple[int, int, HeaderCell]]:
    """Grid position ``(row, col, cell)`` of every header cell, honouring spans.

    Cells are placed left to right, skipping grid slots already covered by a
    row-spanning cell from an earlier row.
    """
    occupied = set()
    placed = []
    for r, header_row in enumerate(header_rows):
        c = 0
        for cell in header_row:
            while (r, c) in occupied:
                c += 1
            placed.append((r, c, cell))
            for rr in range(r, r + cell.row_span):
                for cc in range(c, c + cell.col_span):
                    occupied.add((rr, cc))
            c += cell.col_span
    return placed


def column_count(header_rows: List[List[HeaderCell]]) -> int:
    return sum(cell.col_span for cell in header_rows[0]) if header_rows else 0


def chunk_size_for(orientation: str, chunk_sizes: Optional[Dict[str, int]] = None) -> int:
    if orientation not in ORIENTATIONS:
        raise ValueError(f"Unknown orientation: {orientation!r}")
    sizes = dict(DEFAULT_CHUNK_SIZES)
    sizes.update(chunk_sizes or {})
    size = int(sizes[orientation])
    if size <= 0:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return size


def chunk_students(students: List[Student], chunk_size: int) -> List[List[Student]]:
    """Split the roster into page-sized groups; an empty roster gives one empty page."""
    chunks = [students[i:i + chunk_size] for i in range(0, len(students), chunk_size)]
    return chunks or [[]]


def _summary_labels(sem: int) -> List[str]:
    if sem == 0:
        return [LABEL_SEMESTER_AVG[0], LABEL_MID_YEAR]
    return [LABEL_SEMESTER_AVG[1], LABEL_YEARLY_EFFORT, LABEL_FINAL_EXAM, LABEL_FINAL_GRADE]


def build_header_rows(state: GradebookState, sem: int) -> List[List[HeaderCell]]:
    exam_max = state.info.exam_max_grade
    groups: List[HeaderCell] = [
        HeaderCell(LABEL_NUMBER, row_span=3, group="identity"),
        HeaderCell(LABEL_NAME, row_span=3, group="identity"),
    ]
    titles: List[HeaderCell] = []
    maxes: List[HeaderCell] = []

    for month in range(MONTHS_PER_SEMESTER):
        group = f"month{month}"
        columns = state.columns(sem, month)
        daily_max = sum(c.max or 0 for c in columns)
        groups.append(HeaderCell(LABEL_MONTHS[month], col_span=len(columns) + 3, group=group))
        titles.extend(HeaderCell(c.title, group=group) for c in columns)
        titles.extend(HeaderCell(label, group=group)
                      for label in (LABEL_DAILY_TOTAL, LABEL_EXAM, LABEL_AVERAGE))
        maxes.extend(HeaderCell(str(c.max or 0), group=group) for c in columns)
        maxes.append(HeaderCell(str(daily_max), group=group))
        maxes.append(HeaderCell(str(exam_max), group=group, editable=True, key="examMaxGrade"))
        maxes.append(HeaderCell(str(averages.month_average_max(daily_max, exam_max)), group=group))

    groups.extend(HeaderCell(label, row_span=3, group="summary") for label in _summary_labels(sem))
    return [groups, titles, maxes]


def build_row(state: GradebookState, sem: int, student: Student, number: int,
              results: Optional[averages.StudentAverages] = None) -> ReportRow:
    if results is None:
        results = averages.calculate_student(state, student)

    def entered(key: str) -> ReportCell:
        return ReportCell(student.grade(key), key=key)

    def computed(value: int) -> ReportCell:
        return ReportCell(value, computed=True)

    cells: List[ReportCell] = []
    for month in range(MONTHS_PER_SEMESTER):
        month_avg = results.month(sem, month)
        cells.extend(entered(column_key(sem, month, i))
                     for i in range(len(state.columns(sem, month))))
        cells.append(computed(month_avg.daily_total))
        cells.append(entered(exam_key(sem, month)))
        cells.append(computed(month_avg.display_avg))

    cells.append(computed(results.semesters[sem]))
    if sem == 0:
        cells.append(entered(MID_YEAR_KEY))
    else:
        cells.append(computed(results.yearly_effort))
        cells.append(entered(FINAL_EXAM_KEY))
        cells.append(computed(results.final_grade))
    return ReportRow(number=number, student_id=student.id, name=student.name, cells=cells)


def info_lines(state: GradebookState) -> List[str]:
    info = state.info
    return [
        f"مدرس المادة: {info.teacher_name}",
        f"الصف والشعبة: {info.class_name}",
        f"المادة الدراسية: {info.subject_name}",
        f"إدارة مدرسة: {info.school_name}",
    ]


def semester_title(state: GradebookState, sem: int) -> str:
    return f"الدرجات اليومية للفصل الدراسي {SEMESTER_NAMES[sem]} - العام الدراسي {state.info.year}"


def build_semester_pages(state: GradebookState, sem: int, chunk_size: int,
                         results: Optional[Dict[int, averages.StudentAverages]] = None) -> List[ReportPage]:
    if results is None:
        results = averages.calculate_all(state)
    chunks = chunk_students(state.students, chunk_size)
    header_rows = build_header_rows(state, sem)
    title = semester_title(state, sem)
    lines = info_lines(state)
    pages = []
    for page_index, chunk in enumerate(chunks):
        first_number = page_index * chunk_size + 1
        rows = [
            build_row(state, sem, student, first_number + i, results.get(student.id))
            for i, student in enumerate(chunk)
        ]
        pages.append(ReportPage(
            semester=sem,
            page_index=page_index,
            page_count=len(chunks),
            title=title,
            info_lines=list(lines),
            header_rows=header_rows,
            rows=rows,
        ))
    return pages


def build_report(state: GradebookState, orientation: str = LANDSCAPE,
                 chunk_sizes: Optional[Dict[str, int]] = None) -> Report:
    """All semester-0 pages, then all semester-1 pages."""
    chunk_size = chunk_size_for(orientation, chunk_sizes)
    results = averages.calculate_all(state)
    pages: List[ReportPage] = []
    for sem in range(SEMESTER_COUNT):
        pages.extend(build_semester_pages(state, sem, chunk_size, results))
    return Report(orientation=orientation, chunk_size=chunk_size, pages=pages)
