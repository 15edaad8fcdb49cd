"""Gradebook record model: students, activity columns, grade keys.

A record always has two semesters of two months each.  Grades are stored per
student under string keys:

* ``s{sem}-m{month}-c{col}`` – one activity column of a month
* ``s{sem}-m{month}-exam``   – the month's written exam
* ``midYear``                – mid-year examination (after semester 0)
* ``finalExam``              – year-end examination (after semester 1)

``to_dict`` / ``state_from_dict`` use the camelCase JSON shape records have
always been stored in.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional

from errors import ColumnNotFound, InvalidGradeKey, SlotNotFound, StudentNotFound


SEMESTER_COUNT = 2
MONTHS_PER_SEMESTER = 2

DEFAULT_COLUMN_TITLE = "نشاط"
DEFAULT_COLUMN_MAX = 25
DEFAULT_EXAM_MAX = 100
DEFAULT_YEAR = "2025-2026"

MID_YEAR_KEY = "midYear"
FINAL_EXAM_KEY = "finalExam"
# mid-year and final exams are always marked out of 100
SINGLE_EXAM_MAX = 100


# ── Grade keys ────────────────────────────────────────────────────────────────

_COLUMN_KEY_RE = re.compile(r"^s(\d+)-m(\d+)-c(\d+)$")
_EXAM_KEY_RE = re.compile(r"^s(\d+)-m(\d+)-exam$")


class GradeKey(NamedTuple):
    kind: str                  # "column" | "exam" | "midYear" | "finalExam"
    semester: Optional[int] = None
    month: Optional[int] = None
    column: Optional[int] = None


def column_key(sem: int, month: int, col: int) -> str:
    return f"s{sem}-m{month}-c{col}"


def exam_key(sem: int, month: int) -> str:
    return f"s{sem}-m{month}-exam"


def parse_grade_key(key: str) -> GradeKey:
    """Split a grade key into its addressing parts.

    Raises InvalidGradeKey for anything that is not one of the four key
    shapes in canonical form (no leading zeros), or whose semester/month lies
    outside the 2×2 layout.
    """
    if key == MID_YEAR_KEY:
        return GradeKey("midYear")
    if key == FINAL_EXAM_KEY:
        return GradeKey("finalExam")
    m = _COLUMN_KEY_RE.match(key)
    if m:
        parsed = GradeKey("column", int(m.group(1)), int(m.group(2)), int(m.group(3)))
    else:
        m = _EXAM_KEY_RE.match(key)
        if not m:
            raise InvalidGradeKey(f"Unrecognised grade key: {key!r}")
        parsed = GradeKey("exam", int(m.group(1)), int(m.group(2)))
    if parsed.semester >= SEMESTER_COUNT or parsed.month >= MONTHS_PER_SEMESTER:
        raise InvalidGradeKey(f"Grade key out of range: {key!r}")
    # "s0-m0-c00" parses but would never be read back by the averages
    if canonical_key(parsed) != key:
        raise InvalidGradeKey(f"Grade key not in canonical form: {key!r}")
    return parsed


def canonical_key(parsed: GradeKey) -> str:
    if parsed.kind == "column":
        return column_key(parsed.semester, parsed.month, parsed.column)
    if parsed.kind == "exam":
        return exam_key(parsed.semester, parsed.month)
    return MID_YEAR_KEY if parsed.kind == "midYear" else FINAL_EXAM_KEY


# ── Record model ──────────────────────────────────────────────────────────────

@dataclass
class CustomColumn:
    title: str = DEFAULT_COLUMN_TITLE
    max: int = DEFAULT_COLUMN_MAX


@dataclass
class Month:
    custom_columns: List[CustomColumn] = field(default_factory=list)

    def daily_max(self) -> int:
        return sum(c.max or 0 for c in self.custom_columns)


def _empty_months() -> List[Month]:
    return [Month() for _ in range(MONTHS_PER_SEMESTER)]


@dataclass
class Semester:
    months: List[Month] = field(default_factory=_empty_months)


def _empty_semesters() -> List[Semester]:
    return [Semester() for _ in range(SEMESTER_COUNT)]


@dataclass
class Student:
    id: int
    name: str = ""
    grades: Dict[str, Optional[int]] = field(default_factory=dict)

    def grade(self, key: str) -> Optional[int]:
        """Stored grade for *key*, or None when ungraded."""
        return self.grades.get(key)


@dataclass
class RecordInfo:
    school_name: str = ""
    teacher_name: str = ""
    subject_name: str = ""
    class_name: str = ""
    year: str = DEFAULT_YEAR
    exam_max_grade: int = DEFAULT_EXAM_MAX


@dataclass
class GradebookState:
    info: RecordInfo = field(default_factory=RecordInfo)
    students: List[Student] = field(default_factory=list)
    semesters: List[Semester] = field(default_factory=_empty_semesters)

    def month(self, sem: int, month: int) -> Month:
        if not 0 <= sem < len(self.semesters):
            raise SlotNotFound(f"Semester index out of range: {sem}")
        months = self.semesters[sem].months
        if not 0 <= month < len(months):
            raise SlotNotFound(f"Month index out of range: {month}")
        return months[month]

    def columns(self, sem: int, month: int) -> List[CustomColumn]:
        return self.month(sem, month).custom_columns

    def column(self, sem: int, month: int, col: int) -> CustomColumn:
        cols = self.columns(sem, month)
        if not 0 <= col < len(cols):
            raise ColumnNotFound(
                f"No column {col} in semester {sem} month {month} ({len(cols)} columns)"
            )
        return cols[col]

    def student(self, student_id: int) -> Student:
        for s in self.students:
            if s.id == student_id:
                return s
        raise StudentNotFound(student_id)

    def next_student_id(self) -> int:
        return max((s.id for s in self.students), default=0) + 1


def new_gradebook(teacher_name: str = "", subject_name: str = "",
                  class_name: str = "", school_name: str = "") -> GradebookState:
    """Blank record for a class/section, with no students and no columns."""
    return GradebookState(info=RecordInfo(
        school_name=school_name,
        teacher_name=teacher_name,
        subject_name=subject_name,
        class_name=class_name,
    ))


# ── Serialization ─────────────────────────────────────────────────────────────

_INFO_FIELDS = {
    "schoolName": "school_name",
    "teacherName": "teacher_name",
    "subjectName": "subject_name",
    "className": "class_name",
    "year": "year",
    "examMaxGrade": "exam_max_grade",
}


def info_to_dict(info: RecordInfo) -> dict:
    return {wire: getattr(info, attr) for wire, attr in _INFO_FIELDS.items()}


def to_dict(state: GradebookState) -> dict:
    return {
        "info": info_to_dict(state.info),
        "students": [
            {"id": s.id, "name": s.name, "grades": dict(s.grades)}
            for s in state.students
        ],
        "semesters": [
            {
                "months": [
                    {
                        "customColumns": [
                            {"title": c.title, "max": c.max}
                            for c in m.custom_columns
                        ]
                    }
                    for m in sem.months
                ]
            }
            for sem in state.semesters
        ],
    }


def _int_or(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def info_from_dict(data: Optional[dict]) -> RecordInfo:
    data = data or {}
    info = RecordInfo()
    for wire, attr in _INFO_FIELDS.items():
        if data.get(wire) is None:
            continue
        if attr == "exam_max_grade":
            info.exam_max_grade = _int_or(data[wire], DEFAULT_EXAM_MAX)
        else:
            setattr(info, attr, str(data[wire]))
    return info


def _stored_grade(value) -> Optional[int]:
    # negative and non-numeric values load as ungraded
    if value is None or isinstance(value, bool):
        return None
    grade = _int_or(value, None)
    if grade is None or grade < 0:
        return None
    return grade


def _grades_from_dict(data: Optional[dict]) -> Dict[str, Optional[int]]:
    return {str(key): _stored_grade(value) for key, value in (data or {}).items()}


def _students_from_dict(data) -> List[Student]:
    """Load students, giving a fresh id to any entry whose id is missing or repeated."""
    raw = [s for s in data or [] if isinstance(s, dict)]
    ids = [_int_or(s.get("id"), None) for s in raw]
    next_id = max([i for i in ids if i is not None] or [0]) + 1
    seen = set()
    students = []
    for s, student_id in zip(raw, ids):
        if student_id is None or student_id in seen:
            student_id = next_id
            next_id += 1
        seen.add(student_id)
        students.append(Student(
            id=student_id,
            name=str(s.get("name") or ""),
            grades=_grades_from_dict(s.get("grades")),
        ))
    return students


def _month_from_dict(data: Optional[dict]) -> Month:
    columns = [
        CustomColumn(
            title=str(c.get("title", DEFAULT_COLUMN_TITLE)),
            max=_int_or(c.get("max"), 0),
        )
        for c in (data or {}).get("customColumns") or []
    ]
    return Month(custom_columns=columns)


def state_from_dict(data: Optional[dict]) -> GradebookState:
    """Build a record from its stored JSON, defaulting every missing field.

    Missing ``grades`` become ``{}``, missing ``customColumns`` become ``[]``,
    and short or absent ``semesters``/``months`` lists are padded so the
    result always has the fixed 2×2 shape.
    """
    data = data or {}
    students = _students_from_dict(data.get("students"))

    raw_semesters = list(data.get("semesters") or [])[:SEMESTER_COUNT]
    semesters = []
    for sem_data in raw_semesters:
        raw_months = list((sem_data or {}).get("months") or [])[:MONTHS_PER_SEMESTER]
        months = [_month_from_dict(m) for m in raw_months]
        months.extend(Month() for _ in range(MONTHS_PER_SEMESTER - len(months)))
        semesters.append(Semester(months=months))
    semesters.extend(Semester() for _ in range(SEMESTER_COUNT - len(semesters)))

    return GradebookState(
        info=info_from_dict(data.get("info")),
        students=students,
        semesters=semesters,
    )
