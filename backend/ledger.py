"""Grade ledger: per-student grade entries and roster mutations.

Grade input is permissive.  Anything that is not a non-negative whole number
is stored as None (ungraded) instead of being rejected, and entries above the
slot's maximum are clamped when entered through ``enter_grade``.
"""
import logging
from typing import Iterable, List, Optional

from errors import ColumnNotFound, InvalidGradeKey
from gradebook import (
    SINGLE_EXAM_MAX,
    GradebookState,
    Student,
    column_key,
    parse_grade_key,
)

logger = logging.getLogger(__name__)


def parse_grade(raw) -> Optional[int]:
    """Convert raw cell input to a grade, or None when blank or invalid."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, float):
        return int(raw) if raw >= 0 else None
    text = str(raw).strip()
    # isdecimal() also accepts Arabic-Indic digits, which int() understands
    if not text or not text.isdecimal():
        return None
    return int(text)


def max_for_key(state: GradebookState, key: str) -> int:
    """Maximum score the slot addressed by *key* accepts."""
    parsed = parse_grade_key(key)
    if parsed.kind == "column":
        return state.column(parsed.semester, parsed.month, parsed.column).max
    if parsed.kind == "exam":
        return state.info.exam_max_grade
    return SINGLE_EXAM_MAX


def clamp_grade(value: Optional[int], maximum: int) -> Optional[int]:
    # a zero maximum means "no cap configured yet"
    if value is None or not maximum:
        return value
    return min(value, maximum)


def set_grade(state: GradebookState, student_id: int, key: str, raw) -> Optional[int]:
    """Store *raw* for the student under *key* without checking the max."""
    student = state.student(student_id)
    value = parse_grade(raw)
    student.grades[key] = value
    return value


def enter_grade(state: GradebookState, student_id: int, key: str, raw) -> Optional[int]:
    """Entry-time path: parse *raw*, clamp it to the slot max, store it."""
    maximum = max_for_key(state, key)
    value = clamp_grade(parse_grade(raw), maximum)
    state.student(student_id).grades[key] = value
    return value


def add_student(state: GradebookState, name: str = "") -> Student:
    student = Student(id=state.next_student_id(), name=name)
    state.students.append(student)
    return student


def add_students(state: GradebookState, names: Iterable[str]) -> List[Student]:
    """Append one student per name, with fresh sequential ids."""
    added = [add_student(state, name) for name in names]
    logger.info("Added %d students (roster now %d)", len(added), len(state.students))
    return added


def rename_student(state: GradebookState, student_id: int, name: str) -> Student:
    student = state.student(student_id)
    student.name = name
    return student


def remove_student(state: GradebookState, student_id: int) -> Student:
    """Delete the student and every grade they had.  There is no undo."""
    student = state.student(student_id)
    state.students.remove(student)
    logger.info("Removed student %d (%s)", student_id, student.name)
    return student


def renumber_after_column_removal(state: GradebookState, sem: int, month: int,
                                  removed_col: int) -> None:
    """Shift every student's grades left over a removed column.

    Must run right after the column was removed from the month, so that the
    month's current column count is the new count.  Keys ``c{removed+1..N}``
    move down by one and the vacated top key ``c{N}`` is dropped.
    """
    remaining = len(state.columns(sem, month))
    for student in state.students:
        grades = student.grades
        for i in range(removed_col, remaining):
            old_key = column_key(sem, month, i + 1)
            new_key = column_key(sem, month, i)
            if old_key in grades:
                grades[new_key] = grades.pop(old_key)
            else:
                grades.pop(new_key, None)
        grades.pop(column_key(sem, month, remaining), None)


def clamp_stored_grades(state: GradebookState) -> int:
    """Clamp every grade stored under a recognised key to its slot max.

    Used when a whole record arrives from outside.  Keys that address no
    current slot are left as they are.  Returns the number of grades changed.
    """
    changed = 0
    for student in state.students:
        for key, value in student.grades.items():
            try:
                maximum = max_for_key(state, key)
            except (InvalidGradeKey, ColumnNotFound):
                continue
            clamped = clamp_grade(value, maximum)
            if clamped != value:
                student.grades[key] = clamped
                changed += 1
    if changed:
        logger.info("Clamped %d stored grades to their slot max", changed)
    return changed
