"""Activity column configuration per (semester, month) and the shared exam max."""
import copy
import logging

from errors import InvalidColumnUpdate
from gradebook import (
    DEFAULT_COLUMN_MAX,
    DEFAULT_COLUMN_TITLE,
    MONTHS_PER_SEMESTER,
    SEMESTER_COUNT,
    CustomColumn,
    GradebookState,
)
from ledger import parse_grade, renumber_after_column_removal

logger = logging.getLogger(__name__)

EXAM_MAX_LIMIT = 100


def add_column(state: GradebookState, sem: int, month: int,
               title: str = DEFAULT_COLUMN_TITLE, max: int = DEFAULT_COLUMN_MAX) -> CustomColumn:
    column = CustomColumn(title=title, max=max)
    state.columns(sem, month).append(column)
    return column


def remove_column(state: GradebookState, sem: int, month: int, col: int) -> CustomColumn:
    """Remove a column and shift the ledger so grades stay under their column."""
    state.column(sem, month, col)  # raises ColumnNotFound
    removed = state.columns(sem, month).pop(col)
    renumber_after_column_removal(state, sem, month, col)
    logger.info("Removed column %d (%s) from semester %d month %d", col, removed.title, sem, month)
    return removed


def update_column(state: GradebookState, sem: int, month: int, col: int,
                  field: str, value) -> CustomColumn:
    """Set the column's ``title`` or ``max``.

    A max is any non-negative integer; negative values become 0.  There is no
    upper bound here, the averages interpret whatever total results.
    """
    column = state.column(sem, month, col)
    if field == "title":
        column.title = "" if value is None else str(value)
    elif field == "max":
        try:
            column.max = max(0, int(str(value).strip()))
        except ValueError:
            raise InvalidColumnUpdate(f"Column max must be an integer, got {value!r}")
    else:
        raise InvalidColumnUpdate(f"Unknown column field: {field!r}")
    return column


def copy_first_month_to_all(state: GradebookState) -> None:
    """Replace every other month's columns with copies of semester 0, month 0."""
    source = state.columns(0, 0)
    for sem in range(SEMESTER_COUNT):
        for month in range(MONTHS_PER_SEMESTER):
            if (sem, month) == (0, 0):
                continue
            state.month(sem, month).custom_columns = copy.deepcopy(source)
    logger.info("Copied %d columns from semester 0 month 0 to all months", len(source))


def set_exam_max_grade(state: GradebookState, value) -> int:
    """Set the exam max used by every month's written exam, clamped to 0..100."""
    parsed = parse_grade(value)
    state.info.exam_max_grade = min(parsed or 0, EXAM_MAX_LIMIT)
    return state.info.exam_max_grade
