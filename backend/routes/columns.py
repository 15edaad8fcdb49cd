from fastapi import APIRouter
from models import ColumnCreate, ColumnUpdate
from routes.records import RECORD, open_record
import columns
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

MONTH = RECORD + "/semesters/{sem}/months/{month}/columns"


def _month_columns(state, sem, month):
    return [{"title": c.title, "max": c.max} for c in state.columns(sem, month)]


@router.post(MONTH, status_code=201)
def add_column(teacher_id: str, record_key: str, sem: int, month: int, body: ColumnCreate):
    state = open_record(teacher_id, record_key)
    columns.add_column(state, sem, month, body.title, max(0, body.max))
    logger.info("POST columns — %s s%d m%d: added %r", record_key, sem, month, body.title)
    return _month_columns(state, sem, month)


@router.patch(MONTH + "/{col}")
def update_column(teacher_id: str, record_key: str, sem: int, month: int, col: int, body: ColumnUpdate):
    state = open_record(teacher_id, record_key)
    # unknown slot or column and bad values surface through the app error handler
    columns.update_column(state, sem, month, col, body.field, body.value)
    return _month_columns(state, sem, month)


@router.delete(MONTH + "/{col}")
def remove_column(teacher_id: str, record_key: str, sem: int, month: int, col: int):
    state = open_record(teacher_id, record_key)
    columns.remove_column(state, sem, month, col)
    return _month_columns(state, sem, month)


@router.post(RECORD + "/columns/copy-first-month")
def copy_first_month(teacher_id: str, record_key: str):
    state = open_record(teacher_id, record_key)
    columns.copy_first_month_to_all(state)
    return [
        [_month_columns(state, sem, month) for month in range(len(s.months))]
        for sem, s in enumerate(state.semesters)
    ]
