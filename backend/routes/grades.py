from fastapi import APIRouter, HTTPException
from errors import ColumnNotFound, InvalidGradeKey, StudentNotFound
from models import GradeEntry
from routes.records import RECORD, open_record
import averages
import ledger
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put(RECORD + "/grades/{student_id}")
def put_grade(teacher_id: str, record_key: str, student_id: int, entry: GradeEntry):
    logger.info("PUT /records/%s/grades/%d — key: %s, value: %r", record_key, student_id, entry.key, entry.value)
    state = open_record(teacher_id, record_key)
    try:
        stored = ledger.enter_grade(state, student_id, entry.key, entry.value)
    except StudentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidGradeKey, ColumnNotFound) as e:
        logger.warning("PUT /records/%s/grades/%d — %s", record_key, student_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    student = state.student(student_id)
    return {
        "key": entry.key,
        "value": stored,
        "averages": averages.calculate_student(state, student).to_dict(),
    }


@router.get(RECORD + "/averages")
def get_averages(teacher_id: str, record_key: str):
    state = open_record(teacher_id, record_key)
    results = averages.calculate_all(state)
    logger.info("GET /records/%s/averages — %d students", record_key, len(results))
    return [results[s.id].to_dict() for s in state.students]
