from fastapi import APIRouter, HTTPException
from errors import InvalidRecordKey, RecordExists, RecordNotFound
from gradebook import info_to_dict, new_gradebook, state_from_dict, to_dict
from models import ExamMaxUpdate, InfoUpdate, RecordCreate, RecordSummary
import columns
import ledger
import storage
import workspace
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

RECORDS = "/teachers/{teacher_id}/records"
RECORD = RECORDS + "/{record_key}"

_INFO_ATTRS = {
    "schoolName": "school_name",
    "teacherName": "teacher_name",
    "subjectName": "subject_name",
    "className": "class_name",
    "year": "year",
}


def open_record(teacher_id: str, record_key: str):
    """Open copy of the record, or a 404/400 HTTPException."""
    try:
        return workspace.get_record(teacher_id, record_key)
    except RecordNotFound as e:
        logger.warning("record %s/%s — not found", teacher_id, record_key)
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidRecordKey as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get(RECORDS)
def list_records(teacher_id: str):
    logger.info("GET /records — teacher: %s", teacher_id)
    try:
        records = storage.list_records(teacher_id)
    except InvalidRecordKey as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("GET /records — returned %d records", len(records))
    return records


@router.post(RECORDS, response_model=RecordSummary, status_code=201)
def create_record(teacher_id: str, body: RecordCreate):
    logger.info("POST /records — teacher: %s, class: %s, section: %s", teacher_id, body.class_name, body.section)
    try:
        key = storage.make_record_key(body.class_name, body.section)
        state = new_gradebook(
            teacher_name=body.teacher_name,
            subject_name=body.subject_name,
            school_name=body.school_name,
            class_name=f"{body.class_name.strip()} / {body.section.strip()}",
        )
        storage.create_record(teacher_id, key, state)
    except InvalidRecordKey as e:
        logger.warning("POST /records — invalid key: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    except RecordExists as e:
        logger.warning("POST /records — %s", e)
        raise HTTPException(status_code=409, detail=str(e))
    workspace.replace(teacher_id, key, state)
    logger.info("POST /records — created %s", key)
    return RecordSummary(key=key, info=info_to_dict(state.info))


@router.get(RECORD)
def get_record(teacher_id: str, record_key: str):
    logger.info("GET /records/%s — opening", record_key)
    state = open_record(teacher_id, record_key)
    logger.info("GET /records/%s — %d students", record_key, len(state.students))
    return to_dict(state)


@router.put(RECORD)
def put_record(teacher_id: str, record_key: str, body: dict):
    """Replace the whole record and save it."""
    logger.info("PUT /records/%s — replacing whole record", record_key)
    state = state_from_dict(body)
    ledger.clamp_stored_grades(state)
    try:
        storage.save_record(teacher_id, record_key, state)
    except InvalidRecordKey as e:
        raise HTTPException(status_code=400, detail=str(e))
    workspace.replace(teacher_id, record_key, state)
    return to_dict(state)


@router.delete(RECORD)
def delete_record(teacher_id: str, record_key: str):
    logger.info("DELETE /records/%s", record_key)
    try:
        storage.delete_record(teacher_id, record_key)
    except RecordNotFound as e:
        logger.warning("DELETE /records/%s — not found", record_key)
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidRecordKey as e:
        raise HTTPException(status_code=400, detail=str(e))
    workspace.discard(teacher_id, record_key)
    return {"status": "ok"}


@router.post(RECORD + "/save")
def save_record(teacher_id: str, record_key: str):
    open_record(teacher_id, record_key)
    state = workspace.save(teacher_id, record_key)
    logger.info("POST /records/%s/save — saved %d students", record_key, len(state.students))
    return {"status": "ok"}


@router.post(RECORD + "/discard")
def discard_record(teacher_id: str, record_key: str):
    dropped = workspace.discard(teacher_id, record_key)
    logger.info("POST /records/%s/discard — had open copy: %s", record_key, dropped)
    return {"status": "ok", "discarded": dropped}


@router.patch(RECORD + "/info")
def update_info(teacher_id: str, record_key: str, body: InfoUpdate):
    state = open_record(teacher_id, record_key)
    for wire, value in body.model_dump(exclude_none=True).items():
        setattr(state.info, _INFO_ATTRS[wire], value)
    return info_to_dict(state.info)


@router.put(RECORD + "/exam-max")
def update_exam_max(teacher_id: str, record_key: str, body: ExamMaxUpdate):
    state = open_record(teacher_id, record_key)
    value = columns.set_exam_max_grade(state, body.value)
    logger.info("PUT /records/%s/exam-max — %s -> %d", record_key, body.value, value)
    return {"examMaxGrade": value}
