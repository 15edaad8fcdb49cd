from fastapi import APIRouter, File, HTTPException, UploadFile
from errors import RosterImportError, StudentNotFound
from models import PastedNames, StudentCreate, StudentRename
from routes.records import RECORD, open_record
import ledger
import roster_import
import workspace
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _student_dict(student):
    return {"id": student.id, "name": student.name, "grades": dict(student.grades)}


@router.post(RECORD + "/students", status_code=201)
def add_student(teacher_id: str, record_key: str, body: StudentCreate):
    state = open_record(teacher_id, record_key)
    student = ledger.add_student(state, body.name)
    logger.info("POST /records/%s/students — added %d", record_key, student.id)
    return _student_dict(student)


@router.post(RECORD + "/students/paste", status_code=201)
def paste_students(teacher_id: str, record_key: str, body: PastedNames):
    state = open_record(teacher_id, record_key)
    names = roster_import.parse_pasted_names(body.text)
    added = ledger.add_students(state, names)
    logger.info("POST /records/%s/students/paste — added %d", record_key, len(added))
    return [_student_dict(s) for s in added]


@router.post(RECORD + "/students/import", status_code=201)
async def import_students(teacher_id: str, record_key: str, file: UploadFile = File(...)):
    state = open_record(teacher_id, record_key)
    data = await file.read()
    try:
        names = roster_import.names_from_upload(file.filename, data)
    except RosterImportError as e:
        logger.warning("POST /records/%s/students/import — %s", record_key, e)
        raise HTTPException(status_code=400, detail=str(e))
    if not names:
        raise HTTPException(status_code=400, detail="No names found in the first column below the header row")
    added = ledger.add_students(state, names)
    logger.info("POST /records/%s/students/import — imported %d from %s", record_key, len(added), file.filename)
    return [_student_dict(s) for s in added]


@router.patch(RECORD + "/students/{student_id}")
def rename_student(teacher_id: str, record_key: str, student_id: int, body: StudentRename):
    state = open_record(teacher_id, record_key)
    try:
        student = ledger.rename_student(state, student_id, body.name)
    except StudentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _student_dict(student)


@router.delete(RECORD + "/students/{student_id}")
def delete_student(teacher_id: str, record_key: str, student_id: int):
    """Remove the student and persist right away; there is no undo."""
    state = open_record(teacher_id, record_key)
    try:
        ledger.remove_student(state, student_id)
    except StudentNotFound as e:
        logger.warning("DELETE /records/%s/students/%d — not found", record_key, student_id)
        raise HTTPException(status_code=404, detail=str(e))
    workspace.save(teacher_id, record_key)
    logger.info("DELETE /records/%s/students/%d — removed and saved", record_key, student_id)
    return {"status": "ok"}
