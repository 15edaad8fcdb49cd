from pydantic import BaseModel
from typing import Dict, Literal, Optional, Union

from gradebook import DEFAULT_COLUMN_MAX, DEFAULT_COLUMN_TITLE


class RecordCreate(BaseModel):
    class_name: str
    section: str
    teacher_name: str = ""
    subject_name: str = ""
    school_name: str = ""


class InfoUpdate(BaseModel):
    schoolName: Optional[str] = None
    teacherName: Optional[str] = None
    subjectName: Optional[str] = None
    className: Optional[str] = None
    year: Optional[str] = None


class ExamMaxUpdate(BaseModel):
    value: Union[int, str, None] = None


class StudentCreate(BaseModel):
    name: str = ""


class StudentRename(BaseModel):
    name: str


class PastedNames(BaseModel):
    text: str


class GradeEntry(BaseModel):
    key: str                                    # e.g. "s0-m1-c2", "s1-m0-exam", "midYear"
    value: Union[int, str, None] = None         # blank / invalid input clears the grade


class ColumnCreate(BaseModel):
    title: str = DEFAULT_COLUMN_TITLE
    max: int = DEFAULT_COLUMN_MAX


class ColumnUpdate(BaseModel):
    field: Literal["title", "max"]
    value: Union[int, str]


class ExportRequest(BaseModel):
    format: Literal["pdf", "docx", "xlsx"] = "pdf"
    orientation: Literal["landscape", "portrait"] = "landscape"
    chunk_size: Optional[int] = None            # students per page; None = orientation default


class ExportJobStatus(BaseModel):
    id: str
    format: str
    orientation: str
    status: str                                 # "pending" | "running" | "done" | "failed" | "cancelled"
    current: int
    total: int
    message: str
    error: Optional[str] = None
    filename: Optional[str] = None


class RecordSummary(BaseModel):
    key: str
    info: Dict[str, Union[str, int]]
