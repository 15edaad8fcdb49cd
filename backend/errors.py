"""Exceptions raised by the gradebook core and its collaborators."""


class GradebookError(Exception):
    """Base class for every error the gradebook raises on purpose."""


class StudentNotFound(GradebookError):
    def __init__(self, student_id: int):
        super().__init__(f"No student with id {student_id}")
        self.student_id = student_id


class SlotNotFound(GradebookError):
    """Semester or month index outside the fixed 2×2 layout."""


class ColumnNotFound(GradebookError):
    pass


class InvalidGradeKey(GradebookError):
    pass


class InvalidColumnUpdate(GradebookError):
    pass


class RecordNotFound(GradebookError):
    pass


class RecordExists(GradebookError):
    pass


class InvalidRecordKey(GradebookError):
    pass


class RosterImportError(GradebookError):
    pass


class ExportCancelled(GradebookError):
    pass


class ExportJobNotFound(GradebookError):
    pass
