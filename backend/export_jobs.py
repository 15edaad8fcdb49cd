"""Background export of a gradebook report.

A job renders a deep-copied snapshot of the record in a worker thread, so the
open record can keep being edited and is never touched by a failing export.
Progress is counted in report pages.  Cancellation is checked between pages.
"""
import copy
import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import pdf_exporter
import word_exporter
import xlsx_exporter
from errors import ExportCancelled, ExportJobNotFound
from gradebook import GradebookState
from report_layout import Report, build_report

logger = logging.getLogger(__name__)

EXPORT_BASENAME = "sijil-al-darajat"

PENDING = "pending"
RUNNING = "running"
DONE = "done"
FAILED = "failed"
CANCELLED = "cancelled"
FINISHED = (DONE, FAILED, CANCELLED)

# finished jobs kept for status polling; older ones are dropped on submit
MAX_FINISHED_JOBS = 16


@dataclass(frozen=True)
class ExportFormat:
    name: str
    extension: str
    media_type: str
    render: Callable[..., bytes]


FORMATS: Dict[str, ExportFormat] = {
    "pdf": ExportFormat("pdf", "pdf", "application/pdf", pdf_exporter.render),
    "docx": ExportFormat(
        "docx", "docx",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        word_exporter.render,
    ),
    "xlsx": ExportFormat(
        "xlsx", "xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        xlsx_exporter.render,
    ),
}


@dataclass
class ExportJob:
    id: str
    format: ExportFormat
    orientation: str
    status: str = PENDING
    current: int = 0
    total: int = 0
    error: Optional[str] = None
    content: Optional[bytes] = None
    _cancel: threading.Event = field(default_factory=threading.Event, repr=False)
    _finished: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def filename(self) -> str:
        return f"{EXPORT_BASENAME}.{self.format.extension}"

    @property
    def message(self) -> str:
        if self.status == PENDING:
            return "Preparing export…"
        if self.status == RUNNING:
            return f"Rendering page {min(self.current + 1, self.total)} of {self.total}…"
        if self.status == DONE:
            return f"Exported {self.total} page(s)"
        if self.status == CANCELLED:
            return "Export cancelled"
        return f"Export failed: {self.error}"

    def cancel(self) -> None:
        self._cancel.set()

    def is_cancelled(self) -> bool:
        return self._cancel.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the job has finished; returns False on timeout."""
        return self._finished.wait(timeout)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "format": self.format.name,
            "orientation": self.orientation,
            "status": self.status,
            "current": self.current,
            "total": self.total,
            "message": self.message,
            "error": self.error,
            "filename": self.filename if self.status == DONE else None,
        }


class ExportJobManager:
    def __init__(self):
        self._jobs: Dict[str, ExportJob] = {}
        self._lock = threading.Lock()

    def submit(self, state: GradebookState, fmt: str, orientation: str,
               chunk_sizes: Optional[Dict[str, int]] = None) -> ExportJob:
        """Snapshot *state*, lay it out and start rendering in the background.

        Layout errors (unknown format/orientation, bad chunk size) raise
        ValueError here, before any job exists.
        """
        if fmt not in FORMATS:
            raise ValueError(f"Unknown export format: {fmt!r}")
        report = build_report(copy.deepcopy(state), orientation, chunk_sizes)
        job = ExportJob(id=uuid.uuid4().hex, format=FORMATS[fmt], orientation=orientation,
                        total=len(report.pages))
        with self._lock:
            self._prune()
            self._jobs[job.id] = job
        logger.info("Export %s — %s, %s, %d pages", job.id, fmt, orientation, job.total)
        threading.Thread(target=self._run, args=(job, report), daemon=True,
                         name=f"export-{job.id[:8]}").start()
        return job

    def get(self, job_id: str) -> ExportJob:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise ExportJobNotFound(f"No export job {job_id!r}")
        return job

    def cancel(self, job_id: str) -> ExportJob:
        job = self.get(job_id)
        if job.status not in FINISHED:
            job.cancel()
            logger.info("Export %s — cancel requested", job_id)
        return job

    def forget(self, job_id: str) -> None:
        with self._lock:
            self._jobs.pop(job_id, None)

    def _prune(self) -> None:
        finished = [job_id for job_id, job in self._jobs.items() if job.status in FINISHED]
        for job_id in finished[:max(0, len(finished) - MAX_FINISHED_JOBS + 1)]:
            del self._jobs[job_id]

    def clear(self) -> None:
        with self._lock:
            jobs = list(self._jobs.values())
            self._jobs.clear()
        for job in jobs:
            job.cancel()

    def _run(self, job: ExportJob, report: Report) -> None:
        def on_progress(done: int, total: int) -> None:
            job.current = done
            job.total = total

        job.status = RUNNING
        try:
            content = job.format.render(report, progress_cb=on_progress,
                                        is_cancelled=job.is_cancelled)
        except ExportCancelled:
            job.status = CANCELLED
            logger.info("Export %s — cancelled at page %d of %d", job.id, job.current, job.total)
        except Exception as exc:
            job.error = str(exc) or exc.__class__.__name__
            job.status = FAILED
            logger.exception("Export %s — failed", job.id)
        else:
            job.content = content
            job.status = DONE
            logger.info("Export %s — done, %d bytes", job.id, len(content))
        finally:
            job._finished.set()


jobs = ExportJobManager()
