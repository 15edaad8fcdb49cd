from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from errors import ExportJobNotFound
from models import ExportJobStatus, ExportRequest
from report_layout import build_report
from routes.records import RECORD, open_record
import export_jobs
import io
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _job_or_404(job_id: str):
    try:
        return export_jobs.jobs.get(job_id)
    except ExportJobNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get(RECORD + "/report")
def get_report(teacher_id: str, record_key: str, orientation: str = "landscape",
               chunk_size: Optional[int] = None):
    """Paginated table data, the same pages the exporters render."""
    state = open_record(teacher_id, record_key)
    sizes = {orientation: chunk_size} if chunk_size else None
    try:
        report = build_report(state, orientation, sizes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("GET /records/%s/report — %s, %d pages", record_key, orientation, len(report.pages))
    return report.to_dict()


@router.post(RECORD + "/exports", response_model=ExportJobStatus, status_code=202)
def start_export(teacher_id: str, record_key: str, body: ExportRequest):
    logger.info("POST /records/%s/exports — %s, %s", record_key, body.format, body.orientation)
    state = open_record(teacher_id, record_key)
    sizes = {body.orientation: body.chunk_size} if body.chunk_size else None
    try:
        job = export_jobs.jobs.submit(state, body.format, body.orientation, sizes)
    except ValueError as e:
        logger.warning("POST /records/%s/exports — %s", record_key, e)
        raise HTTPException(status_code=400, detail=str(e))
    return job.to_dict()


@router.get("/exports/{job_id}", response_model=ExportJobStatus)
def get_export(job_id: str):
    return _job_or_404(job_id).to_dict()


@router.delete("/exports/{job_id}", response_model=ExportJobStatus)
def cancel_export(job_id: str):
    logger.info("DELETE /exports/%s — cancelling", job_id)
    try:
        job = export_jobs.jobs.cancel(job_id)
    except ExportJobNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return job.to_dict()


@router.get("/exports/{job_id}/file")
def download_export(job_id: str):
    job = _job_or_404(job_id)
    if job.status != export_jobs.DONE:
        logger.warning("GET /exports/%s/file — not ready (%s)", job_id, job.status)
        raise HTTPException(status_code=409, detail=job.message)
    # one download per job, then the rendered bytes are released
    export_jobs.jobs.forget(job_id)
    logger.info("GET /exports/%s/file — %d bytes, job released", job_id, len(job.content))
    return StreamingResponse(
        io.BytesIO(job.content),
        media_type=job.format.media_type,
        headers={"Content-Disposition": f"attachment; filename={job.filename}"},
    )
