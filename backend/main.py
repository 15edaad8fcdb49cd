from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
import time
import logging

from errors import (
    ColumnNotFound,
    ExportJobNotFound,
    GradebookError,
    RecordExists,
    RecordNotFound,
    SlotNotFound,
    StudentNotFound,
)
from routes import records, students, grades, columns, export
import storage

logging.basicConfig(
    level=os.environ.get("GRADEBOOK_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get("GRADEBOOK_CORS_ORIGINS", "http://localhost:5173").split(",")
    if o.strip()
]

# status for domain errors a route lets through; anything else is a 400
ERROR_STATUS = {
    RecordNotFound: 404,
    StudentNotFound: 404,
    SlotNotFound: 404,
    ColumnNotFound: 404,
    ExportJobNotFound: 404,
    RecordExists: 409,
}


def status_for(exc: GradebookError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


async def gradebook_error_handler(request: Request, exc: GradebookError):
    status = status_for(exc)
    logger.warning("%s %s — %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


app = FastAPI(title="Gradebook API")
app.add_exception_handler(GradebookError, gradebook_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    t0 = time.perf_counter()
    query = f"?{request.url.query}" if request.url.query else ""
    logger.info("REQUEST  %s %s%s", request.method, request.url.path, query)
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - t0) * 1000
    level = logging.ERROR if response.status_code >= 500 else logging.INFO
    logger.log(level, "RESPONSE %s %s — status: %d, time: %.1fms",
               request.method, request.url.path, response.status_code, elapsed_ms)
    return response


for router in (records.router, students.router, grades.router, columns.router, export.router):
    app.include_router(router, prefix="/api")


@app.get("/")
def root():
    return {"status": "ok", "message": "Gradebook API", "data_dir": storage.DATA_DIR}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "8000")))
