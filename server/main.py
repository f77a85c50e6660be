"""Entry point for the ShareDrive server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from server import config
from server.cleanup_task import OrphanedBlobSweeper
from server.database import get_db_connection, init_database
from server.exceptions import (
    ShareDriveException,
    UserAlreadyExistsError,
    InvalidCredentialsError,
    InvalidAPIKeyError,
    FileNotFoundError,
    ForbiddenError,
    InvalidTargetError,
    FileConflictError,
    InvalidFileNameError,
    StorageFailureError,
)
from server.routes.auth_routes import router as auth_router
from server.routes.file_routes import router as file_router
from server.service_locator import get_blob_store, get_sweeper, set_sweeper

logger = setup_logging('server')

app = FastAPI(
    title="ShareDrive",
    description="File upload and sharing server with per-file ownership",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize storage and start the orphan sweep on application startup.
    """
    logger.info("ShareDrive server starting up...")

    init_database()
    get_blob_store().ensure_directory()
    logger.info("Database and blob storage initialized")

    sweeper = OrphanedBlobSweeper()
    set_sweeper(sweeper)
    await sweeper.start()


@app.on_event("shutdown")
async def shutdown_event():
    """
    Stop background tasks on application shutdown.
    """
    logger.info("ShareDrive server shutting down...")

    sweeper = get_sweeper()
    if sweeper:
        await sweeper.stop()
        set_sweeper(None)


def _error(request: Request, status_code: int, exc: Exception, code: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    log = logger.error if status_code >= 500 else logger.warning
    log(f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": code})


@app.exception_handler(UserAlreadyExistsError)
async def user_already_exists_handler(request: Request, exc: UserAlreadyExistsError):
    return _error(request, status.HTTP_400_BAD_REQUEST, exc, "USER_ALREADY_EXISTS")


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    return _error(request, status.HTTP_401_UNAUTHORIZED, exc, "INVALID_CREDENTIALS")


@app.exception_handler(InvalidAPIKeyError)
async def invalid_api_key_handler(request: Request, exc: InvalidAPIKeyError):
    return _error(request, status.HTTP_401_UNAUTHORIZED, exc, "INVALID_API_KEY")


@app.exception_handler(FileNotFoundError)
async def file_not_found_handler(request: Request, exc: FileNotFoundError):
    return _error(request, status.HTTP_404_NOT_FOUND, exc, "FILE_NOT_FOUND")


@app.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError):
    if config.CONCEAL_FORBIDDEN:
        file_id = request.path_params.get("file_id", "")
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(f"ForbiddenError: {exc} [request_id={request_id}] path={request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"File {file_id} not found", "code": "FILE_NOT_FOUND"}
        )
    return _error(request, status.HTTP_403_FORBIDDEN, exc, "FORBIDDEN")


@app.exception_handler(InvalidTargetError)
async def invalid_target_handler(request: Request, exc: InvalidTargetError):
    return _error(request, status.HTTP_400_BAD_REQUEST, exc, "INVALID_TARGET")


@app.exception_handler(FileConflictError)
async def file_conflict_handler(request: Request, exc: FileConflictError):
    return _error(request, status.HTTP_409_CONFLICT, exc, "FILE_CONFLICT")


@app.exception_handler(InvalidFileNameError)
async def invalid_file_name_handler(request: Request, exc: InvalidFileNameError):
    return _error(request, status.HTTP_400_BAD_REQUEST, exc, "INVALID_FILE_NAME")


@app.exception_handler(StorageFailureError)
async def storage_failure_handler(request: Request, exc: StorageFailureError):
    return _error(request, status.HTTP_503_SERVICE_UNAVAILABLE, exc, "STORAGE_FAILURE")


@app.exception_handler(ShareDriveException)
async def sharedrive_exception_handler(request: Request, exc: ShareDriveException):
    return _error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, exc, "INTERNAL_ERROR")


app.include_router(auth_router)
app.include_router(file_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "ShareDrive API", "status": "running"}


@app.get("/health")
def health_check():
    """
    Health check endpoint.
    Verifies the database opens and reports the last orphan sweep.
    """
    try:
        with get_db_connection() as conn:
            conn.execute("SELECT 1")
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {e}"

    sweeper = get_sweeper()
    last_sweep = None
    if sweeper is not None and sweeper.last_report is not None:
        report = sweeper.last_report
        last_sweep = {
            "started_at": report.started_at.isoformat(),
            "removed_blobs": len(report.removed_blobs),
            "missing_blobs": len(report.missing_blobs),
        }

    healthy = db_status == "ok"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "healthy" if healthy else "unhealthy", "database": db_status, "last_sweep": last_sweep}
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "server.main:app",
        host=config.SERVER_HOST,
        port=config.SERVER_PORT,
    )


if __name__ == "__main__":
    main()
