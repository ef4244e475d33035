"""Error taxonomy for the file service.

Every failure the core can produce maps to one stable ``error_code`` and
HTTP status, so a caller can tell transient I/O failures apart from bad
input and from missing records. Nothing here retries; retries belong to
whoever calls the service.
"""
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class FileServiceError(Exception):
    """Base class for all file service errors."""
    http_status: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BadInput(FileServiceError):
    """Caller error. Not retried."""
    http_status = 400
    error_code = "BAD_INPUT"


class NotFound(FileServiceError):
    http_status = 404
    error_code = "NOT_FOUND"

    def __init__(self, file_id: Any):
        super().__init__(f"File {file_id} not found", {"file_id": str(file_id)})
        self.file_id = file_id


class StorageWriteError(FileServiceError):
    error_code = "STORAGE_WRITE_ERROR"


class StorageReadError(FileServiceError):
    error_code = "STORAGE_READ_ERROR"


class MetadataWriteError(FileServiceError):
    error_code = "METADATA_WRITE_ERROR"


class MetadataReadError(FileServiceError):
    error_code = "METADATA_READ_ERROR"


class MetadataDeleteError(FileServiceError):
    error_code = "METADATA_DELETE_ERROR"


class Inconsistency(FileServiceError):
    """Blob and metadata disagree (hash or size mismatch), found at read time."""
    http_status = 409
    error_code = "INCONSISTENCY"


async def file_service_error_handler(request: Request, exc: FileServiceError):
    """Convert a FileServiceError into the JSON error body."""
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests (e.g. a file_id that is not a UUID) as BAD_INPUT."""
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=BadInput.http_status,
        content={
            "error": BadInput.error_code,
            "message": "Invalid request parameters",
            "details": {"errors": errors},
        },
    )
