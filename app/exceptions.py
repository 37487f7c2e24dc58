"""
    Centralized exception handling for the FastAPI application.

    Every error leaves the service as ``{"error": ..., "message": ...}``.
"""
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
import logging

log = logging.getLogger(__name__)

class APIException(Exception):
    """Base class for API exceptions."""
    def __init__(self, status_code: int, error: str, detail: str):
        self.status_code = status_code
        self.error = error
        self.detail = detail
        super().__init__(self.detail)

class NoFileProvidedException(APIException):
    """Exception for upload requests without a file field."""
    def __init__(self, detail: str = "Expected a multipart file field named 'image'."):
        super().__init__(status_code=400, error="No file uploaded", detail=detail)

class UnsupportedMediaTypeException(APIException):
    """Exception for files whose declared MIME type is not allow-listed."""
    def __init__(self, detail: str = "Invalid file type. Only JPG, PNG, and GIF are allowed."):
        super().__init__(status_code=415, error="Invalid file type", detail=detail)

class FileTooLargeException(APIException):
    """Exception for files above the size ceiling."""
    def __init__(self, max_bytes: int):
        super().__init__(
            status_code=413,
            error="File too large",
            detail=f"File exceeds the maximum allowed size of {max_bytes} bytes.",
        )

class IOWriteException(APIException):
    """Exception for disk write failures."""
    def __init__(self, detail: str):
        super().__init__(status_code=500, error="Failed to upload image", detail=detail)

class MetadataPersistException(APIException):
    """Exception for metadata store create failures."""
    def __init__(self, detail: str):
        super().__init__(status_code=500, error="Failed to upload image", detail=detail)

class ListFailedException(APIException):
    """Exception for metadata store query failures."""
    def __init__(self, detail: str):
        super().__init__(status_code=500, error="Failed to fetch images", detail=detail)

async def api_exception_handler(request: Request, exc: APIException):
    """Handles API exceptions."""
    if exc.status_code >= 500:
        log.error(f"API Exception: {exc.error}: {exc.detail}", exc_info=exc)
    else:
        log.info("Rejected request: %s: %s", exc.error, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.detail},
    )

async def http_exception_handler(request: Request, exc: HTTPException):
    """Handles Starlette HTTP exceptions (404 from static mounts, 405, ...)."""
    log.debug("HTTP Exception: %s %s", exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handles request validation errors."""
    message = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    log.info("Invalid request: %s", message)
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "message": message or "Request validation failed."},
    )

async def generic_exception_handler(request: Request, exc: Exception):
    """Handles all other exceptions."""
    log.error(f"Unhandled Exception: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": "An unexpected error occurred."},
    )

def add_exception_handlers(app):
    """Adds exception handlers to the FastAPI app."""
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
