"""
API Exception Classes and Error Handlers

Defines request-level exceptions and the FastAPI error handlers that turn
these and the core ``subburn`` errors into consistent error responses.
"""

import logging
from typing import Any, Dict, List

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from subburn.errors import (
    MetadataError,
    SubburnError,
    SubtitleNotFoundError,
    UnsupportedVideoFormatError,
    VideoDurationError,
    VideoNotFoundError,
)

logger = logging.getLogger(__name__)

CORRUPTED_VIDEO_MESSAGE = "Invalid or corrupted video file"


# Custom Exception Classes
class FileTooLargeError(Exception):
    """Raised when uploaded file exceeds size limit"""

    def __init__(self, max_size_mb: float):
        self.max_size_mb = max_size_mb
        self.message = f"File too large. Max allowed is {max_size_mb:g}MB"
        super().__init__(self.message)


class InvalidPayloadError(Exception):
    """Raised when a JSON body fails validation"""

    def __init__(self, message: str, issues: List[Dict[str, Any]]):
        self.message = message
        self.issues = issues
        super().__init__(self.message)


class InvalidStyleConfigError(InvalidPayloadError):
    """Raised when a render request carries an invalid style"""

    def __init__(self, issues: List[Dict[str, Any]]):
        super().__init__("Invalid styleConfig", issues)


class InvalidRuntimeConfigError(InvalidPayloadError):
    """Raised when a runtime config update is malformed or has unknown fields"""

    def __init__(self, issues: List[Dict[str, Any]]):
        super().__init__("Invalid runtime config", issues)


class JobNotFoundError(Exception):
    """Raised when a job ID is unknown"""

    def __init__(self, job_id: str):
        self.job_id = job_id
        self.message = "Job not found"
        super().__init__(self.message)


class OutputNotReadyError(Exception):
    """Raised when the rendered output is requested before a render succeeded"""

    def __init__(self, video_id: str):
        self.video_id = video_id
        self.message = "Output video not ready"
        super().__init__(self.message)


# Error Response Helper
def create_error_response(
    error_code: str, message: str, remediation: str = None, details: dict = None
) -> dict:
    """
    Create standardized error response.

    Args:
        error_code: Machine-readable error code
        message: Human-readable error message
        remediation: Suggested fix (optional)
        details: Additional error details (optional)

    Returns:
        Standardized error response dict
    """
    response = {"error": error_code, "message": message}

    if remediation:
        response["remediation"] = remediation

    if details:
        response["details"] = details

    return response


def format_validation_issues(errors) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into ``{"path", "message", "type"}`` entries"""
    return [
        {
            "path": [str(loc) for loc in error["loc"]],
            "message": error["msg"],
            "type": error["type"],
        }
        for error in errors
    ]


# FastAPI Exception Handlers
async def not_found_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unknown videos, jobs and missing outputs"""
    logger.info(f"Not found: {exc.message} ({request.url.path})")

    if isinstance(exc, VideoNotFoundError):
        error_code = "video_not_found"
    elif isinstance(exc, JobNotFoundError):
        error_code = "job_not_found"
    else:
        error_code = "output_not_ready"

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=create_error_response(error_code=error_code, message=exc.message),
    )


async def upload_rejected_error_handler(request: Request, exc: SubburnError) -> JSONResponse:
    """Handle uploads refused for format, duration or unreadable media"""
    logger.warning(f"Upload rejected: {exc.message}", extra={"metadata": exc.details})

    if isinstance(exc, MetadataError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=create_error_response(
                error_code="invalid_video",
                message=CORRUPTED_VIDEO_MESSAGE,
                remediation="Re-export the video as mp4, mov or webm and try again",
            ),
        )

    if isinstance(exc, UnsupportedVideoFormatError):
        error_code = "unsupported_media_type"
        remediation = "Convert the video to mp4, mov or webm"
    else:
        error_code = "video_too_long"
        remediation = "Trim the video and upload it again"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=create_error_response(
            error_code=error_code,
            message=exc.message,
            remediation=remediation,
            details=exc.details,
        ),
    )


async def subtitle_not_found_error_handler(
    request: Request, exc: SubtitleNotFoundError
) -> JSONResponse:
    """Handle render requests for videos that were never processed"""
    logger.warning(f"Subtitle missing for video {exc.video_id}")

    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=create_error_response(
            error_code="subtitle_not_found",
            message=exc.message,
            remediation="Run the process step for this video first",
        ),
    )


async def file_too_large_error_handler(
    request: Request, exc: FileTooLargeError
) -> JSONResponse:
    """Handle file too large errors"""
    logger.warning(f"File too large: limit {exc.max_size_mb}MB")

    return JSONResponse(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        content=create_error_response(
            error_code="file_too_large",
            message=exc.message,
            remediation="Please trim or compress the video",
            details={"max_size_mb": exc.max_size_mb},
        ),
    )


async def invalid_payload_error_handler(
    request: Request, exc: InvalidPayloadError
) -> JSONResponse:
    """Handle invalid style and runtime config bodies"""
    logger.warning(f"{exc.message}: {exc.issues}")

    content = create_error_response(error_code="validation_error", message=exc.message)
    content["issues"] = exc.issues
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors"""
    logger.warning(f"Validation error: {exc.errors()}")

    # Extract field-level errors
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({"field": field, "message": error["msg"], "type": error["type"]})

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=create_error_response(
            error_code="validation_error",
            message="Request validation failed",
            remediation="Please check the request parameters and try again",
            details={"errors": errors},
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    logger.exception("Unexpected error occurred", exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(
            error_code="internal_server_error",
            message="An unexpected error occurred",
            remediation="Please try again. If the problem persists, contact support.",
        ),
    )


# Register all exception handlers
def register_exception_handlers(app):
    """
    Register all custom exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(VideoNotFoundError, not_found_error_handler)
    app.add_exception_handler(JobNotFoundError, not_found_error_handler)
    app.add_exception_handler(OutputNotReadyError, not_found_error_handler)
    app.add_exception_handler(UnsupportedVideoFormatError, upload_rejected_error_handler)
    app.add_exception_handler(VideoDurationError, upload_rejected_error_handler)
    app.add_exception_handler(MetadataError, upload_rejected_error_handler)
    app.add_exception_handler(SubtitleNotFoundError, subtitle_not_found_error_handler)
    app.add_exception_handler(FileTooLargeError, file_too_large_error_handler)
    app.add_exception_handler(InvalidPayloadError, invalid_payload_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
