# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class LivePromptException(Exception):
    """
    Base exception for the LivePrompt API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "LIVEPROMPT_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "success": False,
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Job Exceptions
# =============================================================================

class JobNotFoundError(LivePromptException):
    """Raised when an audio job ID doesn't exist."""

    def __init__(self, job_id: str):
        super().__init__(
            message="Audio job not found",
            code="JOB_NOT_FOUND",
            status_code=404,
            suggestion="Check that the job id is correct",
            details={"job_id": job_id}
        )


class JobAccessDeniedError(LivePromptException):
    """Raised when a user tries to touch someone else's job."""

    def __init__(self, job_id: str):
        super().__init__(
            message="Access denied",
            code="JOB_ACCESS_DENIED",
            status_code=403,
            suggestion="You can only access audio jobs you created",
            details={"job_id": job_id}
        )


class InvalidJobStateError(LivePromptException):
    """Raised when a job is not in a state that allows the requested action."""

    def __init__(self, job_id: str, current_status: str):
        super().__init__(
            message=f"Cannot start processing. Current status: {current_status}",
            code="INVALID_JOB_STATE",
            status_code=400,
            suggestion="Only jobs in 'uploaded' status can be processed",
            details={"job_id": job_id, "status": current_status}
        )


class AudioValidationError(LivePromptException):
    """Raised when a stored audio file fails pre-processing checks."""

    def __init__(self, error: str, file_path: str | None = None):
        super().__init__(
            message=error,
            code="AUDIO_VALIDATION_FAILED",
            status_code=400,
            suggestion="Upload the audio file again",
            details={"file_path": file_path} if file_path else None
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class MissingFileError(LivePromptException):
    """Raised when an upload request carries no audio file."""

    def __init__(self):
        super().__init__(
            message="No audio file uploaded",
            code="NO_FILE",
            status_code=400,
            suggestion="Send the file as multipart form field 'audio'",
        )


class InvalidFileTypeError(LivePromptException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Only audio files are allowed: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Upload audio files like: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(LivePromptException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class StorageUploadError(LivePromptException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class StorageDownloadError(LivePromptException):
    """Raised when file download from storage fails."""

    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Failed to download file from storage: {error}",
            code="STORAGE_DOWNLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"path": path, "error": error}
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class AuthRequestError(LivePromptException):
    """Raised when an auth request is malformed or rejected by Supabase."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(
            message=message,
            code="AUTH_REQUEST_INVALID",
            status_code=400,
            suggestion=suggestion,
        )


class AuthenticationFailedError(LivePromptException):
    """Raised when credentials or refresh tokens are rejected."""

    def __init__(self, message: str = "Invalid login credentials"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_FAILED",
            status_code=401,
            suggestion="Check your email and password, or sign in again",
        )


class EmailAlreadyRegisteredError(LivePromptException):
    """Raised when signing up with an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            message="An account with this email already exists",
            code="EMAIL_ALREADY_REGISTERED",
            status_code=409,
            suggestion="Sign in instead, or reset your password",
            details={"email": email}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def liveprompt_exception_handler(
    request: Request,
    exc: LivePromptException
) -> JSONResponse:
    """
    Convert LivePromptException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors.

    Keeps the error envelope used everywhere else, with pydantic's
    per-field errors under "errors".
    """
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": jsonable_encoder(errors)
        }
    )
