"""Error taxonomy, exceptions and error formatting.

Attachment failures carry an ErrorCode so callers and tests can tell them
apart without parsing messages. Remote failures live with the Xero client
(see xero_agent.services.xero_client) and all map to REMOTE_CALL_FAILED.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""

    # Attachment pipeline
    NOT_FOUND = "NOT_FOUND"
    NOT_A_FILE = "NOT_A_FILE"
    TOO_LARGE = "TOO_LARGE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    READ_FAILED = "READ_FAILED"
    MISSING_FILE_NAME = "MISSING_FILE_NAME"
    MISSING_SOURCE = "MISSING_SOURCE"
    PROCESSING_FAILED = "PROCESSING_FAILED"

    # Xero API
    REMOTE_CALL_FAILED = "REMOTE_CALL_FAILED"

    # Tool surface
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standardized error response format for the HTTP surface.

    Attributes:
        error: Machine-readable error code
        message: Human-readable error message
        details: Additional error details
        suggested_action: Actionable suggestion for the caller
    """
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
    suggested_action: Optional[str] = None


SUGGESTED_ACTIONS = {
    ErrorCode.TOOL_NOT_FOUND: "List the available tools and use one of their names.",
    ErrorCode.INTERNAL_ERROR: "Check the server logs and the Xero configuration.",
}


def create_error_response(
    error_code: ErrorCode,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ErrorResponse:
    """Create a standardized error response.

    Args:
        error_code: The error code
        message: Optional custom message (uses the suggested action if not provided)
        details: Optional additional details

    Returns:
        ErrorResponse with suggested action
    """
    suggested_action = SUGGESTED_ACTIONS.get(error_code)
    return ErrorResponse(
        error=error_code.value,
        message=message or suggested_action or "An error occurred",
        details=details,
        suggested_action=suggested_action,
    )


class AppException(HTTPException):
    """HTTP exception carrying a standardized error response."""

    def __init__(
        self,
        error_code: ErrorCode,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.error_response = create_error_response(
            error_code=error_code,
            message=message,
            details=details,
        )
        super().__init__(
            status_code=status_code,
            detail=self.error_response.model_dump(),
        )


class ToolNotFoundError(AppException):
    """Raised by the HTTP surface for an unknown tool name."""

    def __init__(self, name: str):
        super().__init__(
            error_code=ErrorCode.TOOL_NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
            message=f"Unknown tool: {name}",
            details={"name": name},
        )


# =============================================================================
# Attachment pipeline exceptions
# =============================================================================


class AttachmentError(Exception):
    """Base exception for attachment loading and normalization failures."""

    error_code: ErrorCode = ErrorCode.PROCESSING_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AttachmentNotFoundError(AttachmentError):
    """The attachment path does not exist."""

    error_code = ErrorCode.NOT_FOUND


class NotAFileError(AttachmentError):
    """The attachment path exists but is not a regular file."""

    error_code = ErrorCode.NOT_A_FILE


class AttachmentTooLargeError(AttachmentError):
    """The attachment exceeds the size ceiling."""

    error_code = ErrorCode.TOO_LARGE

    def __init__(self, message: str, size: int, limit: int):
        super().__init__(message)
        self.size = size
        self.limit = limit


class AttachmentPermissionError(AttachmentError):
    """The process may not read the attachment."""

    error_code = ErrorCode.PERMISSION_DENIED


class AttachmentReadError(AttachmentError):
    """Any other OS-level failure while reading the attachment."""

    error_code = ErrorCode.READ_FAILED


class MissingFileNameError(AttachmentError):
    """Inline base64 content was given without a file name."""

    error_code = ErrorCode.MISSING_FILE_NAME


class MissingSourceError(AttachmentError):
    """Neither a file path nor inline content was given."""

    error_code = ErrorCode.MISSING_SOURCE


class AttachmentProcessingError(AttachmentError):
    """Wraps the first per-item failure of a normalization batch.

    The original failure is available as ``cause`` (and ``__cause__``).
    """

    error_code = ErrorCode.PROCESSING_FAILED

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def format_error(error: BaseException) -> str:
    """Render an exception as a single human-readable line."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    text = str(error)
    if text:
        return text
    return error.__class__.__name__
