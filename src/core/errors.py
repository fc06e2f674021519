"""Error classification utilities for user-facing scheduling errors."""

from enum import Enum

from pydantic import BaseModel


class ErrorCategory(Enum):
    """Categories of errors that can surface from task editing."""

    INVALID_RECURRENCE_PATTERN = "invalid_recurrence_pattern"
    INVALID_DATE_KEY = "invalid_date_key"
    INVALID_WEEK_START = "invalid_week_start"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Schedule errors
    ERR_INVALID_RECURRENCE_PATTERN = "ERR_INVALID_RECURRENCE_PATTERN"
    ERR_INVALID_DATE_KEY = "ERR_INVALID_DATE_KEY"

    # Settings errors
    ERR_INVALID_WEEK_START = "ERR_INVALID_WEEK_START"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def classify_error(exception: Exception) -> ErrorCategory:
    """Classify an error raised while parsing schedules, keys or settings.

    Args:
        exception: The exception raised

    Returns:
        The matching ErrorCategory
    """
    error_str = str(exception).lower()

    if not isinstance(exception, ValueError):
        return ErrorCategory.UNKNOWN

    if "week_start_day" in error_str:
        return ErrorCategory.INVALID_WEEK_START

    if "recurrence" in error_str:
        return ErrorCategory.INVALID_RECURRENCE_PATTERN

    if "day key" in error_str or "month key" in error_str:
        return ErrorCategory.INVALID_DATE_KEY

    return ErrorCategory.UNKNOWN


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    category = classify_error(exception)

    if category is ErrorCategory.INVALID_RECURRENCE_PATTERN:
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_RECURRENCE_PATTERN,
            message="Invalid recurrence pattern.",
            suggestion="Use formats like 'daily', 'every monday', 'every 3 days', 'mon,wed,fri' or 'yearly on mar 3'.",
            severity=ErrorSeverity.LOW,
        )

    if category is ErrorCategory.INVALID_DATE_KEY:
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_DATE_KEY,
            message="That date could not be read.",
            suggestion="Use the YYYY-MM-DD format, e.g. 2024-03-31.",
            severity=ErrorSeverity.LOW,
        )

    if category is ErrorCategory.INVALID_WEEK_START:
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_WEEK_START,
            message="Week start day is out of range.",
            suggestion="Set WEEK_START_DAY to a number from 0 (Sunday) to 6 (Saturday).",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again. If the problem persists, check the task's saved data.",
        severity=ErrorSeverity.MEDIUM,
    )
