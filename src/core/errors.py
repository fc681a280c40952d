"""
Custom exceptions and error handling for Greenleaf Bookings.

Defines application-specific exceptions with error codes and HTTP status
codes for consistent error handling across the Lambda handlers.

Usage:
    from core.errors import NotFound, ErrorCode

    raise NotFound(f"No booking {ref_id}")
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    RATE_LIMITED = "RATE_LIMITED"

    # Authorization errors
    UNAUTHORIZED = "UNAUTHORIZED"

    # Record errors
    NOT_FOUND = "NOT_FOUND"
    RECORD_LOCKED = "RECORD_LOCKED"

    # System errors
    STORAGE_FAILURE = "STORAGE_FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Your request contains invalid information. Please check and try again.",
    ErrorCode.INVALID_REQUEST: "Invalid request format. Please try again.",
    ErrorCode.PAYLOAD_TOO_LARGE: "Your booking is too large to save. Please remove large attachments.",
    ErrorCode.METHOD_NOT_ALLOWED: "Method not allowed.",
    ErrorCode.RATE_LIMITED: "Too many requests. Please wait a minute and try again.",
    ErrorCode.UNAUTHORIZED: "Unauthorized.",
    ErrorCode.NOT_FOUND: "Booking not found.",
    ErrorCode.RECORD_LOCKED: "This booking is locked by Greenleaf and can no longer be edited.",
    ErrorCode.STORAGE_FAILURE: "Unable to reach booking storage. Please try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}


class BookingServiceError(Exception):
    """Base exception for all Greenleaf Bookings errors."""

    status_code = 500
    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])


class ValidationError(BookingServiceError):
    """Missing or malformed required field."""

    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR


class Unauthorized(BookingServiceError):
    """Admin shared-secret check failed."""

    status_code = 401
    default_code = ErrorCode.UNAUTHORIZED


class NotFound(BookingServiceError):
    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class MethodNotAllowed(BookingServiceError):
    status_code = 405
    default_code = ErrorCode.METHOD_NOT_ALLOWED


class PayloadTooLarge(BookingServiceError):
    status_code = 413
    default_code = ErrorCode.PAYLOAD_TOO_LARGE


class RecordLocked(BookingServiceError):
    """A non-admin caller tried to write a locked booking."""

    status_code = 423
    default_code = ErrorCode.RECORD_LOCKED


class RateLimited(BookingServiceError):
    status_code = 429
    default_code = ErrorCode.RATE_LIMITED


class StorageFailure(BookingServiceError):
    """The underlying blob store call failed."""

    status_code = 500
    default_code = ErrorCode.STORAGE_FAILURE
