"""Custom exceptions for Media Sync with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    MEDIA_SYNC_ERROR = "MEDIA_SYNC_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Session store errors
    SESSION_ERROR = "SESSION_ERROR"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    STORE_STATE_ERROR = "STORE_STATE_ERROR"

    # Transport errors
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    TRANSPORT_UNAVAILABLE = "TRANSPORT_UNAVAILABLE"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"


class MediaSyncException(Exception):
    """Base exception for media sync errors with HTTP status code support.

    All custom exceptions should inherit from this class to ensure
    consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.MEDIA_SYNC_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize media sync exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class SessionException(MediaSyncException):
    """Session store errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SESSION_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class SessionNotFoundException(SessionException):
    """Requested session id is not tracked by the store."""

    def __init__(self, session_id: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Session not found: {session_id}",
            code=ErrorCode.SESSION_NOT_FOUND,
            status_code=404,
            details={"session_id": session_id, **(details or {})},
        )


class StoreStateException(SessionException):
    """Store lifecycle operation called in the wrong state (e.g. initialized twice)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.STORE_STATE_ERROR,
            status_code=409,
            details=details,
        )


class TransportException(MediaSyncException):
    """Media-control endpoint errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TRANSPORT_ERROR,
        status_code: int = 502,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class TransportUnavailableException(TransportException):
    """Media-control endpoint could not be reached."""

    def __init__(self, message: str = "Media-control endpoint unavailable", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.TRANSPORT_UNAVAILABLE,
            status_code=503,
            details=details,
        )


class ConfigurationException(MediaSyncException):
    """Configuration errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)
