"""
Custom exception classes for the application.

Request-level errors (authorization, format) abort an import.
Row- and field-level errors are absorbed by the importer and logged.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "CSV_FORMAT_ERROR")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# REQUEST-LEVEL ERRORS
# ===================

class AuthorizationError(AppError):
    """Caller lacks permission or the anti-forgery token is invalid (403)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="IMPORT_FORBIDDEN",
            message=message,
            status_code=403,
            details=details
        )


class FormatError(AppError):
    """Uploaded file is missing, not CSV, unreadable, or has no header (400)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="CSV_FORMAT_ERROR",
            message=message,
            status_code=400,
            details=details
        )


# ===================
# ROW / FIELD ERRORS
# ===================

class RecordCreationError(AppError):
    """Record store refused to create a record for a row."""

    def __init__(self, title: str, message: str):
        super().__init__(
            code="RECORD_CREATE_FAILED",
            message=f"Record creation failed: {message}",
            status_code=500,
            details={"title": title}
        )


class AssetFetchError(AppError):
    """Remote asset could not be retrieved or was rejected."""

    def __init__(self, url: str, reason: str, details: Optional[dict] = None):
        super().__init__(
            code="ASSET_FETCH_FAILED",
            message=reason,
            status_code=502,
            details={"url": url, **(details or {})}
        )


class StorageError(AppError):
    """Object store write, registration or lookup failed."""

    def __init__(self, operation: str, message: str, details: Optional[dict] = None):
        super().__init__(
            code="STORAGE_ERROR",
            message=f"Storage {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )
