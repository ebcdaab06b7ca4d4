"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    DatabaseError,

    # Request-level
    AuthorizationError,
    FormatError,

    # Row / field level
    RecordCreationError,
    AssetFetchError,
    StorageError,
)

__all__ = [
    # Base
    "AppError",
    "DatabaseError",

    # Request-level
    "AuthorizationError",
    "FormatError",

    # Row / field level
    "RecordCreationError",
    "AssetFetchError",
    "StorageError",
]
