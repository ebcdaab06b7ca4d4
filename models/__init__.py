"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.record import (
    RecordStatus,
    RecordCreate,
    RecordResponse,
)
from models.asset import (
    AssetCreate,
    AssetResponse,
    FetchResponse,
)
from models.import_report import (
    RowOutcome,
    RowResult,
    ImportReport,
    RowResultResponse,
    ImportReportResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Record
    "RecordStatus",
    "RecordCreate",
    "RecordResponse",

    # Asset
    "AssetCreate",
    "AssetResponse",
    "FetchResponse",

    # Import report
    "RowOutcome",
    "RowResult",
    "ImportReport",
    "RowResultResponse",
    "ImportReportResponse",
]
