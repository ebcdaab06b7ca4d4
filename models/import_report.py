"""
Import report: per-row outcomes accumulated over one import run.

rows_processed counts attempted rows, including rows whose record could
not be created. imported/failed carry the split.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import BaseSchema


class RowOutcome(str, Enum):
    """What happened to a single CSV data row."""
    IMPORTED = "IMPORTED"
    FAILED = "FAILED"


@dataclass
class RowResult:
    """Outcome of one row. Warnings hold absorbed asset/field failures."""
    row: int
    outcome: RowOutcome
    record_id: Optional[str] = None
    title: Optional[str] = None
    reason: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.outcome == RowOutcome.IMPORTED


@dataclass
class ImportReport:
    """Result of a whole import run."""
    rows_processed: int = 0
    results: list[RowResult] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)

    def add(self, result: RowResult) -> None:
        """Record one attempted row."""
        self.results.append(result)
        self.rows_processed += 1

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "rows_processed": self.rows_processed,
            "imported": self.imported,
            "failed": self.failed,
            "rows": [
                {
                    "row": r.row,
                    "outcome": r.outcome.value,
                    "record_id": r.record_id,
                    "title": r.title,
                    "reason": r.reason,
                    "warnings": r.warnings,
                }
                for r in self.results
            ],
        }


class RowResultResponse(BaseSchema):
    """Single row in the JSON report."""
    row: int
    outcome: RowOutcome
    record_id: Optional[str] = None
    title: Optional[str] = None
    reason: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class ImportReportResponse(BaseSchema):
    """Response from the JSON import endpoint."""
    rows_processed: int
    imported: int
    failed: int
    rows: list[RowResultResponse] = Field(default_factory=list)
