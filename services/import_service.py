"""
Import service: top-level entry point for a CSV product import.

Coordinates authorization → upload checks → CsvRowReader → RecordImporter
and produces an ImportReport.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import PurePath
from typing import BinaryIO, Optional
import structlog

from config.settings import settings
from exceptions import FormatError
from models.import_report import ImportReport, RowOutcome, RowResult
from parsers.csv_parser import CsvRowReader
from services.asset_fetcher import AssetFetcher
from services.auth_service import ImportAuthorizer
from services.record_importer import RecordImporter
from services.record_service import get_record_service
from services.storage_service import get_storage_service

logger = structlog.get_logger(__name__)


class ImportService:
    """
    Run whole imports.

    Only authorization and format problems abort an import. Everything
    that goes wrong inside a row is recorded on that row's result.
    """

    def __init__(
        self,
        importer: RecordImporter,
        authorizer: Optional[ImportAuthorizer] = None,
        max_workers: Optional[int] = None,
        strict_field_count: Optional[bool] = None
    ):
        self.importer = importer
        self.authorizer = authorizer or ImportAuthorizer()
        self.max_workers = max_workers or settings.import_max_workers
        self.strict_field_count = (
            settings.csv_strict_field_count if strict_field_count is None else strict_field_count
        )

    def run_import(
        self,
        filename: Optional[str],
        stream: Optional[BinaryIO],
        token: Optional[str],
        actor: Optional[str]
    ) -> ImportReport:
        """
        Import every data row of an uploaded CSV file.

        Args:
            filename: Name of the uploaded file (must end in .csv)
            stream: Readable byte stream of the upload
            token: Anti-forgery token from the upload form
            actor: Identity of the administrator running the import

        Returns:
            ImportReport; rows_processed counts every attempted row

        Raises:
            AuthorizationError: Actor not allowed or token invalid
            FormatError: Missing/non-CSV/unreadable file or no header row
        """
        self.authorizer.authorize(actor, token)

        if stream is None or not filename:
            logger.warning("import_no_file", actor=actor)
            raise FormatError("No file uploaded.")

        if PurePath(filename).suffix.lower() != ".csv":
            logger.warning("import_wrong_file_type", actor=actor, filename=filename)
            raise FormatError(
                "Invalid file type. Please upload a CSV file.",
                details={"filename": filename}
            )

        logger.info(
            "import_started",
            actor=actor,
            filename=filename,
            max_workers=self.max_workers
        )

        reader = CsvRowReader(stream, strict=self.strict_field_count)
        reader.read_header()

        report = ImportReport()

        if self.max_workers == 1:
            for row in reader:
                report.add(self._run_row(row, reader.row_number))
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(self._run_row, row, reader.row_number)
                    for row in reader
                ]
                for future in futures:
                    report.add(future.result())

        logger.info(
            "import_complete",
            actor=actor,
            rows_processed=report.rows_processed,
            imported=report.imported,
            failed=report.failed
        )

        return report

    def _run_row(self, row: dict[str, str], row_number: int) -> RowResult:
        """Import one row, turning unexpected errors into a failed result."""
        try:
            return self.importer.import_row(row, row_number)
        except Exception as e:
            logger.error(
                "row_import_unexpected_error",
                row=row_number,
                error=str(e),
                error_type=type(e).__name__
            )
            return RowResult(
                row=row_number,
                outcome=RowOutcome.FAILED,
                reason=f"Unexpected: {e}",
            )


# Singleton instance for convenience
_import_service: Optional[ImportService] = None

def get_import_service() -> ImportService:
    """
    Get or create the ImportService, wiring its collaborators.

    This is the composition root for the import pipeline.
    """
    global _import_service
    if _import_service is None:
        storage = get_storage_service()
        importer = RecordImporter(
            records=get_record_service(),
            storage=storage,
            fetcher=AssetFetcher(storage=storage),
        )
        _import_service = ImportService(importer)
    return _import_service
