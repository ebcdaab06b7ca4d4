"""
Record importer: turns one CSV row into a product record.

Column handling:
    item-name       → record title (default title when empty)
    featured-image  → fetched image, set as primary image
    datesheets      → deduplicated document, public URL stored in a field
    anything else   → sanitized custom field
"""

import threading
from typing import Optional
import structlog

from config.settings import settings
from exceptions import AppError, RecordCreationError
from models.import_report import RowOutcome, RowResult
from models.record import RecordCreate, RecordStatus
from services.asset_fetcher import AssetFetcher
from services.datasheet_deduplicator import DatasheetDeduplicator
from services.record_service import RecordService
from services.storage_service import StorageService
from utils.text_utils import sanitize_key, sanitize_text_field

logger = structlog.get_logger(__name__)

TITLE_COLUMN = "item-name"
IMAGE_COLUMN = "featured-image"
DATASHEET_COLUMN = "datesheets"


class RecordImporter:
    """
    Per-row import pipeline.

    Safe to call from several threads: record creation is serialized,
    datasheet resolution is single-flight per URL.
    """

    def __init__(
        self,
        records: RecordService,
        storage: StorageService,
        fetcher: AssetFetcher,
        deduplicator: Optional[DatasheetDeduplicator] = None
    ):
        self.records = records
        self.storage = storage
        self.fetcher = fetcher
        self.deduplicator = deduplicator or DatasheetDeduplicator(storage, fetcher)
        self._create_lock = threading.Lock()

    def import_row(self, row: dict[str, str], row_number: int = 0) -> RowResult:
        """
        Import one row.

        Args:
            row: Column name → raw value
            row_number: CSV line number, for the report (header = 1)

        Returns:
            RowResult; FAILED only when the record itself couldn't be created
        """
        title = (row.get(TITLE_COLUMN) or "").strip() or settings.default_product_title

        try:
            with self._create_lock:
                record = self.records.create(RecordCreate(
                    title=title,
                    status=RecordStatus(settings.record_status),
                    type=settings.record_type,
                ))
        except RecordCreationError as e:
            logger.warning("row_skipped", row=row_number, title=title, error=e.message)
            return RowResult(
                row=row_number,
                outcome=RowOutcome.FAILED,
                title=title,
                reason=e.message,
            )

        result = RowResult(
            row=row_number,
            outcome=RowOutcome.IMPORTED,
            record_id=record.id,
            title=title,
        )

        for column, value in row.items():
            if column == TITLE_COLUMN or not value or not value.strip():
                continue

            if column == IMAGE_COLUMN:
                self._apply_image(record.id, value.strip(), result)
            elif column == DATASHEET_COLUMN:
                self._apply_datasheet(record.id, value.strip(), result)
            else:
                self._apply_custom_field(record.id, column, value, result)

        logger.info(
            "row_imported",
            row=row_number,
            record_id=record.id,
            warnings=len(result.warnings)
        )
        return result

    # ===================
    # COLUMN HANDLERS
    # ===================

    def _apply_image(self, record_id: str, url: str, result: RowResult) -> None:
        asset_id = self.fetcher.fetch_image(url, owner_record_id=record_id)
        if not asset_id:
            result.warnings.append(f"{IMAGE_COLUMN}: image not imported")
            return

        try:
            self.records.set_primary_image(record_id, asset_id)
        except AppError as e:
            logger.warning("primary_image_not_set", record_id=record_id, error=e.message)
            result.warnings.append(f"{IMAGE_COLUMN}: {e.message}")

    def _apply_datasheet(self, record_id: str, url: str, result: RowResult) -> None:
        asset_id = self.deduplicator.resolve(url, owner_record_id=record_id)
        if not asset_id:
            logger.error("datasheet_upload_failed", record_id=record_id, url=url)
            result.warnings.append(f"{DATASHEET_COLUMN}: failed to upload datasheet")
            return

        try:
            public_url = self.storage.get_public_url(asset_id)
        except AppError as e:
            logger.error("datasheet_url_failed", asset_id=asset_id, error=e.message)
            public_url = None

        if not public_url:
            result.warnings.append(f"{DATASHEET_COLUMN}: no public URL for asset {asset_id}")
            return

        try:
            self.records.set_custom_field(record_id, DATASHEET_COLUMN, public_url)
        except AppError as e:
            logger.error("datasheet_field_failed", record_id=record_id, error=e.message)
            result.warnings.append(f"{DATASHEET_COLUMN}: {e.message}")
            return

        logger.info(
            "datasheet_associated",
            record_id=record_id,
            asset_id=asset_id,
            public_url=public_url
        )

    def _apply_custom_field(
        self,
        record_id: str,
        column: str,
        value: str,
        result: RowResult
    ) -> None:
        key = sanitize_key(column)
        if not key:
            logger.debug("custom_field_key_empty", record_id=record_id, column=column)
            return

        try:
            self.records.set_custom_field(record_id, key, sanitize_text_field(value))
        except AppError as e:
            logger.warning("custom_field_failed", record_id=record_id, key=key, error=e.message)
            result.warnings.append(f"{key}: {e.message}")
