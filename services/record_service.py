"""
Record store: product records and their custom fields.

Records live in the "records" table, custom fields in "record_fields"
(one row per record + key).
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.record import RecordCreate, RecordResponse
from exceptions import RecordCreationError, DatabaseError

logger = structlog.get_logger(__name__)


class RecordService:
    """
    Record store operations used by the importer.

    Handles record creation, display image and custom fields.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "records"
        self.fields_table = "record_fields"

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: RecordCreate) -> RecordResponse:
        """
        Create a new record.

        A single insert, so a failure never leaves a partial record.

        Args:
            data: Record creation data

        Returns:
            Created RecordResponse

        Raises:
            RecordCreationError: If the insert fails or returns nothing
        """
        logger.info("creating_record", title=data.title, type=data.type)

        insert_data = {
            "title": data.title,
            "status": data.status.value,
            "type": data.type,
        }

        try:
            result = (
                self.db.table(self.table)
                .insert(insert_data)
                .execute()
            )
        except Exception as e:
            logger.error(
                "create_record_failed",
                title=data.title,
                error=str(e)
            )
            raise RecordCreationError(data.title, str(e)) from e

        if not result.data:
            logger.error("create_record_empty_result", title=data.title)
            raise RecordCreationError(data.title, "no data returned from insert")

        record = RecordResponse(**result.data[0])

        logger.info(
            "record_created",
            record_id=record.id,
            title=record.title
        )

        return record

    def set_primary_image(self, record_id: str, asset_id: str) -> None:
        """
        Set the asset shown as the record's display image.

        Raises:
            DatabaseError: If the update fails
        """
        logger.debug("setting_primary_image", record_id=record_id, asset_id=asset_id)

        try:
            (
                self.db.table(self.table)
                .update({"primary_image_id": asset_id})
                .eq("id", record_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "set_primary_image_failed",
                record_id=record_id,
                asset_id=asset_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

    def set_custom_field(self, record_id: str, key: str, value: str) -> None:
        """
        Write a custom field, replacing any previous value for the key.

        Args:
            record_id: Record UUID
            key: Sanitized field key
            value: Sanitized field value

        Raises:
            DatabaseError: If the upsert fails
        """
        logger.debug("setting_custom_field", record_id=record_id, key=key)

        try:
            (
                self.db.table(self.fields_table)
                .upsert(
                    {
                        "record_id": record_id,
                        "field_key": key,
                        "field_value": value,
                    },
                    on_conflict="record_id,field_key"
                )
                .execute()
            )
        except Exception as e:
            logger.error(
                "set_custom_field_failed",
                record_id=record_id,
                key=key,
                error=str(e)
            )
            raise DatabaseError("upsert", str(e))


# Singleton instance for convenience
_record_service: Optional[RecordService] = None

def get_record_service() -> RecordService:
    """Get or create RecordService instance."""
    global _record_service
    if _record_service is None:
        _record_service = RecordService()
    return _record_service
