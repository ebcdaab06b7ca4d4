"""
Object store: asset bytes in Supabase Storage, asset metadata in the
"assets" table.

Storage paths follow uploads/YYYY/MM/<filename>.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from config import get_supabase_client
from config.settings import settings
from models.asset import AssetCreate, AssetResponse
from exceptions import StorageError

logger = structlog.get_logger(__name__)


class StorageService:
    """
    Object store operations used by the asset fetcher.

    Handles:
    - Writing bytes into the bucket
    - Registering stored objects as assets
    - Looking assets up by source URL (dedup index)
    - Resolving public URLs
    """

    def __init__(self, bucket: Optional[str] = None):
        self.db = get_supabase_client()
        self.bucket = bucket or settings.storage_bucket
        self.table = "assets"

    def _upload_dir(self) -> str:
        now = datetime.now(timezone.utc)
        return f"{settings.upload_prefix}/{now:%Y}/{now:%m}"

    def write_bytes(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        overwrite: bool = False
    ) -> str:
        """
        Write bytes into the current upload directory.

        Args:
            filename: Target filename (already sanitized)
            content: Raw bytes
            content_type: MIME type stored with the object
            overwrite: Replace an existing object at the same path

        Returns:
            Storage path (e.g., "uploads/2026/10/sheet.pdf")

        Raises:
            StorageError: If the upload fails
        """
        storage_path = f"{self._upload_dir()}/{filename}"

        logger.debug(
            "uploading_to_storage",
            storage_path=storage_path,
            size_bytes=len(content)
        )

        try:
            self.db.storage.from_(self.bucket).upload(
                storage_path,
                content,
                file_options={
                    "content-type": content_type,
                    "upsert": "true" if overwrite else "false",
                }
            )
        except Exception as e:
            logger.error(
                "storage_upload_failed",
                storage_path=storage_path,
                error=str(e)
            )
            raise StorageError("write", str(e), details={"path": storage_path})

        logger.info("uploaded_to_storage", storage_path=storage_path)
        return storage_path

    def register_asset(self, data: AssetCreate) -> str:
        """
        Register a stored object as an asset.

        Returns:
            New asset ID

        Raises:
            StorageError: If the insert fails
        """
        try:
            result = self.db.table(self.table).insert(data.model_dump()).execute()
        except Exception as e:
            logger.error(
                "register_asset_failed",
                storage_path=data.storage_path,
                error=str(e)
            )
            raise StorageError("register", str(e), details={"path": data.storage_path})

        if not result.data:
            raise StorageError("register", "no data returned from insert")

        asset_id = result.data[0]["id"]

        logger.info(
            "asset_registered",
            asset_id=asset_id,
            mime_type=data.mime_type,
            owner_record_id=data.owner_record_id
        )

        return asset_id

    def lookup_asset_by_source_url(self, url: str) -> Optional[str]:
        """
        Find an asset previously stored from exactly this URL.

        No normalization: "https://x/a.pdf" and "https://x/a.pdf?v=1"
        are different keys.

        Returns:
            Asset ID or None
        """
        try:
            result = (
                self.db.table(self.table)
                .select("id")
                .eq("source_url", url)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("asset_lookup_failed", url=url, error=str(e))
            raise StorageError("lookup", str(e), details={"url": url})

        if not result.data:
            return None
        return result.data[0]["id"]

    def get_asset(self, asset_id: str) -> Optional[AssetResponse]:
        """Get an asset by ID, or None."""
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", asset_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_asset_failed", asset_id=asset_id, error=str(e))
            raise StorageError("select", str(e), details={"asset_id": asset_id})

        if not result.data:
            return None
        return AssetResponse(**result.data[0])

    def get_public_url(self, asset_id: str) -> Optional[str]:
        """
        Public URL of an asset's stored object.

        Returns:
            URL, or None if the asset does not exist
        """
        asset = self.get_asset(asset_id)
        if asset is None:
            logger.warning("public_url_asset_missing", asset_id=asset_id)
            return None

        try:
            return self.db.storage.from_(self.bucket).get_public_url(asset.storage_path)
        except Exception as e:
            logger.error("public_url_failed", asset_id=asset_id, error=str(e))
            raise StorageError("public_url", str(e), details={"asset_id": asset_id})


# Singleton instance for convenience
_storage_service: Optional[StorageService] = None

def get_storage_service() -> StorageService:
    """Get or create StorageService instance."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
