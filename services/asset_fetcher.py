"""
Asset fetcher: download remote images and documents into the object store.

Fails closed. Every failure (network, non-200, disallowed type, store
write) is logged and reported to the caller as None, so one bad URL
never aborts the rest of an import.
"""

import mimetypes
import posixpath
import uuid
from typing import Optional
from urllib.parse import urlparse, unquote
import structlog

from config.settings import settings
from exceptions import AppError
from models.asset import AssetCreate, FetchResponse
from services.http_fetcher import HttpFetcher, get_http_fetcher
from services.storage_service import StorageService, get_storage_service
from utils.text_utils import sanitize_file_name

logger = structlog.get_logger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
})


def _media_type(content_type: str) -> str:
    """'image/PNG; charset=binary' → 'image/png'"""
    return content_type.split(";", 1)[0].strip().lower()


class AssetFetcher:
    """
    Fetch remote assets and register them in the object store.

    Two variants:
    - fetch_image: allow-listed image types, randomized filename
    - fetch_generic: any type, filename from the URL, longer timeout
    """

    def __init__(
        self,
        storage: Optional[StorageService] = None,
        http: Optional[HttpFetcher] = None
    ):
        self.storage = storage or get_storage_service()
        self.http = http or get_http_fetcher()

    def _download(self, url: str, timeout: Optional[float]) -> Optional[FetchResponse]:
        """GET the URL; None unless the response is a 200."""
        try:
            response = self.http.get(url, timeout=timeout)
        except AppError as e:
            logger.warning("asset_fetch_failed", url=url, error=e.message)
            return None

        if response.status_code != 200:
            logger.warning(
                "asset_fetch_bad_status",
                url=url,
                status_code=response.status_code
            )
            return None

        return response

    def fetch_image(self, url: str, owner_record_id: Optional[str] = None) -> Optional[str]:
        """
        Download an image and register it as an asset.

        Args:
            url: Remote image URL
            owner_record_id: Record the image belongs to

        Returns:
            Asset ID, or None if the image was rejected or could not be stored
        """
        logger.info("fetching_image", url=url, owner_record_id=owner_record_id)

        response = self._download(url, timeout=None)
        if response is None:
            return None

        mime_type = _media_type(response.header("content-type"))
        if mime_type not in ALLOWED_IMAGE_TYPES:
            logger.warning(
                "image_type_rejected",
                url=url,
                content_type=mime_type or None
            )
            return None

        extension = mime_type.split("/", 1)[1]
        filename = f"{settings.image_filename_prefix}{uuid.uuid4().hex[:8]}.{extension}"

        try:
            storage_path = self.storage.write_bytes(filename, response.body, content_type=mime_type)
            asset_id = self.storage.register_asset(AssetCreate(
                source_url=url,
                mime_type=mime_type,
                storage_path=storage_path,
                title=sanitize_file_name(filename),
                owner_record_id=owner_record_id,
                size_bytes=len(response.body),
            ))
        except AppError as e:
            logger.warning("image_store_failed", url=url, error=e.message)
            return None

        logger.info("image_fetched", url=url, asset_id=asset_id)
        return asset_id

    def fetch_generic(self, url: str, owner_record_id: Optional[str] = None) -> Optional[str]:
        """
        Download any document (e.g. a PDF datasheet) and register it.

        The filename comes from the URL path, so re-fetching the same
        file overwrites the stored object instead of duplicating it.

        Args:
            url: Remote document URL
            owner_record_id: Record that first referenced the document

        Returns:
            Asset ID, or None on any failure
        """
        logger.info("fetching_document", url=url, owner_record_id=owner_record_id)

        filename = sanitize_file_name(unquote(posixpath.basename(urlparse(url).path)))
        if not filename:
            logger.warning("document_filename_missing", url=url)
            return None

        response = self._download(url, timeout=settings.datasheet_fetch_timeout)
        if response is None:
            return None

        mime_type = (
            _media_type(response.header("content-type"))
            or mimetypes.guess_type(filename)[0]
            or "application/octet-stream"
        )

        try:
            storage_path = self.storage.write_bytes(
                filename,
                response.body,
                content_type=mime_type,
                overwrite=True
            )
            asset_id = self.storage.register_asset(AssetCreate(
                source_url=url,
                mime_type=mime_type,
                storage_path=storage_path,
                title=filename,
                owner_record_id=owner_record_id,
                size_bytes=len(response.body),
            ))
        except AppError as e:
            logger.error("document_store_failed", url=url, error=e.message)
            return None

        logger.info("document_fetched", url=url, asset_id=asset_id, mime_type=mime_type)
        return asset_id
