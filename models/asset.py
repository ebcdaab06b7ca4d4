"""
Asset schemas: binary objects (images, datasheets) kept in the object store.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema, TimestampMixin


class AssetCreate(BaseSchema):
    """
    Register a stored object as an asset.

    source_url is the dedup key for datasheets.
    """

    source_url: str = Field(..., min_length=1, description="Remote URL the bytes came from")
    mime_type: str = Field(..., min_length=1, description="MIME type, e.g. application/pdf")
    storage_path: str = Field(..., min_length=1, description="Path inside the storage bucket")
    title: str = Field(..., description="Sanitized filename")
    owner_record_id: Optional[str] = Field(None, description="Record the asset was fetched for")
    size_bytes: int = Field(0, ge=0, description="Stored object size")


class AssetResponse(AssetCreate, TimestampMixin):
    """Asset as stored in the assets table."""

    id: str = Field(..., description="Asset UUID")


class FetchResponse(BaseSchema):
    """
    Raw result of a remote HTTP fetch.

    Header names are lowercased so lookups don't depend on server casing.
    """

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = Field(default_factory=dict)

    def header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)
