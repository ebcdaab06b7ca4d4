"""
Product record schemas for validation and serialization.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum

from models.base import BaseSchema, TimestampMixin


class RecordStatus(str, Enum):
    """Publication status of a record."""
    PUBLISH = "publish"
    DRAFT = "draft"


class RecordCreate(BaseSchema):
    """
    Create a new product record.

    Required: title
    Status and type are fixed by the importer.
    """

    title: str = Field(
        ...,
        min_length=1,
        description="Record title (from the item-name column)",
        examples=["Widget", "Untitled Product"]
    )
    status: RecordStatus = Field(
        RecordStatus.PUBLISH,
        description="Publication status"
    )
    type: str = Field(
        "product",
        min_length=1,
        max_length=50,
        description="Record type"
    )

    @field_validator("type")
    @classmethod
    def type_lowercase(cls, v: str) -> str:
        """Record types are stored lowercase."""
        return v.lower()


class RecordResponse(BaseSchema, TimestampMixin):
    """
    Record as stored in the record store.
    """

    id: str = Field(..., description="Record UUID")
    title: str = Field(..., description="Record title")
    status: RecordStatus = Field(..., description="Publication status")
    type: str = Field(..., description="Record type")
    primary_image_id: Optional[str] = Field(None, description="Asset used as display image")

