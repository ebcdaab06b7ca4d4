"""
Shared schema base for record, asset and report models.
"""

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class BaseSchema(BaseModel):
    """
    Common model config.

    String fields coming from CSV cells or HTTP headers are trimmed,
    assignments are re-validated, and rows returned by Supabase can be
    loaded with model_validate(..., from_attributes=True).
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class TimestampMixin(BaseModel):
    """created_at / updated_at as set by the database."""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
