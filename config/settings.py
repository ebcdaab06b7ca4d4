"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key; preferred over the anon key when set (storage writes)"
    )

    # ===================
    # OBJECT STORE
    # ===================
    storage_bucket: str = Field(
        default="media",
        min_length=1,
        description="Supabase Storage bucket that receives fetched assets"
    )
    upload_prefix: str = Field(
        default="uploads",
        description="Top-level folder inside the bucket (uploads/YYYY/MM/...)"
    )

    # ===================
    # IMPORT BEHAVIOUR
    # ===================
    default_product_title: str = Field(
        default="Untitled Product",
        description="Title used when the item-name column is empty or missing"
    )
    record_type: str = Field(
        default="product",
        description="Record type assigned to every imported row"
    )
    record_status: str = Field(
        default="publish",
        description="Status assigned to every imported row"
    )
    image_filename_prefix: str = Field(
        default="image-",
        description="Prefix for randomized image filenames"
    )
    csv_strict_field_count: bool = Field(
        default=False,
        description="Reject rows whose field count differs from the header instead of padding"
    )
    import_max_workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Rows processed concurrently (1 = strictly sequential)"
    )

    # ===================
    # REMOTE FETCH
    # ===================
    image_fetch_timeout: float = Field(
        default=5.0,
        gt=0,
        le=120,
        description="Seconds before an image download gives up"
    )
    datasheet_fetch_timeout: float = Field(
        default=15.0,
        gt=0,
        le=300,
        description="Seconds before a datasheet download gives up"
    )
    http_user_agent: str = Field(
        default="BulkCSVImporter/1.0",
        description="User-Agent header sent with every remote fetch"
    )

    # ===================
    # IMPORT SECURITY
    # ===================
    import_token_secret: str = Field(
        ...,
        min_length=16,
        description="Secret used to sign anti-forgery import tokens"
    )
    import_allowed_actors: list[str] = Field(
        default_factory=list,
        description="Actors allowed to run imports (empty = any identified actor)"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
