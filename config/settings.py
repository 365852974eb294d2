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
        description="Supabase service role key (for admin operations)"
    )
    storage_bucket: str = Field(
        default="product-images",
        description="Supabase storage bucket for product photos"
    )

    # ===================
    # EXTERNAL ENDPOINTS
    # ===================
    image_storage_url: str = Field(
        default="http://localhost:8000/api/products/upload-images",
        description="Image storage endpoint used by the upload client"
    )
    product_api_url: str = Field(
        default="http://localhost:8000/api/products/create",
        description="Product creation endpoint used by the publish client"
    )
    upload_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Transport timeout for a single image upload"
    )

    # ===================
    # GEMINI
    # ===================
    gemini_api_key: Optional[str] = Field(
        None,
        description="Google Gemini API key"
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model used for content generation"
    )

    # ===================
    # UPLOAD LIMITS
    # ===================
    max_image_size_mb: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum size of a single product photo in MB"
    )
    max_photos: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum photos per listing"
    )

    # ===================
    # DRAFTS
    # ===================
    draft_file_path: str = Field(
        default=".artisanconnect/drafts.json",
        description="Local JSON file backing the draft key-value store"
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

    @property
    def gemini_configured(self) -> bool:
        """Check if Gemini is properly configured."""
        return bool(self.gemini_api_key)

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024


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
