# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key (used for auth flows)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret for verifying access tokens"
    )

    STORAGE_BUCKET: str = Field(
        default="audio",
        description="Supabase Storage bucket holding uploaded audio"
    )

    # -------------------------------------------------------------------------
    # AssemblyAI Configuration (speech-to-text)
    # -------------------------------------------------------------------------

    ASSEMBLYAI_API_KEY: str = Field(
        default="",
        description="AssemblyAI API key for transcription"
    )

    ASSEMBLYAI_BASE_URL: str = Field(
        default="https://api.assemblyai.com/v2",
        description="AssemblyAI REST API base URL"
    )

    TRANSCRIPTION_POLL_INTERVAL: float = Field(
        default=3.0,
        gt=0,
        description="Seconds between transcript status checks"
    )

    TRANSCRIPTION_TIMEOUT: float = Field(
        default=1800.0,
        gt=0,
        description="Give up waiting for a transcript after this many seconds"
    )

    # -------------------------------------------------------------------------
    # OpenAI / LLM Configuration
    # -------------------------------------------------------------------------
    # Required for transcript analysis and summaries

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for transcript analysis"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o",
        description="Model used for analysis and summaries (must support JSON mode)"
    )

    ANALYSIS_TEMPERATURE: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for analysis (lower = more consistent)"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=4000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    API_PREFIX: str = Field(
        default="/api",
        description="URL prefix for all API routes"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    FRONTEND_URL: str = Field(
        default="http://localhost:3000",
        description="Frontend base URL (used for password reset redirects)"
    )

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=100,
        ge=1,
        le=500,
        description="Maximum audio upload size in MB"
    )

    ALLOWED_EXTENSIONS: str = Field(
        default=".mp3,.wav,.m4a,.mp4,.ogg,.aac,.flac,.aiff,.3gp,.webm,.opus",
        description="Allowed audio file extensions (comma-separated)"
    )

    ALLOWED_MIME_TYPES: str = Field(
        default=(
            "audio/mpeg,audio/mp3,audio/wav,audio/x-wav,audio/mp4,audio/m4a,"
            "audio/x-m4a,audio/aac,audio/ogg,audio/opus,audio/webm,audio/flac,"
            "audio/aiff,audio/x-aiff,audio/3gpp,audio/3gpp2"
        ),
        description="Allowed audio MIME types (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_extensions_list(self) -> list[str]:
        """
        Parse ALLOWED_EXTENSIONS string into a list.

        Example: ".mp3, .wav" -> [".mp3", ".wav"]
        """
        return [ext.strip().lower() for ext in self.ALLOWED_EXTENSIONS.split(",") if ext.strip()]

    @property
    def allowed_mime_types_list(self) -> list[str]:
        """Parse ALLOWED_MIME_TYPES string into a list."""
        return [mime.strip().lower() for mime in self.ALLOWED_MIME_TYPES.split(",") if mime.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        """
        Convert MB to bytes for file size validation.
        """
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
