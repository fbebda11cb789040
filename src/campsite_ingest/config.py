"""Configuration management using Pydantic Settings."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(
        default="CampsiteIngest",
        description="Application name",
    )
    app_version: str = Field(
        default="0.3.0",
        description="Application version",
    )

    # MongoDB settings
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI",
    )
    mongodb_database: str = Field(
        default="campsites",
        description="MongoDB database name",
    )

    # OpenAI settings (type classification fallback)
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key; keyword classification only when unset",
    )
    openai_classifier_model: str = Field(
        default="gpt-4o-mini",
        description="Model used when keyword classification is not confident",
    )
    classifier_llm_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Keyword confidence below which the LLM is consulted",
    )

    # Duplicate detection settings
    duplicate_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Similarity score above which a candidate is a duplicate",
    )
    nearby_radius_km: float = Field(
        default=2.0,
        gt=0.0,
        description="Radius for the location-based duplicate lookup",
    )
    name_search_limit: int = Field(
        default=20,
        ge=1,
        description="Maximum campsites returned by the name lookup",
    )
    phone_country_code: str = Field(
        default="66",
        description="Country calling code rewritten to a trunk '0' prefix",
    )

    # Confidence settings
    low_rating_threshold: float = Field(
        default=3.0,
        description="Ratings at or below this value produce a quality warning",
    )

    # Import processing settings
    processing_delay_seconds: float = Field(
        default=0.1,
        ge=0.0,
        description="Pause between places in a processing batch",
    )
    lookup_retry_max_attempts: int = Field(
        default=3,
        ge=0,
        description="Maximum retries for transient database errors",
    )
    lookup_retry_initial_delay: float = Field(
        default=0.5,
        description="Initial delay in seconds before first retry",
    )
    lookup_retry_max_delay: float = Field(
        default=10.0,
        description="Maximum delay in seconds between retries",
    )


# Global settings instance
settings = Settings()
