"""Utility modules for campsite ingestion."""

from campsite_ingest.utils.geo import (
    distance_km,
    is_valid_coordinate,
    proximity_score,
)
from campsite_ingest.utils.retry import RetryConfig, async_retry_with_backoff
from campsite_ingest.utils.text import (
    normalize_phone,
    normalize_text,
    normalize_website,
    string_similarity,
)

__all__ = [
    # Geo utilities
    "distance_km",
    "is_valid_coordinate",
    "proximity_score",
    # Text utilities
    "normalize_phone",
    "normalize_text",
    "normalize_website",
    "string_similarity",
    # Retry utilities
    "RetryConfig",
    "async_retry_with_backoff",
]
