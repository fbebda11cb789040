"""Wiring of the import pipeline from application settings."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from openai import AsyncOpenAI

from campsite_ingest.config import Settings
from campsite_ingest.services.database import (
    CampsiteRepository,
    ImportCandidateRepository,
    RawPlaceRepository,
    close_mongodb_connection,
    connect_to_mongodb,
)
from campsite_ingest.services.duplicate_detection import DuplicateDetectionService
from campsite_ingest.services.import_processing import (
    ImportProcessingService,
    ProcessingSummary,
)
from campsite_ingest.services.type_classifier import TypeClassifierService
from campsite_ingest.utils.retry import RetryConfig

logger = structlog.get_logger(__name__)


def _get_settings() -> Settings:
    """Return the global settings instance."""
    from campsite_ingest.config import settings

    return settings


def create_import_processing_service(
    config: Optional[Settings] = None,
) -> ImportProcessingService:
    """Build an ImportProcessingService from settings.

    Requires an open database connection (see database_session).

    Args:
        config: Settings to use (defaults to the global settings)

    Returns:
        Configured ImportProcessingService
    """
    config = config or _get_settings()

    openai_client = None
    if config.openai_api_key:
        openai_client = AsyncOpenAI(api_key=config.openai_api_key)

    duplicate_service = DuplicateDetectionService(
        CampsiteRepository(phone_country_code=config.phone_country_code),
        duplicate_threshold=config.duplicate_threshold,
        nearby_radius_km=config.nearby_radius_km,
        name_search_limit=config.name_search_limit,
        phone_country_code=config.phone_country_code,
    )
    type_classifier = TypeClassifierService(
        openai_client=openai_client,
        model=config.openai_classifier_model,
        llm_threshold=config.classifier_llm_threshold,
    )

    return ImportProcessingService(
        raw_place_repository=RawPlaceRepository(),
        import_candidate_repository=ImportCandidateRepository(),
        duplicate_service=duplicate_service,
        type_classifier=type_classifier,
        low_rating_threshold=config.low_rating_threshold,
        retry_config=RetryConfig(
            max_retries=config.lookup_retry_max_attempts,
            initial_delay=config.lookup_retry_initial_delay,
            max_delay=config.lookup_retry_max_delay,
        ),
        delay_seconds=config.processing_delay_seconds,
    )


@asynccontextmanager
async def database_session(config: Optional[Settings] = None) -> AsyncIterator[None]:
    """Open the MongoDB connection for the duration of a run."""
    config = config or _get_settings()

    try:
        await connect_to_mongodb(
            uri=config.mongodb_uri,
            database_name=config.mongodb_database,
        )
        logger.info("Connected to MongoDB", database=config.mongodb_database)
    except Exception as e:
        logger.error("Failed to connect to MongoDB", error=str(e))
        raise

    try:
        yield
    finally:
        await close_mongodb_connection()
        logger.info("Closed MongoDB connection")


async def process_pending_places(
    service: ImportProcessingService,
    limit: int = 100,
) -> ProcessingSummary:
    """Process up to `limit` raw places still waiting, oldest first."""
    pending = await service.raw_place_repo.list_pending(limit=limit)
    if not pending:
        logger.info("No pending places to process")
        return ProcessingSummary()

    return await service.process_places([place.id for place in pending])


async def run_import_processing(
    limit: int = 100,
    config: Optional[Settings] = None,
) -> ProcessingSummary:
    """Connect, process pending places and disconnect."""
    config = config or _get_settings()

    logger.info(
        "Starting import run",
        app_name=config.app_name,
        version=config.app_version,
        limit=limit,
    )

    async with database_session(config):
        await CampsiteRepository().ensure_indexes()
        await ImportCandidateRepository().ensure_indexes()
        service = create_import_processing_service(config)
        return await process_pending_places(service, limit=limit)
