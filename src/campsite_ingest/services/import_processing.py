"""Import processing for fetched Google places.

Runs each raw place through duplicate detection, type classification and
confidence scoring, then records one import candidate per raw place for
admin review.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog
from bson import ObjectId

from campsite_ingest.models.import_candidate import (
    ImportCandidate,
    ImportCandidateStatus,
    ProcessedPlace,
)
from campsite_ingest.models.place import PlaceCandidate, RawPlaceStatus
from campsite_ingest.services.confidence import (
    DEFAULT_LOW_RATING_THRESHOLD,
    build_confidence,
)
from campsite_ingest.services.database import (
    ImportCandidateRepository,
    RawPlaceRepository,
)
from campsite_ingest.services.duplicate_detection import DuplicateDetectionService
from campsite_ingest.services.type_classifier import TypeClassifierService
from campsite_ingest.utils.retry import RetryConfig, async_retry_with_backoff

logger = structlog.get_logger(__name__)


class ProcessingAlreadyRunningError(RuntimeError):
    """Raised when a batch is started while another one is running."""


@dataclass
class ProcessingSummary:
    """Outcome counts for a processing batch."""

    successful: int = 0
    failed: int = 0
    candidates_created: int = 0


def determine_status(processed: ProcessedPlace) -> ImportCandidateStatus:
    """Initial review status: duplicates are rejected, the rest wait for review."""
    if processed.is_duplicate:
        return ImportCandidateStatus.REJECTED
    return ImportCandidateStatus.PENDING


class ImportProcessingService:
    """Service that turns raw Google places into import candidates."""

    def __init__(
        self,
        raw_place_repository: RawPlaceRepository,
        import_candidate_repository: ImportCandidateRepository,
        duplicate_service: DuplicateDetectionService,
        type_classifier: TypeClassifierService,
        low_rating_threshold: float = DEFAULT_LOW_RATING_THRESHOLD,
        retry_config: Optional[RetryConfig] = None,
        delay_seconds: float = 0.1,
    ):
        """Initialize import processing service.

        Args:
            raw_place_repository: Repository for fetched places
            import_candidate_repository: Repository for import candidates
            duplicate_service: Duplicate detection against the catalog
            type_classifier: Campsite type classifier
            low_rating_threshold: Rating at or below which a warning is added
            retry_config: Retry policy for duplicate lookups
            delay_seconds: Pause between places in a batch
        """
        self.raw_place_repo = raw_place_repository
        self.candidate_repo = import_candidate_repository
        self.duplicate_service = duplicate_service
        self.type_classifier = type_classifier
        self.low_rating_threshold = low_rating_threshold
        self.delay_seconds = delay_seconds
        self._detect_duplicate = async_retry_with_backoff(retry_config)(
            duplicate_service.detect_duplicate
        )
        self._is_processing = False

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    async def process_place(self, raw_place_id: ObjectId) -> Optional[ProcessedPlace]:
        """Evaluate a single raw place.

        Args:
            raw_place_id: ID of the raw place

        Returns:
            ProcessedPlace, or None when the place is missing or could not
            be evaluated
        """
        try:
            raw_place = await self.raw_place_repo.get_by_id(raw_place_id)
            if raw_place is None:
                logger.error("Raw place not found", raw_place_id=str(raw_place_id))
                return None

            place = PlaceCandidate.from_google_place(raw_place.raw_data)

            verdict = await self._detect_duplicate(
                place.name,
                place.address,
                phone=place.phone,
                website=place.website,
                latitude=place.latitude,
                longitude=place.longitude,
            )
            classification = await self.type_classifier.classify(place)
            confidence = build_confidence(
                place,
                verdict,
                classification,
                low_rating_threshold=self.low_rating_threshold,
            )

            processed = ProcessedPlace(
                raw_place_id=raw_place.id,
                place_id=raw_place.place_id,
                name=place.name,
                address=place.address,
                confidence_score=confidence.overall_score,
                is_duplicate=verdict.is_duplicate,
                duplicate_of_campsite_id=verdict.duplicate_of_id,
                suggested_type_id=classification.type_id,
                validation_warnings=confidence.warnings,
                processed_data={
                    "rating": place.rating,
                    "user_ratings_total": place.user_ratings_total,
                    "phone": place.phone,
                    "website": place.website,
                    "location": {"lat": place.latitude, "lng": place.longitude}
                    if place.has_location
                    else None,
                    "types": place.types,
                    "business_status": place.business_status,
                    "type_classification": classification.model_dump(),
                    "similar_campsites": [
                        c.model_dump(mode="json") for c in verdict.candidates
                    ],
                },
            )

            logger.info(
                "Place processed",
                raw_place_id=str(raw_place_id),
                place_name=place.name,
                confidence_score=processed.confidence_score,
                is_duplicate=processed.is_duplicate,
            )
            return processed

        except Exception as e:
            logger.error(
                "Failed to process place",
                raw_place_id=str(raw_place_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def process_places(self, raw_place_ids: list[ObjectId]) -> ProcessingSummary:
        """Process a batch of raw places into import candidates.

        Args:
            raw_place_ids: Raw places to process, in order

        Returns:
            ProcessingSummary with outcome counts

        Raises:
            ProcessingAlreadyRunningError: If a batch is already running
        """
        if self._is_processing:
            raise ProcessingAlreadyRunningError("Import processing is already running")

        self._is_processing = True
        summary = ProcessingSummary()

        try:
            logger.info("Starting import processing", place_count=len(raw_place_ids))

            for index, raw_place_id in enumerate(raw_place_ids):
                processed = await self.process_place(raw_place_id)

                if processed is None:
                    summary.failed += 1
                    await self.raw_place_repo.mark_processed(
                        raw_place_id, RawPlaceStatus.FAILED
                    )
                else:
                    summary.successful += 1
                    if await self._save_candidate(processed):
                        summary.candidates_created += 1
                    await self.raw_place_repo.mark_processed(raw_place_id)

                if self.delay_seconds and index < len(raw_place_ids) - 1:
                    await asyncio.sleep(self.delay_seconds)

            logger.info(
                "Import processing completed",
                total=len(raw_place_ids),
                successful=summary.successful,
                failed=summary.failed,
                candidates_created=summary.candidates_created,
            )
            return summary

        finally:
            self._is_processing = False

    async def _save_candidate(self, processed: ProcessedPlace) -> bool:
        """Create or refresh the import candidate for a processed place."""
        candidate = ImportCandidate(
            google_place_raw_id=processed.raw_place_id,
            confidence_score=processed.confidence_score,
            is_duplicate=processed.is_duplicate,
            duplicate_of_campsite_id=processed.duplicate_of_campsite_id,
            suggested_type_id=processed.suggested_type_id,
            processed_data=processed.processed_data,
            validation_warnings=processed.validation_warnings,
            status=determine_status(processed),
        )

        try:
            await self.candidate_repo.upsert_for_raw_place(candidate)
            return True
        except Exception as e:
            logger.error(
                "Failed to save import candidate",
                raw_place_id=str(processed.raw_place_id),
                error=str(e),
            )
            return False
