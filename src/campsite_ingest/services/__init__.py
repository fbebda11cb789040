"""Services for campsite ingestion business logic."""

from campsite_ingest.services.confidence import build_confidence
from campsite_ingest.services.database import (
    CampsiteRepository,
    ImportCandidateRepository,
    RawPlaceRepository,
    get_database,
)
from campsite_ingest.services.duplicate_detection import (
    DuplicateDetectionService,
    build_verdict,
    score_entry,
)
from campsite_ingest.services.import_processing import (
    ImportProcessingService,
    ProcessingSummary,
)
from campsite_ingest.services.type_classifier import TypeClassifierService

__all__ = [
    "CampsiteRepository",
    "DuplicateDetectionService",
    "ImportCandidateRepository",
    "ImportProcessingService",
    "ProcessingSummary",
    "RawPlaceRepository",
    "TypeClassifierService",
    "build_confidence",
    "build_verdict",
    "get_database",
    "score_entry",
]
