"""Pydantic models for campsite ingestion."""

from campsite_ingest.models.campsite import CampsiteCreate, CampsiteEntry, PyObjectId
from campsite_ingest.models.confidence import (
    CAMPSITE_TYPE_NAMES,
    ConfidenceBreakdown,
    TypeClassification,
)
from campsite_ingest.models.duplicate import (
    DuplicateVerdict,
    MatchSignal,
    SimilarityResult,
)
from campsite_ingest.models.import_candidate import (
    ImportCandidate,
    ImportCandidateStatus,
    ProcessedPlace,
)
from campsite_ingest.models.place import PlaceCandidate, RawPlace, RawPlaceStatus

__all__ = [
    "CAMPSITE_TYPE_NAMES",
    "CampsiteCreate",
    "CampsiteEntry",
    "ConfidenceBreakdown",
    "DuplicateVerdict",
    "ImportCandidate",
    "ImportCandidateStatus",
    "MatchSignal",
    "PlaceCandidate",
    "ProcessedPlace",
    "PyObjectId",
    "RawPlace",
    "RawPlaceStatus",
    "SimilarityResult",
    "TypeClassification",
]
