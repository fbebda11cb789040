"""Import confidence blending and data quality warnings."""

from typing import Optional

import structlog

from campsite_ingest.models.confidence import ConfidenceBreakdown, TypeClassification
from campsite_ingest.models.duplicate import DuplicateVerdict
from campsite_ingest.models.place import PlaceCandidate

logger = structlog.get_logger(__name__)

DEFAULT_BASELINE = 0.5
DEFAULT_LOW_RATING_THRESHOLD = 3.0

# Minimum score for a confirmed duplicate
DUPLICATE_CONFIDENCE_FLOOR = 0.9

# Non-duplicates scoring above NEAR_MATCH_SCORE are scaled by NEAR_MATCH_FACTOR
NEAR_MATCH_SCORE = 0.5
NEAR_MATCH_FACTOR = 0.8

MISSING_PHONE_PENALTY = 0.05
MISSING_WEBSITE_PENALTY = 0.05
LOW_RATING_PENALTY = 0.10

MISSING_PHONE_WARNING = "Missing phone number"
MISSING_WEBSITE_WARNING = "Missing website"
LOW_RATING_WARNING = "Low or missing rating"


def build_confidence(
    candidate: PlaceCandidate,
    verdict: DuplicateVerdict,
    type_classification: Optional[TypeClassification] = None,
    low_rating_threshold: float = DEFAULT_LOW_RATING_THRESHOLD,
) -> ConfidenceBreakdown:
    """Blend classification, duplicate and completeness signals.

    Args:
        candidate: Place being evaluated
        verdict: Duplicate verdict for the place
        type_classification: Type classifier output, if any
        low_rating_threshold: Ratings at or below this produce a warning

    Returns:
        ConfidenceBreakdown with a score in [0, 1] and warnings
    """
    score = (
        type_classification.confidence
        if type_classification is not None
        else DEFAULT_BASELINE
    )
    warnings: list[str] = []

    if not verdict.is_duplicate and verdict.similarity_score > NEAR_MATCH_SCORE:
        score *= NEAR_MATCH_FACTOR

    if not candidate.phone:
        score -= MISSING_PHONE_PENALTY
        warnings.append(MISSING_PHONE_WARNING)

    if not candidate.website:
        score -= MISSING_WEBSITE_PENALTY
        warnings.append(MISSING_WEBSITE_WARNING)

    if candidate.rating is None or candidate.rating <= low_rating_threshold:
        score -= LOW_RATING_PENALTY
        warnings.append(LOW_RATING_WARNING)

    if verdict.candidates:
        warnings.append(f"{len(verdict.candidates)} similar campsite(s) found")

    if verdict.is_duplicate:
        score = max(score, DUPLICATE_CONFIDENCE_FLOOR)

    overall = round(min(1.0, max(0.0, score)), 2)

    logger.debug(
        "Confidence computed",
        place_name=candidate.name,
        overall_score=overall,
        warning_count=len(warnings),
    )

    return ConfidenceBreakdown(overall_score=overall, warnings=warnings)
