"""Duplicate detection for places imported into the campsite catalog.

A candidate is compared against catalog campsites found by three
independent lookups: name search, location proximity and exact
phone/website matches. Phone and website matches are conclusive; every
other match gets a weighted name/address/proximity score. The best
score decides the verdict.
"""

from typing import Optional

import structlog

from campsite_ingest.models.campsite import CampsiteEntry
from campsite_ingest.models.duplicate import (
    DuplicateVerdict,
    MatchSignal,
    SimilarityResult,
)
from campsite_ingest.services.database import CampsiteRepository
from campsite_ingest.utils.geo import distance_km, is_valid_coordinate, proximity_score
from campsite_ingest.utils.text import normalize_phone, normalize_website, string_similarity

logger = structlog.get_logger(__name__)

DEFAULT_DUPLICATE_THRESHOLD = 0.8
DEFAULT_NEARBY_RADIUS_KM = 2.0

NAME_WEIGHT = 0.45
ADDRESS_WEIGHT = 0.35
PROXIMITY_WEIGHT = 0.20

EXACT_MATCH_SCORE = 1.0


def score_entry(
    name: str,
    address: str,
    entry: CampsiteEntry,
    candidate_latitude: Optional[float] = None,
    candidate_longitude: Optional[float] = None,
) -> SimilarityResult:
    """Weighted name/address/proximity similarity against one campsite.

    Name and address are weighted and renormalized between themselves.
    When a distance is known, either from the lookup or from both sides
    having valid coordinates, proximity is blended in only if that raises
    the score.
    """
    name_score = string_similarity(name, entry.name)
    address_score = string_similarity(address, entry.address)

    distance = entry.distance_km
    if (
        distance is None
        and is_valid_coordinate(candidate_latitude, candidate_longitude)
        and is_valid_coordinate(entry.latitude, entry.longitude)
    ):
        distance = distance_km(
            candidate_latitude, candidate_longitude, entry.latitude, entry.longitude
        )
    proximity = proximity_score(distance)

    text_weighted = name_score * NAME_WEIGHT + address_score * ADDRESS_WEIGHT
    score = text_weighted / (NAME_WEIGHT + ADDRESS_WEIGHT)
    if proximity is not None:
        blended = (text_weighted + proximity * PROXIMITY_WEIGHT) / (
            NAME_WEIGHT + ADDRESS_WEIGHT + PROXIMITY_WEIGHT
        )
        score = max(score, blended)

    signals: list[MatchSignal] = []
    if name_score > 0:
        signals.append(MatchSignal.NAME)
    if proximity:
        signals.append(MatchSignal.LOCATION)

    return SimilarityResult(
        campsite_id=entry.id,
        name=entry.name,
        address=entry.address,
        similarity_score=min(1.0, score),
        distance_km=distance if proximity is not None else None,
        signals=signals,
    )


def exact_match(entry: CampsiteEntry, signal: MatchSignal) -> SimilarityResult:
    return SimilarityResult(
        campsite_id=entry.id,
        name=entry.name,
        address=entry.address,
        similarity_score=EXACT_MATCH_SCORE,
        distance_km=entry.distance_km,
        signals=[signal],
    )


def merge_results(results: list[SimilarityResult]) -> list[SimilarityResult]:
    """Collapse results per campsite keeping the highest score.

    Signals from every lookup that found the campsite are kept. The result
    is ordered by descending score, ties broken by campsite id.
    """
    best: dict[str, SimilarityResult] = {}
    for result in results:
        key = str(result.campsite_id)
        current = best.get(key)
        if current is None:
            best[key] = result
            continue

        signals = list(current.signals)
        for signal in result.signals:
            if signal not in signals:
                signals.append(signal)

        if result.similarity_score > current.similarity_score:
            winner, other = result, current
        else:
            winner, other = current, result
        distance = winner.distance_km if winner.distance_km is not None else other.distance_km
        best[key] = winner.model_copy(update={"signals": signals, "distance_km": distance})

    return sorted(
        best.values(),
        key=lambda r: (-r.similarity_score, str(r.campsite_id)),
    )


def build_verdict(
    results: list[SimilarityResult],
    threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
) -> DuplicateVerdict:
    """Turn scored matches into a duplicate verdict.

    Args:
        results: Scored matches, possibly with repeated campsites
        threshold: Score the best match must exceed to be a duplicate

    Returns:
        DuplicateVerdict with candidates ordered by descending score
    """
    candidates = merge_results(results)
    if not candidates:
        return DuplicateVerdict()

    top = candidates[0]
    is_duplicate = top.similarity_score > threshold
    return DuplicateVerdict(
        is_duplicate=is_duplicate,
        duplicate_of_id=top.campsite_id if is_duplicate else None,
        similarity_score=top.similarity_score,
        candidates=candidates,
    )


class DuplicateDetectionService:
    """Service for detecting duplicate campsites before import."""

    def __init__(
        self,
        campsite_repository: CampsiteRepository,
        duplicate_threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
        nearby_radius_km: float = DEFAULT_NEARBY_RADIUS_KM,
        name_search_limit: int = 20,
        phone_country_code: str = "66",
    ):
        """Initialize duplicate detection service.

        Args:
            campsite_repository: Repository used for the catalog lookups
            duplicate_threshold: Score above which a match is a duplicate
            nearby_radius_km: Radius for the location lookup
            name_search_limit: Maximum campsites from the name lookup
            phone_country_code: Calling code rewritten to a trunk prefix
        """
        self.campsite_repo = campsite_repository
        self.duplicate_threshold = duplicate_threshold
        self.nearby_radius_km = nearby_radius_km
        self.name_search_limit = name_search_limit
        self.phone_country_code = phone_country_code

    async def detect_duplicate(
        self,
        name: str,
        address: str,
        phone: Optional[str] = None,
        website: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> DuplicateVerdict:
        """Decide whether a candidate place duplicates a catalog campsite.

        Args:
            name: Candidate name
            address: Candidate address
            phone: Candidate phone number, if known
            website: Candidate website, if known
            latitude: Candidate latitude, if known
            longitude: Candidate longitude, if known

        Returns:
            DuplicateVerdict; an empty verdict when nothing matched

        Raises:
            Exception: Any lookup failure, after logging
        """
        results: list[SimilarityResult] = []

        try:
            if name and name.strip():
                for entry in await self.campsite_repo.search_by_name(
                    name, limit=self.name_search_limit
                ):
                    results.append(score_entry(name, address, entry, latitude, longitude))

            if is_valid_coordinate(latitude, longitude):
                for entry in await self.campsite_repo.find_nearby(
                    latitude, longitude, self.nearby_radius_km
                ):
                    results.append(score_entry(name, address, entry, latitude, longitude))
            elif latitude is not None or longitude is not None:
                logger.warning(
                    "Skipping location lookup for invalid coordinates",
                    latitude=latitude,
                    longitude=longitude,
                )

            normalized_phone = normalize_phone(phone or "", self.phone_country_code)
            if normalized_phone:
                for entry in await self.campsite_repo.find_by_phone(normalized_phone):
                    results.append(exact_match(entry, MatchSignal.PHONE))

            normalized_website = normalize_website(website or "")
            if normalized_website:
                for entry in await self.campsite_repo.find_by_website(normalized_website):
                    results.append(exact_match(entry, MatchSignal.WEBSITE))

        except Exception as e:
            logger.error(
                "Duplicate lookup failed",
                place_name=name,
                error=str(e),
            )
            raise

        verdict = build_verdict(results, self.duplicate_threshold)

        logger.info(
            "Duplicate detection complete",
            place_name=name,
            candidate_count=len(verdict.candidates),
            is_duplicate=verdict.is_duplicate,
            similarity_score=round(verdict.similarity_score, 3),
            duplicate_of_id=str(verdict.duplicate_of_id) if verdict.duplicate_of_id else None,
        )

        return verdict
