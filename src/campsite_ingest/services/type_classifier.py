"""Campsite type classification for imported places.

Keyword rules handle most places. When they are not confident and an
OpenAI client is configured, the LLM is asked as well and the more
confident answer wins.
"""

import json
from typing import Optional

import structlog
from openai import AsyncOpenAI

from campsite_ingest.llm.prompts.type_classification import (
    TYPE_CLASSIFICATION_SYSTEM_PROMPT,
    TypeClassificationOutput,
    format_type_classification_prompt,
)
from campsite_ingest.models.confidence import CAMPSITE_TYPE_NAMES, TypeClassification
from campsite_ingest.models.place import PlaceCandidate

logger = structlog.get_logger(__name__)

CAMPING, GLAMPING, TENTED_RESORT, BUNGALOW = 1, 2, 3, 4

# (type_id, confidence, name keywords) checked in order
NAME_KEYWORD_RULES: list[tuple[int, float, tuple[str, ...]]] = [
    (GLAMPING, 0.95, ("glamping",)),
    (BUNGALOW, 0.95, ("bungalow", "บังกะโล")),
    (TENTED_RESORT, 0.9, ("resort", "รีสอร์ท")),
    (CAMPING, 0.95, ("camping", "แคมป์ปิ้ง", "ลานกางเต็นท์")),
]

HIGH_PRICE_LEVEL = 3


def _classification(type_id: int, confidence: float, method: str = "keyword") -> TypeClassification:
    return TypeClassification(
        type_id=type_id,
        type_name=CAMPSITE_TYPE_NAMES[type_id],
        confidence=confidence,
        method=method,
    )


def classify_by_keywords(place: PlaceCandidate) -> TypeClassification:
    """Rule-based classification from name keywords, place types and price."""
    name = place.name.casefold()
    types = set(place.types)

    if "glamping_site" in types:
        return _classification(GLAMPING, 0.95)

    for type_id, confidence, keywords in NAME_KEYWORD_RULES:
        if any(keyword in name for keyword in keywords):
            return _classification(type_id, confidence)

    expensive = place.price_level is not None and place.price_level >= HIGH_PRICE_LEVEL

    if "campground" in types:
        if expensive:
            return _classification(GLAMPING, 0.7)
        return _classification(CAMPING, 0.85)

    if "lodging" in types or "inn" in types:
        if expensive:
            return _classification(GLAMPING, 0.6)
        return _classification(CAMPING, 0.6)

    return _classification(CAMPING, 0.5, method="default")


class TypeClassifierService:
    """Service for suggesting a campsite type for a place."""

    def __init__(
        self,
        openai_client: Optional[AsyncOpenAI] = None,
        model: str = "gpt-4o-mini",
        llm_threshold: float = 0.7,
        temperature: float = 0.0,
    ):
        """Initialize TypeClassifierService.

        Args:
            openai_client: OpenAI client for the LLM fallback (keywords only if None)
            model: Model to use for LLM classification
            llm_threshold: Keyword confidence below which the LLM is consulted
            temperature: Temperature for generation
        """
        self.client = openai_client
        self.model = model
        self.llm_threshold = llm_threshold
        self.temperature = temperature

    async def classify(self, place: PlaceCandidate) -> TypeClassification:
        """Classify a place into a campsite type.

        Args:
            place: Place to classify

        Returns:
            TypeClassification from keywords, or from the LLM when it is
            more confident
        """
        result = classify_by_keywords(place)

        if result.confidence >= self.llm_threshold or self.client is None:
            return result

        logger.info(
            "Low keyword confidence, asking LLM",
            place_name=place.name,
            keyword_confidence=result.confidence,
        )

        try:
            llm_result = await self._classify_with_llm(place)
        except Exception as e:
            logger.warning(
                "LLM classification failed, falling back to keywords",
                place_name=place.name,
                error=str(e),
            )
            return result

        if llm_result.confidence > result.confidence:
            return llm_result
        return result

    async def _classify_with_llm(self, place: PlaceCandidate) -> TypeClassification:
        """Ask the LLM for a type.

        Raises:
            ValueError: If the response is not a usable classification
        """
        response = await self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": TYPE_CLASSIFICATION_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": format_type_classification_prompt(place.model_dump()),
                },
            ],
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content
        output: TypeClassificationOutput = json.loads(content)

        type_id = int(output.get("type_id", CAMPING))
        if type_id not in CAMPSITE_TYPE_NAMES:
            raise ValueError(f"Unknown campsite type id: {type_id}")

        confidence = min(1.0, max(0.0, float(output.get("confidence", 0.5))))

        logger.info(
            "AI-generated type classification",
            place_name=place.name,
            type_id=type_id,
            confidence=confidence,
            model=self.model,
            ai_generated=True,
        )

        return _classification(type_id, confidence, method="llm")
