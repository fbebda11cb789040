"""
Campsite type classification prompts.

Used when keyword rules cannot classify a Google place with enough
confidence. The LLM picks one of the four catalog types and reports its
confidence as structured JSON per TypeClassificationOutput.

Model Recommendation: GPT-4o-mini (short, closed-set classification)
Expected token usage: ~250 input, ~30 output per place
"""

from typing import Any, TypedDict


class TypeClassificationOutput(TypedDict):
    """Expected output schema for type classification."""

    type_id: int  # 1-4
    type_name: str
    confidence: float  # 0.0-1.0


TYPE_CLASSIFICATION_SYSTEM_PROMPT = """You classify camping places for a campsite directory in Thailand.

Available types:
1. Camping - Basic camping sites, tents, minimal facilities
2. Glamping - Luxury camping with comfort amenities, AC, proper beds
3. Tented Resort - Resort-style accommodation in tents, full facilities
4. Bungalow - Permanent structures, cabins, cottages

Names may be in Thai or English. Use the place types, price level and
rating as supporting evidence, not as proof.

Respond with valid JSON only:
{"type_id": 1, "type_name": "Camping", "confidence": 0.9}
"""

TYPE_CLASSIFICATION_USER_PROMPT_TEMPLATE = """Classify this place:

Name: {name}
Address: {address}
Types: {types}
Price Level: {price_level} (0-4 scale)
Rating: {rating} (1-5)
Review Count: {review_count}
"""


def format_type_classification_prompt(place: dict[str, Any]) -> str:
    """Fill the user prompt from place fields, marking unknown values N/A."""
    return TYPE_CLASSIFICATION_USER_PROMPT_TEMPLATE.format(
        name=place.get("name") or "N/A",
        address=place.get("address") or "N/A",
        types=", ".join(place.get("types") or []) or "N/A",
        price_level=place.get("price_level") if place.get("price_level") is not None else "N/A",
        rating=place.get("rating") if place.get("rating") is not None else "N/A",
        review_count=place.get("user_ratings_total") or 0,
    )
