"""Models for type classification and import confidence."""

from typing import Literal

from pydantic import BaseModel, Field

CAMPSITE_TYPE_NAMES: dict[int, str] = {
    1: "Camping",
    2: "Glamping",
    3: "Tented Resort",
    4: "Bungalow",
}


class TypeClassification(BaseModel):
    """Suggested campsite type with the classifier's own confidence."""

    type_id: int = Field(
        default=1,
        ge=1,
        le=4,
        description="Campsite type (1=Camping, 2=Glamping, 3=Tented Resort, 4=Bungalow)",
    )
    type_name: str = Field(
        default="Camping",
        description="Human-readable type name",
    )
    confidence: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Classifier confidence (0-1)",
    )
    method: Literal["keyword", "llm", "default"] = Field(
        default="keyword",
        description="How the type was determined",
    )


class ConfidenceBreakdown(BaseModel):
    """Blended trust score for a candidate plus data quality warnings."""

    overall_score: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Overall import confidence (0-1)",
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Validation warnings in the order they were found",
    )
