"""Models for duplicate detection against the campsite catalog."""

from enum import Enum
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, model_validator

from campsite_ingest.models.campsite import PyObjectId


class MatchSignal(str, Enum):
    """Lookup strategy that surfaced a catalog campsite."""

    NAME = "name"
    LOCATION = "location"
    PHONE = "phone"
    WEBSITE = "website"


class SimilarityResult(BaseModel):
    """Similarity between a candidate and one existing campsite."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=True,
        json_encoders={ObjectId: str},
    )

    campsite_id: PyObjectId = Field(
        ...,
        description="ID of the matched campsite",
    )
    name: str = Field(
        default="",
        description="Name of the matched campsite",
    )
    address: str = Field(
        default="",
        description="Address of the matched campsite",
    )
    similarity_score: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Composite similarity score (0-1)",
    )
    distance_km: Optional[float] = Field(
        default=None,
        description="Distance from the candidate in km, when known",
    )
    signals: list[MatchSignal] = Field(
        default_factory=list,
        description="Lookups and components that contributed to the match",
    )


class DuplicateVerdict(BaseModel):
    """Decision on whether a candidate duplicates an existing campsite."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        json_encoders={ObjectId: str},
    )

    is_duplicate: bool = Field(
        default=False,
        description="Whether the best match exceeds the duplicate threshold",
    )
    duplicate_of_id: Optional[PyObjectId] = Field(
        default=None,
        description="Best matching campsite when is_duplicate is set",
    )
    similarity_score: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Score of the best match, 0 when nothing matched",
    )
    candidates: list[SimilarityResult] = Field(
        default_factory=list,
        description="Matches ordered by descending similarity",
    )

    @model_validator(mode="after")
    def check_duplicate_reference(self) -> "DuplicateVerdict":
        """A duplicate must point at its best match; a non-duplicate must not."""
        if self.is_duplicate and (self.duplicate_of_id is None or not self.candidates):
            raise ValueError("Duplicate verdict requires a best match")
        if not self.is_duplicate and self.duplicate_of_id is not None:
            raise ValueError("duplicate_of_id is only set for duplicates")
        return self
