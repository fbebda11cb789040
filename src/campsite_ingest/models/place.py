"""Candidate place records sourced from Google Places."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

from campsite_ingest.models.campsite import PyObjectId


class PlaceCandidate(BaseModel):
    """An externally sourced place evaluated for import.

    Exists only for the duration of one evaluation. Blank optional strings
    are stored as None so "absent" has a single representation.
    """

    place_id: Optional[str] = Field(
        default=None,
        description="Google Places place_id",
    )
    name: str = Field(
        default="",
        description="Place name",
    )
    address: str = Field(
        default="",
        description="Formatted address",
    )
    phone: Optional[str] = Field(
        default=None,
        description="Phone number",
    )
    website: Optional[str] = Field(
        default=None,
        description="Website URL",
    )
    latitude: Optional[float] = Field(
        default=None,
        ge=-90.0,
        le=90.0,
        description="Latitude in decimal degrees",
    )
    longitude: Optional[float] = Field(
        default=None,
        ge=-180.0,
        le=180.0,
        description="Longitude in decimal degrees",
    )
    rating: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=5.0,
        description="Average user rating (1-5)",
    )
    user_ratings_total: int = Field(
        default=0,
        ge=0,
        description="Number of user ratings",
    )
    price_level: Optional[int] = Field(
        default=None,
        ge=0,
        le=4,
        description="Google price level (0-4)",
    )
    types: list[str] = Field(
        default_factory=list,
        description="Google place types",
    )
    business_status: Optional[str] = Field(
        default=None,
        description="Google business status",
    )
    source: str = Field(
        default="google_places",
        description="Where the record came from",
    )

    @field_validator("name", "address", mode="before")
    @classmethod
    def strip_required_text(cls, v: Any) -> str:
        """Treat None as empty and trim whitespace."""
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("phone", "website", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        """Convert blank strings to None."""
        if v is None:
            return None
        value = str(v).strip()
        return value or None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_google_place(cls, details: dict[str, Any]) -> "PlaceCandidate":
        """Build a candidate from a Places Details payload.

        Args:
            details: Raw place details (formatted_address, geometry, ...)

        Returns:
            PlaceCandidate with the fields the scorer uses
        """
        location = (details.get("geometry") or {}).get("location") or {}
        return cls(
            place_id=details.get("place_id"),
            name=details.get("name"),
            address=details.get("formatted_address"),
            phone=details.get("formatted_phone_number")
            or details.get("international_phone_number"),
            website=details.get("website"),
            latitude=location.get("lat"),
            longitude=location.get("lng"),
            rating=details.get("rating"),
            user_ratings_total=details.get("user_ratings_total") or 0,
            price_level=details.get("price_level"),
            types=details.get("types") or [],
            business_status=details.get("business_status"),
        )


class RawPlaceStatus(str, Enum):
    """Processing status of a fetched Google place."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class RawPlace(BaseModel):
    """A Google Places Details payload stored before processing."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        json_encoders={ObjectId: str},
    )

    id: Optional[PyObjectId] = Field(
        default=None,
        alias="_id",
        description="MongoDB document ID",
    )
    place_id: str = Field(
        ...,
        description="Google Places place_id",
    )
    raw_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Unmodified Places Details payload",
    )
    sync_status: RawPlaceStatus = Field(
        default=RawPlaceStatus.PENDING,
        description="Processing status",
    )
    data_fetched_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the payload was fetched",
    )
    processed_at: Optional[datetime] = Field(
        default=None,
        description="When the place was last processed",
    )
